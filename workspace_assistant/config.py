"""Configuration management using pydantic-settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # LLM Provider Configuration
    llm_provider: LLMProvider = Field(
        default=LLMProvider.OLLAMA,
        description="LLM provider used for response generation",
    )
    embedding_provider: LLMProvider | None = Field(
        default=None,
        description="Override provider for embeddings, defaults to llm_provider",
    )

    # Ollama Configuration
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama API host URL",
    )
    ollama_model: str = Field(
        default="llama3.2",
        description="Ollama model to use",
    )
    ollama_embedding_model: str = Field(
        default="nomic-embed-text",
        description="Ollama embedding model to use",
    )

    # OpenAI Configuration
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI chat model",
    )
    openai_embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model",
    )

    # Anthropic Configuration
    anthropic_api_key: str | None = Field(
        default=None,
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Anthropic model to use",
    )

    # Generation behaviour
    generation_temperature: float = Field(
        default=0.1,
        description="Sampling temperature for answers (low keeps citation format stable)",
    )
    generation_max_tokens: int = Field(
        default=1000,
        description="Maximum tokens in a generated answer",
    )
    generation_timeout: float = Field(
        default=60.0,
        description="Seconds to wait for the generation provider before failing the request",
    )

    # ChromaDB Configuration
    chroma_host: str = Field(
        default="localhost",
        description="ChromaDB host",
    )
    chroma_port: int = Field(
        default=8000,
        description="ChromaDB port",
    )
    messages_collection: str = Field(
        default="workspace_messages",
        description="Collection holding message embeddings",
    )
    channels_collection: str = Field(
        default="workspace_channels",
        description="Collection holding channel metadata",
    )
    users_collection: str = Field(
        default="workspace_users",
        description="Collection holding user metadata",
    )

    # Application Configuration
    display_timezone: str = Field(
        default="UTC",
        description="IANA timezone for day boundaries and citation timestamps",
    )
    server_port: int = Field(
        default=3000,
        description="HTTP port for the chat API",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )

    @property
    def chroma_url(self) -> str:
        """Get the full ChromaDB URL."""
        return f"http://{self.chroma_host}:{self.chroma_port}"

    def validate_provider_config(self) -> None:
        """Validate that required API keys are set for the selected providers."""
        for provider in {self.llm_provider, self.embedding_provider}:
            if provider == LLMProvider.OPENAI and not self.openai_api_key:
                raise ValueError("OpenAI API key is required when using OpenAI provider")
            elif provider == LLMProvider.ANTHROPIC and not self.anthropic_api_key:
                raise ValueError("Anthropic API key is required when using Anthropic provider")

        if self.embedding_provider == LLMProvider.ANTHROPIC:
            raise ValueError("Anthropic does not provide embeddings; choose another embedding provider")


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
