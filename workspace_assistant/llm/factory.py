"""Factory for creating LLM providers from configuration."""

from workspace_assistant.config import LLMProvider as LLMProviderEnum
from workspace_assistant.config import get_settings
from workspace_assistant.llm.base import LLMProvider, LLMProviderFactory


def create_llm_provider(provider_name: str | None = None) -> LLMProvider:
    """Create LLM provider from configuration.

    Args:
        provider_name: Override provider name, defaults to settings.llm_provider

    Returns:
        Configured LLM provider instance

    Raises:
        ValueError: If provider configuration is invalid
    """
    settings = get_settings()
    provider_name = provider_name or settings.llm_provider

    if provider_name == LLMProviderEnum.OLLAMA:
        from workspace_assistant.llm.ollama import OllamaConfig

        config = OllamaConfig(
            host=settings.ollama_host,
            model=settings.ollama_model,
            embedding_model=settings.ollama_embedding_model,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
        )
        return LLMProviderFactory.create("ollama", config=config)

    elif provider_name == LLMProviderEnum.OPENAI:
        from workspace_assistant.llm.openai import OpenAIConfig

        if not settings.openai_api_key:
            raise ValueError("OpenAI API key is required")

        config = OpenAIConfig(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            embedding_model=settings.openai_embedding_model,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
        )
        return LLMProviderFactory.create("openai", config=config)

    elif provider_name == LLMProviderEnum.ANTHROPIC:
        from workspace_assistant.llm.anthropic import AnthropicConfig

        if not settings.anthropic_api_key:
            raise ValueError("Anthropic API key is required")

        config = AnthropicConfig(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
        )
        return LLMProviderFactory.create("anthropic", config=config)

    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")


def create_embedding_provider(provider_name: str | None = None) -> LLMProvider:
    """Create LLM provider specifically for embeddings.

    Note: Anthropic doesn't provide embeddings, so this falls back to OpenAI
    or Ollama for embeddings even if Anthropic is selected for responses.

    Args:
        provider_name: Override provider name, defaults to settings.embedding_provider
            and then settings.llm_provider

    Returns:
        Configured LLM provider instance suitable for embeddings
    """
    settings = get_settings()
    provider_name = provider_name or settings.embedding_provider or settings.llm_provider

    if provider_name == LLMProviderEnum.ANTHROPIC:
        if settings.openai_api_key:
            return create_llm_provider(LLMProviderEnum.OPENAI)
        return create_llm_provider(LLMProviderEnum.OLLAMA)

    return create_llm_provider(provider_name)
