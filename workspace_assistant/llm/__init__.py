"""LLM providers module."""

from workspace_assistant.llm.anthropic import AnthropicConfig, AnthropicProvider
from workspace_assistant.llm.base import (
    EmbeddingResult,
    LLMProvider,
    LLMProviderFactory,
    ResponseResult,
)
from workspace_assistant.llm.factory import create_embedding_provider, create_llm_provider
from workspace_assistant.llm.ollama import OllamaConfig, OllamaProvider
from workspace_assistant.llm.openai import OpenAIConfig, OpenAIProvider

# Register all providers
LLMProviderFactory.register("ollama", OllamaProvider)
LLMProviderFactory.register("openai", OpenAIProvider)
LLMProviderFactory.register("anthropic", AnthropicProvider)

__all__ = [
    "AnthropicConfig",
    "AnthropicProvider",
    "EmbeddingResult",
    "LLMProvider",
    "LLMProviderFactory",
    "OllamaConfig",
    "OllamaProvider",
    "OpenAIConfig",
    "OpenAIProvider",
    "ResponseResult",
    "create_embedding_provider",
    "create_llm_provider",
]
