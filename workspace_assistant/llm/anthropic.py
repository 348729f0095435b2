"""Anthropic Claude LLM provider implementation."""

import logging
from typing import Any

import anthropic
from pydantic import BaseModel

from workspace_assistant.llm.base import EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class AnthropicConfig(BaseModel):
    """Configuration for Anthropic provider."""

    api_key: str
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 1000
    temperature: float = 0.1
    timeout: int = 30


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider, generation only."""

    def __init__(self, config: AnthropicConfig | None = None, **kwargs: Any) -> None:
        self.config = config or AnthropicConfig(**kwargs)
        self.client = anthropic.AsyncAnthropic(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
        )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Anthropic doesn't provide embeddings.

        Raises:
            NotImplementedError: Always; configure another embedding provider
        """
        raise NotImplementedError(
            "Anthropic doesn't provide embeddings. Set EMBEDDING_PROVIDER to openai or ollama."
        )

    async def generate_response(
        self, prompt: str, system_prompt: str | None = None
    ) -> ResponseResult:
        """Generate response using Anthropic's Claude model.

        Args:
            prompt: User message
            system_prompt: Optional system instructions

        Returns:
            ResponseResult with generated response
        """
        request: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            request["system"] = system_prompt

        try:
            response = await self.client.messages.create(**request)
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}")

        # Anthropic returns content as a list of blocks
        content = "".join(block.text for block in response.content if block.type == "text")

        return ResponseResult(
            content=content,
            model=self.config.model,
            token_count=response.usage.output_tokens + response.usage.input_tokens,
            finish_reason=response.stop_reason,
        )

    async def health_check(self) -> bool:
        try:
            await self.client.models.retrieve(self.config.model)
            return True
        except Exception as e:
            logger.warning(f"Anthropic health check failed: {e}")
            return False
