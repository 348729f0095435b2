"""OpenAI LLM provider implementation."""

import logging
from typing import Any

import openai
from pydantic import BaseModel

from workspace_assistant.llm.base import EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class OpenAIConfig(BaseModel):
    """Configuration for OpenAI provider."""

    api_key: str
    model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    max_tokens: int = 1000
    temperature: float = 0.1
    timeout: int = 30
    max_retries: int = 3


class OpenAIProvider(LLMProvider):
    """OpenAI embeddings and chat completions."""

    def __init__(self, config: OpenAIConfig | None = None, **kwargs: Any) -> None:
        self.config = config or OpenAIConfig(**kwargs)
        self.client = openai.AsyncOpenAI(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
        )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding using OpenAI's embedding model."""
        try:
            response = await self.client.embeddings.create(
                model=self.config.embedding_model,
                input=text,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI embedding request failed: {e}")
            raise RuntimeError(f"Failed to generate embedding: {e}")

        return EmbeddingResult(
            embedding=response.data[0].embedding,
            model=self.config.embedding_model,
            token_count=response.usage.total_tokens,
        )

    async def generate_response(
        self, prompt: str, system_prompt: str | None = None
    ) -> ResponseResult:
        """Generate response using OpenAI's chat model.

        The system prompt goes in its own system message so the user message
        cannot override the instructions.
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}")

        choice = response.choices[0]
        return ResponseResult(
            content=choice.message.content or "",
            model=self.config.model,
            token_count=response.usage.total_tokens if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    async def health_check(self) -> bool:
        try:
            await self.client.models.retrieve(self.config.model)
            return True
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False
