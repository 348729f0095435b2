"""Ollama LLM provider implementation."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from workspace_assistant.llm.base import EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class OllamaConfig(BaseModel):
    """Configuration for Ollama provider."""

    host: str = "http://localhost:11434"
    model: str = "llama3.2"
    embedding_model: str = "nomic-embed-text"
    temperature: float = 0.1
    max_tokens: int = 1000
    timeout: int = 30
    generation_timeout: float = 180.0


class OllamaProvider(LLMProvider):
    """Ollama LLM provider implementation."""

    def __init__(self, config: OllamaConfig | None = None, **kwargs: Any) -> None:
        """Initialize Ollama provider.

        Args:
            config: Ollama configuration
            **kwargs: Additional configuration options
        """
        self.config = config or OllamaConfig(**kwargs)
        self.client = httpx.AsyncClient(
            base_url=self.config.host,
            timeout=self.config.timeout,
        )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding using Ollama's embedding model.

        Args:
            text: Text to embed

        Returns:
            EmbeddingResult with embedding vector
        """
        try:
            response = await self.client.post(
                "/api/embed",
                json={
                    "model": self.config.embedding_model,
                    "input": text,
                },
            )
            response.raise_for_status()
            data = response.json()
        except httpx.RequestError as e:
            logger.error(f"Ollama embedding request failed: {e}")
            raise RuntimeError(f"Failed to generate embedding: {e}")
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama embedding HTTP error: {e}")
            raise RuntimeError(f"Ollama API error: {e}")

        embeddings = data.get("embeddings") or [[]]
        return EmbeddingResult(
            embedding=embeddings[0],
            model=self.config.embedding_model,
            token_count=data.get("prompt_eval_count"),
        )

    async def generate_response(
        self, prompt: str, system_prompt: str | None = None
    ) -> ResponseResult:
        """Generate response using Ollama's chat endpoint.

        Args:
            prompt: User message
            system_prompt: Optional system instructions

        Returns:
            ResponseResult with generated response
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            logger.debug(f"Sending chat request to Ollama with model: {self.config.model}")
            response = await self.client.post(
                "/api/chat",
                json={
                    "model": self.config.model,
                    "messages": messages,
                    "stream": False,
                    "options": {
                        "temperature": self.config.temperature,
                        "num_predict": self.config.max_tokens,
                    },
                },
                timeout=self.config.generation_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Ollama request timed out after {self.config.generation_timeout}s: {e}")
            raise RuntimeError(f"Ollama request timed out: {e}")
        except httpx.RequestError as e:
            logger.error(f"Ollama response request failed: {e}")
            logger.error(f"Model: {self.config.model}, Host: {self.config.host}")
            raise RuntimeError(f"Failed to generate response: {e}")
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama response HTTP error: {e}")
            logger.error(f"Status: {e.response.status_code}")
            raise RuntimeError(f"Ollama API error: {e}")

        return ResponseResult(
            content=data.get("message", {}).get("content", ""),
            model=self.config.model,
            token_count=data.get("eval_count"),
            finish_reason=data.get("done_reason"),
        )

    async def health_check(self) -> bool:
        """Check if Ollama service is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = await self.client.get("/api/tags")
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()
