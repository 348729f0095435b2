"""Query embedding and similarity search with graceful degradation."""

import logging
from typing import Any

from pydantic import ValidationError

from workspace_assistant.llm.base import LLMProvider
from workspace_assistant.store.search import MessageSearch
from .entities import has_searchable_topic
from .models import QueryAnalysis, RawHit, RetrievalFilter

logger = logging.getLogger(__name__)

# Aggregate queries are driven by the filter, not by semantic similarity.
AGGREGATE_EMBEDDING_TEXT = "messages in channel"
FALLBACK_EMBEDDING_TEXT = "recent messages"


class Retriever:
    """Fetches candidate messages for a query.

    Neither an embedding failure nor a search failure is raised to the
    caller: the first degrades to a filter-only search, the second to an
    empty hit list.
    """

    def __init__(self, embedding_provider: LLMProvider, search: MessageSearch):
        self.embedding_provider = embedding_provider
        self.search = search

    @staticmethod
    def embedding_text(query: str, analysis: QueryAnalysis) -> str:
        """Choose the text to embed for a query."""
        if analysis.is_aggregate:
            return AGGREGATE_EMBEDDING_TEXT
        if has_searchable_topic(query, analysis.entities):
            return query
        return FALLBACK_EMBEDDING_TEXT

    async def embed(self, text: str) -> list[float]:
        """Embed text, returning an empty vector if the provider fails."""
        try:
            result = await self.embedding_provider.generate_embedding(text)
        except Exception as e:
            logger.warning(f"Embedding generation failed, falling back to filter-only search: {e}")
            return []

        if not result.success or not result.embedding:
            logger.warning(f"Embedding generation returned no vector: {result.error}")
            return []
        return result.embedding

    @staticmethod
    def validate_hits(records: list[dict[str, Any]]) -> list[RawHit]:
        """Validate raw search records, skipping malformed ones."""
        hits = []
        for record in records:
            try:
                hits.append(RawHit.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping malformed search record {record.get('id')}: {e}")
        return hits

    async def retrieve(
        self,
        query: str,
        analysis: QueryAnalysis,
        search_filter: RetrievalFilter,
        limit: int,
    ) -> list[RawHit]:
        """Embed the query and run one similarity search.

        Args:
            query: Original query text
            analysis: Classified query
            search_filter: Structured filter for the search provider
            limit: Maximum number of hits

        Returns:
            Validated hits, empty if the search failed
        """
        embedding = await self.embed(self.embedding_text(query, analysis))

        try:
            records = await self.search.search(embedding, search_filter, limit)
        except Exception as e:
            logger.error(f"Message search failed, treating as no results: {e}", exc_info=True)
            return []

        hits = self.validate_hits(records[:limit])
        logger.info(f"Retrieved {len(hits)} hits (limit {limit})")
        return hits
