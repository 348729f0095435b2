"""Similarity search over indexed workspace messages."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from chromadb.api import ClientAPI

from .metadata import MetadataStore

if TYPE_CHECKING:
    from workspace_assistant.query.models import RetrievalFilter

logger = logging.getLogger(__name__)


class MessageSearch(ABC):
    """Similarity-search provider for workspace messages."""

    @abstractmethod
    async def search(
        self,
        embedding: list[float],
        search_filter: RetrievalFilter,
        limit: int,
    ) -> list[dict[str, Any]]:
        """Return up to ``limit`` message records matching the filter.

        An empty embedding means the filter alone selects the records.
        Each record has ``content`` and ``metadata`` keys.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass


def build_where(search_filter: RetrievalFilter, user_id: str | None = None) -> dict[str, Any]:
    """Translate a retrieval filter into a ChromaDB ``where`` clause.

    Args:
        search_filter: Filter built for the query
        user_id: Resolved id for ``search_filter.username``, if known

    Returns:
        A single condition or an ``$and`` of conditions
    """
    conditions: list[dict[str, Any]] = [{"workspace_id": search_filter.workspace_id}]

    if search_filter.channel_name:
        conditions.append({"channel_key": search_filter.channel_name.lower()})

    if user_id:
        conditions.append({"user_id": user_id})
    elif search_filter.username:
        conditions.append({"username_key": search_filter.username.lower()})

    if search_filter.created_at_gte:
        conditions.append({"created_at_ts": {"$gte": search_filter.created_at_gte.timestamp()}})
    if search_filter.created_at_lte:
        conditions.append({"created_at_ts": {"$lte": search_filter.created_at_lte.timestamp()}})

    if len(conditions) == 1:
        return conditions[0]
    return {"$and": conditions}


class ChromaMessageSearch(MessageSearch):
    """ChromaDB implementation of message search."""

    def __init__(
        self,
        client: ClientAPI,
        metadata_store: MetadataStore | None = None,
        collection_name: str = "workspace_messages",
    ):
        """Initialize message search.

        Args:
            client: ChromaDB client
            metadata_store: Used to resolve usernames to user ids
            collection_name: Collection holding message embeddings
        """
        self.client = client
        self.metadata_store = metadata_store
        self.collection_name = collection_name

    async def _resolve_user_id(self, username: str | None) -> str | None:
        if not username or self.metadata_store is None:
            return None

        try:
            user_id = await self.metadata_store.find_user_id(username)
        except Exception as e:
            logger.warning(f"Failed to resolve username '{username}': {e}")
            return None

        if user_id is None:
            logger.info(f"No user id found for '{username}', filtering on username")
        return user_id

    async def search(
        self,
        embedding: list[float],
        search_filter: RetrievalFilter,
        limit: int,
    ) -> list[dict[str, Any]]:
        user_id = await self._resolve_user_id(search_filter.username)
        where = build_where(search_filter, user_id)
        collection = self.client.get_or_create_collection(
            name=self.collection_name, embedding_function=None
        )

        if not embedding:
            logger.info("Searching without embedding, using filter only")
            results = collection.get(
                where=where,
                limit=limit,
                include=["documents", "metadatas"],
            )
            records = [
                {"id": record_id, "content": document or "", "metadata": metadata or {}}
                for record_id, document, metadata in zip(
                    results["ids"], results["documents"] or [], results["metadatas"] or []
                )
            ]
        else:
            results = collection.query(
                query_embeddings=[embedding],
                n_results=limit,
                where=where,
                include=["documents", "metadatas", "distances"],
            )
            records = []
            if results["ids"] and len(results["ids"]) > 0:
                for i in range(len(results["ids"][0])):
                    distance = results["distances"][0][i] if results["distances"] else 0.0
                    records.append(
                        {
                            "id": results["ids"][0][i],
                            "content": results["documents"][0][i] if results["documents"] else "",
                            "metadata": results["metadatas"][0][i] if results["metadatas"] else {},
                            "similarity": 1.0 - distance,
                        }
                    )

        logger.info(f"Found {len(records)} messages in {self.collection_name}")
        return records

    async def health_check(self) -> bool:
        try:
            self.client.heartbeat()
            return True
        except Exception as e:
            logger.warning(f"ChromaDB health check failed: {e}")
            return False
