"""Indexing pipeline that turns chat messages into searchable embeddings."""

import asyncio
import logging
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from chromadb.api import ClientAPI
from pydantic import BaseModel, field_validator
from tqdm.asyncio import tqdm

from workspace_assistant.llm.base import LLMProvider
from .metadata import ChromaMetadataStore

logger = logging.getLogger(__name__)


class MessageRecord(BaseModel):
    """One version of a chat message as exported from the workspace."""

    id: str
    workspace_id: str
    channel_id: str
    user_id: str | None = None
    content: str
    created_at: datetime
    version: int = 1
    is_deleted: bool = False
    original_message_content: str | None = None

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def document_id(self) -> str:
        return f"{self.id}:v{self.version}"


class MessageIndexer:
    """Embeds messages and stores them with the metadata retrieval filters on."""

    def __init__(
        self,
        embedding_provider: LLMProvider,
        client: ClientAPI,
        metadata_store: ChromaMetadataStore,
        collection_name: str = "workspace_messages",
    ):
        self.embedding_provider = embedding_provider
        self.client = client
        self.metadata_store = metadata_store
        self.collection_name = collection_name

    def _collection(self):
        return self.client.get_or_create_collection(
            name=self.collection_name, embedding_function=None
        )

    async def index_messages(
        self, messages: Sequence[MessageRecord], batch_size: int = 10
    ) -> dict[str, Any]:
        """Index message versions.

        Deleted messages are not embedded, nor are any other versions of
        them in the same batch; every stored version is marked deleted
        instead. A message that is already stored as deleted stays deleted
        when re-indexed. A new version marks all earlier versions of the
        same message as no longer latest.

        Args:
            messages: Message versions to index
            batch_size: Number of embeddings requested concurrently

        Returns:
            Dictionary with indexing statistics
        """
        start_time = time.time()
        deletions = [m for m in messages if m.is_deleted]
        deleted_ids = {m.id for m in deletions}
        # A deletion in the same export retracts every version of the message
        live = [m for m in messages if m.id not in deleted_ids]

        embeddings = await self._generate_embeddings_batch(live, batch_size)
        keys = await self._lookup_keys(live)

        latest_versions: dict[str, int] = {}
        for message, embedding in zip(live, embeddings):
            if embedding:
                latest_versions[message.id] = max(latest_versions.get(message.id, 0), message.version)

        previously_deleted: set[str] = set()
        for message_id, version in list(latest_versions.items()):
            stored_version, stored_deleted = self._retire_versions(message_id, version)
            latest_versions[message_id] = max(version, stored_version)
            if stored_deleted:
                previously_deleted.add(message_id)

        ids, vectors, documents, metadatas = [], [], [], []
        for message, embedding in zip(live, embeddings):
            if not embedding:
                logger.warning(f"Message {message.id} has no embedding, skipping")
                continue

            is_latest = message.version == latest_versions[message.id]
            is_deleted = message.id in previously_deleted
            channel_key, username_key = keys.get(message.id, (None, None))
            ids.append(message.document_id)
            vectors.append(embedding)
            documents.append(message.content)
            metadatas.append(
                self._metadata(message, channel_key, username_key, is_latest, is_deleted)
            )

        if ids:
            self._collection().upsert(
                ids=ids,
                embeddings=vectors,
                documents=documents,
                metadatas=metadatas,
            )

        # Must follow the upsert
        for message_id in sorted(deleted_ids):
            self._mark_deleted(message_id)

        stats = {
            "messages_received": len(messages),
            "messages_indexed": len(ids),
            "messages_deleted": len(deleted_ids),
            "messages_skipped": len(messages) - len(deletions) - len(ids),
            "elapsed_seconds": round(time.time() - start_time, 2),
        }
        logger.info(f"Message indexing completed: {stats}")
        return stats

    @staticmethod
    def _metadata(
        message: MessageRecord,
        channel_key: str | None,
        username_key: str | None,
        is_latest: bool = True,
        is_deleted: bool = False,
    ) -> dict[str, Any]:
        metadata = {
            "workspace_id": message.workspace_id,
            "message_id": message.id,
            "channel_id": message.channel_id,
            "channel_key": channel_key,
            "user_id": message.user_id,
            "username_key": username_key,
            "created_at": message.created_at.isoformat(),
            "created_at_ts": message.created_at.timestamp(),
            "version": message.version,
            "is_latest": is_latest,
            "is_deleted": is_deleted,
            "original_message_content": message.original_message_content,
        }
        return {key: value for key, value in metadata.items() if value is not None}

    def _stored_versions(self, message_id: str) -> tuple[list[str], list[dict[str, Any]]]:
        existing = self._collection().get(where={"message_id": message_id}, include=["metadatas"])
        return existing["ids"], [dict(m or {}) for m in existing["metadatas"] or []]

    def _mark_deleted(self, message_id: str) -> None:
        ids, metadatas = self._stored_versions(message_id)
        if ids:
            self._collection().update(
                ids=ids, metadatas=[{**m, "is_deleted": True} for m in metadatas]
            )
            logger.info(f"Marked {len(ids)} stored versions of message {message_id} as deleted")

    def _retire_versions(self, message_id: str, version: int) -> tuple[int, bool]:
        """Mark stored versions older than ``version`` as not latest.

        Returns:
            Highest version already stored (0 if none) and whether any stored
            version is marked deleted
        """
        ids, metadatas = self._stored_versions(message_id)
        retired_ids, retired = [], []
        for record_id, metadata in zip(ids, metadatas):
            if metadata.get("version", 0) < version and metadata.get("is_latest"):
                retired_ids.append(record_id)
                retired.append({**metadata, "is_latest": False})

        if retired_ids:
            self._collection().update(ids=retired_ids, metadatas=retired)
            logger.debug(f"Retired {len(retired_ids)} older versions of message {message_id}")

        stored_version = max((m.get("version", 0) for m in metadatas), default=0)
        return stored_version, any(m.get("is_deleted") for m in metadatas)

    async def _lookup_keys(
        self, messages: Sequence[MessageRecord]
    ) -> dict[str, tuple[str | None, str | None]]:
        """Resolve lower-cased channel names and usernames for filter metadata."""
        channel_names: dict[str, str] = {}
        by_workspace: dict[str, set[str]] = {}
        for message in messages:
            by_workspace.setdefault(message.workspace_id, set()).add(message.channel_id)
        for workspace_id, channel_ids in by_workspace.items():
            for channel in await self.metadata_store.get_channels(sorted(channel_ids), workspace_id):
                channel_names[channel.id] = channel.name.lower()

        user_ids = sorted({m.user_id for m in messages if m.user_id})
        usernames = {
            user.id: user.username.lower() for user in await self.metadata_store.get_users(user_ids)
        }

        return {
            m.id: (channel_names.get(m.channel_id), usernames.get(m.user_id) if m.user_id else None)
            for m in messages
        }

    async def _generate_embeddings_batch(
        self, messages: Sequence[MessageRecord], batch_size: int = 10
    ) -> list[list[float] | None]:
        """Generate embeddings in concurrent batches with progress tracking."""
        embeddings: list[list[float] | None] = []
        progress = tqdm(total=len(messages), desc="Embedding messages", unit="msg", ncols=100)

        for i in range(0, len(messages), batch_size):
            batch = messages[i : i + batch_size]
            tasks = [self.embedding_provider.generate_embedding(m.content) for m in batch]
            results = await asyncio.gather(*tasks, return_exceptions=True)

            for message, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.warning(f"Failed to generate embedding for message {message.id}: {result}")
                    embeddings.append(None)
                elif not result.success or not result.embedding:
                    logger.warning(f"Embedding generation failed for message {message.id}: {result.error}")
                    embeddings.append(None)
                else:
                    embeddings.append(result.embedding)
                progress.update(1)

        progress.close()
        return embeddings
