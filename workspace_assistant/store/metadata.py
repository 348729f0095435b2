"""Channel and user metadata lookups."""

import logging
from abc import ABC, abstractmethod

from chromadb.api import ClientAPI
from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Metadata collections are read by id only; each record carries a
# one-dimensional placeholder vector.
_PLACEHOLDER_EMBEDDING = [0.0]


class ChannelRecord(BaseModel):
    """A workspace channel."""

    id: str
    name: str
    workspace_id: str | None = None


class UserRecord(BaseModel):
    """A workspace member."""

    id: str
    username: str
    full_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None


class MetadataStore(ABC):
    """Batch lookups of channel and user metadata."""

    @abstractmethod
    async def get_channels(self, channel_ids: list[str], workspace_id: str) -> list[ChannelRecord]:
        """Fetch channels by id, restricted to one workspace."""
        pass

    @abstractmethod
    async def get_users(self, user_ids: list[str]) -> list[UserRecord]:
        """Fetch users by id."""
        pass

    @abstractmethod
    async def find_user_id(self, username: str) -> str | None:
        """Resolve a username to a user id."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass


def _clean(metadata: dict) -> dict:
    """Drop values ChromaDB cannot store."""
    return {key: value for key, value in metadata.items() if value is not None}


class ChromaMetadataStore(MetadataStore):
    """Metadata store backed by two ChromaDB collections."""

    def __init__(
        self,
        client: ClientAPI,
        channels_collection: str = "workspace_channels",
        users_collection: str = "workspace_users",
    ):
        self.client = client
        self.channels_collection = channels_collection
        self.users_collection = users_collection

    def _collection(self, name: str):
        return self.client.get_or_create_collection(name=name, embedding_function=None)

    async def get_channels(self, channel_ids: list[str], workspace_id: str) -> list[ChannelRecord]:
        if not channel_ids:
            return []

        results = self._collection(self.channels_collection).get(
            ids=channel_ids,
            where={"workspace_id": workspace_id},
            include=["metadatas"],
        )
        return [
            ChannelRecord(id=record_id, **(metadata or {}))
            for record_id, metadata in zip(results["ids"], results["metadatas"] or [])
        ]

    async def get_users(self, user_ids: list[str]) -> list[UserRecord]:
        if not user_ids:
            return []

        results = self._collection(self.users_collection).get(
            ids=user_ids,
            include=["metadatas"],
        )
        users = []
        for record_id, metadata in zip(results["ids"], results["metadatas"] or []):
            metadata = dict(metadata or {})
            metadata.pop("username_key", None)
            users.append(UserRecord(id=record_id, **metadata))
        return users

    async def find_user_id(self, username: str) -> str | None:
        results = self._collection(self.users_collection).get(
            where={"username_key": username.lower()},
            limit=1,
        )
        return results["ids"][0] if results["ids"] else None

    async def upsert_channels(self, channels: list[ChannelRecord]) -> None:
        if not channels:
            return

        self._collection(self.channels_collection).upsert(
            ids=[c.id for c in channels],
            embeddings=[_PLACEHOLDER_EMBEDDING for _ in channels],
            metadatas=[_clean({"name": c.name, "workspace_id": c.workspace_id}) for c in channels],
        )
        logger.info(f"Upserted {len(channels)} channels")

    async def upsert_users(self, users: list[UserRecord]) -> None:
        if not users:
            return

        self._collection(self.users_collection).upsert(
            ids=[u.id for u in users],
            embeddings=[_PLACEHOLDER_EMBEDDING for _ in users],
            metadatas=[
                _clean({**u.model_dump(exclude={"id"}), "username_key": u.username.lower()})
                for u in users
            ],
        )
        logger.info(f"Upserted {len(users)} users")

    async def health_check(self) -> bool:
        try:
            self.client.heartbeat()
            return True
        except Exception as e:
            logger.warning(f"ChromaDB health check failed: {e}")
            return False
