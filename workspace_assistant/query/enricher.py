"""Joins retrieved hits with channel and user metadata."""

import asyncio
import logging
from collections.abc import Iterable
from typing import Protocol, TypeVar

from workspace_assistant.store.metadata import ChannelRecord, MetadataStore, UserRecord
from .models import MessageContext, RawHit, UserInfo

logger = logging.getLogger(__name__)


class _Versioned(Protocol):
    is_latest: bool
    is_deleted: bool


T = TypeVar("T", bound=_Versioned)


def is_current(item: _Versioned) -> bool:
    """Whether a message version is the latest and not deleted."""
    return item.is_latest is True and item.is_deleted is not True


def filter_current(items: Iterable[T]) -> list[T]:
    """Keep only latest, non-deleted message versions."""
    return [item for item in items if is_current(item)]


def deduplicate(contexts: Iterable[MessageContext]) -> list[MessageContext]:
    """Collapse identical posts by the same author in the same channel.

    The first occurrence is kept, so hit order is preserved.
    """
    seen: set[tuple[str | None, str | None, str]] = set()
    unique = []
    for context in contexts:
        key = (context.channel_id, context.user.id if context.user else None, context.content)
        if key not in seen:
            seen.add(key)
            unique.append(context)
    return unique


def _unique(values: Iterable[str | None]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


class MetadataEnricher:
    """Resolves channel names and authors for hits and drops stale versions.

    Lookups are batched: one channel query and one user query per request,
    however many hits there are.
    """

    def __init__(self, metadata_store: MetadataStore):
        self.metadata_store = metadata_store

    async def _channel_names(self, channel_ids: list[str], workspace_id: str) -> dict[str, str]:
        if not channel_ids:
            return {}
        try:
            channels: list[ChannelRecord] = await self.metadata_store.get_channels(
                channel_ids, workspace_id
            )
        except Exception as e:
            logger.warning(f"Channel lookup failed, continuing without channel names: {e}")
            return {}
        return {channel.id: channel.name for channel in channels}

    async def _users(self, user_ids: list[str]) -> dict[str, UserRecord]:
        if not user_ids:
            return {}
        try:
            users = await self.metadata_store.get_users(user_ids)
        except Exception as e:
            logger.warning(f"User lookup failed, continuing without user names: {e}")
            return {}
        return {user.id: user for user in users}

    async def enrich(self, hits: list[RawHit], workspace_id: str) -> list[MessageContext]:
        """Build message contexts for the current versions among ``hits``.

        Args:
            hits: Validated search hits
            workspace_id: Workspace the channels must belong to

        Returns:
            Enriched messages in hit order
        """
        channel_ids = _unique(hit.metadata.channel_id for hit in hits)
        user_ids = _unique(hit.metadata.user_id for hit in hits)

        channel_names, users = await asyncio.gather(
            self._channel_names(channel_ids, workspace_id),
            self._users(user_ids),
        )

        contexts = []
        for hit in hits:
            metadata = hit.metadata
            if not is_current(metadata):
                continue

            user = None
            if metadata.user_id:
                record = users.get(metadata.user_id)
                user = UserInfo(
                    id=metadata.user_id,
                    username=record.username if record else None,
                    full_name=record.full_name if record else None,
                    email=record.email if record else None,
                    avatar_url=record.avatar_url if record else None,
                )

            contexts.append(
                MessageContext(
                    # Edited messages keep a snapshot of the text that was posted
                    content=metadata.original_message_content or hit.content,
                    created_at=metadata.created_at,
                    channel_id=metadata.channel_id,
                    channel_name=channel_names.get(metadata.channel_id) if metadata.channel_id else None,
                    user=user,
                    version=metadata.version,
                    is_latest=metadata.is_latest,
                    is_deleted=metadata.is_deleted,
                )
            )

        dropped = len(hits) - len(contexts)
        if dropped:
            logger.info(f"Dropped {dropped} stale or deleted message versions")
        return contexts
