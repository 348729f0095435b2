"""Shared fakes for pipeline tests."""

from datetime import datetime, timezone
from typing import Any

import pytest

from workspace_assistant.llm.base import EmbeddingResult, LLMProvider, ResponseResult
from workspace_assistant.store.metadata import ChannelRecord, MetadataStore, UserRecord
from workspace_assistant.store.search import MessageSearch


class FakeEmbeddingProvider(LLMProvider):
    """Returns a fixed vector, or fails on demand."""

    def __init__(self, embedding: list[float] | None = None, error: Exception | None = None):
        self.embedding = embedding if embedding is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.texts: list[str] = []

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        self.texts.append(text)
        if self.error:
            raise self.error
        return EmbeddingResult(embedding=self.embedding, model="fake-embed")

    async def generate_response(self, prompt: str, system_prompt: str | None = None) -> ResponseResult:
        raise NotImplementedError

    async def health_check(self) -> bool:
        return True


class FakeLLM(LLMProvider):
    """Generation provider that records every call."""

    def __init__(self, content: str = "Generated answer", error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        raise NotImplementedError

    async def generate_response(self, prompt: str, system_prompt: str | None = None) -> ResponseResult:
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.error:
            raise self.error
        return ResponseResult(content=self.content, model="fake-llm")

    async def health_check(self) -> bool:
        return True


class FakeSearch(MessageSearch):
    """Returns canned records and remembers what it was asked."""

    def __init__(self, records: list[dict[str, Any]] | None = None, error: Exception | None = None):
        self.records = records or []
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def search(self, embedding, search_filter, limit):
        self.calls.append({"embedding": embedding, "filter": search_filter, "limit": limit})
        if self.error:
            raise self.error
        return self.records[:limit]

    async def health_check(self) -> bool:
        return True


class FakeMetadataStore(MetadataStore):
    """In-memory channel and user lookups with call counting."""

    def __init__(
        self,
        channels: list[ChannelRecord] | None = None,
        users: list[UserRecord] | None = None,
        error: Exception | None = None,
    ):
        self.channels = {c.id: c for c in channels or []}
        self.users = {u.id: u for u in users or []}
        self.error = error
        self.channel_calls: list[list[str]] = []
        self.user_calls: list[list[str]] = []

    async def get_channels(self, channel_ids, workspace_id):
        self.channel_calls.append(list(channel_ids))
        if self.error:
            raise self.error
        return [
            self.channels[i]
            for i in channel_ids
            if i in self.channels and self.channels[i].workspace_id in (None, workspace_id)
        ]

    async def get_users(self, user_ids):
        self.user_calls.append(list(user_ids))
        if self.error:
            raise self.error
        return [self.users[i] for i in user_ids if i in self.users]

    async def find_user_id(self, username):
        for user in self.users.values():
            if user.username.lower() == username.lower():
                return user.id
        return None

    async def health_check(self) -> bool:
        return True


def make_record(
    record_id: str,
    content: str = "hello",
    channel_id: str = "c1",
    user_id: str | None = "u1",
    created_at: str = "2024-03-10T09:30:00+00:00",
    **metadata: Any,
) -> dict[str, Any]:
    """Build a raw search record as the search provider returns it."""
    meta = {
        "channel_id": channel_id,
        "user_id": user_id,
        "created_at": created_at,
        "version": 1,
        "is_latest": True,
        "is_deleted": False,
    }
    meta.update(metadata)
    return {"id": record_id, "content": content, "metadata": meta, "similarity": 0.9}


FIXED_NOW = datetime(2024, 3, 10, 15, 45, 0, tzinfo=timezone.utc)


def fixed_clock(tz):
    return FIXED_NOW.astimezone(tz)


@pytest.fixture
def channels():
    return [
        ChannelRecord(id="c1", name="general", workspace_id="w1"),
        ChannelRecord(id="c2", name="random", workspace_id="w1"),
    ]


@pytest.fixture
def users():
    return [
        UserRecord(id="u1", username="alice", full_name="Alice Smith"),
        UserRecord(id="u2", username="bob", full_name=None),
        UserRecord(id="u3", username="carol", full_name="Carol Jones"),
    ]


@pytest.fixture
def metadata_store(channels, users):
    return FakeMetadataStore(channels=channels, users=users)
