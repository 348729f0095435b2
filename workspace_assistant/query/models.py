"""Query processing models and data structures."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class QueryType(str, Enum):
    """Kinds of questions the assistant distinguishes."""

    WORKSPACE_INFO = "workspace_info"
    CHANNEL_CONTEXT = "channel_context"
    USER_CONTEXT = "user_context"
    GENERAL_ASSISTANCE = "general_assistance"
    COUNT_QUERY = "count_query"
    STATISTICAL_QUERY = "statistical_query"
    SUMMARY_QUERY = "summary_query"
    TOPIC_QUERY = "topic_query"


AGGREGATE_QUERY_TYPES = frozenset({QueryType.COUNT_QUERY, QueryType.STATISTICAL_QUERY})


@dataclass(frozen=True)
class Aggregation:
    """Aggregate operation requested by the query."""

    operation: str  # count | most | least
    target: str = "messages"  # messages | reactions | files


@dataclass(frozen=True)
class EntitySet:
    """Entities extracted from a query.

    Channels, users and topics are lower-cased and de-duplicated, keeping the
    order in which they were first seen.
    """

    channels: tuple[str, ...] = ()
    users: tuple[str, ...] = ()
    timeframe: str | None = None
    topics: tuple[str, ...] = ()
    aggregation: Aggregation | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "channels": list(self.channels),
            "users": list(self.users),
            "timeframe": self.timeframe,
            "topics": list(self.topics),
            "aggregation": (
                {"operation": self.aggregation.operation, "target": self.aggregation.target}
                if self.aggregation
                else None
            ),
        }


@dataclass(frozen=True)
class ContextRequirements:
    """Which kinds of context the answer should take into account."""

    needs_workspace_context: bool = False
    needs_channel_context: bool = False
    needs_user_context: bool = False
    needs_time_context: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "needsWorkspaceContext": self.needs_workspace_context,
            "needsChannelContext": self.needs_channel_context,
            "needsUserContext": self.needs_user_context,
            "needsTimeContext": self.needs_time_context,
        }


@dataclass(frozen=True)
class QueryAnalysis:
    """Classification result for a single query."""

    type: QueryType
    entities: EntitySet
    context_requirements: ContextRequirements

    @property
    def is_aggregate(self) -> bool:
        """Whether the query is answered by counting instead of generation."""
        return self.type in AGGREGATE_QUERY_TYPES

    def to_dict(self) -> dict[str, Any]:
        return {
            "entities": self.entities.to_dict(),
            "contextRequirements": self.context_requirements.to_dict(),
        }


@dataclass
class RetrievalFilter:
    """Structured filter handed to the similarity-search provider.

    ``username`` is the raw name from the query; resolving it to a user id is
    left to the search provider.
    """

    workspace_id: str
    channel_name: str | None = None
    username: str | None = None
    created_at_gte: datetime | None = None
    created_at_lte: datetime | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"workspace_id": self.workspace_id}
        if self.channel_name:
            data["channel_name"] = self.channel_name
        if self.username:
            data["username"] = self.username
        if self.created_at_gte:
            data["created_at_gte"] = self.created_at_gte.isoformat()
        if self.created_at_lte:
            data["created_at_lte"] = self.created_at_lte.isoformat()
        return data


class HitMetadata(BaseModel):
    """Metadata stored alongside an indexed message."""

    channel_id: str | None = None
    user_id: str | None = None
    created_at: datetime
    version: int | None = None
    is_latest: bool = False
    is_deleted: bool = False
    original_message_content: str | None = None

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("channel_id", "user_id", "original_message_content", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value == "":
            return None
        return value


class RawHit(BaseModel):
    """One record returned by the similarity-search provider."""

    id: str | None = None
    content: str
    metadata: HitMetadata
    similarity: float | None = None


@dataclass
class UserInfo:
    """Resolved author of a message."""

    id: str
    username: str | None = None
    full_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None


@dataclass
class MessageContext:
    """A retrieved message joined with its channel and author metadata."""

    content: str
    created_at: datetime
    channel_id: str | None = None
    channel_name: str | None = None
    user: UserInfo | None = None
    version: int | None = None
    is_latest: bool = True
    is_deleted: bool = False


@dataclass
class UserStatistic:
    """Message count for one user."""

    user_id: str
    username: str
    count: int


@dataclass
class AggregatedResult:
    """Computed answer for count and statistics queries.

    Exactly one of ``count`` and ``statistics`` is set.
    """

    count: int | None = None
    statistics: list[UserStatistic] | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.statistics is not None:
            return {
                "statistics": [
                    {"user_id": s.user_id, "username": s.username, "count": s.count}
                    for s in self.statistics
                ]
            }
        return {"count": self.count}


@dataclass(frozen=True)
class InstructionBundle:
    """Role and behaviour text used to build a system prompt."""

    role: str
    base: str
    format_instructions: tuple[str, ...] = ()
    context_instructions: tuple[str, ...] = ()
    error_instructions: tuple[str, ...] = ()


class RequestUser(BaseModel):
    """Profile of the person asking, as supplied by the caller."""

    username: str | None = None
    full_name: str | None = None


class ChatRequest(BaseModel):
    """Incoming question about a workspace."""

    message: str = Field(..., min_length=1)
    workspace_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    channel_name: str | None = None
    user: RequestUser | None = None

    @field_validator("message")
    @classmethod
    def _strip_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message must not be blank")
        return value


class ChatResponse(BaseModel):
    """Successful answer."""

    message: str
    metadata: dict[str, Any]


class ErrorResponse(BaseModel):
    """Structured failure payload."""

    error: str
    details: str | None = None
