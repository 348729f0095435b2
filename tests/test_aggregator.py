"""Tests for count and statistics aggregation."""

from datetime import datetime, timezone

from workspace_assistant.query.aggregator import aggregate, count_messages, user_statistics
from workspace_assistant.query.models import (
    Aggregation,
    ContextRequirements,
    EntitySet,
    MessageContext,
    QueryAnalysis,
    QueryType,
    UserInfo,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def messages_by(counts: dict[str, int]) -> list[MessageContext]:
    contexts = []
    for name, count in counts.items():
        for _ in range(count):
            contexts.append(
                MessageContext(
                    content="x",
                    created_at=NOW,
                    user=UserInfo(id=f"id-{name}", username=name),
                )
            )
    return contexts


def statistical(operation: str | None = None) -> QueryAnalysis:
    aggregation = Aggregation(operation=operation) if operation else None
    return QueryAnalysis(
        type=QueryType.STATISTICAL_QUERY,
        entities=EntitySet(aggregation=aggregation),
        context_requirements=ContextRequirements(),
    )


def test_statistics_sorted_descending_by_default():
    result = aggregate(messages_by({"a": 3, "b": 5, "c": 1}), statistical())

    assert [s.username for s in result.statistics] == ["b", "a", "c"]
    assert [s.count for s in result.statistics] == [5, 3, 1]


def test_statistics_least_sorts_ascending():
    result = aggregate(messages_by({"a": 3, "b": 5, "c": 1}), statistical("least"))

    assert [s.username for s in result.statistics] == ["c", "a", "b"]


def test_statistics_top_five_only():
    counts = {name: i + 1 for i, name in enumerate("abcdefg")}

    result = user_statistics(messages_by(counts))

    assert [s.username for s in result.statistics] == ["g", "f", "e", "d", "c"]


def test_ties_keep_first_seen_order():
    result = user_statistics(messages_by({"x": 2, "y": 2, "z": 2}))

    assert [s.username for s in result.statistics] == ["x", "y", "z"]


def test_messages_without_user_are_not_ranked():
    contexts = messages_by({"a": 1}) + [MessageContext(content="x", created_at=NOW)]

    result = user_statistics(contexts)

    assert [(s.username, s.count) for s in result.statistics] == [("a", 1)]


def test_unresolved_username_is_labelled():
    contexts = [MessageContext(content="x", created_at=NOW, user=UserInfo(id="u9"))]

    result = user_statistics(contexts)

    assert result.statistics[0].username == "unknown_user"


def test_count_is_number_of_messages():
    analysis = QueryAnalysis(
        type=QueryType.COUNT_QUERY,
        entities=EntitySet(),
        context_requirements=ContextRequirements(),
    )

    result = aggregate(messages_by({"a": 2, "b": 1}), analysis)

    assert result.count == 3
    assert result.statistics is None
    assert result.to_dict() == {"count": 3}


def test_empty_inputs():
    assert count_messages([]).to_dict() == {"count": 0}
    assert user_statistics([]).to_dict() == {"statistics": []}
