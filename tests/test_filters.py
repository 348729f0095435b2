"""Tests for retrieval filter construction."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from conftest import FIXED_NOW, fixed_clock
from workspace_assistant.query.classifier import QueryClassifier
from workspace_assistant.query.filters import FilterBuilder, result_cap
from workspace_assistant.query.models import QueryType


@pytest.fixture
def classifier():
    return QueryClassifier()


@pytest.fixture
def builder():
    return FilterBuilder(tz="UTC", clock=fixed_clock)


def test_channel_without_timeframe(classifier, builder):
    """Test a channel query produces only workspace and channel fields."""
    analysis = classifier.analyze("What is going on in #general")
    search_filter = builder.build(analysis, "W")

    assert search_filter.to_dict() == {"workspace_id": "W", "channel_name": "general"}
    assert search_filter.created_at_gte is None
    assert search_filter.created_at_lte is None


def test_today_covers_calendar_day(classifier, builder):
    analysis = classifier.analyze("How many messages today in #general")
    search_filter = builder.build(analysis, "W")

    assert search_filter.channel_name == "general"
    assert search_filter.created_at_gte == datetime(2024, 3, 10, 0, 0, 0, tzinfo=timezone.utc)
    assert search_filter.created_at_lte == datetime(
        2024, 3, 10, 23, 59, 59, 999000, tzinfo=timezone.utc
    )


def test_today_uses_configured_timezone(classifier):
    """Test day boundaries follow the display timezone."""
    builder = FilterBuilder(tz="America/New_York", clock=fixed_clock)
    search_filter = builder.build(classifier.analyze("messages today"), "W")

    tz = ZoneInfo("America/New_York")
    assert search_filter.created_at_gte == datetime(2024, 3, 10, 0, 0, 0, tzinfo=tz)


def test_recent_is_last_24_hours(classifier, builder):
    search_filter = builder.build(classifier.analyze("Show recent messages"), "W")

    assert search_filter.created_at_lte == FIXED_NOW
    assert search_filter.created_at_gte == FIXED_NOW - timedelta(hours=24)


def test_other_timeframes_do_not_filter(classifier, builder):
    """Test extracted but unsupported timeframes leave the range open."""
    analysis = classifier.analyze("What happened in the last 7 days")
    assert analysis.entities.timeframe == "last 7 days"

    search_filter = builder.build(analysis, "W")
    assert search_filter.created_at_gte is None
    assert search_filter.created_at_lte is None


def test_caller_channel_overrides_extracted(classifier, builder):
    analysis = classifier.analyze("What happened in #random")
    search_filter = builder.build(analysis, "W", channel_name="#General")

    assert search_filter.channel_name == "General"


def test_username_is_first_user(classifier, builder):
    analysis = classifier.analyze("What did @alice say to @bob")
    search_filter = builder.build(analysis, "W")

    assert search_filter.username == "alice"
    assert search_filter.channel_name is None


@pytest.mark.parametrize(
    "query_type,expected",
    [
        (QueryType.COUNT_QUERY, 1000),
        (QueryType.STATISTICAL_QUERY, 500),
        (QueryType.CHANNEL_CONTEXT, 100),
        (QueryType.USER_CONTEXT, 10),
        (QueryType.GENERAL_ASSISTANCE, 10),
    ],
)
def test_result_caps(query_type, expected):
    assert result_cap(query_type) == expected
