"""Tests for entity extraction."""

import pytest

from workspace_assistant.query.entities import (
    EntityExtractor,
    has_searchable_topic,
    patterns_for,
)


@pytest.fixture
def extractor():
    return EntityExtractor()


class TestChannelExtraction:
    """Test channel entity patterns."""

    @pytest.mark.parametrize(
        "query",
        [
            "What happened in #general?",
            "what happened in general",
            "Show me the channel general",
            "Anything new in the #General channel",
        ],
    )
    def test_channel_is_case_folded(self, extractor, query):
        """Test that every channel phrasing yields the same lower-cased name."""
        assert "general" in extractor.extract_channels(query)

    def test_hash_and_phrase_are_unioned(self, extractor):
        """Test that two patterns naming the same channel produce one entry."""
        assert extractor.extract_channels("#general and channel general") == ("general",)

    def test_hyphenated_channel(self, extractor):
        assert extractor.extract_channels("Any updates in #dev-ops?") == ("dev-ops",)

    def test_stopwords_are_not_channels(self, extractor):
        """Test that filler words after 'in' are ignored."""
        assert extractor.extract_channels("What did I miss in the last week") == ()

    def test_numbers_after_in_are_not_channels(self, extractor):
        assert extractor.extract_channels("messages in 2024") == ()


class TestUserExtraction:
    """Test user entity patterns."""

    def test_mention(self, extractor):
        assert extractor.extract_users("What did @Alice say?") == ("alice",)

    def test_sent_by(self, extractor):
        assert extractor.extract_users("messages sent by bob") == ("bob",)

    def test_email_is_not_a_mention(self, extractor):
        assert extractor.extract_users("email alice@example.com") == ()

    def test_first_person_uses_current_user(self, extractor):
        """Test first-person words resolve to the asking user."""
        assert extractor.extract_users("Summarize my messages", "Dana") == ("dana",)

    def test_explicit_user_beats_first_person(self, extractor):
        assert extractor.extract_users("Did I reply to @bob?", "dana") == ("bob",)

    def test_first_person_without_current_user(self, extractor):
        assert extractor.extract_users("Summarize my messages") == ()

    def test_what_did_name_say(self, extractor):
        query = "What did bob say in #general yesterday?"
        entities = extractor.extract(query)

        assert entities.users == ("bob",)
        assert "general" in entities.channels

    @pytest.mark.parametrize(
        "query", ["What did people say about the launch?", "What has everyone posted today?"]
    )
    def test_crowd_words_are_not_users(self, extractor, query):
        assert extractor.extract_users(query) == ()

    def test_what_did_i_say_uses_current_user(self, extractor):
        assert extractor.extract_users("What did I say yesterday?", "dana") == ("dana",)


class TestTimeframeExtraction:
    """Test timeframe entity patterns."""

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("How many messages today", "today"),
            ("What happened in the last 7 days", "last 7 days"),
            ("Anything from yesterday?", "yesterday"),
            ("Show recent messages", "recent"),
            ("Updates this week", "this week"),
        ],
    )
    def test_timeframe(self, extractor, query, expected):
        assert extractor.extract_timeframe(query) == expected

    def test_first_pattern_wins(self, extractor):
        """Test that the more specific phrase wins when several appear."""
        assert extractor.extract_timeframe("recent messages from the past 3 days") == "past 3 days"

    def test_no_timeframe(self, extractor):
        assert extractor.extract_timeframe("Who is alice?") is None


class TestTopicAndAggregation:
    """Test topic and aggregation extraction."""

    def test_topic_after_about(self, extractor):
        assert extractor.extract_topics("What did people say about the deployment in #ops?") == (
            "deployment",
        )

    def test_quoted_topic(self, extractor):
        assert extractor.extract_topics('Find "release plan"') == ("release plan",)

    def test_count_aggregation(self, extractor):
        aggregation = extractor.extract_aggregation("How many files were shared?")
        assert aggregation.operation == "count"
        assert aggregation.target == "files"

    def test_least_aggregation(self, extractor):
        aggregation = extractor.extract_aggregation("Who sent the fewest messages?")
        assert aggregation.operation == "least"

    def test_most_aggregation(self, extractor):
        assert extractor.extract_aggregation("Who is the most active?").operation == "most"

    def test_no_aggregation(self, extractor):
        assert extractor.extract_aggregation("Tell me about the launch") is None


def test_patterns_are_grouped_by_family():
    """Test that every family has its own pattern table entries."""
    for family in ("channels", "users", "topics", "timeframes"):
        assert patterns_for(family)
        assert all(p.family == family for p in patterns_for(family))


class TestSearchableTopic:
    """Test detection of queries worth embedding."""

    def test_filters_only_query(self, extractor):
        query = "Show recent messages in #general"
        assert has_searchable_topic(query, extractor.extract(query)) is False

    def test_content_query(self, extractor):
        query = "Any news on the database migration?"
        assert has_searchable_topic(query, extractor.extract(query)) is True
