"""Tests for the retriever."""

import pytest

from conftest import FakeEmbeddingProvider, FakeSearch, make_record
from workspace_assistant.query.classifier import QueryClassifier
from workspace_assistant.query.models import RetrievalFilter
from workspace_assistant.query.retriever import (
    AGGREGATE_EMBEDDING_TEXT,
    FALLBACK_EMBEDDING_TEXT,
    Retriever,
)


@pytest.fixture
def classifier():
    return QueryClassifier()


class TestEmbeddingText:
    """Test choice of embedded text."""

    def test_aggregate_uses_generic_phrase(self, classifier):
        query = "How many messages today in #general"
        assert Retriever.embedding_text(query, classifier.analyze(query)) == AGGREGATE_EMBEDDING_TEXT

    def test_narrative_uses_query(self, classifier):
        query = "What did @alice say about deployment"
        assert Retriever.embedding_text(query, classifier.analyze(query)) == query

    def test_narrative_without_topic_uses_fallback(self, classifier):
        query = "Show recent messages in #general"
        assert Retriever.embedding_text(query, classifier.analyze(query)) == FALLBACK_EMBEDDING_TEXT


class TestRetrieve:
    """Test retrieval and its degradation paths."""

    @pytest.mark.asyncio
    async def test_passes_embedding_filter_and_limit(self, classifier):
        search = FakeSearch(records=[make_record("m1"), make_record("m2")])
        retriever = Retriever(FakeEmbeddingProvider([0.5, 0.5]), search)
        query = "What did @alice say about deployment"
        search_filter = RetrievalFilter(workspace_id="W", username="alice")

        hits = await retriever.retrieve(query, classifier.analyze(query), search_filter, 10)

        assert [hit.id for hit in hits] == ["m1", "m2"]
        assert search.calls == [{"embedding": [0.5, 0.5], "filter": search_filter, "limit": 10}]

    @pytest.mark.asyncio
    async def test_embedding_failure_falls_back_to_filter_only(self, classifier):
        """Test an embedding error still searches, with an empty vector."""
        search = FakeSearch(records=[make_record("m1")])
        retriever = Retriever(FakeEmbeddingProvider(error=RuntimeError("down")), search)
        query = "How many messages today"

        hits = await retriever.retrieve(
            query, classifier.analyze(query), RetrievalFilter(workspace_id="W"), 1000
        )

        assert len(hits) == 1
        assert search.calls[0]["embedding"] == []

    @pytest.mark.asyncio
    async def test_search_failure_returns_no_hits(self, classifier):
        search = FakeSearch(error=RuntimeError("chroma unavailable"))
        retriever = Retriever(FakeEmbeddingProvider(), search)
        query = "Tell me about the launch"

        hits = await retriever.retrieve(
            query, classifier.analyze(query), RetrievalFilter(workspace_id="W"), 10
        )

        assert hits == []

    @pytest.mark.asyncio
    async def test_malformed_records_are_skipped(self, classifier):
        bad = {"id": "broken", "content": "no metadata"}
        search = FakeSearch(records=[bad, make_record("m1")])
        retriever = Retriever(FakeEmbeddingProvider(), search)
        query = "Tell me about the launch"

        hits = await retriever.retrieve(
            query, classifier.analyze(query), RetrievalFilter(workspace_id="W"), 10
        )

        assert [hit.id for hit in hits] == ["m1"]
