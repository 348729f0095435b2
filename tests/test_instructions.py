"""Tests for instruction bundles."""

import pytest

from workspace_assistant.query.instructions import (
    FORMAT_INSTRUCTIONS,
    GENERAL_BUNDLE,
    TOPIC_BUNDLE,
    compose_instructions,
    get_instruction_bundle,
    requirement_lines,
)
from workspace_assistant.query.models import ContextRequirements, QueryType


@pytest.mark.parametrize("query_type", list(QueryType))
def test_every_type_carries_citation_format(query_type):
    bundle = get_instruction_bundle(query_type)
    assert FORMAT_INSTRUCTIONS in bundle.format_instructions
    assert "(@username) in #[channel] at [exact time]" in compose_instructions(query_type)


def test_unknown_type_falls_back_to_general():
    assert get_instruction_bundle("not-a-type") is GENERAL_BUNDLE


def test_summary_combines_topic_analysis():
    summary = get_instruction_bundle(QueryType.SUMMARY_QUERY)

    assert TOPIC_BUNDLE.base in summary.base
    assert set(TOPIC_BUNDLE.context_instructions) <= set(summary.context_instructions)
    assert set(TOPIC_BUNDLE.error_instructions) <= set(summary.error_instructions)


def test_compose_order():
    """Test base, format, context and error blocks appear in that order."""
    bundle = get_instruction_bundle(QueryType.GENERAL_ASSISTANCE)
    text = compose_instructions(QueryType.GENERAL_ASSISTANCE)

    assert text.startswith(bundle.base)
    assert text.index(FORMAT_INSTRUCTIONS) < text.index(bundle.error_instructions[0])


def test_compose_without_format():
    text = compose_instructions(QueryType.CHANNEL_CONTEXT, include_format=False)
    assert FORMAT_INSTRUCTIONS not in text
    assert "Prioritize messages from the current channel" in text


def test_requirement_lines():
    lines = requirement_lines(
        ContextRequirements(needs_time_context=True, needs_user_context=True)
    )

    assert len(lines) == 2
    assert lines[0].startswith("Consider the specified timeframe")
    assert lines[1].startswith("Focus on user-specific interactions")


def test_no_requirements_no_lines():
    assert requirement_lines(ContextRequirements()) == []
