"""Renders enriched messages and aggregate results as text."""

import re
from datetime import tzinfo
from itertools import groupby
from zoneinfo import ZoneInfo

from .models import AggregatedResult, MessageContext, QueryAnalysis, RetrievalFilter

NO_VALID_MESSAGES = "There are no valid messages available for this query."

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_CONTROLS = re.compile(r"[\r\n\t]+")


def sanitize(content: str) -> str:
    """Make message text safe to place inside a double-quoted citation."""
    content = _WHITESPACE_CONTROLS.sub(" ", content)
    content = _CONTROL_CHARS.sub("", content)
    return content.replace("\\", "\\\\").replace('"', '\\"').strip()


def author_label(context: MessageContext) -> str:
    user = context.user
    if user is None or not user.username:
        return "@unknown_user"
    if user.full_name:
        return f"{user.full_name} (@{user.username})"
    return f"@{user.username}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class ContextFormatter:
    """Formats retrieval results for the prompt or for a direct answer."""

    def __init__(self, tz: tzinfo | str = "UTC"):
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def format_messages(self, contexts: list[MessageContext]) -> str:
        """Render messages grouped by calendar day, oldest first.

        Args:
            contexts: Enriched messages

        Returns:
            Citation block, or a "no valid messages" sentence when empty
        """
        if not contexts:
            return NO_VALID_MESSAGES

        ordered = sorted(contexts, key=lambda c: c.created_at)
        sections = []
        for day, group in groupby(ordered, key=lambda c: c.created_at.astimezone(self.tz).date()):
            lines = [f"=== {day.isoformat()} ==="]
            for context in group:
                time = context.created_at.astimezone(self.tz).strftime("%H:%M:%S")
                where = f" in #{context.channel_name}" if context.channel_name else ""
                lines.append(
                    f'[{time}] {author_label(context)}{where}: "{sanitize(context.content)}"'
                )
            sections.append("\n".join(lines))
        return "\n\n".join(sections)

    @staticmethod
    def _qualifiers(search_filter: RetrievalFilter, analysis: QueryAnalysis) -> str:
        parts = []
        if search_filter.channel_name:
            parts.append(f"in channel #{search_filter.channel_name}")
        if search_filter.username:
            parts.append(f"from @{search_filter.username}")
        # Only mention a timeframe the filter actually applied
        if search_filter.created_at_gte and analysis.entities.timeframe:
            parts.append(f"during {analysis.entities.timeframe}")
        return "".join(f" {part}" for part in parts)

    def format_aggregate(
        self,
        result: AggregatedResult,
        analysis: QueryAnalysis,
        search_filter: RetrievalFilter,
        cap: int | None = None,
    ) -> str:
        """Render a count or leaderboard as plain sentences."""
        qualifiers = self._qualifiers(search_filter, analysis)

        if result.statistics is not None:
            if not result.statistics:
                return f"I found no user activity{qualifiers}."
            aggregation = analysis.entities.aggregation
            direction = "least" if aggregation and aggregation.operation == "least" else "most"
            lines = [f"Here are the {direction} active users{qualifiers}:"]
            for rank, stat in enumerate(result.statistics, start=1):
                lines.append(f"{rank}. @{stat.username}: {_plural(stat.count, 'message')}")
            return "\n".join(lines)

        count = result.count or 0
        if count == 0:
            return f"I found no messages{qualifiers}."

        if cap is not None and count >= cap:
            return (
                f"I found at least {_plural(count, 'message')}{qualifiers}. "
                f"Counts are limited to {cap} messages, so the real number may be higher."
            )
        return f"I found exactly {_plural(count, 'message')}{qualifiers}."
