"""Retrieval filter construction."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from .models import QueryAnalysis, QueryType, RetrievalFilter

logger = logging.getLogger(__name__)

# Aggregate answers have to scan deep; narrative answers only need the best hits.
RESULT_CAPS: dict[QueryType, int] = {
    QueryType.COUNT_QUERY: 1000,
    QueryType.STATISTICAL_QUERY: 500,
    QueryType.CHANNEL_CONTEXT: 100,
}
DEFAULT_RESULT_CAP = 10

# Timeframe phrases that narrow the search. Other extracted phrases are kept
# in the analysis but do not filter.
ACTIONABLE_TIMEFRAMES = frozenset({"today", "recent"})


def result_cap(query_type: QueryType) -> int:
    """Maximum number of hits to request for a query type."""
    return RESULT_CAPS.get(query_type, DEFAULT_RESULT_CAP)


class FilterBuilder:
    """Turns a query analysis into a ``RetrievalFilter``."""

    def __init__(
        self,
        tz: tzinfo | str = "UTC",
        clock: Callable[[tzinfo], datetime] | None = None,
    ):
        """Initialize filter builder.

        Args:
            tz: Timezone whose calendar day "today" refers to
            clock: Returns the current time in the given timezone
        """
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self.clock = clock or datetime.now

    def time_range(self, timeframe: str | None) -> tuple[datetime, datetime] | None:
        """Interpret a timeframe phrase as an inclusive time range."""
        if timeframe not in ACTIONABLE_TIMEFRAMES:
            return None

        now = self.clock(self.tz)
        if timeframe == "today":
            start = now.replace(hour=0, minute=0, second=0, microsecond=0)
            end = now.replace(hour=23, minute=59, second=59, microsecond=999000)
            return start, end

        return now - timedelta(hours=24), now

    def build(
        self,
        analysis: QueryAnalysis,
        workspace_id: str,
        channel_name: str | None = None,
    ) -> RetrievalFilter:
        """Build the search filter.

        Args:
            analysis: Classified query
            workspace_id: Workspace to search in
            channel_name: Channel the caller is looking at; overrides extracted channels

        Returns:
            RetrievalFilter for the similarity-search provider
        """
        entities = analysis.entities
        search_filter = RetrievalFilter(workspace_id=workspace_id)

        if channel_name:
            search_filter.channel_name = channel_name.lstrip("#")
        elif entities.channels:
            search_filter.channel_name = entities.channels[0]

        if entities.users:
            search_filter.username = entities.users[0]

        time_range = self.time_range(entities.timeframe)
        if time_range:
            search_filter.created_at_gte, search_filter.created_at_lte = time_range
        elif entities.timeframe:
            logger.info(f"Timeframe '{entities.timeframe}' is not applied to the search filter")

        logger.info(f"Built search filter: {search_filter.to_dict()}")
        return search_filter
