"""Count and per-user statistics over enriched messages."""

import logging

from .filters import result_cap
from .models import AggregatedResult, MessageContext, QueryAnalysis, QueryType, UserStatistic

logger = logging.getLogger(__name__)

STATISTICS_LIMIT = 5


def count_messages(contexts: list[MessageContext], cap: int | None = None) -> AggregatedResult:
    """Count surviving messages. Exact only up to the retrieval cap."""
    count = len(contexts)
    if cap is not None and count >= cap:
        logger.warning(f"Message count reached the retrieval cap of {cap}; the real count may be higher")
    return AggregatedResult(count=count)


def user_statistics(
    contexts: list[MessageContext],
    least: bool = False,
    limit: int = STATISTICS_LIMIT,
) -> AggregatedResult:
    """Rank users by message count.

    Args:
        contexts: Enriched messages
        least: Sort ascending instead of descending
        limit: Number of users to return

    Returns:
        AggregatedResult with ``statistics`` set
    """
    groups: dict[str, UserStatistic] = {}
    for context in contexts:
        if context.user is None:
            continue
        stat = groups.get(context.user.id)
        if stat is None:
            stat = UserStatistic(
                user_id=context.user.id,
                username=context.user.username or "unknown_user",
                count=0,
            )
            groups[context.user.id] = stat
        stat.count += 1

    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(groups.values(), key=lambda s: s.count, reverse=not least)
    return AggregatedResult(statistics=ranked[:limit])


def aggregate(contexts: list[MessageContext], analysis: QueryAnalysis) -> AggregatedResult:
    """Compute the aggregate answer for a count or statistical query."""
    if analysis.type == QueryType.STATISTICAL_QUERY:
        aggregation = analysis.entities.aggregation
        least = aggregation is not None and aggregation.operation == "least"
        return user_statistics(contexts, least=least)

    return count_messages(contexts, cap=result_cap(analysis.type))
