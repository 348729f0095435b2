"""Pattern-based query classification."""

import logging
import re

from .entities import COUNT_PATTERNS, STATISTICAL_PATTERNS, EntityExtractor
from .models import ContextRequirements, EntitySet, QueryAnalysis, QueryType

logger = logging.getLogger(__name__)

SUMMARY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bsummari[sz]e\b", re.I),
    re.compile(r"\bsummary of\b", re.I),
    re.compile(r"\bwhat (?:has been|was|have been|were) discussed\b", re.I),
    re.compile(r"\bwhat (?:have|did) people (?:talk|talked) about\b", re.I),
    re.compile(r"\brecap\b", re.I),
)

TOPIC_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bwhat\b.*\b(?:said|talked|discussed|mentioned)\s+about\s+\S", re.I),
    re.compile(r"\bfind\b.*\b(?:messages|discussions?|mentions?)\s+about\s+\S", re.I),
    re.compile(r"\bsearch\b.*\b(?:for|about)\s+\S", re.I),
    re.compile(r"\bshow\b.*\b(?:messages|discussions?|mentions?)\s+about\s+\S", re.I),
    re.compile(r"\btell\s+(?:me|us)\s+about\s+\S", re.I),
    re.compile(r"\bany\b.*\b(?:messages|discussions?|mentions?)\s+about\s+\S", re.I),
)

WORKSPACE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bworkspace\s+(?:members|activity|overview|info|information|stats)\b", re.I),
    re.compile(r"\bwho(?:'s| is| are)\s+in\s+(?:this|the|our)\s+workspace\b", re.I),
    re.compile(r"\b(?:what|which|list)\b.*\bchannels\s+(?:are there|exist|do we have)\b", re.I),
    re.compile(r"\blist\s+(?:all\s+)?(?:the\s+)?channels\b", re.I),
    re.compile(r"\bacross\s+(?:the\s+|all\s+)?(?:workspace|channels)\b", re.I),
)

CHANNEL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?:this|the current)\s+channel\b", re.I),
    re.compile(r"\bchannel\s+(?:purpose|topic|activity|history)\b", re.I),
    re.compile(r"\bwhat(?:'s| is)\s+(?:happening|going on)\s+in\b", re.I),
)

USER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bmy\s+(?:messages|activity|posts)\b", re.I),
    re.compile(r"\bmessages?\s+I\s+(?:have|had)\s+(?:sent|posted|written)\b", re.I),
    re.compile(r"\b(?:have|did)\s+I\s+(?:send|post|write)\b", re.I),
    re.compile(r"\b(?:check|find)\s+my\b", re.I),
    re.compile(r"\bhas\s+(?:sent|written|posted)\s+(?:messages|message)\b", re.I),
    re.compile(r"\bmessages\s+from\b", re.I),
    re.compile(r"\bsent\s+by\b", re.I),
    re.compile(r"\bwhat\s+(?:did|has)\s+@?[\w.-]+\s+(?:say|said|post|posted|write|wrote)\b", re.I),
)

# Explicit families in priority order; the first family with any match wins.
EXPLICIT_PATTERN_FAMILIES: tuple[tuple[QueryType, tuple[re.Pattern[str], ...]], ...] = (
    (QueryType.COUNT_QUERY, COUNT_PATTERNS),
    (QueryType.STATISTICAL_QUERY, STATISTICAL_PATTERNS),
    (QueryType.SUMMARY_QUERY, SUMMARY_PATTERNS),
    (QueryType.TOPIC_QUERY, TOPIC_PATTERNS),
    (QueryType.WORKSPACE_INFO, WORKSPACE_PATTERNS),
    (QueryType.CHANNEL_CONTEXT, CHANNEL_PATTERNS),
    (QueryType.USER_CONTEXT, USER_PATTERNS),
)


class QueryClassifier:
    """Assigns a ``QueryType`` to a query and derives its context needs."""

    def __init__(self, extractor: EntityExtractor | None = None):
        self.extractor = extractor or EntityExtractor()

    def match_explicit(self, query: str) -> QueryType | None:
        """Return the type of the first pattern family matching the query."""
        for query_type, patterns in EXPLICIT_PATTERN_FAMILIES:
            if any(pattern.search(query) for pattern in patterns):
                return query_type
        return None

    def classify_type(self, query: str, entities: EntitySet) -> QueryType:
        explicit = self.match_explicit(query)
        if explicit is not None:
            return explicit

        # Channel beats user when both are mentioned
        if entities.channels:
            return QueryType.CHANNEL_CONTEXT
        if entities.users:
            return QueryType.USER_CONTEXT
        if "workspace" in query.lower():
            return QueryType.WORKSPACE_INFO
        return QueryType.GENERAL_ASSISTANCE

    @staticmethod
    def context_requirements(query_type: QueryType, entities: EntitySet) -> ContextRequirements:
        summary = query_type == QueryType.SUMMARY_QUERY
        return ContextRequirements(
            needs_workspace_context=query_type == QueryType.WORKSPACE_INFO,
            needs_channel_context=(
                query_type == QueryType.CHANNEL_CONTEXT or bool(entities.channels) or summary
            ),
            needs_user_context=(
                query_type == QueryType.USER_CONTEXT or bool(entities.users) or summary
            ),
            needs_time_context=entities.timeframe is not None,
        )

    def analyze(self, query: str, current_username: str | None = None) -> QueryAnalysis:
        """Extract entities, classify and derive context requirements."""
        entities = self.extractor.extract(query, current_username)
        query_type = self.classify_type(query, entities)
        analysis = QueryAnalysis(
            type=query_type,
            entities=entities,
            context_requirements=self.context_requirements(query_type, entities),
        )
        logger.info(f"Classified query as {query_type.value}")
        return analysis
