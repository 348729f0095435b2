"""Entity extraction from free-text workspace questions.

Extraction is driven by pattern tables rather than conditionals: each
``EntityPattern`` belongs to one family (``channels``, ``users``, ``topics`` or
``timeframes``) and every pattern in a family runs against the whole query.
Matches for channels, users and topics are unioned; for timeframes the first
pattern (in table order) that matches wins and its phrase is kept verbatim.
"""

import logging
import re
from dataclasses import dataclass

from .models import Aggregation, EntitySet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityPattern:
    """A single extraction rule."""

    family: str
    pattern: re.Pattern[str]


_NAME = r"([a-z0-9][\w-]*)"

ENTITY_PATTERNS: tuple[EntityPattern, ...] = (
    # Channels
    EntityPattern("channels", re.compile(r"(?<![\w#&])#" + _NAME, re.I)),
    EntityPattern("channels", re.compile(r"\bchannel\s+[\"'#]?" + _NAME, re.I)),
    EntityPattern("channels", re.compile(r"\bin\s+(?:the\s+)?(?:channel\s+)?[\"'#]?([a-z][\w-]*)", re.I)),
    EntityPattern("channels", re.compile(r"\b(?:from|to)\s+(?:the\s+)?(?:channel\s+[\"'#]?|#)" + _NAME, re.I)),
    # Users
    EntityPattern("users", re.compile(r"(?<![\w.@])@([a-z0-9_](?:[\w-]|\.(?=[\w-]))*)", re.I)),
    EntityPattern("users", re.compile(r"\buser\s+@?" + _NAME, re.I)),
    EntityPattern("users", re.compile(r"\b(?:sent|posted|written)\s+by\s+@?" + _NAME, re.I)),
    EntityPattern("users", re.compile(r"\bmessages?\s+from\s+@?" + _NAME, re.I)),
    EntityPattern(
        "users",
        re.compile(r"\bwhat\s+(?:did|has)\s+@?" + _NAME + r"\s+(?:say|said|post|posted|write|wrote)\b", re.I),
    ),
    # Topics
    EntityPattern("topics", re.compile(r"\b(?:about|regarding|concerning)\s+([^.,?!]+)", re.I)),
    EntityPattern("topics", re.compile(r"\bon\s+the\s+topic\s+of\s+([^.,?!]+)", re.I)),
    EntityPattern("topics", re.compile(r"\brelated\s+to\s+([^.,?!]+)", re.I)),
    EntityPattern(
        "topics",
        re.compile(r"\b(?:opinions?|thoughts?|views?|perspectives?|stances?)\s+on\s+([^.,?!]+)", re.I),
    ),
    EntityPattern("topics", re.compile(r"\"([^\"]+)\"")),
    # Timeframes, most specific first
    EntityPattern("timeframes", re.compile(r"\b(?:last|past)\s+\d+\s+(?:hours?|days?|weeks?|months?)\b", re.I)),
    EntityPattern("timeframes", re.compile(r"\b(?:last|past)\s+(?:24\s+hours|hour|day|week|month)\b", re.I)),
    EntityPattern("timeframes", re.compile(r"\btoday\b", re.I)),
    EntityPattern("timeframes", re.compile(r"\byesterday\b", re.I)),
    EntityPattern("timeframes", re.compile(r"\bthis\s+(?:week|month)\b", re.I)),
    EntityPattern("timeframes", re.compile(r"\b24\s+hours\b", re.I)),
    EntityPattern("timeframes", re.compile(r"\brecent\b", re.I)),
)

COUNT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bhow many\b", re.I),
    re.compile(r"\bnumber of\b", re.I),
    re.compile(r"\bcount of\b", re.I),
    re.compile(r"\bmessage count\b", re.I),
    re.compile(r"\btotal\b", re.I),
)

STATISTICAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?:most|least) active\b", re.I),
    re.compile(r"\baverage\b", re.I),
    re.compile(r"\bwho (?:has sent|sent|wrote|posted|has posted) the (?:most|least|fewest)\b", re.I),
    re.compile(r"\bwho (?:has been|is|was) (?:the )?(?:most|least) active\b", re.I),
    re.compile(r"\btop (?:posters|contributors)\b", re.I),
)

FIRST_PERSON_PATTERN = re.compile(r"\b(?:i|me|my|mine)\b", re.I)

# Words that follow "in", "from", "user" etc. without naming anything.
NAME_STOPWORDS = frozenset(
    {
        "a", "about", "activity", "afternoon", "all", "an", "and", "any",
        "anybody", "anyone", "at", "been", "by", "case", "channel", "channels",
        "count", "detail", "details", "did", "evening", "every", "everybody",
        "everyone", "for", "from", "has", "have", "he", "here", "how", "i",
        "in", "is", "it", "its", "last", "many", "me", "message", "messages",
        "morning", "my", "of", "on", "order", "our", "past", "people",
        "posted", "posts", "recent", "relation", "send", "sent", "she",
        "somebody", "someone", "stats", "that", "the", "their", "there",
        "these", "they", "this", "those", "to", "today", "total", "user",
        "users", "was", "we", "week", "were", "what", "which", "who", "with",
        "workspace", "wrote", "yesterday", "you", "your",
    }
)

# Words that carry no searchable topic on their own.
QUERY_STOPWORDS = NAME_STOPWORDS | frozenset(
    {
        "are", "been", "can", "could", "do", "does", "going", "give", "happen",
        "happened", "happening", "has", "have", "is", "latest", "list", "new",
        "of", "on", "please", "post", "posted", "said", "say", "sent", "show",
        "summarise", "summarize", "summary", "tell", "us", "was", "were", "when",
        "where", "who", "why", "you",
    }
)

_TOPIC_TAIL = re.compile(r"\s+(?:in|from|during|since|today|yesterday|last|this)\b.*$", re.I)
_LEADING_ARTICLE = re.compile(r"^(?:the|a|an)\s+", re.I)
_MENTION = re.compile(r"[#@][\w.-]+")
_WORD = re.compile(r"[a-z0-9']+")


def _normalize(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip()).lower()


def _clean_name(value: str) -> str:
    return value.strip().strip("-_.").lower()


def _clean_topic(value: str) -> str:
    topic = _TOPIC_TAIL.sub("", value.strip())
    topic = _LEADING_ARTICLE.sub("", topic)
    return _normalize(topic)


def _add_unique(values: list[str], value: str) -> None:
    if value and value not in values:
        values.append(value)


def patterns_for(family: str) -> tuple[EntityPattern, ...]:
    """Return the extraction rules of one family, in table order."""
    return tuple(p for p in ENTITY_PATTERNS if p.family == family)


class EntityExtractor:
    """Pulls channels, users, topics and timeframes out of a query."""

    def __init__(self, patterns: tuple[EntityPattern, ...] = ENTITY_PATTERNS):
        self.patterns = patterns

    def _family(self, family: str) -> list[re.Pattern[str]]:
        return [p.pattern for p in self.patterns if p.family == family]

    def extract_channels(self, query: str) -> tuple[str, ...]:
        channels: list[str] = []
        for pattern in self._family("channels"):
            for match in pattern.finditer(query):
                name = _clean_name(match.group(1))
                if name not in NAME_STOPWORDS:
                    _add_unique(channels, name)
        return tuple(channels)

    def extract_users(self, query: str, current_username: str | None = None) -> tuple[str, ...]:
        """Extract user names.

        When nobody is named explicitly and the query speaks in the first
        person, the asking user's own name is used.
        """
        users: list[str] = []
        for pattern in self._family("users"):
            for match in pattern.finditer(query):
                name = _clean_name(match.group(1))
                if name not in NAME_STOPWORDS:
                    _add_unique(users, name)

        if not users and current_username and FIRST_PERSON_PATTERN.search(query):
            users.append(current_username.lower())

        return tuple(users)

    def extract_topics(self, query: str) -> tuple[str, ...]:
        topics: list[str] = []
        for pattern in self._family("topics"):
            for match in pattern.finditer(query):
                _add_unique(topics, _clean_topic(match.group(1)))
        return tuple(topics)

    def extract_timeframe(self, query: str) -> str | None:
        for pattern in self._family("timeframes"):
            match = pattern.search(query)
            if match:
                return _normalize(match.group(0))
        return None

    def extract_aggregation(self, query: str) -> Aggregation | None:
        lowered = query.lower()
        if "reaction" in lowered:
            target = "reactions"
        elif "file" in lowered:
            target = "files"
        else:
            target = "messages"

        if any(p.search(query) for p in COUNT_PATTERNS):
            return Aggregation(operation="count", target=target)

        if any(p.search(query) for p in STATISTICAL_PATTERNS):
            operation = "least" if re.search(r"\b(?:least|fewest)\b", lowered) else "most"
            return Aggregation(operation=operation, target=target)

        return None

    def extract(self, query: str, current_username: str | None = None) -> EntitySet:
        entities = EntitySet(
            channels=self.extract_channels(query),
            users=self.extract_users(query, current_username),
            timeframe=self.extract_timeframe(query),
            topics=self.extract_topics(query),
            aggregation=self.extract_aggregation(query),
        )
        logger.debug(f"Extracted entities: {entities.to_dict()}")
        return entities


def has_searchable_topic(query: str, entities: EntitySet) -> bool:
    """Whether the query says anything worth embedding beyond its filters."""
    if entities.topics:
        return True

    residue = _MENTION.sub(" ", query.lower())
    if entities.timeframe:
        residue = residue.replace(entities.timeframe, " ")
    for name in (*entities.channels, *entities.users):
        residue = re.sub(rf"\b{re.escape(name)}\b", " ", residue)

    return any(
        len(word) > 2 and word not in QUERY_STOPWORDS for word in _WORD.findall(residue)
    )
