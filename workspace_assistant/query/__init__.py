"""Query analysis, retrieval and answer composition."""

from .classifier import QueryClassifier
from .entities import EntityExtractor
from .filters import FilterBuilder, result_cap
from .formatter import ContextFormatter
from .models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    QueryAnalysis,
    QueryType,
    RetrievalFilter,
)
from .processor import QueryProcessor

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ContextFormatter",
    "EntityExtractor",
    "ErrorResponse",
    "FilterBuilder",
    "QueryAnalysis",
    "QueryClassifier",
    "QueryProcessor",
    "QueryType",
    "RetrievalFilter",
    "result_cap",
]
