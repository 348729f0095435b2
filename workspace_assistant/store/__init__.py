"""Vector store and metadata lookups for workspace messages."""

from .chroma import create_chroma_client
from .indexer import MessageIndexer, MessageRecord
from .metadata import ChannelRecord, ChromaMetadataStore, MetadataStore, UserRecord
from .search import ChromaMessageSearch, MessageSearch, build_where

__all__ = [
    "ChannelRecord",
    "ChromaMessageSearch",
    "ChromaMetadataStore",
    "MessageIndexer",
    "MessageRecord",
    "MessageSearch",
    "MetadataStore",
    "UserRecord",
    "build_where",
    "create_chroma_client",
]
