"""Shared ChromaDB client construction."""

import logging

import chromadb
from chromadb.api import ClientAPI
from chromadb.config import Settings as ChromaSettings

from workspace_assistant.config import get_settings

logger = logging.getLogger(__name__)


def create_chroma_client(host: str | None = None, port: int | None = None) -> ClientAPI:
    """Connect to ChromaDB over HTTP.

    Args:
        host: ChromaDB host (optional, uses config if not provided)
        port: ChromaDB port (optional, uses config if not provided)
    """
    if host is None or port is None:
        settings = get_settings()
        host = host or settings.chroma_host
        port = port or settings.chroma_port

    try:
        client = chromadb.HttpClient(
            host=host,
            port=port,
            settings=ChromaSettings(anonymized_telemetry=False),
        )
    except Exception as e:
        logger.error(f"Failed to connect to ChromaDB at http://{host}:{port}: {e}")
        raise

    logger.info(f"Connected to ChromaDB at http://{host}:{port}")
    return client
