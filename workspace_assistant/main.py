"""Main entry point for the Workspace Assistant service."""

import asyncio
import logging
import sys

from dotenv import load_dotenv

from workspace_assistant.config import Settings, get_settings
from workspace_assistant.llm import create_embedding_provider, create_llm_provider
from workspace_assistant.query import ContextFormatter, FilterBuilder, QueryProcessor
from workspace_assistant.store import ChromaMessageSearch, ChromaMetadataStore, create_chroma_client
from workspace_assistant.web_server import WebServer

logger = logging.getLogger(__name__)


def build_processor(settings: Settings) -> QueryProcessor:
    """Wire the query pipeline to its providers."""
    client = create_chroma_client(settings.chroma_host, settings.chroma_port)
    metadata_store = ChromaMetadataStore(
        client,
        channels_collection=settings.channels_collection,
        users_collection=settings.users_collection,
    )
    search = ChromaMessageSearch(
        client,
        metadata_store=metadata_store,
        collection_name=settings.messages_collection,
    )

    return QueryProcessor(
        embedding_provider=create_embedding_provider(),
        llm_provider=create_llm_provider(),
        search=search,
        metadata_store=metadata_store,
        filter_builder=FilterBuilder(tz=settings.display_timezone),
        formatter=ContextFormatter(tz=settings.display_timezone),
        generation_timeout=settings.generation_timeout,
    )


async def main() -> None:
    """Main application entry point."""
    settings = get_settings()
    logger.info(f"Starting Workspace Assistant in {settings.environment.value} mode")
    logger.info(f"Using LLM provider: {settings.llm_provider.value}")

    # Validate configuration
    try:
        settings.validate_provider_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    processor = build_processor(settings)
    web_server = WebServer(processor, port=settings.server_port)
    web_runner = await web_server.start()

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down...")
        await web_server.stop(web_runner)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    run()
