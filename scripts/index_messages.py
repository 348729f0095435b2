"""Index a workspace chat export into ChromaDB.

The export is a JSON file with ``channels``, ``users`` and ``messages`` lists.

Usage:
    python scripts/index_messages.py export.json [--batch-size 10]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from workspace_assistant.config import get_settings
from workspace_assistant.llm import create_embedding_provider
from workspace_assistant.store import (
    ChannelRecord,
    ChromaMetadataStore,
    MessageIndexer,
    MessageRecord,
    UserRecord,
    create_chroma_client,
)

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def index_export(path: Path, batch_size: int) -> dict:
    """Load an export file and index its contents."""
    settings = get_settings()
    export = json.loads(path.read_text(encoding="utf-8"))

    channels = [ChannelRecord.model_validate(c) for c in export.get("channels", [])]
    users = [UserRecord.model_validate(u) for u in export.get("users", [])]
    messages = [MessageRecord.model_validate(m) for m in export.get("messages", [])]
    print(f"📥 Loaded {len(channels)} channels, {len(users)} users, {len(messages)} messages")

    client = create_chroma_client(settings.chroma_host, settings.chroma_port)
    metadata_store = ChromaMetadataStore(
        client,
        channels_collection=settings.channels_collection,
        users_collection=settings.users_collection,
    )
    await metadata_store.upsert_channels(channels)
    await metadata_store.upsert_users(users)

    indexer = MessageIndexer(
        embedding_provider=create_embedding_provider(),
        client=client,
        metadata_store=metadata_store,
        collection_name=settings.messages_collection,
    )
    return await indexer.index_messages(messages, batch_size=batch_size)


def main() -> None:
    parser = argparse.ArgumentParser(description="Index a workspace chat export")
    parser.add_argument("export", type=Path, help="Path to the JSON export")
    parser.add_argument("--batch-size", type=int, default=10, help="Concurrent embedding requests")
    args = parser.parse_args()

    load_dotenv()
    if not args.export.exists():
        print(f"❌ Export file not found: {args.export}")
        sys.exit(1)

    stats = asyncio.run(index_export(args.export, args.batch_size))

    print("\n🎯 Results:")
    print(f"   Indexed: {stats['messages_indexed']}")
    print(f"   Deleted: {stats['messages_deleted']}")
    print(f"   Skipped: {stats['messages_skipped']}")
    print(f"   Time: {stats['elapsed_seconds']}s")


if __name__ == "__main__":
    main()
