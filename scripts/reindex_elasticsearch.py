#!/usr/bin/env python3
"""
Elasticsearch Reindex Script

Rebuilds the search indices (books, authors, reviews) from the database.
The indices are derived data; this is the way to repair them after
Elasticsearch was down while writes happened.

Usage:
    # From project root with venv activated:
    python scripts/reindex_elasticsearch.py

    # Options:
    python scripts/reindex_elasticsearch.py --drop                # Drop and recreate indices first
    python scripts/reindex_elasticsearch.py --batch-size 100      # Custom batch size
    python scripts/reindex_elasticsearch.py --collection books    # Only one index
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from catalog.config import get_settings
from catalog.database import SessionLocal
from catalog.exceptions import AccelerantDegradedError
from catalog.services.cache import NullCache
from catalog.services.collections import SEARCHABLE_COLLECTIONS, EntityCollection
from catalog.services.elasticsearch import ElasticsearchIndex
from catalog.services.health import HealthMonitor
from catalog.services.search import SearchMirror
from catalog.services.store import DocumentStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def reindex_collection(
    mirror: SearchMirror,
    collection: EntityCollection,
    drop_index: bool,
    batch_size: int,
) -> None:
    """Reindex one collection in batches."""
    db = SessionLocal()
    try:
        store = DocumentStore(db, collection)
        total = store.count()
        logger.info(f"Found {total} {collection.index_name} to index")

        total_success = 0
        total_errors = 0
        # The first batch (re)creates the index, later ones only add to it
        for offset in range(0, max(total, 1), batch_size):
            batch = store.find(skip=offset, limit=batch_size)
            success, errors = await mirror.reindex(
                collection,
                batch,
                drop=drop_index and offset == 0,
            )
            total_success += success
            total_errors += errors

        logger.info(f"{collection.index_name}: {total_success} indexed, {total_errors} errors")
        doc_count = await mirror.index.count(mirror.index_name(collection))
        logger.info(f"Documents in {mirror.index_name(collection)}: {doc_count}")
    finally:
        db.close()


async def reindex_all(
    collections: list[str],
    drop_index: bool = False,
    batch_size: int = 100,
) -> bool:
    """
    Reindex the given collections from the database.

    Returns:
        True if every collection was reindexed
    """
    settings = get_settings()
    index = ElasticsearchIndex.from_settings(settings)
    health = HealthMonitor(NullCache(), index, probe_timeout=settings.elasticsearch_timeout)
    mirror = SearchMirror(index, health, prefix=settings.elasticsearch_index_prefix)

    logger.info("Starting Elasticsearch reindex...")
    try:
        if not await health.search_available():
            logger.error("Failed to connect to Elasticsearch")
            return False

        for name in collections:
            await reindex_collection(mirror, SEARCHABLE_COLLECTIONS[name], drop_index, batch_size)

        logger.info("Reindex complete!")
        return True
    except AccelerantDegradedError as e:
        logger.error(f"Reindex failed: {e}")
        return False
    finally:
        await index.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rebuild the Elasticsearch indices from the database"
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop and recreate each index before reindexing"
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=100,
        help="Number of documents to index in each batch (default: 100)"
    )
    parser.add_argument(
        "--collection",
        choices=sorted(SEARCHABLE_COLLECTIONS),
        action="append",
        help="Collection to reindex; repeat for several (default: all)"
    )

    args = parser.parse_args()

    ok = asyncio.run(reindex_all(
        collections=args.collection or sorted(SEARCHABLE_COLLECTIONS),
        drop_index=args.drop,
        batch_size=args.batch_size,
    ))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
