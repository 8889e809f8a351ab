"""
Job to sync the card catalog from YGOPRODeck.

Fetches the full catalog in the configured locale (plus English names) and
upserts cards and printings. Can be run as a standalone script or called
from the API or a scheduler.

Usage:
    python -m duelvault.jobs.sync_catalog
    python -m duelvault.jobs.sync_catalog --batch-size 200
"""

import argparse
import asyncio
import logging
import sys

from duelvault.db.database import async_session_factory, init_db
from duelvault.models.failure import UpstreamUnavailableError
from duelvault.models.sync import SyncResult
from duelvault.services.catalog_sync import CatalogSyncEngine
from duelvault.sources.ygoprodeck import YgoprodeckClient

logger = logging.getLogger(__name__)


async def run_sync(batch_size: int | None = None) -> SyncResult:
    """
    Run a catalog sync.

    Args:
        batch_size: Upsert records concurrently in batches of this size.
            If None, records are upserted one at a time.

    Returns:
        Totals for the run

    Raises:
        UpstreamUnavailableError: If the catalog cannot be fetched
    """
    async with YgoprodeckClient() as client:
        engine = CatalogSyncEngine(client, async_session_factory)
        if batch_size is None:
            return await engine.sync_all()
        return await engine.sync_in_batches(batch_size)


async def _main(batch_size: int | None) -> int:
    await init_db()
    try:
        result = await run_sync(batch_size)
    except UpstreamUnavailableError as e:
        logger.error("Catalog sync aborted: %s (%s)", e.message, e.detail)
        return 1

    logger.info("Result: %s", result.to_dict())
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for running a catalog sync."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Sync the card catalog from YGOPRODeck")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Upsert cards concurrently in batches of this size",
    )
    args = parser.parse_args(argv)

    if args.batch_size is not None and args.batch_size < 1:
        parser.error("--batch-size must be at least 1")

    sys.exit(asyncio.run(_main(args.batch_size)))


if __name__ == "__main__":
    main()
