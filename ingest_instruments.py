#!/usr/bin/env python3
"""Load downloaded symbol-master files into the instruments table."""
import argparse
import asyncio
import logging
import sys

from catalog.config.settings import get_settings
from catalog.monitoring.logger import configure_from_settings
from catalog.services.ingestor.ingestion import ingest_instruments
from catalog.services.ingestor.models import IngestionError, IngestionStatus

logger = logging.getLogger("catalog.ingest")


async def main(data_dir=None, prune=None) -> int:
    settings = get_settings()
    configure_from_settings(settings)

    try:
        result = await ingest_instruments(settings, data_dir=data_dir, prune=prune)
    except IngestionError as e:
        logger.error(f"Ingestion failed: {e}")
        return 1

    if result.status == IngestionStatus.LOCKED:
        return 1
    print(
        f"{result.status.value}: {result.upserted} upserted, {result.failed} failed, "
        f"{result.pruned} pruned from {result.files_read} files"
    )
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--data-dir", help="Directory holding *.json files (default: DATA_DIR)")
    parser.add_argument(
        "--prune",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Delete instruments absent from this run (default: INGEST_PRUNE_STALE)",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.data_dir, args.prune)))
