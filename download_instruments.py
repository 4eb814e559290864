#!/usr/bin/env python3
"""Download the broker symbol-master files into DATA_DIR."""
import argparse
import asyncio
import logging
import sys

from catalog.config.settings import get_settings
from catalog.monitoring.logger import configure_from_settings
from catalog.services.ingestor.fetcher import DownloadError, download_instruments

logger = logging.getLogger("catalog.download")


async def main(data_dir=None) -> int:
    settings = get_settings()
    configure_from_settings(settings)

    try:
        paths = await download_instruments(
            settings.INSTRUMENT_SOURCES,
            data_dir or settings.DATA_DIR,
            timeout=settings.DOWNLOAD_TIMEOUT,
        )
    except DownloadError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Downloaded {len(paths)} files")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--data-dir", help="Directory to write files into (default: DATA_DIR)")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.data_dir)))
