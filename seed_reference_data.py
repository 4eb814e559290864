#!/usr/bin/env python3
"""Populate the exchange, segment and instrument-type lookup tables."""
import asyncio
import sys

from catalog.config.settings import get_settings
from catalog.db.database import Database
from catalog.db.reference_data import seed_reference_data
from catalog.monitoring.logger import configure_from_settings


async def main() -> int:
    settings = get_settings()
    configure_from_settings(settings)

    database = Database(settings)
    await database.init()
    try:
        async with database.session() as session:
            counts = await seed_reference_data(session)
    finally:
        await database.close()

    for table, count in counts.items():
        print(f"{table}: {count} rows")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
