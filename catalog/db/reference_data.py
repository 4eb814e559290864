"""Fixed lookup enumerations published by the broker, and their seeding."""

import logging
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from catalog.db.upsert import upsert
from catalog.models import Exchange, ExchangeSegmentCombination, InstrumentType, Segment
from catalog.models.base import utcnow

logger = logging.getLogger(__name__)

# (code, name, full name)
EXCHANGES = [
    (10, "NSE", "National Stock Exchange"),
    (11, "MCX", "Multi Commodity Exchange"),
    (12, "BSE", "Bombay Stock Exchange"),
]

SEGMENTS = [
    (10, "Capital Market"),
    (11, "Equity Derivatives"),
    (12, "Currency Derivatives"),
    (20, "Commodity Derivatives"),
]

# (exchange code, segment code)
EXCHANGE_SEGMENTS = [
    (10, 10), (10, 11), (10, 12), (10, 20),
    (12, 10), (12, 11), (12, 12),
    (11, 20),
]

# (type code, segment code, name)
INSTRUMENT_TYPES = [
    (0, 10, "EQ (EQUITY)"), (1, 10, "PREFSHARES"), (2, 10, "DEBENTURES"),
    (3, 10, "WARRANTS"), (4, 10, "MISC (NSE, BSE)"), (5, 10, "SGB"),
    (6, 10, "G - Secs"), (7, 10, "T - Bills"), (8, 10, "MF"),
    (9, 10, "ETF"), (10, 10, "INDEX"), (50, 10, "MISC (BSE)"),
    (11, 11, "FUTIDX"), (12, 11, "FUTIVX"), (13, 11, "FUTSTK"),
    (14, 11, "OPTIDX"), (15, 11, "OPTSTK"),
    (16, 12, "FUTCUR"), (17, 12, "FUTIRT"), (18, 12, "FUTIRC"),
    (19, 12, "OPTCUR"), (20, 12, "UNDCUR"), (21, 12, "UNDIRC"),
    (22, 12, "UNDIRT"), (23, 12, "UNDIRD"), (24, 12, "INDEX_CD"),
    (25, 12, "FUTIRD"),
    (11, 20, "FUTIDX"), (30, 20, "FUTCOM"), (31, 20, "OPTFUT"),
    (32, 20, "OPTCOM"), (33, 20, "FUTBAS"), (34, 20, "FUTBLN"),
    (35, 20, "FUTENR"), (36, 20, "OPTBLN"), (37, 20, "OPTFUT (NCOM)"),
]


def exchange_rows() -> list[dict]:
    return [{"id": code, "name": name, "full_name": full_name} for code, name, full_name in EXCHANGES]


def segment_rows() -> list[dict]:
    return [{"id": code, "name": name} for code, name in SEGMENTS]


def exchange_segment_rows() -> list[dict]:
    exchange_names = {code: name for code, name, _ in EXCHANGES}
    segment_names = dict(SEGMENTS)
    return [
        {
            "exchange_id": exchange_id,
            "segment_id": segment_id,
            "exchange_name": exchange_names[exchange_id],
            "segment_name": segment_names[segment_id],
        }
        for exchange_id, segment_id in EXCHANGE_SEGMENTS
    ]


def instrument_type_rows() -> list[dict]:
    return [{"id": code, "segment_id": segment_id, "name": name} for code, segment_id, name in INSTRUMENT_TYPES]


async def seed_reference_data(session: AsyncSession) -> Dict[str, int]:
    """Insert or refresh every lookup row. Safe to run repeatedly."""
    dialect_name = session.get_bind().dialect.name
    now = utcnow()

    batches = [
        (Exchange, exchange_rows(), ["id"]),
        (Segment, segment_rows(), ["id"]),
        (ExchangeSegmentCombination, exchange_segment_rows(), ["exchange_id", "segment_id"]),
        (InstrumentType, instrument_type_rows(), ["id", "segment_id"]),
    ]

    counts = {}
    for model, rows, keys in batches:
        stmt = upsert(dialect_name, model.__table__, rows, keys, extra_updates={"updated_at": now})
        await session.execute(stmt)
        counts[model.__tablename__] = len(rows)
        logger.info(f"Seeded {len(rows)} rows into {model.__tablename__}")

    return counts
