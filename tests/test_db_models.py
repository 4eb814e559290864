"""Tests for database models and reference data."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from catalog.db.database import normalize_database_url
from catalog.db.reference_data import seed_reference_data
from catalog.models import Exchange, ExchangeSegmentCombination, Instrument, InstrumentType, Segment
from catalog.services.ingestor.normalizers import normalize_record


async def count(database, model):
    async with database.session() as session:
        return await session.scalar(select(func.count()).select_from(model))


def test_normalize_database_url():
    assert normalize_database_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert normalize_database_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert normalize_database_url("sqlite:///x.db") == "sqlite+aiosqlite:///x.db"
    assert normalize_database_url("postgresql+asyncpg://h/db") == "postgresql+asyncpg://h/db"

    with pytest.raises(ValueError):
        normalize_database_url(None)


@pytest.mark.asyncio
async def test_reference_data_seeded(database):
    assert await count(database, Exchange) == 3
    assert await count(database, Segment) == 4
    assert await count(database, ExchangeSegmentCombination) == 8
    assert await count(database, InstrumentType) == 36


@pytest.mark.asyncio
async def test_seeding_is_repeatable(database):
    async with database.session() as session:
        counts = await seed_reference_data(session)

    assert counts["instrument_types"] == 36
    assert await count(database, InstrumentType) == 36


@pytest.mark.asyncio
async def test_instrument_type_codes_are_scoped_by_segment(database):
    async with database.session() as session:
        rows = (await session.scalars(select(InstrumentType).where(InstrumentType.id == 11))).all()

    assert sorted(row.segment_id for row in rows) == [11, 20]


@pytest.mark.asyncio
async def test_instrument_rejects_invalid_exchange_segment(database, make_raw_instrument):
    raw = make_raw_instrument("MCX:BOGUS-EQ", 11, 10, 0, "NOT A REAL PAIR")

    with pytest.raises(IntegrityError):
        async with database.session() as session:
            session.add(Instrument(**normalize_record(raw).to_dict()))

    assert await count(database, Instrument) == 0


@pytest.mark.asyncio
async def test_instrument_rejects_type_from_other_segment(database, make_raw_instrument):
    # OPTIDX (14) belongs to equity derivatives, not capital market
    raw = make_raw_instrument("NSE:WRONGTYPE-EQ", 10, 10, 14, "WRONG TYPE")

    with pytest.raises(IntegrityError):
        async with database.session() as session:
            session.add(Instrument(**normalize_record(raw).to_dict()))


@pytest.mark.asyncio
async def test_instrument_timestamps_set(database, make_raw_instrument):
    raw = make_raw_instrument("NSE:SBIN-EQ", 10, 10, 0, "STATE BANK OF INDIA")

    async with database.session() as session:
        session.add(Instrument(**normalize_record(raw).to_dict()))

    async with database.session() as session:
        instrument = await session.scalar(select(Instrument).where(Instrument.sym_ticker == "NSE:SBIN-EQ"))

    assert instrument.created_at is not None
    assert instrument.updated_at is not None
    assert repr(instrument).startswith("<Instrument(sym_ticker=NSE:SBIN-EQ")
