"""Shared fixtures: a seeded SQLite catalog and an app wired to it."""

import json
import zlib
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient

from catalog.config.settings import Settings
from catalog.db.database import Database
from catalog.db.reference_data import seed_reference_data
from catalog.main import create_app
from catalog.models import Base, Instrument
from catalog.services.ingestor.normalizers import normalize_record

EXCHANGE_NAMES = {10: "NSE", 11: "MCX", 12: "BSE"}


def build_raw_instrument(ticker, exchange, segment, inst_type, name, **overrides):
    """A record shaped like one entry of a broker symbol-master file."""
    symbol = ticker.split(":", 1)[1].split("-")[0]
    record = {
        "symTicker": ticker,
        "fyToken": f"FY{zlib.crc32(ticker.encode())}",
        "exToken": zlib.crc32(ticker.encode()) % 100000,
        "exSymbol": symbol,
        "exSymName": name,
        "exchange": exchange,
        "exchangeName": EXCHANGE_NAMES[exchange],
        "segment": segment,
        "exInstType": inst_type,
        "tradeStatus": 1,
        "currencyCode": "INR",
        "lastUpdate": "2026-06-05",
        "exSeries": "EQ",
        "optType": "XX",
        "strikePrice": -1.0,
        "expiryDate": "",
        "minLotSize": 1,
        "tickSize": 0.05,
        "upperPrice": 0,
        "lowerPrice": 0,
        "faceValue": 10.0,
        "qtyMultiplier": 1.0,
        "isin": "NA",
        "is_mtf_tradable": 0,
        "symbolDesc": name,
    }
    record.update(overrides)
    return record


SAMPLE_INSTRUMENTS = [
    build_raw_instrument("NSE:RELIANCE-EQ", 10, 10, 0, "RELIANCE INDUSTRIES LTD", previousClose=2900.5, isin="INE002A01018"),
    build_raw_instrument("NSE:TCS-EQ", 10, 10, 0, "TATA CONSULTANCY SERV LT", previousClose=3500.0),
    build_raw_instrument("BSE:RELIANCE-A", 12, 10, 0, "RELIANCE INDUSTRIES LTD.", previousClose=2901.0, exSeries="A"),
    build_raw_instrument(
        "NSE:NIFTY26JUNFUT", 10, 11, 11, "NIFTY 26 Jun 26 FUT",
        exSeries="XX", expiryDate="1782727200", minLotSize=75, underSym="NIFTY",
    ),
    build_raw_instrument(
        "NSE:NIFTY26JUN24000CE", 10, 11, 14, "NIFTY 26 Jun 26 24000 CE",
        exSeries="XX", expiryDate="1782727200", minLotSize=75, optType="CE", strikePrice=24000.0,
    ),
    build_raw_instrument("MCX:CRUDEOIL26JUNFUT", 11, 20, 30, "CRUDEOIL 26 Jun 19 FUT", exSeries="XX", minLotSize=100),
    build_raw_instrument("MCX:MCXBULLDEX26JUNFUT", 11, 20, 11, "MCXBULLDEX 26 Jun 24 FUT", exSeries="XX"),
    build_raw_instrument("NSE:PCTETF-EQ", 10, 10, 9, "PCT 100% RETURN ETF"),
]


def write_source(directory, filename, records):
    """Write records the way the broker publishes them: an object keyed by ticker."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(json.dumps({record["symTicker"]: record for record in records}))
    return path


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'catalog.db'}",
        DATA_DIR=str(tmp_path / "data"),
        PRICE_FEED_ENABLED=False,
        ENVIRONMENT="development",
    )


@pytest_asyncio.fixture
async def database(settings):
    """A migrated and seeded database."""
    db = Database(settings)
    await db.init()
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with db.session() as session:
        await seed_reference_data(session)

    yield db

    await db.close()


@pytest_asyncio.fixture
async def seeded_instruments(database):
    async with database.session() as session:
        for raw in SAMPLE_INSTRUMENTS:
            session.add(Instrument(**normalize_record(raw).to_dict()))
    return SAMPLE_INSTRUMENTS


@pytest.fixture
def app(settings, database):
    application = create_app(settings)
    application.state.database = database
    return application


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(base_url="http://test", transport=httpx.ASGITransport(app=app)) as test_client:
        yield test_client


@pytest.fixture
def make_raw_instrument():
    return build_raw_instrument


@pytest.fixture
def data_dir(settings):
    return Path(settings.DATA_DIR)


@pytest.fixture
def write_instrument_file(data_dir):
    def write(filename, records):
        return write_source(data_dir, filename, records)
    return write
