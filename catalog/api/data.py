"""Instrument catalog and lookup endpoints."""

import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.db.database import get_db
from catalog.middleware.errors import AppError, success_body
from catalog.services.catalog import lookups
from catalog.services.catalog.instrument_query import InstrumentQuery, list_instruments

logger = logging.getLogger(__name__)

router = APIRouter()


class CamelModel(BaseModel):
    """Reads ORM attributes by name and serializes with camelCase keys."""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )


class ExchangeDetails(CamelModel):
    id: int
    name: str
    full_name: Optional[str] = None


class SegmentDetails(CamelModel):
    id: int
    name: str


class InstrumentTypeDetails(CamelModel):
    id: int
    name: str


class InstrumentTypeOut(InstrumentTypeDetails):
    segment_id: int


class ExchangeSegmentOut(CamelModel):
    exchange_id: int
    segment_id: int
    exchange_name: str
    segment_name: str


class InstrumentOut(CamelModel):
    id: int
    sym_ticker: str
    fy_token: str
    ex_token: int
    ex_symbol: str
    ex_sym_name: str
    full_description: Optional[str] = None
    short_name: Optional[str] = None
    display_name_mobile: Optional[str] = None
    exchange_id: int
    exchange_name: str
    segment_id: int
    ex_inst_type: int
    ex_series: Optional[str] = None
    currency_code: str
    under_sym: Optional[str] = None
    under_fy_tok: Optional[str] = None
    expiry_date: Optional[int] = None
    opt_type: Optional[str] = None
    strike_price: Optional[float] = None
    min_lot_size: Optional[int] = None
    tick_size: Optional[float] = None
    upper_price: Optional[float] = None
    lower_price: Optional[float] = None
    face_value: Optional[float] = None
    qty_multiplier: Optional[float] = None
    qty_freeze: Optional[int] = None
    previous_close: Optional[float] = None
    previous_oi: Optional[float] = None
    is_mtf_tradable: Optional[bool] = None
    mtf_margin: Optional[float] = None
    isin: Optional[str] = None
    trading_session: Optional[str] = None
    asm_gsm_val: Optional[str] = None
    stream: Optional[str] = None
    cautionary_msg: Optional[str] = None
    product_code: Optional[str] = None
    trade_status: bool
    last_update: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    exchange_details: Optional[ExchangeDetails] = Field(default=None, validation_alias="exchange")
    segment_details: Optional[SegmentDetails] = Field(default=None, validation_alias="segment")
    instrument_type_details: Optional[InstrumentTypeDetails] = Field(default=None, validation_alias="instrument_type")


def dump(model: type[CamelModel], rows) -> list:
    return [model.model_validate(row).model_dump(mode="json", by_alias=True) for row in rows]


@router.get("/instruments")
async def get_instruments(
    search: Optional[str] = None,
    exchange_code: Optional[str] = None,
    segment_code: Optional[str] = None,
    instrument_type_code: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: AsyncSession = Depends(get_db),
):
    """Search, filter, sort and paginate instruments."""
    query = InstrumentQuery.from_params(
        page=page,
        limit=limit,
        search=search,
        exchange_code=exchange_code,
        segment_code=segment_code,
        instrument_type_code=instrument_type_code,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    try:
        result = await list_instruments(db, query)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching instruments: {e}")
        raise AppError("Failed to fetch instruments.", 500)

    return success_body(
        "Fyers instruments fetched successfully.",
        dump(InstrumentOut, result.items),
        totalRecords=result.total,
        currentPage=result.page,
        totalPages=result.total_pages,
    )


@router.get("/exchanges")
async def get_exchanges(db: AsyncSession = Depends(get_db)):
    try:
        rows = await lookups.list_exchanges(db)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching exchanges: {e}")
        raise AppError("Failed to fetch exchanges.", 500)
    return success_body("Exchanges fetched successfully.", dump(ExchangeDetails, rows))


@router.get("/segments")
async def get_segments(db: AsyncSession = Depends(get_db)):
    try:
        rows = await lookups.list_segments(db)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching segments: {e}")
        raise AppError("Failed to fetch segments.", 500)
    return success_body("Segments fetched successfully.", dump(SegmentDetails, rows))


@router.get("/instrument-types")
async def get_instrument_types(db: AsyncSession = Depends(get_db)):
    try:
        rows = await lookups.list_instrument_types(db)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching instrument types: {e}")
        raise AppError("Failed to fetch instrument types.", 500)
    return success_body("Instrument types fetched successfully.", dump(InstrumentTypeOut, rows))


@router.get("/exchange-segments")
async def get_exchange_segments(db: AsyncSession = Depends(get_db)):
    try:
        rows = await lookups.list_exchange_segments(db)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching exchange segments: {e}")
        raise AppError("Failed to fetch exchange segments.", 500)
    return success_body("Exchange segments fetched successfully.", dump(ExchangeSegmentOut, rows))


# Broker passthroughs below are not wired to the broker yet and return fixed data.

@router.get("/market-status")
async def get_market_status():
    logger.info("Market status requested")
    return success_body(
        "This endpoint will return market status.",
        {"NSE": "OPEN", "BSE": "CLOSED"},
    )


@router.get("/quotes")
async def get_quotes(symbols: Optional[str] = None):
    logger.info(f"Quotes requested for symbols: {symbols}")
    if not symbols:
        raise AppError("Symbols query parameter is required for quotes.", 400)

    return success_body(
        f"This endpoint will return live quotes for symbols: {symbols}.",
        {symbols: {"ltp": 100.5, "volume": 100000}},
    )


PLACEHOLDER_CANDLES: List[dict] = [
    {"time": "2023-01-01", "open": 100, "high": 105, "low": 98, "close": 103, "volume": 5000},
    {"time": "2023-01-02", "open": 103, "high": 108, "low": 102, "close": 107, "volume": 6000},
]


@router.get("/history/{symbol}")
async def get_history(
    symbol: str,
    resolution: Optional[str] = None,
    range_from: Optional[str] = None,
    range_to: Optional[str] = None,
):
    logger.info(f"History requested for {symbol}: resolution={resolution}, from={range_from}, to={range_to}")
    if not (symbol and resolution and range_from and range_to):
        raise AppError(
            "Symbol, resolution, range_from, and range_to query parameters are required for historical data.",
            400,
        )

    return success_body(f"This endpoint will return historical data for {symbol}.", PLACEHOLDER_CANDLES)
