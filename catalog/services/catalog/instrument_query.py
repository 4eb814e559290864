"""Search, filter, sort and paginate the instrument catalog."""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from catalog.middleware.errors import AppError
from catalog.models import Instrument

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
DEFAULT_SORT_FIELD = "symTicker"

# Largest value accepted for page, limit and lookup codes (32-bit column range).
MAX_PARAM_VALUE = 2**31 - 1

# Public sort keys and the columns they map to. Anything else falls back
# to the default so callers cannot order by arbitrary columns.
SORT_FIELDS = {
    "symTicker": Instrument.sym_ticker,
    "exchangeName": Instrument.exchange_name,
    "createdAt": Instrument.created_at,
    "updatedAt": Instrument.updated_at,
    "strikePrice": Instrument.strike_price,
    "expiryDate": Instrument.expiry_date,
    "previousClose": Instrument.previous_close,
    "minLotSize": Instrument.min_lot_size,
    "tickSize": Instrument.tick_size,
    "upperPrice": Instrument.upper_price,
    "lowerPrice": Instrument.lower_price,
    "faceValue": Instrument.face_value,
}

SEARCH_COLUMNS = (
    Instrument.sym_ticker,
    Instrument.ex_symbol,
    Instrument.ex_sym_name,
    Instrument.full_description,
    Instrument.exchange_name,
)


def parse_positive_int(value: Optional[str], default: int, message: str) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        number = int(value.strip())
    except ValueError:
        raise AppError(message, 400)
    if number < 1 or number > MAX_PARAM_VALUE:
        raise AppError(message, 400)
    return number


def parse_code(value: Optional[str], name: str) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    message = f"Invalid {name}. Must be an integer."
    try:
        number = int(value.strip())
    except ValueError:
        raise AppError(message, 400)
    if abs(number) > MAX_PARAM_VALUE:
        raise AppError(message, 400)
    return number


@dataclass
class InstrumentQuery:
    """Validated instrument list parameters."""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: Optional[str] = None
    exchange_code: Optional[int] = None
    segment_code: Optional[int] = None
    instrument_type_code: Optional[int] = None
    sort_by: str = DEFAULT_SORT_FIELD
    descending: bool = False

    @classmethod
    def from_params(
        cls,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        search: Optional[str] = None,
        exchange_code: Optional[str] = None,
        segment_code: Optional[str] = None,
        instrument_type_code: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> "InstrumentQuery":
        """Parse raw query-string values, raising a 400 AppError on bad input."""
        query = cls(
            page=parse_positive_int(page, DEFAULT_PAGE, "Invalid page number. Must be a positive integer."),
            limit=parse_positive_int(limit, DEFAULT_LIMIT, "Invalid limit. Must be a positive integer."),
            search=search.strip() if search and search.strip() else None,
            exchange_code=parse_code(exchange_code, "exchange_code"),
            segment_code=parse_code(segment_code, "segment_code"),
            instrument_type_code=parse_code(instrument_type_code, "instrument_type_code"),
        )

        if sort_by is None or sort_by == "":
            sort_by = DEFAULT_SORT_FIELD
        if sort_by in SORT_FIELDS:
            query.sort_by = sort_by
            query.descending = (sort_order or "").upper() == "DESC"
        else:
            logger.warning(f"Invalid sortBy '{sort_by}', falling back to {DEFAULT_SORT_FIELD} ASC")

        return query

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class InstrumentPage:
    items: List[Instrument]
    total: int
    page: int
    total_pages: int


def build_conditions(query: InstrumentQuery) -> list:
    conditions = []
    if query.search:
        conditions.append(or_(*(column.icontains(query.search, autoescape=True) for column in SEARCH_COLUMNS)))
    if query.exchange_code is not None:
        conditions.append(Instrument.exchange_id == query.exchange_code)
    if query.segment_code is not None:
        conditions.append(Instrument.segment_id == query.segment_code)
    if query.instrument_type_code is not None:
        conditions.append(Instrument.ex_inst_type == query.instrument_type_code)
    return conditions


async def list_instruments(session: AsyncSession, query: InstrumentQuery) -> InstrumentPage:
    """Fetch one page of instruments with their lookup rows, plus the total match count."""
    conditions = build_conditions(query)

    total = await session.scalar(
        select(func.count()).select_from(Instrument).where(*conditions)
    )

    column = SORT_FIELDS[query.sort_by]
    order = column.desc() if query.descending else column.asc()

    stmt = (
        select(Instrument)
        .options(
            joinedload(Instrument.exchange),
            joinedload(Instrument.segment),
            joinedload(Instrument.instrument_type),
        )
        .where(*conditions)
        .order_by(order, Instrument.id.asc())
        .offset(query.offset)
        .limit(query.limit)
    )
    items = list((await session.scalars(stmt)).all())

    return InstrumentPage(
        items=items,
        total=total or 0,
        page=query.page,
        total_pages=math.ceil((total or 0) / query.limit),
    )
