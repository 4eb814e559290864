"""Full-table reads of the small lookup tables."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models import Exchange, ExchangeSegmentCombination, InstrumentType, Segment


async def list_exchanges(session: AsyncSession) -> List[Exchange]:
    return list((await session.scalars(select(Exchange).order_by(Exchange.id))).all())


async def list_segments(session: AsyncSession) -> List[Segment]:
    return list((await session.scalars(select(Segment).order_by(Segment.id))).all())


async def list_instrument_types(session: AsyncSession) -> List[InstrumentType]:
    stmt = select(InstrumentType).order_by(InstrumentType.segment_id, InstrumentType.id)
    return list((await session.scalars(stmt)).all())


async def list_exchange_segments(session: AsyncSession) -> List[ExchangeSegmentCombination]:
    stmt = select(ExchangeSegmentCombination).order_by(
        ExchangeSegmentCombination.exchange_id, ExchangeSegmentCombination.segment_id
    )
    return list((await session.scalars(stmt)).all())
