"""Database models package."""

from catalog.models.base import Base
from catalog.models.lookups import Exchange, ExchangeSegmentCombination, InstrumentType, Segment
from catalog.models.instrument import Instrument

__all__ = ["Base", "Exchange", "Segment", "InstrumentType", "ExchangeSegmentCombination", "Instrument"]
