"""Reference tables: exchanges, segments, instrument types and the valid
exchange/segment pairings.

Codes are assigned by the broker, so primary keys are not autoincrementing.
Instrument type codes are only unique within a segment: code 11 is FUTIDX in
both equity derivatives and commodities but the rows are distinct.
"""

from sqlalchemy import Column, ForeignKey, Integer, String

from catalog.models.base import Base


class Exchange(Base):
    """Exchange such as NSE (10), MCX (11) or BSE (12)."""

    __tablename__ = "exchanges"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), unique=True, nullable=False)
    full_name = Column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Exchange(id={self.id}, name={self.name})>"


class Segment(Base):
    """Market segment such as Capital Market (10)."""

    __tablename__ = "segments"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Segment(id={self.id}, name={self.name})>"


class InstrumentType(Base):
    """Instrument type keyed by (type code, segment code)."""

    __tablename__ = "instrument_types"

    id = Column(Integer, primary_key=True, autoincrement=False)
    segment_id = Column(
        Integer,
        ForeignKey("segments.id"),
        primary_key=True,
        autoincrement=False
    )
    name = Column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<InstrumentType(id={self.id}, segment_id={self.segment_id}, name={self.name})>"


class ExchangeSegmentCombination(Base):
    """Allow-list of exchange/segment pairs an instrument may carry."""

    __tablename__ = "exchange_segment_combinations"

    exchange_id = Column(
        Integer,
        ForeignKey("exchanges.id"),
        primary_key=True,
        autoincrement=False
    )
    segment_id = Column(
        Integer,
        ForeignKey("segments.id"),
        primary_key=True,
        autoincrement=False
    )
    exchange_name = Column(String(50), nullable=False)
    segment_name = Column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<ExchangeSegmentCombination({self.exchange_name}/{self.segment_name})>"
