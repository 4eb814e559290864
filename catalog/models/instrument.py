"""Instrument model for broker reference data."""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from catalog.models.base import Base


PRICE = Numeric(18, 4, asdecimal=False)


class Instrument(Base):
    """A tradable instrument, keyed naturally by its ticker."""

    __tablename__ = "instruments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["exchange_id", "segment_id"],
            ["exchange_segment_combinations.exchange_id", "exchange_segment_combinations.segment_id"],
            name="fk_instruments_exchange_segment",
        ),
        ForeignKeyConstraint(
            ["ex_inst_type", "segment_id"],
            ["instrument_types.id", "instrument_types.segment_id"],
            name="fk_instruments_instrument_type",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identification
    sym_ticker = Column(String(255), unique=True, nullable=False, index=True)
    fy_token = Column(String(50), unique=True, nullable=False)
    ex_token = Column(BigInteger, nullable=False)
    ex_symbol = Column(String(50), nullable=False, index=True)
    ex_sym_name = Column(String(255), nullable=False)
    full_description = Column(String(255), nullable=True)
    short_name = Column(String(100), nullable=True)
    display_name_mobile = Column(String(255), nullable=True)

    # Classification
    exchange_id = Column(Integer, ForeignKey("exchanges.id"), nullable=False, index=True)
    exchange_name = Column(String(50), nullable=False)
    segment_id = Column(Integer, ForeignKey("segments.id"), nullable=False, index=True)
    ex_inst_type = Column(Integer, nullable=False)
    ex_series = Column(String(20), nullable=True)
    currency_code = Column(String(10), nullable=False)

    # Derivatives
    under_sym = Column(String(50), nullable=True)
    under_fy_tok = Column(String(50), nullable=True)
    expiry_date = Column(BigInteger, nullable=True)  # unix seconds
    opt_type = Column(String(10), nullable=True)
    strike_price = Column(PRICE, nullable=True)

    # Trading parameters
    min_lot_size = Column(Integer, nullable=True)
    tick_size = Column(PRICE, nullable=True)
    upper_price = Column(PRICE, nullable=True)
    lower_price = Column(PRICE, nullable=True)
    face_value = Column(PRICE, nullable=True)
    qty_multiplier = Column(PRICE, nullable=True)
    qty_freeze = Column(BigInteger, nullable=True)
    previous_close = Column(PRICE, nullable=True)
    previous_oi = Column(PRICE, nullable=True)

    # Margin
    is_mtf_tradable = Column(Boolean, nullable=True)
    mtf_margin = Column(PRICE, nullable=True)

    # Auxiliary
    isin = Column(String(20), nullable=True)
    trading_session = Column(String(100), nullable=True)
    asm_gsm_val = Column(Text, nullable=True)
    stream = Column(String(50), nullable=True)
    cautionary_msg = Column(Text, nullable=True)
    product_code = Column(String(50), nullable=True)

    # Status
    trade_status = Column(Boolean, nullable=False)
    last_update = Column(Date, nullable=True)

    exchange = relationship("Exchange", viewonly=True, lazy="raise")
    segment = relationship("Segment", viewonly=True, lazy="raise")
    # Type codes repeat across segments, so the join needs both columns.
    instrument_type = relationship(
        "InstrumentType",
        primaryjoin="and_(Instrument.ex_inst_type == InstrumentType.id, "
                    "Instrument.segment_id == InstrumentType.segment_id)",
        viewonly=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Instrument(sym_ticker={self.sym_ticker}, exchange_id={self.exchange_id}, segment_id={self.segment_id})>"
