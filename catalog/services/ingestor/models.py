"""Data models for reference-data ingestion."""

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

# A field as it arrives in a broker file. Nothing is trusted until it has
# passed through a normalizer.
RawValue = Union[str, int, float, bool, None]
RawRecord = Mapping[str, Any]


class IngestionStatus(str, Enum):
    """Outcome of an ingestion run."""
    COMPLETED = "completed"
    NO_DATA = "no_data"
    LOCKED = "locked"


@dataclass
class NormalizedInstrument:
    """An instrument record with every field coerced to its column type."""
    sym_ticker: Optional[str]
    fy_token: Optional[str]
    ex_token: Optional[int]
    ex_symbol: Optional[str]
    ex_sym_name: Optional[str]
    exchange_id: Optional[int]
    exchange_name: Optional[str]
    segment_id: Optional[int]
    ex_inst_type: Optional[int]
    trade_status: bool
    currency_code: Optional[str]
    last_update: Optional[date] = None
    under_sym: Optional[str] = None
    under_fy_tok: Optional[str] = None
    ex_series: Optional[str] = None
    opt_type: Optional[str] = None
    expiry_date: Optional[int] = None
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
    full_description: Optional[str] = None
    short_name: Optional[str] = None
    display_name_mobile: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to column values for database insertion."""
        return asdict(self)


@dataclass
class IngestionResult:
    """Counters reported at the end of a run."""
    status: IngestionStatus
    files_read: int = 0
    files_skipped: int = 0
    records_parsed: int = 0
    upserted: int = 0
    failed: int = 0
    pruned: int = 0
    segment_counts: Dict[int, int] = field(default_factory=dict)


class IngestionError(Exception):
    """A run-level failure; the whole batch was rolled back."""


class InvalidRecordError(ValueError):
    """A single record that cannot be stored."""
