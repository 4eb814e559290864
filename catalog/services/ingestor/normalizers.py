"""Field coercion for broker instrument records.

Every function here is pure and total: any input, including missing,
empty or malformed values, maps to a defined output and nothing raises.
The broker marks "not applicable" with sentinels ("XX" option type, -1.0
strike, "NA" ISIN, "None" dates), all of which become None.
"""

import math
from datetime import date, datetime, UTC
from typing import Optional

from catalog.services.ingestor.models import NormalizedInstrument, RawRecord, RawValue

NULL_WORDS = {"none", "null"}
NO_OPTION_TYPE = "XX"
NO_STRIKE_PRICE = -1.0
NO_ISIN = "NA"

# Column ranges; anything outside is treated as missing.
INT_MIN, INT_MAX = -2**31, 2**31 - 1
BIG_INT_MIN, BIG_INT_MAX = -2**63, 2**63 - 1


def to_text(value: RawValue) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def to_float(value: RawValue) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _in_range(number: Optional[int], low: int, high: int) -> Optional[int]:
    if number is None or not low <= number <= high:
        return None
    return number


def _parse_int(value: RawValue, truncate: bool) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    number = to_float(value)
    if number is None or (not truncate and not number.is_integer()):
        return None
    return int(number)


def to_int(value: RawValue) -> Optional[int]:
    """32-bit integer value, truncating fractional input."""
    return _in_range(_parse_int(value, truncate=True), INT_MIN, INT_MAX)


def to_big_int(value: RawValue) -> Optional[int]:
    """64-bit integer value for timestamps and quantities; fractional input is rejected."""
    return _in_range(_parse_int(value, truncate=False), BIG_INT_MIN, BIG_INT_MAX)


def to_flag(value: RawValue) -> bool:
    """0/1 flag where anything other than 1 means False."""
    if isinstance(value, bool):
        return value
    return to_int(value) == 1


def to_optional_flag(value: RawValue) -> Optional[bool]:
    """0/1 flag where an absent or non-numeric value stays unknown."""
    if isinstance(value, bool):
        return value
    number = to_int(value)
    if number is None:
        return None
    return number == 1


def to_date(value: RawValue) -> Optional[date]:
    """Calendar date from an ISO string or a unix timestamp in seconds."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text or text.lower() in NULL_WORDS:
            return None
        if to_float(text) is None:
            try:
                return datetime.fromisoformat(text).date()
            except ValueError:
                return None

    seconds = to_float(value)
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(seconds, UTC).date()
    except (OverflowError, OSError, ValueError):
        return None


def to_option_type(value: RawValue) -> Optional[str]:
    text = to_text(value)
    if text is None or text.upper() == NO_OPTION_TYPE:
        return None
    return text


def to_strike_price(value: RawValue) -> Optional[float]:
    price = to_float(value)
    if price == NO_STRIKE_PRICE:
        return None
    return price


def to_isin(value: RawValue) -> Optional[str]:
    text = to_text(value)
    if text is None or text.upper() == NO_ISIN:
        return None
    return text


def first_text(*values: RawValue) -> Optional[str]:
    for value in values:
        text = to_text(value)
        if text is not None:
            return text
    return None


def normalize_record(record: RawRecord) -> NormalizedInstrument:
    """Map one raw broker record onto instrument columns."""
    get = record.get

    return NormalizedInstrument(
        sym_ticker=to_text(get("symTicker")),
        fy_token=to_text(get("fyToken")),
        ex_token=to_big_int(get("exToken")),
        ex_symbol=to_text(get("exSymbol")),
        ex_sym_name=to_text(get("exSymName")),
        exchange_id=to_int(get("exchange")),
        exchange_name=to_text(get("exchangeName")),
        segment_id=to_int(get("segment")),
        ex_inst_type=to_int(get("exInstType")),
        trade_status=to_flag(get("tradeStatus")),
        currency_code=to_text(get("currencyCode")),
        last_update=to_date(get("lastUpdate")),
        under_sym=to_text(get("underSym")),
        under_fy_tok=to_text(get("underFyTok")),
        ex_series=to_text(get("exSeries")),
        opt_type=to_option_type(get("optType")),
        expiry_date=to_big_int(get("expiryDate")),
        strike_price=to_strike_price(get("strikePrice")),
        min_lot_size=to_int(get("minLotSize")),
        tick_size=to_float(get("tickSize")),
        upper_price=to_float(get("upperPrice")),
        lower_price=to_float(get("lowerPrice")),
        face_value=to_float(get("faceValue")),
        qty_multiplier=to_float(get("qtyMultiplier")),
        qty_freeze=to_big_int(get("qtyFreeze")),
        previous_close=to_float(get("previousClose")),
        previous_oi=to_float(get("previousOi")),
        is_mtf_tradable=to_optional_flag(get("is_mtf_tradable")),
        mtf_margin=to_float(get("mtf_margin")),
        isin=to_isin(get("isin")),
        trading_session=to_text(get("tradingSession")),
        asm_gsm_val=to_text(get("asmGsmVal")),
        stream=to_text(get("stream")),
        cautionary_msg=to_text(get("cautionary_msg")),
        product_code=to_text(get("productCode")),
        full_description=first_text(get("symbolDetails"), get("symDetails"), get("symbolDesc")),
        short_name=to_text(get("short_name")),
        display_name_mobile=to_text(get("display_format_mob")),
    )
