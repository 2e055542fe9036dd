# utils/helpers.py
from datetime import date, datetime
import logging
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Formats seen in server payloads, tried in order.
_DATE_FORMATS = ("%Y-%m-%d", "%d/%b/%Y", "%d-%b-%Y", "%d/%m/%Y", "%m/%d/%Y")


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fmt_qty(v: NumberLike) -> str:
    """Compact quantity display: 3.0 -> '3', 2.5 -> '2.5'."""
    try:
        return f"{float(v):g}"
    except (TypeError, ValueError):
        return "" if v is None else str(v)


def parse_date(value) -> Optional[date]:
    """
    Best-effort parse of a server/UI date value.

    Accepts date/datetime objects, ISO dates, ISO datetimes
    ('2024-01-15T00:00:00'), 'dd/Mon/yyyy' and 'dd/mm/yyyy'.
    Returns None when the value is empty or unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    elif " " in text:
        text = text.split(" ", 1)[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    _log.debug("parse_date: unrecognised date %r", value)
    return None


def to_iso_date(value) -> str:
    d = parse_date(value)
    return d.isoformat() if d else ""


def to_api_date(value) -> str:
    """Render a date the way the save endpoint expects it: '15/Jan/2024'."""
    d = parse_date(value)
    if d is None:
        raise ValueError(f"Could not parse {value!r} as a date.")
    return f"{d.day:02d}/{_MONTHS[d.month - 1]}/{d.year}"


def as_int(value) -> Optional[int]:
    """int(value) or None for blanks/garbage; ids arrive as ints or strings."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return None


def as_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
