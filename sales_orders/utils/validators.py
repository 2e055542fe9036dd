# utils/validators.py
from typing import Iterable, Optional, Sequence

from ..constants import (
    MSG_REQUIRED_FIELDS,
    MSG_LINE_REQUIRED,
    MSG_QTY_POSITIVE,
    MSG_RATE_POSITIVE,
)


def non_empty(text) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


def is_set(value) -> bool:
    """
    A foreign key counts as chosen when it is not None, 0 or blank.
    """
    return value not in (None, 0, "", "0")


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)
    """
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses to a float and value > 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val > 0)


def calculate_amount(qty, rate) -> float:
    """Line amount; blanks count as zero."""
    ok_q, q = try_parse_float(qty)
    ok_r, r = try_parse_float(rate)
    return (q if ok_q else 0.0) * (r if ok_r else 0.0)


def calculate_total(lines: Iterable) -> float:
    total = 0.0
    for line in lines:
        ok, amount = try_parse_float(getattr(line, "amount", None))
        if ok:
            total += amount
    return total


# ---- Record-level validation ----

def validate_line(line) -> list[str]:
    """
    Presence/positivity checks for a draft line. Returns user-facing messages
    in display order; empty list means valid.
    """
    errors = []
    if not is_set(line.get("item_id")) or not is_set(line.get("unit_id")):
        errors.append(MSG_LINE_REQUIRED)
    if not is_strictly_positive_number(line.get("qty")):
        errors.append(MSG_QTY_POSITIVE)
    if not is_strictly_positive_number(line.get("rate")):
        errors.append(MSG_RATE_POSITIVE)
    return errors


def validate_header(header) -> Optional[str]:
    """Returns an error message or None when the header can be saved."""
    for field in ("so_date", "division_id", "so_type_id", "customer_id"):
        value = header.get(field)
        if field == "so_date":
            if not non_empty(value):
                return MSG_REQUIRED_FIELDS
        elif not is_set(value):
            return MSG_REQUIRED_FIELDS
    return None


def has_duplicate(
    rows: Iterable,
    candidate: dict,
    key_fields: Sequence[str],
    *,
    id_field: str = "id_number",
    exclude_id=None,
) -> bool:
    """
    True when another row already holds the same values for `key_fields`.
    The row whose id equals `exclude_id` (the one being edited) is skipped.
    """
    wanted = tuple(candidate.get(f) for f in key_fields)
    for row in rows:
        if exclude_id is not None and _field(row, id_field) == exclude_id:
            continue
        if tuple(_field(row, f) for f in key_fields) == wanted:
            return True
    return False


def _field(row, name):
    # rows are dataclass records or plain dicts
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)
