"""
Client-side column filtering and sorting over already-loaded rows.

Three filter kinds:
  - MultiSelectFilter: text columns, match any of the chosen values
    (case-insensitive); a plain string means "contains".
  - NumberRangeFilter: from/to bounds, blanks are open-ended.
  - DateRangeFilter: from/to dates at day granularity; build one from a
    preset with DateRangeFilter.preset("past_week").
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from ...utils.helpers import parse_date
from ...utils.validators import try_parse_float

DATE_PRESETS = (
    "today",
    "yesterday",
    "past_week",
    "past_month",
    "past_6_months",
    "past_year",
    "custom",
)

_NATURAL_SPLIT = re.compile(r"(\d+)")


def is_blank(v) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


@dataclass
class MultiSelectFilter:
    selected: Any = None            # list of values, a "contains" string, or None

    @property
    def active(self) -> bool:
        if self.selected is None:
            return False
        if isinstance(self.selected, (list, tuple, set, frozenset)):
            return bool(self.selected)
        return str(self.selected) != ""

    def matches(self, value) -> bool:
        if not self.active:
            return True
        if value is None:
            return False
        cell = str(value).lower()
        if isinstance(self.selected, (list, tuple, set, frozenset)):
            return any(str(s).lower() == cell for s in self.selected)
        return str(self.selected).lower() in cell


@dataclass
class NumberRangeFilter:
    low: Optional[float] = None
    high: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.low is not None or self.high is not None

    def matches(self, value) -> bool:
        if not self.active:
            return True
        ok, num = try_parse_float(value)
        if not ok or num is None or math.isnan(num):
            return False
        low = -math.inf if self.low is None else float(self.low)
        high = math.inf if self.high is None else float(self.high)
        return low <= num <= high


@dataclass
class DateRangeFilter:
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def active(self) -> bool:
        # both bounds are required, a half-open date range is ignored
        return self.start is not None and self.end is not None

    def matches(self, value) -> bool:
        if not self.active:
            return True
        d = parse_date(value)
        if d is None:
            return False
        return self.start <= d <= self.end

    @classmethod
    def preset(
        cls,
        kind: str,
        custom_start=None,
        custom_end=None,
        *,
        today: Optional[date] = None,
    ) -> Optional["DateRangeFilter"]:
        rng = date_range(kind, custom_start, custom_end, today=today)
        if rng is None:
            return None
        return cls(*rng)


def date_range(kind: str, custom_start=None, custom_end=None, *, today: Optional[date] = None):
    """
    (start, end) for a named range, inclusive, or None for an unknown kind
    or an incomplete custom range.
    """
    today = today or date.today()
    if kind == "today":
        return today, today
    if kind == "yesterday":
        y = today - timedelta(days=1)
        return y, y
    if kind == "past_week":
        # Monday..Sunday of the previous calendar week
        monday_this_week = today - timedelta(days=today.weekday())
        return monday_this_week - timedelta(days=7), monday_this_week - timedelta(days=1)
    if kind == "past_month":
        first_this_month = today.replace(day=1)
        last_prev = first_this_month - timedelta(days=1)
        return last_prev.replace(day=1), last_prev
    if kind == "past_6_months":
        first_this_month = today.replace(day=1)
        y, m = today.year, today.month - 6
        while m <= 0:
            m += 12
            y -= 1
        return date(y, m, 1), first_this_month - timedelta(days=1)
    if kind == "past_year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    if kind == "custom":
        start, end = parse_date(custom_start), parse_date(custom_end)
        if start is None or end is None:
            return None
        return start, end
    return None


# ---- Column configuration ------------------------------------------------

@dataclass
class ColumnSpec:
    key: str
    header: str
    kind: str = "text"              # 'text' | 'number' | 'date'
    accessor: Optional[Callable[[Any], Any]] = None

    def value(self, row) -> Any:
        if self.accessor is not None:
            return self.accessor(row)
        if isinstance(row, Mapping):
            return row.get(self.key)
        return getattr(row, self.key, None)


@dataclass
class ColumnFilters:
    """Per-column filter state; a row passes when every active filter matches."""
    columns: Sequence[ColumnSpec]
    filters: dict = field(default_factory=dict)

    def column(self, key: str) -> ColumnSpec:
        for c in self.columns:
            if c.key == key:
                return c
        raise KeyError(key)

    def set(self, key: str, flt) -> None:
        self.column(key)
        if flt is None or not getattr(flt, "active", False):
            self.filters.pop(key, None)
        else:
            self.filters[key] = flt

    def clear(self) -> None:
        self.filters.clear()

    @property
    def active(self) -> bool:
        return bool(self.filters)

    def accepts(self, row) -> bool:
        for key, flt in self.filters.items():
            if not flt.matches(self.column(key).value(row)):
                return False
        return True

    def apply(self, rows: Iterable) -> list:
        return [r for r in rows if self.accepts(r)]


def distinct_values(rows: Iterable, column: ColumnSpec) -> list[str]:
    """Distinct non-blank display values of a column, naturally sorted."""
    seen = {}
    for r in rows:
        v = column.value(r)
        if is_blank(v):
            continue
        text = str(v)
        seen.setdefault(text, None)
    return sorted(seen, key=natural_key)


def text_filter_mode(rows: Iterable, column: ColumnSpec, limit: int) -> str:
    """'multi' when the distinct values fit in a pick list, else 'contains'."""
    return "multi" if len(distinct_values(rows, column)) <= limit else "contains"


# ---- Sorting -------------------------------------------------------------

def natural_key(text: str):
    parts = _NATURAL_SPLIT.split(str(text).casefold())
    return [(0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts if p != ""]


def _looks_like_date(v) -> bool:
    if isinstance(v, date):
        return True
    return isinstance(v, str) and any(c in v for c in "-/T") and parse_date(v) is not None


def compare_values(a, b) -> int:
    """
    Three-way compare used for column sorting: blanks sort last, dates as
    dates, numbers as numbers, everything else in natural case-insensitive
    order.
    """
    if is_blank(a) and is_blank(b):
        return 0
    if is_blank(a):
        return 1
    if is_blank(b):
        return -1

    if _looks_like_date(a) and _looks_like_date(b):
        da, db = parse_date(a), parse_date(b)
        return (da > db) - (da < db)

    ok_a, na = try_parse_float(a)
    ok_b, nb = try_parse_float(b)
    if ok_a and ok_b:
        return (na > nb) - (na < nb)

    ka, kb = natural_key(str(a)), natural_key(str(b))
    return (ka > kb) - (ka < kb)
