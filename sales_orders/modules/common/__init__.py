"""
Reusable building blocks shared by the sales-order screens: background
runners, cached reference lookups, cascading selectors, the draft-row editor
and client-side column filters. None of them touch widgets directly.
"""

from .loader import AsyncRunner, InlineRunner
from .option_cache import ReferenceFetcher
from .cascade import CascadeChain, CascadeLink
from .row_editor import DraftRowEditor, EditorState, LINE_KEY_FIELDS
from .filters import (
    ColumnFilters,
    ColumnSpec,
    DateRangeFilter,
    MultiSelectFilter,
    NumberRangeFilter,
    compare_values,
    is_blank,
    date_range,
    distinct_values,
)

__all__ = [
    "AsyncRunner",
    "InlineRunner",
    "ReferenceFetcher",
    "CascadeChain",
    "CascadeLink",
    "DraftRowEditor",
    "EditorState",
    "LINE_KEY_FIELDS",
    "ColumnFilters",
    "ColumnSpec",
    "DateRangeFilter",
    "MultiSelectFilter",
    "NumberRangeFilter",
    "compare_values",
    "is_blank",
    "date_range",
    "distinct_values",
]
