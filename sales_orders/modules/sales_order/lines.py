"""
Line items of one sales order.

OrderLinesPresenter owns the loaded lines for a single SOID and, unless it
is read-only, the draft-row editor plus the item cascade that feeds the
draft's dropdowns:

    main_group -> sub_main_group -> item (needs both groups) -> unit

The list screen uses a read-only presenter for the expanded row; the form
uses a read-write one.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..common.cascade import CascadeChain, CascadeLink
from ..common.option_cache import ReferenceFetcher
from ..common.row_editor import DraftRowEditor
from ...api.client import ApiError, ApiResult
from ...api.repositories import ReferenceRepo, SalesOrderLine, SalesOrdersRepo
from ...constants import (
    MSG_DELETE_LINE_FAILED,
    MSG_LINE_DELETED,
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
)
from ...utils.validators import calculate_total

_log = logging.getLogger(__name__)

# cascade link name -> draft field
CASCADE_FIELDS = {
    "main_group": "main_group_id",
    "sub_main_group": "sub_main_group_id",
    "item": "item_id",
    "unit": "unit_id",
}


def item_fetchers(reference: ReferenceRepo, runner, notify) -> dict[str, ReferenceFetcher]:
    return {
        "main_group": ReferenceFetcher("main groups", reference.list_main_groups, runner, notify),
        "sub_main_group": ReferenceFetcher("sub main groups", reference.list_sub_main_groups, runner, notify),
        "item": ReferenceFetcher("items", reference.list_items, runner, notify),
        "unit": ReferenceFetcher("units", reference.list_units, runner, notify),
    }


class OrderLinesPresenter:
    def __init__(
        self,
        *,
        orders: SalesOrdersRepo,
        runner,
        notify: Callable[[str, str], None],
        reference: Optional[ReferenceRepo] = None,
        read_only: bool = False,
        on_change: Optional[Callable[[], None]] = None,
        fetchers: Optional[dict[str, ReferenceFetcher]] = None,
    ):
        self.orders = orders
        self._runner = runner
        self._notify = notify
        self.read_only = read_only
        self.on_change = on_change

        self.so_id: Optional[int] = None
        self.lines: list[SalesOrderLine] = []
        self.loading = False
        self.deleting = False
        self._generation = 0

        self.editor: Optional[DraftRowEditor] = None
        self.cascade: Optional[CascadeChain] = None
        if not read_only:
            if fetchers is None:
                if reference is None:
                    raise ValueError("An editable line grid needs reference lookups")
                fetchers = item_fetchers(reference, runner, notify)
            self.cascade = CascadeChain(
                [
                    CascadeLink("main_group", fetchers["main_group"]),
                    CascadeLink("sub_main_group", fetchers["sub_main_group"], parents=("main_group",)),
                    CascadeLink("item", fetchers["item"], parents=("main_group", "sub_main_group")),
                    CascadeLink("unit", fetchers["unit"], parents=("item",)),
                ],
                on_change=lambda _name: self._changed(),
            )
            self.editor = DraftRowEditor(
                save=lambda draft: self.orders.save_line(draft, self.so_id),
                rows=lambda: self.lines,
                runner=runner,
                notify=notify,
                on_saved=self._after_save,
                on_change=self._changed,
            )

    # ---- loading ---------------------------------------------------------

    @property
    def total(self) -> float:
        return calculate_total(self.lines)

    def set_so_id(self, so_id: Optional[int]) -> None:
        if self.editor is not None and self.editor.is_open and not self.editor.is_saving:
            self.cancel()
        self.so_id = so_id or None
        self.refetch()

    def refetch(self) -> None:
        self._generation += 1
        generation = self._generation
        if not self.so_id:
            self.lines = []
            self.loading = False
            self._changed()
            return
        so_id = self.so_id
        self.loading = True
        self._changed()
        self._runner.submit(
            lambda: self.orders.list_lines(so_id),
            lambda rows: self._loaded(generation, rows),
            lambda exc: self._load_failed(generation, exc),
        )

    def _loaded(self, generation: int, rows) -> None:
        if generation != self._generation:
            return
        self.lines = list(rows or [])
        self.loading = False
        self._changed()

    def _load_failed(self, generation: int, exc: BaseException) -> None:
        if generation != self._generation:
            return
        if not isinstance(exc, ApiError):
            _log.error("Unexpected error loading order lines", exc_info=exc)
        self._notify(f"Error fetching order details: {exc}", SEVERITY_ERROR)
        self.lines = []
        self.loading = False
        self._changed()

    # ---- draft row -------------------------------------------------------

    def _require_editor(self) -> DraftRowEditor:
        if self.editor is None:
            raise RuntimeError("Line grid is read-only")
        return self.editor

    def start_new(self) -> bool:
        editor = self._require_editor()
        if not self.so_id or not editor.start_new():
            return False
        self.cascade.reset()
        self.cascade.load_roots()
        return True

    def start_edit(self, line: SalesOrderLine) -> bool:
        editor = self._require_editor()
        if not editor.start_edit(line):
            return False
        self.cascade.restore({
            "main_group": line.main_group_id,
            "sub_main_group": line.sub_main_group_id,
            "item": line.item_id,
            "unit": line.unit_id,
        })
        return True

    def select(self, link: str, value) -> None:
        """Pick a dropdown value; descendants are cleared in both cascade and draft."""
        editor = self._require_editor()
        if not editor.is_open or editor.is_saving:
            return
        self.cascade.select(link, value)
        editor.update(**{CASCADE_FIELDS[name]: v for name, v in self.cascade.values().items()})

    def set_qty(self, value) -> None:
        self._require_editor().set_field("qty", value)

    def set_rate(self, value) -> None:
        self._require_editor().set_field("rate", value)

    def commit(self) -> bool:
        return self._require_editor().commit()

    def cancel(self) -> bool:
        editor = self._require_editor()
        if not editor.cancel():
            return False
        self.cascade.reset()
        return True

    def _after_save(self) -> None:
        self.cascade.reset()
        self.refetch()

    # ---- delete ----------------------------------------------------------

    def delete_line(self, line: SalesOrderLine) -> bool:
        """Send the delete for an already confirmed line. Returns True when issued."""
        self._require_editor()
        if self.deleting or self.editor.is_open:
            return False
        self.deleting = True
        self._changed()
        self._runner.submit(
            lambda: self.orders.delete_line(line.id_number),
            self._deleted,
            self._delete_failed,
        )
        return True

    def _deleted(self, result: ApiResult) -> None:
        self.deleting = False
        if result.ok:
            self._notify(MSG_LINE_DELETED, SEVERITY_SUCCESS)
            self.refetch()
            return
        self._notify(result.message or MSG_DELETE_LINE_FAILED, SEVERITY_ERROR)
        self._changed()

    def _delete_failed(self, exc: BaseException) -> None:
        self.deleting = False
        if not isinstance(exc, ApiError):
            _log.error("Unexpected error deleting line", exc_info=exc)
        self._notify(f"{MSG_DELETE_LINE_FAILED}: {exc}", SEVERITY_ERROR)
        self._changed()

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()
