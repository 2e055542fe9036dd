from __future__ import annotations

import logging

from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from ..common.loader import AsyncRunner
from .form import SalesOrderForm
from .lines import OrderLinesPresenter
from .model import SalesOrdersFilterProxy, SalesOrdersTableModel
from .view import SalesOrderView
from ... import config
from ...api.client import ApiClient, ApiError, ApiResult
from ...api.repositories import ReferenceRepo, SalesOrderHeader, SalesOrdersRepo
from ...constants import (
    MSG_DELETE_ORDER_FAILED,
    MSG_ORDER_DELETED,
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
    SEVERITY_WARNING,
)
from ...utils.ui_helpers import confirm

_log = logging.getLogger(__name__)


class SalesOrderController(BaseModule):
    """
    Master list of sales orders.

      - Loads all masters on start and on Refresh; filtering and sorting are
        client-side over the loaded rows.
      - Any number of masters can be expanded; each expanded row gets its
        own read-only line presenter and panel, refetched on every reload.
      - Delete asks first and refetches only when the server confirms.
      - New/Edit open SalesOrderForm; the list refetches when it closes.
    """

    def __init__(
        self,
        api: ApiClient | None = None,
        *,
        runner=None,
        reference: ReferenceRepo | None = None,
        orders: SalesOrdersRepo | None = None,
    ):
        super().__init__()
        self.api = api or ApiClient()
        self.reference = reference or ReferenceRepo(self.api)
        self.orders = orders or SalesOrdersRepo(self.api)
        self._owns_runner = runner is None
        self.runner = runner or AsyncRunner(self)

        self.view = SalesOrderView()
        self.notify = self.view.snackbar.notify
        self.loading = False
        self.deleting = False

        self.base = SalesOrdersTableModel([])
        self.proxy = SalesOrdersFilterProxy(self.view)
        self.proxy.setSourceModel(self.base)
        self.view.table.setModel(self.proxy)

        # IDNumber -> read-only presenter, in expansion order
        self.expanded: dict[int, OrderLinesPresenter] = {}

        self._wire()
        self._reload()

    # ------------------------------------------------------------------ #
    # BaseModule API
    # ------------------------------------------------------------------ #

    def get_widget(self) -> QWidget:
        return self.view

    def refresh(self) -> None:
        self._reload()

    def shutdown(self) -> None:
        if self._owns_runner:
            self.runner.shutdown()

    # ------------------------------------------------------------------ #
    # Wiring & loading
    # ------------------------------------------------------------------ #

    def _wire(self):
        self.view.btn_add.clicked.connect(self._add)
        self.view.btn_edit.clicked.connect(self._edit)
        self.view.btn_del.clicked.connect(self._delete)
        self.view.btn_expand.clicked.connect(self._toggle_selected)
        self.view.btn_collapse_all.clicked.connect(self.collapse_all)
        self.view.btn_refresh.clicked.connect(self._reload)
        self.view.table.doubleClicked.connect(lambda _=None: self._edit())
        self.view.filters.changed.connect(self._apply_filter)
        self.view.filters.btn_clear.clicked.connect(self._clear_filters)
        # the selection model is created by setModel, which happens once
        self.view.table.selectionModel().selectionChanged.connect(lambda *_: self._update_buttons())

    def _reload(self):
        self.loading = True
        self._update_buttons()
        self.runner.submit(self.orders.list_orders, self._loaded, self._load_failed)

    def _loaded(self, rows: list[SalesOrderHeader]):
        self.loading = False
        keep = self._selected_id()
        self.base.replace(rows)
        self.view.filters.refresh_choices(rows, config.FILTER_AUTOCOMPLETE_MAX)
        self.view.table.resizeColumnsToContents()
        self._select_id(keep)
        # expanded rows follow the reload: gone orders collapse, the rest refetch
        present = {r.id_number for r in rows}
        for id_number, presenter in list(self.expanded.items()):
            if id_number in present:
                presenter.refetch()
            else:
                self.collapse(id_number)
        self._update_buttons()

    def _load_failed(self, exc: BaseException):
        self.loading = False
        if not isinstance(exc, ApiError):
            _log.error("Unexpected error loading sales orders", exc_info=exc)
        self.notify(f"Error fetching sales orders: {exc}", SEVERITY_ERROR)
        self._update_buttons()

    # ------------------------------------------------------------------ #
    # Selection & expansion
    # ------------------------------------------------------------------ #

    def _selected(self) -> SalesOrderHeader | None:
        row = self.view.table.selected_source_row()
        if row is None:
            return None
        return self.base.at(row)

    def _selected_id(self) -> int | None:
        so = self._selected()
        return so.id_number if so else None

    def _select_id(self, id_number: int | None):
        if self.proxy.rowCount() == 0:
            return
        target = 0
        if id_number is not None:
            for r in range(self.proxy.rowCount()):
                src = self.proxy.mapToSource(self.proxy.index(r, 0))
                if self.base.at(src.row()).id_number == id_number:
                    target = r
                    break
        self.view.table.selectRow(target)

    def is_expanded(self, id_number: int) -> bool:
        return id_number in self.expanded

    def expand(self, so: SalesOrderHeader) -> OrderLinesPresenter:
        """Open a line panel for `so` with its own fetch; no-op if already open."""
        if so.id_number in self.expanded:
            return self.expanded[so.id_number]
        self.view.details.add(so.id_number, f"SO #{so.so_no or so.id_number} Items")
        presenter = OrderLinesPresenter(
            orders=self.orders,
            runner=self.runner,
            notify=self.notify,
            read_only=True,
        )
        presenter.on_change = lambda: self._render_lines(so.id_number, presenter)
        self.expanded[so.id_number] = presenter
        presenter.set_so_id(so.id_number)
        self._update_buttons()
        return presenter

    def collapse(self, id_number: int) -> None:
        presenter = self.expanded.pop(id_number, None)
        if presenter is not None:
            # detach first so a late response cannot touch the removed panel
            presenter.on_change = None
            presenter.set_so_id(None)
        self.view.details.remove(id_number)
        self._update_buttons()

    def collapse_all(self) -> None:
        for id_number in list(self.expanded):
            self.collapse(id_number)

    def _toggle_selected(self):
        so = self._selected()
        if not so:
            self.notify("Select a sales order to expand.", SEVERITY_WARNING)
            return
        if self.is_expanded(so.id_number):
            self.collapse(so.id_number)
        else:
            self.expand(so)

    def _render_lines(self, id_number: int, presenter: OrderLinesPresenter):
        panel = self.view.details.panels.get(id_number)
        if panel is None or self.expanded.get(id_number) is not presenter:
            return
        panel.set_rows(presenter.lines, presenter.total, presenter.loading)

    def _update_buttons(self):
        so = self._selected()
        has_sel = so is not None
        self.view.btn_edit.setEnabled(has_sel)
        self.view.btn_del.setEnabled(has_sel and not self.deleting)
        self.view.btn_expand.setEnabled(has_sel)
        self.view.btn_expand.setText("Collapse" if has_sel and self.is_expanded(so.id_number) else "Expand")
        self.view.btn_collapse_all.setEnabled(bool(self.expanded))
        self.view.btn_refresh.setEnabled(not self.loading)
        self.view.lbl_count.setText(f"{self.proxy.rowCount()} of {self.base.rowCount()} orders")

    # ------------------------------------------------------------------ #
    # Filters
    # ------------------------------------------------------------------ #

    def _apply_filter(self, key: str):
        self.proxy.set_filter(key, self.view.filters.filter_for(key))
        self._update_buttons()

    def _clear_filters(self):
        self.view.filters.clear()
        self.proxy.clear_filters()
        self._update_buttons()

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def _make_form(self, id_number: int | None) -> SalesOrderForm:
        return SalesOrderForm(
            self.view,
            reference=self.reference,
            orders=self.orders,
            runner=None if self._owns_runner else self.runner,
            id_number=id_number,
        )

    def _open_form(self, id_number: int | None):
        form = self._make_form(id_number)
        form.exec()
        self._reload()

    def _add(self):
        self._open_form(None)

    def _edit(self):
        so = self._selected()
        if not so:
            self.notify("Select a sales order to edit.", SEVERITY_WARNING)
            return
        self._open_form(so.id_number)

    def _delete(self):
        so = self._selected()
        if not so:
            self.notify("Select a sales order to delete.", SEVERITY_WARNING)
            return
        if self.deleting:
            return
        if not confirm(
            self.view,
            "Confirm Delete",
            f"Are you sure you want to delete sales order {so.so_no or so.id_number}? "
            "This action cannot be undone.",
        ):
            return
        self.deleting = True
        self._update_buttons()
        self.runner.submit(
            lambda: self.orders.delete_order(so.id_number),
            self._deleted,
            self._delete_failed,
        )

    def _deleted(self, result: ApiResult):
        self.deleting = False
        if result.ok:
            self.notify(MSG_ORDER_DELETED, SEVERITY_SUCCESS)
            self._reload()
            return
        self.notify(result.message or MSG_DELETE_ORDER_FAILED, SEVERITY_ERROR)
        self._update_buttons()

    def _delete_failed(self, exc: BaseException):
        self.deleting = False
        if not isinstance(exc, ApiError):
            _log.error("Unexpected error deleting sales order", exc_info=exc)
        self.notify(f"{MSG_DELETE_ORDER_FAILED}: {exc}", SEVERITY_ERROR)
        self._update_buttons()
