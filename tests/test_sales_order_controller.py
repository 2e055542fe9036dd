# sales_orders/tests/test_sales_order_controller.py

from datetime import date

import pytest
from PySide6.QtWidgets import QMessageBox

from conftest import LINES, MASTERS
from sales_orders import config
from sales_orders.api.client import ApiError
from sales_orders.constants import (
    MSG_ORDER_DELETED,
    OP_DETAIL_SELECT,
    OP_MASTER_DELETE,
    OP_MASTER_LIST,
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
)
from sales_orders.modules.sales_order.controller import SalesOrderController
from sales_orders.modules.sales_order.form import SalesOrderForm


@pytest.fixture()
def ctrl(qtbot, fake_api, reference, orders, runner):
    c = SalesOrderController(fake_api, runner=runner, reference=reference, orders=orders)
    qtbot.addWidget(c.get_widget())
    return c


def _answer(monkeypatch, button):
    asked = []

    def _question(*args, **kwargs):
        asked.append(args)
        return button

    monkeypatch.setattr(QMessageBox, "question", _question)
    return asked


def _visible_ids(c):
    p = c.proxy
    return sorted(c.base.at(p.mapToSource(p.index(r, 0)).row()).id_number for r in range(p.rowCount()))


def test_loads_masters_on_start(ctrl, fake_api):
    assert ctrl.base.rowCount() == 3
    assert len(fake_api.ops(OP_MASTER_LIST)) == 1
    assert ctrl.view.lbl_count.text() == "3 of 3 orders"


def _order(c, id_number):
    return next(so for so in c.base.rows() if so.id_number == id_number)


def test_each_expanded_order_fetches_and_shows_its_own_lines(ctrl, fake_api):
    ctrl.expand(_order(ctrl, 1))
    ctrl.expand(_order(ctrl, 2))

    assert [p["SOID"] for p in fake_api.ops(OP_DETAIL_SELECT)] == [1, 2]
    panels = ctrl.view.details.panels
    assert list(panels) == [1, 2]
    assert panels[1].model.rowCount() == 2
    assert panels[1].lbl_total.text() == "Total: 45.00"
    assert panels[2].model.rowCount() == 0
    assert panels[2].lbl_total.text() == "Total: 0.00"

    ctrl.collapse(1)
    assert list(ctrl.view.details.panels) == [2]
    assert not ctrl.is_expanded(1) and ctrl.is_expanded(2)


def test_expand_button_toggles_selected_row(ctrl):
    ctrl._select_id(3)
    assert ctrl.view.btn_expand.text() == "Expand"
    ctrl.view.btn_expand.click()
    assert ctrl.is_expanded(3)
    assert ctrl.view.btn_expand.text() == "Collapse"
    assert ctrl.view.details.panels[3].model.rowCount() == 1

    ctrl.view.btn_expand.click()
    assert not ctrl.is_expanded(3)
    assert not ctrl.view.btn_collapse_all.isEnabled()


def test_late_lines_for_collapsed_order_are_dropped(qtbot, fake_api, reference, orders, deferred):
    c = SalesOrderController(fake_api, runner=deferred, reference=reference, orders=orders)
    qtbot.addWidget(c.get_widget())
    deferred.run_all()
    c.expand(_order(c, 1))
    c.collapse(1)
    deferred.run_all()
    assert c.view.details.panels == {}


def test_expanded_lines_refetch_after_edit_dialog_closes(ctrl, fake_api, monkeypatch):
    ctrl.expand(_order(ctrl, 1))
    assert ctrl.view.details.panels[1].model.rowCount() == 2

    def _exec(form):
        # a line was deleted inside the dialog
        fake_api.on(OP_DETAIL_SELECT, lambda p: LINES.get(p["SOID"], [])[:1])
        return 0

    monkeypatch.setattr(SalesOrderForm, "exec", _exec)
    ctrl._select_id(1)
    ctrl.view.btn_edit.click()

    assert ctrl.view.details.panels[1].model.rowCount() == 1


def test_refresh_refetches_expanded_lines_and_collapses_deleted_orders(ctrl, fake_api):
    ctrl.expand(_order(ctrl, 1))
    ctrl.expand(_order(ctrl, 3))
    fake_api.on(OP_DETAIL_SELECT, lambda p: [])
    fake_api.on(OP_MASTER_LIST, [r for r in MASTERS if r["IDNumber"] != 3])

    ctrl.view.btn_refresh.click()

    assert list(ctrl.view.details.panels) == [1]
    assert ctrl.view.details.panels[1].model.rowCount() == 0
    assert ctrl.view.details.panels[1].lbl_total.text() == "Total: 0.00"


def test_scenario_rejected_delete_leaves_list_and_shows_message(ctrl, fake_api, monkeypatch):
    fake_api.on(OP_MASTER_DELETE, [{"ErrCode": "0", "ErrMsg": "Referenced by invoice"}])
    asked = _answer(monkeypatch, QMessageBox.StandardButton.Yes)
    ctrl._select_id(2)

    ctrl.view.btn_del.click()

    assert len(asked) == 1
    assert fake_api.ops(OP_MASTER_DELETE) == [{"IDNumber": 2}]
    assert ctrl.view.snackbar.last == ("Referenced by invoice", SEVERITY_ERROR)
    assert len(fake_api.ops(OP_MASTER_LIST)) == 1
    assert ctrl.base.rowCount() == 3
    assert ctrl.view.btn_del.isEnabled()


def test_confirmed_delete_refetches(ctrl, fake_api, monkeypatch):
    remaining = [r for r in MASTERS if r["IDNumber"] != 3]
    fake_api.on(OP_MASTER_DELETE, [{"ErrCode": "1"}])
    _answer(monkeypatch, QMessageBox.StandardButton.Yes)
    ctrl._select_id(3)
    fake_api.on(OP_MASTER_LIST, remaining)

    ctrl.view.btn_del.click()

    assert fake_api.ops(OP_MASTER_DELETE) == [{"IDNumber": 3}]
    assert ctrl.view.snackbar.last == (MSG_ORDER_DELETED, SEVERITY_SUCCESS)
    assert _visible_ids(ctrl) == [1, 2]


def test_declined_delete_sends_nothing(ctrl, fake_api, monkeypatch):
    _answer(monkeypatch, QMessageBox.StandardButton.No)
    ctrl._select_id(1)
    ctrl.view.btn_del.click()
    assert fake_api.ops(OP_MASTER_DELETE) == []


def test_text_filter_uses_loaded_values(ctrl):
    w = ctrl.view.filters.widgets["so_type"]
    assert list(w._actions) == ["Export", "Local", "Retail"]

    w.set_selected(["Local"])
    assert _visible_ids(ctrl) == [1]
    assert ctrl.view.lbl_count.text() == "1 of 3 orders"

    ctrl.view.filters.btn_clear.click()
    assert _visible_ids(ctrl) == [1, 2, 3]


def test_number_and_date_filters(ctrl):
    ctrl.view.filters.widgets["id_number"].txt_from.setText("2")
    assert _visible_ids(ctrl) == [2, 3]

    ctrl.view.filters.widgets["id_number"].clear()
    ctrl.view.filters.widgets["so_date"].set_custom_range(date(2024, 2, 1), date(2024, 3, 31))
    assert _visible_ids(ctrl) == [2, 3]


def test_new_and_edit_open_form_and_refetch_after(ctrl, fake_api, monkeypatch):
    opened = []

    def _exec(form):
        opened.append((form.header.so_id, form.header.display_number))
        return 0

    monkeypatch.setattr(SalesOrderForm, "exec", _exec)

    ctrl.view.btn_add.click()
    ctrl._select_id(2)
    ctrl.view.btn_edit.click()

    assert opened == [(None, "Auto"), (2, "102")]
    assert len(fake_api.ops(OP_MASTER_LIST)) == 3


def test_load_failure_is_reported(qtbot, fake_api, reference, orders, runner):
    fake_api.on(OP_MASTER_LIST, ApiError("Network error: refused"))
    c = SalesOrderController(fake_api, runner=runner, reference=reference, orders=orders)
    qtbot.addWidget(c.get_widget())
    assert c.base.rowCount() == 0
    assert c.view.snackbar.last == ("Error fetching sales orders: Network error: refused", SEVERITY_ERROR)


def test_text_filter_switching_to_contains_drops_stale_selection(ctrl, fake_api, monkeypatch):
    ctrl.view.filters.widgets["so_type"].set_selected(["Local"])
    assert _visible_ids(ctrl) == [1]

    monkeypatch.setattr(config, "FILTER_AUTOCOMPLETE_MAX", 2)
    ctrl.view.btn_refresh.click()

    w = ctrl.view.filters.widgets["so_type"]
    assert w.mode == "contains"
    assert w.current_filter() is None
    assert _visible_ids(ctrl) == [1, 2, 3]
