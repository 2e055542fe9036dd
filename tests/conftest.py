# sales_orders/tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - No network: repositories talk to FakeApi, which answers per operation
# - Background work runs inline unless a test needs to hold responses back
#   (use the `deferred` runner for ordering/staleness scenarios)
# - Notifications are collected by the `notes` fixture
# - Silence benign Qt signal warnings
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import re
from typing import Any, Callable

import pytest
from PySide6 import QtCore

from sales_orders.api.client import ApiResult
from sales_orders.api.repositories import ReferenceRepo, SalesOrdersRepo
from sales_orders.constants import (
    OP_CUSTOMERS,
    OP_DETAIL_SELECT,
    OP_DIVISIONS,
    OP_ITEMS,
    OP_MAIN_GROUPS,
    OP_MASTER_LIST,
    OP_MASTER_SELECT,
    OP_SO_TYPES,
    OP_SUB_MAIN_GROUPS,
    OP_UNITS,
)
from sales_orders.modules.common.loader import InlineRunner

# Headless environments have no display; Qt reads this when QApplication starts.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Silence benign Qt warnings ----------
_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QObject::disconnect: Unexpected null parameter",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
]

@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    original = QtCore.qInstallMessageHandler(None)
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]

    def handler(msg_type, context, message):
        text = str(message)
        for r in rx:
            if r.search(text):
                return  # swallow benign messages
        QtCore.qInstallMessageHandler(None)
        try:
            QtCore.qDebug(message)
        finally:
            QtCore.qInstallMessageHandler(handler)

    QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- Fake transport ----------
class FakeApi:
    """
    Stands in for ApiClient. Responses are registered per operation as a
    body, a callable(params) -> body, or an exception instance to raise.
    Every call is recorded as (kind, op, params).
    """

    def __init__(self):
        self.calls: list[tuple[str, str, dict]] = []
        self.responses: dict[str, Any] = {}

    def on(self, op: str, response) -> None:
        self.responses[op] = response

    def _respond(self, kind: str, op: str, params: dict):
        self.calls.append((kind, op, params))
        r = self.responses.get(op, [])
        if callable(r):
            r = r(params)
        if isinstance(r, BaseException):
            raise r
        return r

    def fetch(self, op: str, **params):
        body = self._respond("fetch", op, params)
        return [r for r in body if isinstance(r, dict)] if isinstance(body, list) else []

    def call(self, op: str, **params) -> ApiResult:
        return ApiResult.from_response(self._respond("call", op, params))

    def save(self, op: str, payload) -> ApiResult:
        return ApiResult.from_response(self._respond("save", op, {"json": payload}))

    def ops(self, op: str) -> list[dict]:
        return [params for _, name, params in self.calls if name == op]


class Notes(list):
    """Collects (message, severity) pairs; pass it wherever `notify` is expected."""

    def __call__(self, message: str, severity: str = "info") -> None:
        self.append((message, severity))

    @property
    def messages(self) -> list[str]:
        return [m for m, _ in self]

    @property
    def last(self):
        return self[-1] if self else None


class DeferredRunner:
    """Queues work; the test decides when (and in which order) each job completes."""

    def __init__(self):
        self.jobs: list[tuple[Callable, Callable, Callable | None]] = []

    def submit(self, work, on_done, on_error=None) -> None:
        self.jobs.append((work, on_done, on_error))

    def run(self, index: int = 0) -> None:
        work, on_done, on_error = self.jobs.pop(index)
        try:
            result = work()
        except Exception as exc:
            if on_error is not None:
                on_error(exc)
            return
        on_done(result)

    def run_all(self) -> None:
        while self.jobs:
            self.run(0)

    def shutdown(self) -> None:
        self.jobs.clear()


# ---------- Canned reference data ----------
DIVISIONS = [
    {"DivisionID": 1, "DivisionName": "North"},
    {"DivisionID": 2, "DivisionName": "South"},
]
SO_TYPES = {
    1: [{"SOTypeID": 10, "SOType": "Local"}, {"SOTypeID": 11, "SOType": "Retail"}],
    2: [{"SOTypeID": 20, "SOType": "Export"}],
}
CUSTOMERS = {
    1: [{"CustomerId": 100, "CustCodeName": "C100 - Acme"}],
    2: [{"CustomerId": 200, "CustCodeName": "C200 - Globex"}],
}
MAIN_GROUPS = [
    {"MainGroupID": 1, "MainGroup": "Fabrics"},
    {"MainGroupID": 2, "MainGroup": "Yarn"},
]
SUB_MAIN_GROUPS = {
    1: [{"SubMainGroupID": 11, "MainGroupID": 1, "SubMianGroup": "Cotton"}],
    2: [{"SubMainGroupID": 21, "MainGroupID": 2, "SubMianGroup": "Polyester"}],
}
ITEMS = {
    (1, 11): [
        {"ItemID": 111, "MainGroupID": 1, "SubMainGroupID": 11, "ItemName": "Twill"},
        {"ItemID": 112, "MainGroupID": 1, "SubMainGroupID": 11, "ItemName": "Denim"},
    ],
    (2, 21): [{"ItemID": 211, "MainGroupID": 2, "SubMainGroupID": 21, "ItemName": "Spun"}],
}
UNITS = {
    111: [{"UnitID": 5, "ItemID": 111, "Unit": "MTR"}],
    112: [{"UnitID": 5, "ItemID": 112, "Unit": "MTR"}, {"UnitID": 6, "ItemID": 112, "Unit": "YRD"}],
    211: [{"UnitID": 7, "ItemID": 211, "Unit": "KG"}],
}

MASTERS = [
    {"IDNumber": 1, "SONo": "101", "SODate": "2024-01-15T00:00:00", "SOType": "Local",
     "CustomerName": "C100 - Acme", "DivisionID": 1, "SOTypeID": 10, "CustomerID": 100},
    {"IDNumber": 2, "SONo": "102", "SODate": "2024-02-20T00:00:00", "SOType": "Export",
     "CustomerName": "C200 - Globex", "DivisionID": 2, "SOTypeID": 20, "CustomerID": 200},
    {"IDNumber": 3, "SONo": "103", "SODate": "2024-03-05T00:00:00", "SOType": "Retail",
     "CustomerName": "C100 - Acme", "DivisionID": 1, "SOTypeID": 11, "CustomerID": 100},
]

LINES = {
    1: [
        {"SODetID": 501, "SOID": 1, "MainGroupID": 1, "MainGroup": "Fabrics",
         "SubMainGroupID": 11, "SubMianGroup": "Cotton", "ItemID": 111, "ItemName": "Twill",
         "UnitID": 5, "Unit": "MTR", "Qty": 10, "Rate": 2.5, "Amount": 25},
        {"SODetID": 502, "SOID": 1, "MainGroupID": 1, "MainGroup": "Fabrics",
         "SubMainGroupID": 11, "SubMianGroup": "Cotton", "ItemID": 112, "ItemName": "Denim",
         "UnitID": 6, "Unit": "YRD", "Qty": 4, "Rate": 5, "Amount": 20},
    ],
    2: [],
    3: [
        {"SODetID": 701, "SOID": 3, "MainGroupID": 2, "MainGroup": "Yarn",
         "SubMainGroupID": 21, "SubMianGroup": "Polyester", "ItemID": 211, "ItemName": "Spun",
         "UnitID": 7, "Unit": "KG", "Qty": 3, "Rate": 100, "Amount": 300},
    ],
}


@pytest.fixture()
def fake_api() -> FakeApi:
    """FakeApi answering every lookup/select operation with the canned data above."""
    api = FakeApi()
    api.on(OP_DIVISIONS, DIVISIONS)
    api.on(OP_SO_TYPES, lambda p: SO_TYPES.get(p["DivID"], []))
    api.on(OP_CUSTOMERS, lambda p: CUSTOMERS.get(p["DivID"], []))
    api.on(OP_MAIN_GROUPS, MAIN_GROUPS)
    api.on(OP_SUB_MAIN_GROUPS, lambda p: SUB_MAIN_GROUPS.get(p["MainGroupID"], []))
    api.on(OP_ITEMS, lambda p: ITEMS.get((p["MainGroupID"], p["SubMianGroupID"]), []))
    api.on(OP_UNITS, lambda p: UNITS.get(p["ItemID"], []))
    api.on(OP_MASTER_LIST, MASTERS)
    api.on(OP_MASTER_SELECT, lambda p: [m for m in MASTERS if m["IDNumber"] == p["IDNumber"]])
    api.on(OP_DETAIL_SELECT, lambda p: LINES.get(p["SOID"], []))
    return api


@pytest.fixture()
def reference(fake_api: FakeApi) -> ReferenceRepo:
    return ReferenceRepo(fake_api)


@pytest.fixture()
def orders(fake_api: FakeApi) -> SalesOrdersRepo:
    return SalesOrdersRepo(fake_api)


@pytest.fixture()
def runner() -> InlineRunner:
    return InlineRunner()


@pytest.fixture()
def deferred() -> DeferredRunner:
    return DeferredRunner()


@pytest.fixture()
def notes() -> Notes:
    return Notes()
