"""
State behind the sales-order header (new / edit).

Holds the SO number, date and the division -> (SO type, customer) cascade,
loads an existing master by IDNumber and saves it. Widget-free so the form
and the tests drive the same object.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..common.cascade import CascadeChain, CascadeLink
from ..common.option_cache import ReferenceFetcher
from ...api.client import ApiError, ApiResult
from ...api.repositories import (
    DomainError,
    ReferenceRepo,
    SalesOrderHeader,
    SalesOrdersRepo,
)
from ...constants import (
    MSG_RECORD_NOT_FOUND,
    MSG_SAVE_ORDER_FAILED,
    NEW_SO_NUMBER,
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
)
from ...utils.helpers import as_int, to_iso_date, today_str
from ...utils.validators import validate_header

_log = logging.getLogger(__name__)


def header_fetchers(reference: ReferenceRepo, runner, notify) -> dict[str, ReferenceFetcher]:
    return {
        "division": ReferenceFetcher("divisions", reference.list_divisions, runner, notify),
        "so_type": ReferenceFetcher("SO types", reference.list_so_types, runner, notify),
        "customer": ReferenceFetcher("customers", reference.list_customers, runner, notify),
    }


class SalesOrderHeaderEditor:
    def __init__(
        self,
        *,
        reference: ReferenceRepo,
        orders: SalesOrdersRepo,
        runner,
        notify: Callable[[str, str], None],
        on_change: Optional[Callable[[], None]] = None,
        on_saved: Optional[Callable[[int], None]] = None,
        fetchers: Optional[dict[str, ReferenceFetcher]] = None,
    ):
        self.orders = orders
        self._runner = runner
        self._notify = notify
        self.on_change = on_change
        self.on_saved = on_saved

        f = fetchers or header_fetchers(reference, runner, notify)
        self.cascade = CascadeChain(
            [
                CascadeLink("division", f["division"]),
                CascadeLink("so_type", f["so_type"], parents=("division",)),
                CascadeLink("customer", f["customer"], parents=("division",)),
            ],
            on_change=lambda _name: self._changed(),
        )

        self.so_id: Optional[int] = None
        self.so_number: str = ""           # raw SONo; blank until the server assigns one
        self.so_date: str = today_str()
        self.saving = False
        self.loading = False

    # ---- queries ---------------------------------------------------------

    @property
    def is_new(self) -> bool:
        return self.so_id is None

    @property
    def display_number(self) -> str:
        return self.so_number or NEW_SO_NUMBER

    @property
    def division_id(self):
        return self.cascade["division"].value

    @property
    def so_type_id(self):
        return self.cascade["so_type"].value

    @property
    def customer_id(self):
        return self.cascade["customer"].value

    def values(self) -> dict:
        return {
            "so_date": self.so_date,
            "division_id": self.division_id,
            "so_type_id": self.so_type_id,
            "customer_id": self.customer_id,
        }

    def to_header(self) -> SalesOrderHeader:
        return SalesOrderHeader(
            id_number=self.so_id or 0,
            so_no=self.so_number,
            so_date=self.so_date,
            division_id=self.division_id,
            so_type_id=self.so_type_id,
            customer_id=self.customer_id,
        )

    # ---- field edits -----------------------------------------------------

    def start_new(self) -> None:
        self.so_id = None
        self.so_number = ""
        self.so_date = today_str()
        self.cascade.reset()
        self.cascade.load_roots()

    def set_date(self, value) -> None:
        self.so_date = to_iso_date(value)
        self._changed()

    def select_division(self, division_id) -> None:
        # clears SO type and customer before their lists reload
        self.cascade.select("division", division_id)

    def select_so_type(self, so_type_id) -> None:
        self.cascade.select("so_type", so_type_id)

    def select_customer(self, customer_id) -> None:
        self.cascade.select("customer", customer_id)

    # ---- load ------------------------------------------------------------

    def load(self, id_number: int) -> None:
        """Fetch an existing master and apply it; missing records are reported."""
        self.loading = True
        self._changed()
        self._runner.submit(
            lambda: self.orders.get_order(id_number),
            lambda header: self._loaded(id_number, header),
            self._load_failed,
        )

    def _loaded(self, id_number: int, header: Optional[SalesOrderHeader]) -> None:
        self.loading = False
        if header is None:
            _log.info("Sales order %s not found", id_number)
            self._notify(MSG_RECORD_NOT_FOUND, SEVERITY_ERROR)
            self._changed()
            return
        self.so_id = header.id_number or int(id_number)
        self.so_number = header.so_no or ""
        self.so_date = header.so_date or today_str()
        self.cascade.restore({
            "division": header.division_id,
            "so_type": header.so_type_id,
            "customer": header.customer_id,
        })

    def _load_failed(self, exc: BaseException) -> None:
        self.loading = False
        if not isinstance(exc, ApiError):
            _log.error("Unexpected error loading sales order", exc_info=exc)
        self._notify(f"Error loading sales order: {exc}", SEVERITY_ERROR)
        self._changed()

    # ---- save ------------------------------------------------------------

    def save(self) -> bool:
        """Validate and send the header. Returns True when a request was issued."""
        if self.saving:
            return False
        err = validate_header(self.values())
        if err:
            self._notify(err, SEVERITY_ERROR)
            return False

        header = self.to_header()
        was_new = self.is_new
        self.saving = True
        self._changed()
        self._runner.submit(
            lambda: self.orders.save_order(header),
            lambda result: self._saved(result, was_new),
            self._save_failed,
        )
        return True

    def _saved(self, result: ApiResult, was_new: bool) -> None:
        self.saving = False
        if not result.ok:
            self._notify(result.message or MSG_SAVE_ORDER_FAILED, SEVERITY_ERROR)
            self._changed()
            return

        so_no = result.data.get("SONO") or result.data.get("SONo")
        if so_no:
            self.so_number = str(so_no)
        if was_new:
            self.so_id = as_int(result.data.get("IDNumber"))
        verb = "saved" if was_new else "updated"
        self._notify(f"Sales Order #{self.display_number} {verb} successfully!", SEVERITY_SUCCESS)
        self._changed()
        if self.on_saved and self.so_id:
            self.on_saved(self.so_id)

    def _save_failed(self, exc: BaseException) -> None:
        self.saving = False
        if isinstance(exc, DomainError):
            self._notify(str(exc), SEVERITY_ERROR)
        else:
            if not isinstance(exc, ApiError):
                _log.error("Unexpected error saving sales order", exc_info=exc)
            self._notify(f"{MSG_SAVE_ORDER_FAILED}: {exc}", SEVERITY_ERROR)
        self._changed()

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()
