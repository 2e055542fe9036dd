from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping
import logging

from ..client import ApiClient, ApiResult
from ... import config
from ...constants import (
    OP_MASTER_LIST,
    OP_MASTER_SELECT,
    OP_MASTER_SAVE,
    OP_MASTER_DELETE,
    OP_DETAIL_SELECT,
    OP_DETAIL_SAVE,
    OP_DETAIL_DELETE,
)
from ...utils.helpers import as_int, as_float, to_api_date, to_iso_date
from ...utils.validators import is_set

_log = logging.getLogger(__name__)


# Domain-level error the controller can surface directly (e.g., snackbar)
class DomainError(Exception):
    pass


@dataclass
class SalesOrderHeader:
    id_number: int
    so_no: str
    so_date: str                 # ISO yyyy-mm-dd
    division_id: int | None
    so_type_id: int | None
    customer_id: int | None
    year_id: int | None = None
    login_id: int | None = None
    # display-only, present on list/select responses
    division_name: str = ""
    so_type: str = ""
    customer_name: str = ""

    @classmethod
    def from_api(cls, r: Mapping[str, Any]) -> "SalesOrderHeader":
        return cls(
            id_number=as_int(r.get("IDNumber")) or 0,
            so_no=str(r.get("SONo") or r.get("SONO") or ""),
            so_date=to_iso_date(r.get("SODate")),
            division_id=as_int(r.get("DivisionID")),
            so_type_id=as_int(r.get("SOTypeID")),
            customer_id=as_int(r.get("CustomerID")),
            year_id=as_int(r.get("YearID")),
            login_id=as_int(r.get("LoginID")),
            division_name=str(r.get("Division") or r.get("DivisionName") or ""),
            so_type=str(r.get("SOType") or ""),
            customer_name=str(r.get("CustomerName") or r.get("CustCodeName") or ""),
        )

    @property
    def is_new(self) -> bool:
        return not self.id_number


@dataclass
class SalesOrderLine:
    id_number: int
    so_id: int | None
    main_group_id: int | None
    sub_main_group_id: int | None
    item_id: int | None
    unit_id: int | None
    qty: float
    rate: float
    amount: float
    main_group: str = ""
    sub_main_group: str = ""
    item_name: str = ""
    unit: str = ""

    @classmethod
    def from_api(cls, r: Mapping[str, Any], so_id: int | None = None) -> "SalesOrderLine":
        return cls(
            id_number=as_int(r.get("SODetID", r.get("IDNumber"))) or 0,
            so_id=as_int(r.get("SOID")) if r.get("SOID") is not None else so_id,
            main_group_id=as_int(r.get("MainGroupID")),
            sub_main_group_id=as_int(r.get("SubMainGroupID")),
            item_id=as_int(r.get("ItemID")),
            unit_id=as_int(r.get("UnitID")),
            qty=as_float(r.get("Qty")),
            rate=as_float(r.get("Rate")),
            amount=as_float(r.get("Amount")),
            main_group=str(r.get("MainGroup") or ""),
            sub_main_group=str(r.get("SubMianGroup") or r.get("SubMainGroup") or ""),
            item_name=str(r.get("ItemName") or ""),
            unit=str(r.get("Unit") or ""),
        )


class SalesOrdersRepo:
    def __init__(self, api: ApiClient):
        self.api = api

    # ---- Payload builders -------------------------------------------------

    @staticmethod
    def header_payload(header: SalesOrderHeader) -> list[dict]:
        for value, label in (
            (header.division_id, "Division"),
            (header.so_type_id, "SO Type"),
            (header.customer_id, "Customer"),
        ):
            if not is_set(value):
                raise DomainError(f"{label} is required.")
        try:
            so_date = to_api_date(header.so_date)
        except ValueError as e:
            raise DomainError("SO Date is required.") from e
        return [{
            "IDNumber": int(header.id_number or 0),
            "SONo": header.so_no if header.id_number else "",
            "SODate": so_date,
            "SOTypeID": header.so_type_id,
            "CustomerID": header.customer_id,
            "YearID": header.year_id if header.year_id is not None else config.YEAR_ID,
            "DivisionID": header.division_id,
            "LoginID": header.login_id if header.login_id is not None else config.LOGIN_ID,
        }]

    @staticmethod
    def line_payload(line: Mapping[str, Any], so_id: int) -> list[dict]:
        if not is_set(so_id):
            raise DomainError("Save the sales order before adding items.")
        if not is_set(line.get("item_id")) or not is_set(line.get("unit_id")):
            raise DomainError("Item and Unit are required.")
        qty = as_float(line.get("qty"))
        rate = as_float(line.get("rate"))
        return [{
            "IDNumber": int(line.get("id_number") or 0),
            "SOID": so_id,
            "ItemID": line.get("item_id"),
            "UnitID": line.get("unit_id"),
            "Qty": qty,
            "Rate": rate,
            "Amount": as_float(line.get("amount"), qty * rate),
        }]

    # ---- Masters ----------------------------------------------------------

    def list_orders(self) -> list[SalesOrderHeader]:
        return [SalesOrderHeader.from_api(r) for r in self.api.fetch(OP_MASTER_LIST)]

    def get_order(self, id_number: int) -> SalesOrderHeader | None:
        rows = self.api.fetch(OP_MASTER_SELECT, IDNumber=id_number)
        if not rows:
            return None
        header = SalesOrderHeader.from_api(rows[0])
        if not header.id_number:
            header.id_number = int(id_number)
        return header

    def save_order(self, header: SalesOrderHeader) -> ApiResult:
        payload = self.header_payload(header)
        _log.info("Saving sales order IDNumber=%s", payload[0]["IDNumber"])
        return self.api.save(OP_MASTER_SAVE, payload)

    def delete_order(self, id_number: int) -> ApiResult:
        _log.info("Deleting sales order IDNumber=%s", id_number)
        return self.api.call(OP_MASTER_DELETE, IDNumber=id_number)

    # ---- Details ----------------------------------------------------------

    def list_lines(self, so_id: int) -> list[SalesOrderLine]:
        rows = self.api.fetch(OP_DETAIL_SELECT, SOID=so_id)
        return [SalesOrderLine.from_api(r, so_id=so_id) for r in rows]

    def save_line(self, line: Mapping[str, Any], so_id: int) -> ApiResult:
        payload = self.line_payload(line, so_id)
        _log.info("Saving line IDNumber=%s for SOID=%s", payload[0]["IDNumber"], so_id)
        return self.api.save(OP_DETAIL_SAVE, payload)

    def delete_line(self, detail_id: int) -> ApiResult:
        _log.info("Deleting line SODetailID=%s", detail_id)
        return self.api.call(OP_DETAIL_DELETE, SODetailID=detail_id)
