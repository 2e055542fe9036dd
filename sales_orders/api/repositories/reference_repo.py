from __future__ import annotations
from dataclasses import dataclass

from ..client import ApiClient
from ...constants import (
    OP_DIVISIONS,
    OP_SO_TYPES,
    OP_CUSTOMERS,
    OP_MAIN_GROUPS,
    OP_SUB_MAIN_GROUPS,
    OP_ITEMS,
    OP_UNITS,
)
from ...utils.helpers import as_int


def _text(r: dict, key: str) -> str:
    v = r.get(key)
    return "" if v is None else str(v)


# ---- Sales header lookups -------------------------------------------------

@dataclass(frozen=True)
class Division:
    division_id: int | None
    division_name: str

    @classmethod
    def from_api(cls, r: dict) -> "Division":
        return cls(as_int(r.get("DivisionID")), _text(r, "DivisionName"))

    @property
    def option_id(self):
        return self.division_id

    @property
    def label(self) -> str:
        return self.division_name


@dataclass(frozen=True)
class SOType:
    so_type_id: int | None
    so_type: str

    @classmethod
    def from_api(cls, r: dict) -> "SOType":
        return cls(as_int(r.get("SOTypeID")), _text(r, "SOType"))

    @property
    def option_id(self):
        return self.so_type_id

    @property
    def label(self) -> str:
        return self.so_type


@dataclass(frozen=True)
class Customer:
    customer_id: int | None
    cust_code_name: str

    @classmethod
    def from_api(cls, r: dict) -> "Customer":
        return cls(as_int(r.get("CustomerId")), _text(r, "CustCodeName"))

    @property
    def option_id(self):
        return self.customer_id

    @property
    def label(self) -> str:
        return self.cust_code_name


# ---- Item hierarchy -------------------------------------------------------

@dataclass(frozen=True)
class MainGroup:
    main_group_id: int | None
    main_group: str

    @classmethod
    def from_api(cls, r: dict) -> "MainGroup":
        return cls(as_int(r.get("MainGroupID")), _text(r, "MainGroup"))

    @property
    def option_id(self):
        return self.main_group_id

    @property
    def label(self) -> str:
        return self.main_group


@dataclass(frozen=True)
class SubMainGroup:
    sub_main_group_id: int | None
    main_group_id: int | None
    sub_main_group: str

    @classmethod
    def from_api(cls, r: dict) -> "SubMainGroup":
        # the server spells the name column "SubMianGroup"
        name = r.get("SubMianGroup", r.get("SubMainGroup"))
        return cls(
            as_int(r.get("SubMainGroupID")),
            as_int(r.get("MainGroupID")),
            "" if name is None else str(name),
        )

    @property
    def option_id(self):
        return self.sub_main_group_id

    @property
    def label(self) -> str:
        return self.sub_main_group


@dataclass(frozen=True)
class Item:
    item_id: int | None
    sub_main_group_id: int | None
    main_group_id: int | None
    item_name: str

    @classmethod
    def from_api(cls, r: dict) -> "Item":
        return cls(
            as_int(r.get("ItemID")),
            as_int(r.get("SubMainGroupID")),
            as_int(r.get("MainGroupID")),
            _text(r, "ItemName"),
        )

    @property
    def option_id(self):
        return self.item_id

    @property
    def label(self) -> str:
        return self.item_name


@dataclass(frozen=True)
class Unit:
    unit_id: int | None
    item_id: int | None
    unit: str

    @classmethod
    def from_api(cls, r: dict) -> "Unit":
        return cls(as_int(r.get("UnitID")), as_int(r.get("ItemID")), _text(r, "Unit"))

    @property
    def option_id(self):
        return self.unit_id

    @property
    def label(self) -> str:
        return self.unit


class ReferenceRepo:
    """
    Read-only lookups that feed the dropdowns. Every method performs one
    request; caching lives in modules.common.option_cache.
    """

    def __init__(self, api: ApiClient):
        self.api = api

    def list_divisions(self) -> list[Division]:
        return [Division.from_api(r) for r in self.api.fetch(OP_DIVISIONS)]

    def list_so_types(self, division_id: int) -> list[SOType]:
        return [SOType.from_api(r) for r in self.api.fetch(OP_SO_TYPES, DivID=division_id)]

    def list_customers(self, division_id: int) -> list[Customer]:
        return [Customer.from_api(r) for r in self.api.fetch(OP_CUSTOMERS, DivID=division_id)]

    def list_main_groups(self) -> list[MainGroup]:
        return [MainGroup.from_api(r) for r in self.api.fetch(OP_MAIN_GROUPS)]

    def list_sub_main_groups(self, main_group_id: int) -> list[SubMainGroup]:
        rows = self.api.fetch(OP_SUB_MAIN_GROUPS, MainGroupID=main_group_id)
        return [SubMainGroup.from_api(r) for r in rows]

    def list_items(self, main_group_id: int, sub_main_group_id: int) -> list[Item]:
        rows = self.api.fetch(
            OP_ITEMS, MainGroupID=main_group_id, SubMianGroupID=sub_main_group_id
        )
        return [Item.from_api(r) for r in rows]

    def list_units(self, item_id: int) -> list[Unit]:
        return [Unit.from_api(r) for r in self.api.fetch(OP_UNITS, ItemID=item_id)]
