# api/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from sales_orders.api.repositories import (
        # Lookups
        ReferenceRepo, Division, SOType, Customer,
        MainGroup, SubMainGroup, Item, Unit,
        # Sales orders
        SalesOrdersRepo, SalesOrderHeader, SalesOrderLine, DomainError,
    )
"""

from .reference_repo import (
    ReferenceRepo,
    Division,
    SOType,
    Customer,
    MainGroup,
    SubMainGroup,
    Item,
    Unit,
)
from .sales_orders_repo import (
    SalesOrdersRepo,
    SalesOrderHeader,
    SalesOrderLine,
    DomainError,
)

__all__ = [
    "ReferenceRepo",
    "Division",
    "SOType",
    "Customer",
    "MainGroup",
    "SubMainGroup",
    "Item",
    "Unit",
    "SalesOrdersRepo",
    "SalesOrderHeader",
    "SalesOrderLine",
    "DomainError",
]
