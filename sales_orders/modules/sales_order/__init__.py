"""
Sales order module package exports.

- SalesOrderController      master list screen (BaseModule)
- SalesOrderForm            new / edit dialog
- SalesOrderHeaderEditor    header state and save, widget-free
- OrderLinesPresenter       line items of one order, read-only or editable
- LineItemsGrid             editable line grid widget
"""

from .controller import SalesOrderController
from .form import SalesOrderForm
from .header_editor import SalesOrderHeaderEditor
from .lines import OrderLinesPresenter
from .line_grid import LineItemsGrid
from .model import SalesOrdersTableModel, SalesOrdersFilterProxy, OrderLinesTableModel
from .view import SalesOrderView

__all__ = [
    "SalesOrderController",
    "SalesOrderForm",
    "SalesOrderHeaderEditor",
    "OrderLinesPresenter",
    "LineItemsGrid",
    "SalesOrdersTableModel",
    "SalesOrdersFilterProxy",
    "OrderLinesTableModel",
    "SalesOrderView",
]
