from PySide6.QtCore import QAbstractTableModel, QModelIndex, QSortFilterProxyModel, Qt

from ..common.filters import ColumnFilters, ColumnSpec, compare_values, is_blank
from ...api.repositories import SalesOrderHeader, SalesOrderLine
from ...utils.helpers import fmt_money, fmt_qty

ORDER_COLUMNS = (
    ColumnSpec("id_number", "ID", "number"),
    ColumnSpec("so_no", "SO No", "number"),
    ColumnSpec("so_date", "SO Date", "date"),
    ColumnSpec("so_type", "SO Type", "text"),
    ColumnSpec("customer_name", "Customer", "text"),
)


class SalesOrdersTableModel(QAbstractTableModel):
    HEADERS = [c.header for c in ORDER_COLUMNS]

    def __init__(self, rows: list[SalesOrderHeader] | None = None):
        super().__init__()
        self._rows = rows or []

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(ORDER_COLUMNS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        spec = ORDER_COLUMNS[index.column()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            v = spec.value(r)
            return "" if v is None else str(v)
        if role == Qt.TextAlignmentRole and spec.kind == "number":
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> SalesOrderHeader:
        return self._rows[row]

    def rows(self) -> list[SalesOrderHeader]:
        return list(self._rows)

    def replace(self, rows: list[SalesOrderHeader]):
        self.beginResetModel()
        self._rows = rows or []
        self.endResetModel()


class SalesOrdersFilterProxy(QSortFilterProxyModel):
    """
    Applies ColumnFilters to the loaded masters and sorts with
    compare_values; blank cells stay at the bottom in both directions.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.filters = ColumnFilters(ORDER_COLUMNS)

    def set_filter(self, key: str, flt) -> None:
        self.filters.set(key, flt)
        self.invalidateFilter()

    def clear_filters(self) -> None:
        self.filters.clear()
        self.invalidateFilter()

    def _row_obj(self, source_row: int):
        return self.sourceModel().at(source_row)

    def filterAcceptsRow(self, source_row, source_parent):
        if not self.filters.active:
            return True
        return self.filters.accepts(self._row_obj(source_row))

    def lessThan(self, left, right):
        spec = ORDER_COLUMNS[left.column()]
        a = spec.value(self._row_obj(left.row()))
        b = spec.value(self._row_obj(right.row()))
        a_blank, b_blank = is_blank(a), is_blank(b)
        if a_blank or b_blank:
            if a_blank and b_blank:
                return False
            if self.sortOrder() == Qt.DescendingOrder:
                return a_blank
            return b_blank
        return compare_values(a, b) < 0


class OrderLinesTableModel(QAbstractTableModel):
    HEADERS = ["Main Group", "Sub Main Group", "Item", "Unit", "Qty", "Rate", "Amount"]

    def __init__(self, rows: list[SalesOrderLine] | None = None):
        super().__init__()
        self._rows = rows or []

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                r.main_group,
                r.sub_main_group,
                r.item_name,
                r.unit,
                fmt_qty(r.qty),
                fmt_money(r.rate),
                fmt_money(r.amount),
            ][c]
        if role == Qt.TextAlignmentRole and c >= 4:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> SalesOrderLine:
        return self._rows[row]

    def replace(self, rows: list[SalesOrderLine]):
        self.beginResetModel()
        self._rows = rows or []
        self.endResetModel()
