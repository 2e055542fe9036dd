from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from .model import ORDER_COLUMNS, OrderLinesTableModel
from ..common.filters import distinct_values, text_filter_mode
from ...utils.helpers import fmt_money
from ...widgets.column_filters import (
    DateRangeFilterWidget,
    NumberRangeFilterWidget,
    TextFilterWidget,
)
from ...widgets.snackbar import Snackbar
from ...widgets.table_view import TableView


class FilterBar(QWidget):
    """One filter editor per list column; emits the key of the column that changed."""
    changed = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        self.widgets: dict[str, QWidget] = {}
        for spec in ORDER_COLUMNS:
            if spec.kind == "number":
                w = NumberRangeFilterWidget(spec.header)
            elif spec.kind == "date":
                w = DateRangeFilterWidget(spec.header)
            else:
                w = TextFilterWidget(spec.header)
            w.changed.connect(lambda key=spec.key: self.changed.emit(key))
            self.widgets[spec.key] = w
            lay.addWidget(w)
        lay.addStretch(1)
        self.btn_clear = QPushButton("Clear Filters")
        lay.addWidget(self.btn_clear)

    def filter_for(self, key: str):
        return self.widgets[key].current_filter()

    def refresh_choices(self, rows, limit: int) -> None:
        """
        Rebuild the text pick lists from the currently loaded rows. A column
        whose filter changed in the rebuild (mode switch, vanished values)
        emits `changed` so the proxy picks up what the widget now shows.
        """
        for spec in ORDER_COLUMNS:
            if spec.kind != "text":
                continue
            w = self.widgets[spec.key]
            before = w.current_filter()
            w.blockSignals(True)
            w.set_values(distinct_values(rows, spec), text_filter_mode(rows, spec, limit))
            w.blockSignals(False)
            if w.current_filter() != before:
                self.changed.emit(spec.key)

    def clear(self) -> None:
        for w in self.widgets.values():
            w.blockSignals(True)
            w.clear()
            w.blockSignals(False)


class OrderLinesView(QWidget):
    """Read-only line table plus total for one expanded order."""

    def __init__(self, title: str = "Order Items", parent=None):
        super().__init__(parent)
        self.box = QGroupBox(title)
        v = QVBoxLayout(self.box)
        self.table = TableView(sortable=False)
        self.model = OrderLinesTableModel([])
        self.table.setModel(self.model)
        v.addWidget(self.table, 1)

        foot = QHBoxLayout()
        self.lbl_status = QLabel("")
        foot.addWidget(self.lbl_status)
        foot.addStretch(1)
        self.lbl_total = QLabel("Total: 0.00")
        self.lbl_total.setObjectName("lineTotal")
        foot.addWidget(self.lbl_total)
        v.addLayout(foot)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addWidget(self.box, 1)

    def set_rows(self, rows, total: float, loading: bool = False):
        self.model.replace(rows)
        self.table.resizeColumnsToContents()
        self.lbl_total.setText(f"Total: {fmt_money(total)}")
        self.lbl_status.setText("Loading…" if loading else "")


class ExpandedOrdersPanel(QScrollArea):
    """Stack of line panels, one per expanded master row, in expansion order."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWidgetResizable(True)
        body = QWidget()
        self._lay = QVBoxLayout(body)
        self._lay.setContentsMargins(0, 0, 0, 0)
        self.lbl_empty = QLabel("Select an order and press Expand to see its items.")
        self.lbl_empty.setAlignment(Qt.AlignCenter)
        self._lay.addWidget(self.lbl_empty)
        self._lay.addStretch(1)
        self.setWidget(body)
        self.panels: dict[int, OrderLinesView] = {}

    def add(self, id_number: int, title: str) -> OrderLinesView:
        panel = OrderLinesView(title)
        panel.setMinimumHeight(160)
        # keep the trailing stretch last
        self._lay.insertWidget(self._lay.count() - 1, panel)
        self.panels[id_number] = panel
        self.lbl_empty.setVisible(False)
        return panel

    def remove(self, id_number: int) -> None:
        panel = self.panels.pop(id_number, None)
        if panel is not None:
            self._lay.removeWidget(panel)
            panel.deleteLater()
        self.lbl_empty.setVisible(not self.panels)


class SalesOrderView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)

        bar = QHBoxLayout()
        self.btn_add = QPushButton("New")
        self.btn_edit = QPushButton("Edit")
        self.btn_del = QPushButton("Delete")
        self.btn_expand = QPushButton("Expand")
        self.btn_collapse_all = QPushButton("Collapse All")
        self.btn_refresh = QPushButton("Refresh")
        for b in (self.btn_add, self.btn_edit, self.btn_del, self.btn_expand,
                  self.btn_collapse_all, self.btn_refresh):
            bar.addWidget(b)
        bar.addStretch(1)
        self.lbl_count = QLabel("")
        bar.addWidget(self.lbl_count)
        root.addLayout(bar)

        self.filters = FilterBar()
        root.addWidget(self.filters)

        split = QSplitter(Qt.Vertical)
        self.table = TableView()
        split.addWidget(self.table)
        self.details = ExpandedOrdersPanel()
        split.addWidget(self.details)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)
        root.addWidget(split, 1)

        self.snackbar = Snackbar(self)
        root.addWidget(self.snackbar)
