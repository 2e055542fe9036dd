from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from .header_editor import SalesOrderHeaderEditor
from .line_grid import LineItemsGrid
from .lines import OrderLinesPresenter
from ..common.loader import AsyncRunner
from ...api.repositories import ReferenceRepo, SalesOrdersRepo
from ...utils.helpers import parse_date
from ...widgets.snackbar import Snackbar

_HEADER_LINKS = ("division", "so_type", "customer")


class SalesOrderForm(QDialog):
    """
    New / edit dialog. The header is saved first; once the order has an
    IDNumber the line grid for it becomes usable.
    """

    def __init__(
        self,
        parent=None,
        *,
        reference: ReferenceRepo,
        orders: SalesOrdersRepo,
        runner=None,
        id_number: int | None = None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Edit Sales Order" if id_number else "New Sales Order")
        self.setModal(True)
        self.resize(900, 680)

        self._owns_runner = runner is None
        self.runner = runner or AsyncRunner(self)
        self.saved = False

        self.snackbar = Snackbar(self)
        notify = self.snackbar.notify
        self.header = SalesOrderHeaderEditor(
            reference=reference,
            orders=orders,
            runner=self.runner,
            notify=notify,
            on_saved=self._on_header_saved,
        )
        self.lines = OrderLinesPresenter(
            orders=orders,
            reference=reference,
            runner=self.runner,
            notify=notify,
        )

        # --- header fields ---
        head = QGroupBox("Sales Order")
        form = QFormLayout(head)
        self.txt_so_number = QLineEdit()
        self.txt_so_number.setReadOnly(True)
        self.date = QDateEdit()
        self.date.setCalendarPopup(True)
        self.date.setDisplayFormat("yyyy-MM-dd")
        self.cmb_division = QComboBox()
        self.cmb_so_type = QComboBox()
        self.cmb_customer = QComboBox()
        self.combos = {
            "division": self.cmb_division,
            "so_type": self.cmb_so_type,
            "customer": self.cmb_customer,
        }
        form.addRow("SO No", self.txt_so_number)
        form.addRow("SO Date*", self.date)
        form.addRow("Division*", self.cmb_division)
        form.addRow("SO Type*", self.cmb_so_type)
        form.addRow("Customer*", self.cmb_customer)

        btns = QHBoxLayout()
        btns.addStretch(1)
        self.btn_save = QPushButton("Save")
        self.btn_save.setDefault(True)
        self.btn_close = QPushButton("Close")
        btns.addWidget(self.btn_save)
        btns.addWidget(self.btn_close)
        form.addRow(btns)

        self.grid = LineItemsGrid(self.lines)

        root = QVBoxLayout(self)
        root.addWidget(head)
        root.addWidget(self.grid, 1)
        root.addWidget(self.snackbar)

        # --- wiring ---
        self.date.dateChanged.connect(lambda d: self.header.set_date(d.toString("yyyy-MM-dd")))
        self.cmb_division.currentIndexChanged.connect(
            lambda _=None: self.header.select_division(self.cmb_division.currentData())
        )
        self.cmb_so_type.currentIndexChanged.connect(
            lambda _=None: self.header.select_so_type(self.cmb_so_type.currentData())
        )
        self.cmb_customer.currentIndexChanged.connect(
            lambda _=None: self.header.select_customer(self.cmb_customer.currentData())
        )
        self.btn_save.clicked.connect(self.header.save)
        self.btn_close.clicked.connect(self.accept)

        self.header.on_change = self._refresh_header
        if id_number:
            self.header.load(id_number)
        else:
            self.header.start_new()
        self._refresh_header()

    # ---- header state -> widgets ---------------------------------------------

    def _refresh_header(self):
        h = self.header
        busy = h.saving or h.loading
        self.txt_so_number.setText(h.display_number)

        d = parse_date(h.so_date)
        self.date.blockSignals(True)
        if d is not None:
            self.date.setDate(QDate(d.year, d.month, d.day))
        self.date.setEnabled(not busy)
        self.date.blockSignals(False)

        for name in _HEADER_LINKS:
            link = h.cascade[name]
            cmb = self.combos[name]
            cmb.blockSignals(True)
            cmb.clear()
            cmb.addItem("Loading…" if link.loading else "", None)
            for opt in link.options:
                cmb.addItem(opt.label, opt.option_id)
            idx = cmb.findData(link.value) if link.value is not None else 0
            cmb.setCurrentIndex(idx if idx >= 0 else 0)
            cmb.setEnabled(not busy and h.cascade.is_enabled(name))
            cmb.blockSignals(False)

        self.btn_save.setEnabled(not busy)
        if h.saving:
            self.btn_save.setText("Saving…")
        else:
            self.btn_save.setText("Save" if h.is_new else "Update")

        if h.so_id and self.lines.so_id != h.so_id:
            self.lines.set_so_id(h.so_id)

    def _on_header_saved(self, so_id: int):
        self.saved = True

    # ---- lifecycle -----------------------------------------------------------

    def done(self, result):
        if self._owns_runner:
            self.runner.shutdown()
        super().done(result)
