from PySide6.QtWidgets import (
    QComboBox,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from .lines import OrderLinesPresenter
from .model import OrderLinesTableModel
from ...utils.helpers import fmt_money
from ...utils.ui_helpers import confirm
from ...widgets.table_view import TableView

_LINKS = ("main_group", "sub_main_group", "item", "unit")


class LineItemsGrid(QWidget):
    """
    Editable line items of a saved sales order. Existing lines are listed in
    the table; the draft row (new or edited line) is edited in the strip
    below it. Buttons follow the presenter's editor state.
    """

    def __init__(self, presenter: OrderLinesPresenter, parent=None):
        super().__init__(parent)
        self.presenter = presenter
        presenter.on_change = self.refresh

        box = QGroupBox("Items")
        v = QVBoxLayout(box)

        self.table = TableView(sortable=False)
        self.model = OrderLinesTableModel([])
        self.table.setModel(self.model)
        self.table.doubleClicked.connect(lambda _=None: self._on_edit())
        v.addWidget(self.table, 1)

        # --- draft row ---
        self.draft_box = QGroupBox("Line")
        form = QFormLayout(self.draft_box)
        self.cmb_main_group = QComboBox()
        self.cmb_sub_main_group = QComboBox()
        self.cmb_item = QComboBox()
        self.cmb_unit = QComboBox()
        self.combos = {
            "main_group": self.cmb_main_group,
            "sub_main_group": self.cmb_sub_main_group,
            "item": self.cmb_item,
            "unit": self.cmb_unit,
        }
        for name, cmb in self.combos.items():
            cmb.currentIndexChanged.connect(lambda _=None, n=name: self._on_pick(n))

        self.spin_qty = QDoubleSpinBox()
        self.spin_qty.setDecimals(3)
        self.spin_qty.setMaximum(1_000_000_000)
        self.spin_rate = QDoubleSpinBox()
        self.spin_rate.setDecimals(2)
        self.spin_rate.setMaximum(1_000_000_000)
        self.spin_qty.valueChanged.connect(self.presenter.set_qty)
        self.spin_rate.valueChanged.connect(self.presenter.set_rate)
        self.lbl_amount = QLabel("0.00")

        form.addRow("Main Group*", self.cmb_main_group)
        form.addRow("Sub Main Group", self.cmb_sub_main_group)
        form.addRow("Item*", self.cmb_item)
        form.addRow("Unit*", self.cmb_unit)
        form.addRow("Qty*", self.spin_qty)
        form.addRow("Rate*", self.spin_rate)
        form.addRow("Amount", self.lbl_amount)

        draft_btns = QHBoxLayout()
        self.btn_save = QPushButton("Save")
        self.btn_cancel = QPushButton("Cancel")
        draft_btns.addStretch(1)
        draft_btns.addWidget(self.btn_save)
        draft_btns.addWidget(self.btn_cancel)
        form.addRow(draft_btns)
        v.addWidget(self.draft_box)

        bar = QHBoxLayout()
        self.btn_add = QPushButton("Add Item")
        self.btn_edit = QPushButton("Edit Item")
        self.btn_delete = QPushButton("Delete Item")
        for b in (self.btn_add, self.btn_edit, self.btn_delete):
            bar.addWidget(b)
        bar.addStretch(1)
        self.lbl_total = QLabel("Total: 0.00")
        bar.addWidget(self.lbl_total)
        v.addLayout(bar)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addWidget(box, 1)

        self.btn_add.clicked.connect(self._on_add)
        self.btn_edit.clicked.connect(self._on_edit)
        self.btn_delete.clicked.connect(self._on_delete)
        self.btn_save.clicked.connect(self.presenter.commit)
        self.btn_cancel.clicked.connect(self.presenter.cancel)

        self.refresh()

    # ---- actions -----------------------------------------------------------

    def _selected_line(self):
        row = self.table.selected_source_row()
        if row is None:
            return None
        return self.model.at(row)

    def _on_add(self):
        self.presenter.start_new()

    def _on_edit(self):
        line = self._selected_line()
        if line is not None:
            self.presenter.start_edit(line)

    def _on_delete(self):
        line = self._selected_line()
        if line is None:
            return
        if not confirm(
            self,
            "Confirm Delete",
            "Are you sure you want to delete this record? This action cannot be undone.",
        ):
            return
        self.presenter.delete_line(line)

    def _on_pick(self, name: str):
        self.presenter.select(name, self.combos[name].currentData())

    # ---- state -> widgets ----------------------------------------------------

    def refresh(self):
        p = self.presenter
        editor = p.editor
        has_order = bool(p.so_id)
        drafting = editor.is_open
        busy = editor.is_saving or p.deleting

        if self.model.rowCount() != len(p.lines) or any(
            self.model.at(i) is not line for i, line in enumerate(p.lines)
        ):
            self.model.replace(p.lines)
            self.table.resizeColumnsToContents()
        self.lbl_total.setText(f"Total: {fmt_money(p.total)}")

        self.setEnabled(has_order)
        self.btn_add.setEnabled(has_order and editor.can_start and not busy)
        self.btn_edit.setEnabled(has_order and editor.can_start and not busy and bool(p.lines))
        self.btn_delete.setEnabled(has_order and editor.can_start and not busy and bool(p.lines))
        self.table.setEnabled(not drafting)

        self.draft_box.setVisible(drafting)
        self.btn_save.setEnabled(drafting and not editor.is_saving)
        self.btn_save.setText("Saving…" if editor.is_saving else "Save")
        self.btn_cancel.setEnabled(drafting and not editor.is_saving)

        self._sync_combos(drafting and not editor.is_saving)
        draft = editor.draft or {}
        for spin, key in ((self.spin_qty, "qty"), (self.spin_rate, "rate")):
            spin.blockSignals(True)
            spin.setValue(float(draft.get(key) or 0.0))
            spin.setEnabled(drafting and not editor.is_saving)
            spin.blockSignals(False)
        self.lbl_amount.setText(fmt_money(draft.get("amount") or 0.0))

    def _sync_combos(self, editable: bool):
        cascade = self.presenter.cascade
        for name in _LINKS:
            link = cascade[name]
            cmb = self.combos[name]
            cmb.blockSignals(True)
            cmb.clear()
            cmb.addItem("Loading…" if link.loading else "", None)
            for opt in link.options:
                cmb.addItem(opt.label, opt.option_id)
            idx = cmb.findData(link.value) if link.value is not None else 0
            cmb.setCurrentIndex(idx if idx >= 0 else 0)
            cmb.setEnabled(editable and cascade.is_enabled(name))
            cmb.blockSignals(False)
