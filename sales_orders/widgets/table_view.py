from PySide6.QtCore import QSortFilterProxyModel
from PySide6.QtWidgets import QTableView, QAbstractItemView


class TableView(QTableView):
    """Read-only, single-row-selection table used by every list in the app."""

    def __init__(self, parent=None, *, sortable: bool = True):
        super().__init__(parent)
        self.setSortingEnabled(sortable)
        self.setAlternatingRowColors(True)
        self.setSelectionBehavior(QTableView.SelectRows)
        self.setSelectionMode(QTableView.SingleSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.verticalHeader().setVisible(False)
        self.horizontalHeader().setStretchLastSection(True)

    def selected_source_row(self) -> int | None:
        """Row index in the source model (maps through a proxy if one is set)."""
        sel = self.selectionModel()
        if sel is None:
            return None
        idxs = sel.selectedRows()
        if not idxs:
            return None
        idx = idxs[0]
        model = self.model()
        if isinstance(model, QSortFilterProxyModel):
            idx = model.mapToSource(idx)
        return idx.row()
