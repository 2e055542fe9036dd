"""
Filter editors for the list screen's filter bar.

Each widget emits `changed` whenever its value changes and exposes
`current_filter()` returning the matching object from
modules.common.filters (or None when nothing is set).
"""
from __future__ import annotations

from datetime import date

from PySide6.QtCore import QDate, Signal
from PySide6.QtGui import QAction, QDoubleValidator
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMenu,
    QStackedWidget,
    QToolButton,
    QWidget,
)

from ..modules.common.filters import (
    DATE_PRESETS,
    DateRangeFilter,
    MultiSelectFilter,
    NumberRangeFilter,
)

_PRESET_LABELS = {
    "today": "Today",
    "yesterday": "Yesterday",
    "past_week": "Past week",
    "past_month": "Past month",
    "past_6_months": "Past 6 months",
    "past_year": "Past year",
    "custom": "Custom…",
}


def _row(parent: QWidget, title: str) -> QHBoxLayout:
    lay = QHBoxLayout(parent)
    lay.setContentsMargins(0, 0, 0, 0)
    lay.setSpacing(4)
    lay.addWidget(QLabel(f"{title}:"))
    return lay


class TextFilterWidget(QWidget):
    """Pick-list over the distinct loaded values, or a 'contains' box when there are too many."""
    changed = Signal()

    def __init__(self, title: str, parent: QWidget | None = None):
        super().__init__(parent)
        self.title = title
        lay = _row(self, title)

        self._stack = QStackedWidget()
        self.btn_pick = QToolButton()
        self.btn_pick.setPopupMode(QToolButton.InstantPopup)
        self.btn_pick.setText("All")
        self._menu = QMenu(self.btn_pick)
        self.btn_pick.setMenu(self._menu)
        self.txt_contains = QLineEdit()
        self.txt_contains.setPlaceholderText("contains…")
        self.txt_contains.setClearButtonEnabled(True)
        self.txt_contains.textChanged.connect(lambda _=None: self.changed.emit())
        self._stack.addWidget(self.btn_pick)
        self._stack.addWidget(self.txt_contains)
        lay.addWidget(self._stack)

        self._actions: dict[str, QAction] = {}
        self.mode = "multi"

    def set_values(self, values: list[str], mode: str = "multi") -> None:
        """Rebuild the pick list, keeping selections that still exist."""
        keep = set(self.selected())
        self._menu.clear()
        self._actions.clear()
        for v in values:
            act = QAction(v, self._menu)
            act.setCheckable(True)
            act.setChecked(v in keep)
            act.toggled.connect(lambda _=None: self._on_pick())
            self._menu.addAction(act)
            self._actions[v] = act
        self.mode = mode
        self._stack.setCurrentWidget(self.btn_pick if mode == "multi" else self.txt_contains)
        self._refresh_caption()

    def selected(self) -> list[str]:
        return [v for v, a in self._actions.items() if a.isChecked()]

    def set_selected(self, values: list[str]) -> None:
        wanted = set(values)
        for v, a in self._actions.items():
            a.blockSignals(True)
            a.setChecked(v in wanted)
            a.blockSignals(False)
        self._on_pick()

    def clear(self) -> None:
        self.txt_contains.blockSignals(True)
        self.txt_contains.clear()
        self.txt_contains.blockSignals(False)
        self.set_selected([])

    def current_filter(self) -> MultiSelectFilter | None:
        if self.mode == "multi":
            sel = self.selected()
            return MultiSelectFilter(sel) if sel else None
        text = self.txt_contains.text().strip()
        return MultiSelectFilter(text) if text else None

    def _on_pick(self) -> None:
        self._refresh_caption()
        self.changed.emit()

    def _refresh_caption(self) -> None:
        n = len(self.selected())
        self.btn_pick.setText("All" if n == 0 else f"{n} selected")


class NumberRangeFilterWidget(QWidget):
    changed = Signal()

    def __init__(self, title: str, parent: QWidget | None = None):
        super().__init__(parent)
        self.title = title
        lay = _row(self, title)
        self.txt_from = QLineEdit()
        self.txt_to = QLineEdit()
        for w, hint in ((self.txt_from, "from"), (self.txt_to, "to")):
            w.setPlaceholderText(hint)
            w.setValidator(QDoubleValidator(w))
            w.setMaximumWidth(80)
            w.textChanged.connect(lambda _=None: self.changed.emit())
            lay.addWidget(w)

    @staticmethod
    def _bound(text: str):
        text = (text or "").strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None

    def current_filter(self) -> NumberRangeFilter | None:
        flt = NumberRangeFilter(self._bound(self.txt_from.text()), self._bound(self.txt_to.text()))
        return flt if flt.active else None

    def clear(self) -> None:
        for w in (self.txt_from, self.txt_to):
            w.blockSignals(True)
            w.clear()
            w.blockSignals(False)
        self.changed.emit()


class DateRangeFilterWidget(QWidget):
    changed = Signal()

    def __init__(self, title: str, parent: QWidget | None = None):
        super().__init__(parent)
        self.title = title
        lay = _row(self, title)

        self.cmb_preset = QComboBox()
        self.cmb_preset.addItem("Any", None)
        for key in DATE_PRESETS:
            self.cmb_preset.addItem(_PRESET_LABELS[key], key)
        lay.addWidget(self.cmb_preset)

        self.date_from = QDateEdit()
        self.date_to = QDateEdit()
        for w in (self.date_from, self.date_to):
            w.setCalendarPopup(True)
            w.setDisplayFormat("yyyy-MM-dd")
            w.setDate(QDate.currentDate())
            w.setEnabled(False)
            w.dateChanged.connect(lambda _=None: self._on_custom_changed())
            lay.addWidget(w)

        self.cmb_preset.currentIndexChanged.connect(lambda _=None: self._on_preset_changed())

    def preset(self) -> str | None:
        return self.cmb_preset.currentData()

    def set_preset(self, key: str | None) -> None:
        idx = self.cmb_preset.findData(key)
        self.cmb_preset.setCurrentIndex(idx if idx >= 0 else 0)

    def set_custom_range(self, start: date, end: date) -> None:
        self.date_from.blockSignals(True)
        self.date_to.blockSignals(True)
        self.date_from.setDate(QDate(start.year, start.month, start.day))
        self.date_to.setDate(QDate(end.year, end.month, end.day))
        self.date_from.blockSignals(False)
        self.date_to.blockSignals(False)
        self.set_preset("custom")
        self.changed.emit()

    def current_filter(self) -> DateRangeFilter | None:
        key = self.preset()
        if not key:
            return None
        if key == "custom":
            return DateRangeFilter.preset(
                "custom",
                self.date_from.date().toString("yyyy-MM-dd"),
                self.date_to.date().toString("yyyy-MM-dd"),
            )
        return DateRangeFilter.preset(key)

    def clear(self) -> None:
        self.set_preset(None)

    def _on_preset_changed(self) -> None:
        custom = self.preset() == "custom"
        self.date_from.setEnabled(custom)
        self.date_to.setEnabled(custom)
        self.changed.emit()

    def _on_custom_changed(self) -> None:
        if self.preset() == "custom":
            self.changed.emit()
