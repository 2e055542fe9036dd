from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QLabel, QWidget

from .. import config
from ..constants import SEVERITY_ERROR, SEVERITY_INFO, SEVERITY_SUCCESS, SEVERITY_WARNING

_STYLES = {
    SEVERITY_INFO: "background:#1565c0; color:white;",
    SEVERITY_SUCCESS: "background:#2e7d32; color:white;",
    SEVERITY_WARNING: "background:#ef6c00; color:white;",
    SEVERITY_ERROR: "background:#c62828; color:white;",
}


class Snackbar(QLabel):
    """
    Transient, non-modal message strip. Lay it out at the bottom of a screen;
    it hides itself after `timeout_ms`. `notify` matches the
    (message, severity) callback used by the editors and fetchers.
    """

    def __init__(self, parent: QWidget | None = None, timeout_ms: int | None = None):
        super().__init__(parent)
        self.setWordWrap(True)
        self.setAlignment(Qt.AlignVCenter | Qt.AlignLeft)
        self.setMargin(8)
        self.setVisible(False)
        self.history: list[tuple[str, str]] = []

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(timeout_ms if timeout_ms is not None else config.SNACKBAR_MS)
        self._timer.timeout.connect(self.dismiss)

    @property
    def last(self) -> tuple[str, str] | None:
        return self.history[-1] if self.history else None

    def notify(self, message: str, severity: str = SEVERITY_INFO) -> None:
        self.history.append((message, severity))
        self.setStyleSheet(_STYLES.get(severity, _STYLES[SEVERITY_INFO]) + " border-radius:4px;")
        self.setText(message)
        self.setVisible(True)
        self._timer.start()

    def dismiss(self) -> None:
        self._timer.stop()
        self.setVisible(False)
