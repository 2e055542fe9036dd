from PySide6.QtCore import QObject
from PySide6.QtWidgets import QWidget


class BaseModule(QObject):
    """A screen the main window can host: exposes its widget and lifecycle hooks."""

    def get_widget(self) -> QWidget:
        raise NotImplementedError

    def refresh(self) -> None:
        """Re-fetch whatever the screen shows. Optional."""

    def shutdown(self) -> None:
        """Called when the hosting window closes; drop in-flight work."""
