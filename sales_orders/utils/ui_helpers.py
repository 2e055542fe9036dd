from PySide6.QtWidgets import QWidget, QMessageBox


def confirm(parent: QWidget, title: str, text: str) -> bool:
    """Yes/No question; True only for an explicit Yes."""
    resp = QMessageBox.question(
        parent,
        title,
        text,
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
    )
    return resp == QMessageBox.StandardButton.Yes
