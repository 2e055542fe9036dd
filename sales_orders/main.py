import sys

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QSizePolicy,
    QStackedWidget,
    QWidget,
)

from .api.client import ApiClient
from .constants import APP_NAME
from .modules.base_module import BaseModule
from .modules.sales_order.controller import SalesOrderController
from .utils.loggers import enable_file_logging, get_logger

log = get_logger(__name__.split(".")[0])


class MainWindow(QMainWindow):
    def __init__(self, api: ApiClient):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(820, 520)

        self.api = api

        # ---- left nav + stacked pages ----
        central = QWidget(self)
        row = QHBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(120)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()
        row.addWidget(self.nav)
        row.addWidget(self.stack, 1)

        self.modules: list[tuple[str, BaseModule]] = []
        self.nav.currentRowChanged.connect(self.stack.setCurrentIndex)

        self.add_module("Sales Orders", SalesOrderController(self.api))
        self.nav.setCurrentRow(0)

    def add_module(self, title: str, module: BaseModule):
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(module.get_widget())
        self.modules.append((title, module))

    def closeEvent(self, event):
        for title, mod in self.modules:
            log.debug("Shutting down %s", title)
            mod.shutdown()
        super().closeEvent(event)


def main():
    enable_file_logging()

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    api = ApiClient()
    log.info("Starting %s against %s", APP_NAME, api.base_url)

    win = MainWindow(api)
    win.resize(1100, 720)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
