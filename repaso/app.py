"""Application entry point and setup for Aventuras de Repaso."""

import logging
import sys

from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from repaso.core.catalog import Catalog
from repaso.core.content import provider_from_env
from repaso.core.controller import GameController
from repaso.core.storage import JsonKeyValueStore, PersistentStore, default_store_dir
from repaso.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def apply_application_font(app: QApplication) -> None:
    """Use the system UI font with emoji fallbacks so avatars and stars render."""
    app_font = QFont(app.font().family())
    app_font.setFamilies(
        [
            app.font().family(),
            "Noto Color Emoji",  # Linux
            "Segoe UI Emoji",  # Windows
            "Apple Color Emoji",  # macOS
        ]
    )
    app_font.setPointSize(12)
    app.setFont(app_font)


def run() -> None:
    """Load catalog and saved progress, then start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Repaso")
    app.setApplicationDisplayName("Aventuras de Repaso")
    apply_application_font(app)

    catalog = Catalog.load()
    store = PersistentStore(catalog, JsonKeyValueStore(default_store_dir()))
    controller = GameController(catalog, store)

    window = MainWindow(controller=controller, provider=provider_from_env())
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        window.setGeometry(screen.availableGeometry())
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
