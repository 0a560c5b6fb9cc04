"""Allow running Focusly as a module: python -m focusly."""

import logging
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .app import MenuBarApp

LOG_DIR = Path.home() / "Library" / "Logs" / "Focusly"


def setup_logging(level: int = logging.INFO) -> None:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(LOG_DIR / "focusly.log"),
            logging.StreamHandler(),
        ],
    )


def main() -> None:
    setup_logging()
    init_db()

    app = QApplication(sys.argv)
    app.setApplicationName("Focusly")
    app.setOrganizationName("Focusly")
    # Menu-bar only: no window keeps the app alive.
    app.setQuitOnLastWindowClosed(False)

    shell = MenuBarApp()
    shell.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
