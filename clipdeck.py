#!/usr/bin/env python3
import sys
import logging
from PyQt6.QtWidgets import QApplication

from core.config import load_config
from ui.window import MainWindow

def load_stylesheet(app):
    """Loads the QSS stylesheet."""
    try:
        with open("styles.qss", "r") as f:
            app.setStyleSheet(f.read())
    except FileNotFoundError:
        logging.getLogger("clipdeck").debug("styles.qss not found, using default style")

def setup_logging():
    level = str(load_config().get("log_level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

def main():
    setup_logging()

    app = QApplication(sys.argv)
    app.setApplicationName("clipdeck")

    # Load Styles
    load_stylesheet(app)

    window = MainWindow()
    window.show()

    # Ensure window is focused and on top (Linux/i3 specific hints sometimes needed)
    window.activateWindow()
    window.raise_()

    sys.exit(app.exec())

if __name__ == "__main__":
    main()
