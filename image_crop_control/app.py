"""
Application entry point and dark-theme stylesheet.

Usage:
    python -m image_crop_control
    image-crop-control          (after pip install)

Set ``IMAGE_CROP_CONTROL_LOG_LEVEL=DEBUG`` to trace zoom resets and bounds.
"""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from image_crop_control.config import LOG_LEVEL_ENV, LOG_LEVEL_DEFAULT
from image_crop_control.main_window import MainWindow

DARK_STYLESHEET = """
    QMainWindow { background: #2b2b2b; }
    QWidget { background: #2b2b2b; color: #ddd; font-size: 10pt; }
    QFrame#imageCard { background: #333; border: 1px solid #444; border-radius: 6px; }
    QPushButton { background: #3a3a3a; border: 1px solid #555; border-radius: 4px; padding: 2px 8px; }
    QPushButton:hover { background: #4a4a4a; }
    QPushButton:pressed { background: #2a2a2a; }
    QPushButton:checked { background: #3a6ea5; border-color: #5a8ec5; }
    QPushButton:disabled { color: #666; }
    QLineEdit { background: #1e1e1e; border: 1px solid #555; border-radius: 3px; }
    QLineEdit:disabled { color: #666; }
    QToolBar { background: #333; border-bottom: 1px solid #444; spacing: 4px; padding: 4px; }
    QStatusBar { background: #333; border-top: 1px solid #444; }
"""


def configure_logging():
    level_name = os.environ.get(LOG_LEVEL_ENV, LOG_LEVEL_DEFAULT).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = getattr(logging, LOG_LEVEL_DEFAULT)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def main():
    configure_logging()
    app = QApplication(sys.argv)
    app.setStyleSheet(DARK_STYLESHEET)

    window = MainWindow()
    window.show()

    try:
        sys.exit(app.exec())
    except (SystemExit, KeyboardInterrupt):
        pass


if __name__ == "__main__":
    main()
