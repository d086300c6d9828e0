"""Application entry point and setup for Puzzle Path."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from puzzlepath.core.config import load_config
from puzzlepath.core.levels import LevelRepository
from puzzlepath.core.progress import ProgressStore
from puzzlepath.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load config, catalogs and progress, then start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Puzzle Path")
    app.setApplicationDisplayName("Puzzle Path")

    config = load_config()
    levels = LevelRepository()
    progress_store = ProgressStore(config.progress_path)
    logging.info(
        "Loaded %d games from %s", len(levels.families()), ", ".join(f.value for f in levels.families())
    )

    window = MainWindow(levels=levels, progress_store=progress_store, config=config)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(int(geometry.width() * 0.8), int(geometry.height() * 0.8))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
