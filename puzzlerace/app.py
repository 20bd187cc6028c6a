"""Application entry point and setup for Workflow Puzzle Race."""

import logging
import os
import random
import sys
from typing import Optional

from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from puzzlerace.core.catalog import CatalogRepository
from puzzlerace.core.engine import GameEngine
from puzzlerace.ui.main_window import MainWindow

SEED_ENV_VAR = "PUZZLERACE_SEED"


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_rng() -> random.Random:
    """Random source for puzzle selection, seeded from PUZZLERACE_SEED when set."""
    seed: Optional[str] = os.environ.get(SEED_ENV_VAR)
    if seed:
        logging.info(f"Using fixed puzzle seed {seed!r}")
        return random.Random(seed)
    return random.Random()


def run() -> None:
    """Load the content, build the engine and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Workflow Puzzle Race")
    app.setApplicationDisplayName("Workflow Puzzle Race")

    app_font = QFont("Segoe UI")
    app_font.setPointSize(11)
    app.setFont(app_font)

    repository = CatalogRepository()
    engine = GameEngine(repository.catalog, rng=build_rng())

    window = MainWindow(engine=engine)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(geometry.width(), 1400), min(geometry.height(), 900))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
