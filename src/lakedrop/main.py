"""
LakeDrop - Main entry point
"""

import argparse
import logging
import os
import sys

from PySide6.QtWidgets import QApplication, QStatusBar

from . import __version__
from .config.i18n import i18n_manager
from .config.user_preferences import UserPreferences
from .core.drop_zone import DropZoneBridge
from .core.engine_client import DataEngineClient
from .core.grid_model import ResultGridModel
from .core.interaction import InteractionController
from .core.session_controller import SessionController
from .engine.local_engine import LocalEngine
from .ui.clipboard import QtClipboard
from .ui.main_window import MainWindow
from .ui.notifier import StatusBarNotifier
from .ui.theme import apply_theme

LOG_LEVEL_ENV = "LAKEDROP_LOG_LEVEL"

logger = logging.getLogger(__name__)


def configure_logging():
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main():
    """Main entry point for LakeDrop."""
    parser = argparse.ArgumentParser(prog="lakedrop", description="Drop a data file, query it with SQL.")
    parser.add_argument("file", nargs="?", help="File to open at startup")
    args, qt_args = parser.parse_known_args()

    configure_logging()
    logger.info(f"Starting LakeDrop {__version__}")

    app = QApplication([sys.argv[0]] + qt_args)
    app.setApplicationName("LakeDrop")
    app.setApplicationVersion(__version__)

    # Preferences drive theme and language
    preferences = UserPreferences.get_instance()
    i18n_manager.set_language(preferences.get_language())
    apply_theme(app, preferences.get_theme())

    status_bar = QStatusBar()
    notifier = StatusBarNotifier(status_bar)

    engine = LocalEngine()
    client = DataEngineClient(engine)
    controller = SessionController(client, notifier)
    grid = ResultGridModel()
    grid.bind_session(controller)
    interaction = InteractionController(grid, QtClipboard(), notifier)
    drop_zone = DropZoneBridge(controller)

    window = MainWindow(controller, grid, interaction, drop_zone, preferences, status_bar)
    window.show()

    if args.file:
        controller.load_file(args.file)

    exit_code = app.exec()
    engine.close()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
