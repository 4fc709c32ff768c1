"""Application bootstrap for boxlabel."""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from .ui.main_window import MainWindow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger(__name__)


def create_application(argv: List[str]) -> QApplication:
    """
    Create and configure the Qt application.

    Returns:
        Configured QApplication instance
    """
    app = QApplication(argv)
    app.setApplicationName("boxlabel")
    app.setApplicationVersion("1.0.0")
    return app


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run the boxlabel application.

    The first argument, if any, is the image directory to open;
    otherwise the last used directory from the config is reopened.

    Returns:
        Exit code
    """
    argv = list(sys.argv if argv is None else argv)
    logger.info("Starting boxlabel")

    try:
        app = create_application(argv)

        window = MainWindow()
        directory = argv[1] if len(argv) >= 2 else window.config.default_directory
        if directory:
            window.open_directory_path(directory)
        else:
            logger.info("No directory given. Usage: boxlabel /path/to/images")

        window.show()
        return app.exec()

    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        return 1


def main() -> None:
    """Main entry point for the application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
