"""Entry point for the POS terminal Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from pos_dashboard.config import DEBUG_LOG_PATH
from pos_dashboard.pos_app import PosApp

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(path: str = DEBUG_LOG_PATH, level: int = logging.DEBUG) -> None:
    """Send log records to a file; the terminal belongs to the UI."""
    root = logging.getLogger()
    root.setLevel(level)
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # Logging must never block the app.
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main() -> None:
    """Run the Textual application."""
    configure_logging()
    PosApp().run()


if __name__ == "__main__":
    main()
