"""Logging configuration for the thumbnail service."""

import logging
import sys

from thumbnail_service.config import settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a console handler.

    Safe to call more than once: the console handler is only attached the
    first time.

    Args:
        level: Log level name. Defaults to settings.log_level.
    """
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())

    if not any(getattr(h, "_thumbnail_console", False) for h in root.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(_FORMAT))
        console_handler._thumbnail_console = True  # type: ignore[attr-defined]
        root.addHandler(console_handler)

    # Quiet some noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("fontTools").setLevel(logging.WARNING)
