"""
Logging setup.

Console output plus a size-rotated application log file.
Modules log through logging.getLogger(__name__).
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.core.config import settings


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging() -> None:
    """Attach console and file handlers to the root logger once."""
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())

    # Remove any pre-existing handlers to avoid duplicates on reload
    if root.hasHandlers():
        root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # SQL echo is handled by our own query logging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
