from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Package root logger, whichever import path the package was loaded under.
LOGGER_NAME = __name__.rsplit(".", 2)[0]

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def configure_logging(*, level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """Attach console (and optionally rotating file) handlers to the package logger.

    Safe to call more than once: handlers are only added the first time.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        # Rotates at 5MB
        file_handler = RotatingFileHandler(
            path / "ogs_backend.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
