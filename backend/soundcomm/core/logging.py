# backend/soundcomm/core/logging.py

import logging
import sys


DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Loggers that chatter per frame; kept at WARNING unless the relay runs at DEBUG
_FRAME_LOGGERS = ("websockets", "websockets.protocol", "uvicorn.access")


def resolve_level(level_name: str | None) -> int:
    """Map a level name such as "debug" to its logging constant, INFO if unknown."""
    level = logging.getLevelName((level_name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level_name: str | None = "INFO") -> int:
    """
    Configure relay logging at *level_name* (Settings.LOG_LEVEL).

    - Root logger and the ``soundcomm`` loggers follow the configured level
    - Output goes to stdout so the hosting platform picks it up
    - Per-frame transport loggers stay quiet unless the level is DEBUG

    Safe to call once per app: when a handler is already installed
    (Uvicorn, pytest) only the levels are updated.

    Returns:
        The numeric level applied.
    """
    level = resolve_level(level_name)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root_logger.addHandler(handler)

    root_logger.setLevel(level)
    logging.getLogger("soundcomm").setLevel(level)

    frame_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _FRAME_LOGGERS:
        logging.getLogger(name).setLevel(frame_level)

    return level


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Usage:
        from soundcomm.core.logging import get_logger

        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
