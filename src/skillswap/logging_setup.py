"""Logging configuration shared by the CLI and API entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "WARNING") -> None:
    """Attach one stream handler to the ``skillswap`` logger.

    Calling it again only changes the level.
    """
    logger = logging.getLogger("skillswap")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logger.setLevel(level)
    if not any(getattr(h, "_skillswap", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._skillswap = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
