"""Logging setup — one stream handler on the ``app`` logger."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the ``app`` logger once; repeated calls only update the level."""
    logger = logging.getLogger("app")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_reading_tracker", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._reading_tracker = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        logger.propagate = False

    return logger
