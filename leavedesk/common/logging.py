"""Process-wide logging setup (stdlib ``logging``)."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "info") -> None:
    """Attach a single stream handler to the root logger.

    Safe to call more than once: if the root logger already has handlers
    (uvicorn, pytest's caplog, a previous call) only the level is updated.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if root_logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
