"""Logging helpers for FOUNDprint."""

from __future__ import annotations

import logging


def get_logger(name: str = "foundprint", level: int | None = None) -> logging.Logger:
    """
    Return a logger under the `foundprint` hierarchy.

    The root `foundprint` logger gets one stream handler the first time it is
    requested; children propagate to it.
    """
    root = logging.getLogger("foundprint")
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.WARNING)
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
