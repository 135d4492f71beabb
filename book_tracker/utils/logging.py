"""Application logging helpers.

All module loggers are children of one `book_tracker` logger, which owns the
single stream handler and takes its level from
`book_tracker.config.log_level_name()`.
"""
from __future__ import annotations

import logging

from book_tracker import config as app_config

ROOT_NAME = "book_tracker"
LOG_FORMAT = "[book_tracker] %(asctime)s %(levelname)s %(name)s %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(getattr(logging, app_config.log_level_name(), logging.INFO))
        root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Return `book_tracker.<name>`; records propagate to the shared handler."""
    _configure_root()
    if name == ROOT_NAME or name.startswith(ROOT_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_NAME}.{name}")


__all__ = ["get_logger", "ROOT_NAME"]
