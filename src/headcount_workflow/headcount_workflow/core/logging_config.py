"""Logging setup for the headcount_workflow logger hierarchy."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Any, Optional

_LOGGER_PREFIX = "headcount_workflow"

_STDLIB_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {"message", "asctime", "taskName"}


class KeyValueFormatter(logging.Formatter):
    """Plain text line followed by any ``extra=`` fields as key=value pairs."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [
            f"{key}={val}"
            for key, val in sorted(vars(record).items())
            if key not in _STDLIB_KEYS
        ]
        if extras:
            line = f"{line} | {' '.join(extras)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the headcount_workflow namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(*, level: Any = logging.INFO, stream: Optional[Any] = None) -> None:
    """Configure the headcount_workflow logger hierarchy (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(KeyValueFormatter())
    root_logger.addHandler(handler)
