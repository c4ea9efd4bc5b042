"""JSON-formatted logging with keyword context."""

import json
import logging
from datetime import UTC, datetime
from typing import Any


class StructuredLogger:
    """
    Logger that renders the message and its context as one JSON object.

    Records go through the standard ``logging`` module, so handlers, levels
    and pytest's ``caplog`` all apply.

    Example:
        logger = StructuredLogger(__name__)
        logger.error("Backing store call failed", exc_info=True, collection="notes")
    """

    def __init__(self, name: str):
        self._name = name
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, exc_info: bool = False, **extra: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": logging.getLevelName(level),
            "logger": self._name,
            "message": message,
            **extra,
        }
        self._logger.log(level, json.dumps(log_entry, default=str), exc_info=exc_info)

    def debug(self, message: str, **extra: Any) -> None:
        self._log(logging.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        self._log(logging.INFO, message, **extra)

    def warning(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        self._log(logging.WARNING, message, exc_info=exc_info, **extra)

    def error(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **extra)

    def critical(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        self._log(logging.CRITICAL, message, exc_info=exc_info, **extra)
