"""
Structured JSON Logger
======================

One JSON object per log line, on top of the standard logging module.

Each line carries timestamp, level, component, event and message, plus
optional metadata and exception. Loggers are named lookout.<component>,
so callers (and tests) can filter by component.

Example:
    >>> logger = create_logger("registry")
    >>> logger.info(
    ...     event=LogEvent.AOI_ADDED,
    ...     message="Triangle added",
    ...     metadata={'aoi_id': 'triangle_1', 'count': 3}
    ... )
    {"timestamp": "...", "level": "INFO", "component": "registry", "event": "aoi.added", ...}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent

LOGGER_PREFIX = "lookout"


class StructuredLogger:
    """JSON logger bound to one component of the library."""

    def __init__(self, component: str, level: int = logging.INFO):
        self.component = component
        self.logger = logging.getLogger(f"{LOGGER_PREFIX}.{component}")
        self.logger.setLevel(level)

        # Loggers are process-wide; attach the JSON handler once per name
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _emit(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }
        if metadata:
            entry['metadata'] = metadata
        if exc_info is not None:
            entry['exception'] = {'type': type(exc_info).__name__, 'message': str(exc_info)}

        self.logger.log(level, json.dumps(entry, default=str))

    def debug(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """Log an error; exc_info is summarised into the 'exception' field."""
        self._emit(logging.ERROR, event, message, metadata, exc_info)


class JSONFormatter(logging.Formatter):
    """Messages are already JSON; emit them unchanged."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(component: str, level: int = logging.INFO) -> StructuredLogger:
    """
    Factory used for every default logger in the library.

    Example:
        >>> logger = create_logger("clustering", level=logging.DEBUG)
    """
    return StructuredLogger(component=component, level=level)
