"""
Structured Logging for Lookout
==============================

Bounded Context: Observability

JSON-structured logging for the stateful parts of the library (registry,
cluster index, drawing controller, dataset loader, CLI). Pure geometry and
analysis functions do not log.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
