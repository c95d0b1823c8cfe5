"""
Structured Logging for AOI Map
==============================

Bounded Context: Observability

JSON-structured logging with typed events, shared by every package.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from aoi_zone.logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="store")
    >>> logger.warning(
    ...     event=LogEvent.STORAGE_ENTRY_DROPPED,
    ...     message="Dropped malformed polygon",
    ...     metadata={'index': 3}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
