"""
Structured Logging for fluentd_forward
======================================

Bounded Context: Observability

JSON-structured diagnostics for the library itself (connects, disconnects,
stale connections, emit and cleanup failures).

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function
    LOGGER_NAMESPACE: Root logger name used by the library

Example:
    >>> from fluentd_forward.logging import create_logger, LogEvent
    >>> logger = create_logger("connection")
    >>> logger.info(
    ...     event=LogEvent.FLUENTD_CONNECTED,
    ...     message="Connected to collector",
    ...     metadata={'collector': '127.0.0.1:24224'}
    ... )
"""

from .events import LogEvent
from .structured import LOGGER_NAMESPACE, StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
    'LOGGER_NAMESPACE',
]
