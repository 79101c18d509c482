"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

This module provides a structured logger that outputs one JSON object per
diagnostic line.

Design:
- JSON output (compatible with log aggregators)
- Wraps Python's logging module (levels, handlers, propagation)
- Type-safe events (LogEvent enum)

Loggers are named fluentd_forward.<component>. FluentdHandler skips
records from that namespace so the library never ships its own
diagnostics back to the collector it is reporting on.

Example:
    >>> logger = StructuredLogger(component="connection")
    >>> logger.warning(
    ...     event=LogEvent.FLUENTD_CONNECTION_ERROR,
    ...     message="Failed to connect to collector",
    ...     metadata={'collector': '127.0.0.1:24224'}
    ... )

Output:
    {
        "timestamp": "2026-10-18T15:30:45.123456+00:00",
        "level": "WARNING",
        "component": "connection",
        "event": "error.fluentd_connection",
        "message": "Failed to connect to collector",
        "metadata": {"collector": "127.0.0.1:24224"}
    }
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent

LOGGER_NAMESPACE = "fluentd_forward"


class StructuredLogger:
    """
    JSON structured logger.

    Attributes:
        component: Component name (e.g., "connection", "publisher")
        logger: Underlying Python logger instance
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None
    ):
        """
        Initialize structured logger.

        Args:
            component: Component identifier (e.g., "connection")
            level: Logging level (default: INFO)
            logger_name: Custom logger name (default: fluentd_forward.<component>)
        """
        self.component = component
        self.logger_name = logger_name or f"{LOGGER_NAMESPACE}.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _log(
        self,
        level: str,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        log_level = getattr(logging, level)
        if not self.logger.isEnabledFor(log_level):
            return

        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        if metadata:
            log_entry['metadata'] = metadata

        if exc_info:
            log_entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info)
            }

        self.logger.log(
            log_level,
            json.dumps(log_entry, default=str),
            exc_info=exc_info if level == 'ERROR' else None
        )

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log('DEBUG', event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log INFO level message.

        Example:
            >>> logger.info(
            ...     event=LogEvent.FLUENTD_CONNECTED,
            ...     message="Connected to collector",
            ...     metadata={'collector': '127.0.0.1:24224'}
            ... )
        """
        self._log('INFO', event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log WARNING level message.

        The exception, when given, is summarized in the JSON body
        (type and message) without a traceback.
        """
        self._log('WARNING', event, message, metadata, exc_info)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log ERROR level message.

        Example:
            >>> try:
            ...     encode(value, sink)
            ... except EncodingError as e:
            ...     logger.error(
            ...         event=LogEvent.ENCODING_ERROR,
            ...         message="Failed to encode record",
            ...         exc_info=e,
            ...         metadata={'tag': 'app.web'}
            ...     )
        """
        self._log('ERROR', event, message, metadata, exc_info)


class JSONFormatter(logging.Formatter):
    """
    Formatter used by StructuredLogger's default handler.

    The message from StructuredLogger is already JSON, so it is passed
    through unchanged.
    """

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(
    component: str,
    level: int = logging.INFO
) -> StructuredLogger:
    """
    Factory function to create configured StructuredLogger.

    Example:
        >>> logger = create_logger("publisher", level=logging.DEBUG)
    """
    return StructuredLogger(component=component, level=level)
