"""
Fluentd Publisher
=================

Bounded Context: Forward Protocol Target

One FluentdPublisher is one target instance: one collector, one tag, one
TCP connection.

Design:
- ConnectionManager owns the socket and decides when to (re)connect
- ForwardEmitter encodes and writes each message as one flushed unit
- Fire-and-forget, synchronous, at most once per call
- Fail-loud: ConnectError, EncodingError and WriteError reach the caller
- A write/flush failure drops the connection so the next call reconnects

Message Flow:
    emit() → ensure_connected() → ForwardEmitter.emit() → socket

Example:
    >>> from fluentd_forward import FluentdPublisher, FluentdConfig
    >>> publisher = FluentdPublisher(FluentdConfig(tag="app.web", use_event_time=True))
    >>> publisher.publish({"message": "hi", "user": None})
    >>> publisher.close()
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import FluentdConfig
from ..errors import ConnectError, EncodingError, WriteError
from ..logging import LogEvent, StructuredLogger, create_logger
from .connection import ConnectionManager
from .emitter import ForwardEmitter, RecordInput, TimestampInput


class FluentdPublisher:
    """
    Publisher of log records to a Fluentd collector.

    Not thread-safe: callers that share a publisher across threads must
    serialize emit()/close() themselves.

    Attributes:
        config: Target configuration
        connection: Connection manager (owns the socket)
        emitter: Forward message encoder
        logger: Structured logger instance
    """

    def __init__(
        self,
        config: Optional[FluentdConfig] = None,
        logger: Optional[StructuredLogger] = None,
        connection: Optional[ConnectionManager] = None,
    ):
        self.config = config or FluentdConfig()
        self.logger = logger or create_logger("publisher")
        self.connection = connection or ConnectionManager(
            host=self.config.host,
            port=self.config.port,
            options=self.config.socket,
            logger=self.logger,
        )
        self.emitter = ForwardEmitter(
            use_event_time=self.config.use_event_time,
            binary_as_raw=self.config.binary_as_raw,
        )

        self._message_count = 0
        self._error_count = 0

    @property
    def tag(self) -> str:
        return self.config.tag

    def ensure_connected(self):
        """Open or revalidate the collector connection; returns the sink."""
        return self.connection.ensure_connected()

    def emit(self, timestamp: TimestampInput, tag: str, record: RecordInput) -> None:
        """
        Send one [tag, timestamp, record] message.

        Args:
            timestamp: int seconds, EventTime, datetime or float epoch
            tag: Message tag
            record: Mapping or native dict record

        Raises:
            ConnectError: Connection needed and could not be opened
            EncodingError: Record not encodable (nothing written)
            WriteError: Transport failed mid-message (connection dropped)
        """
        try:
            sink = self.connection.ensure_connected()
        except ConnectError:
            self._error_count += 1
            raise

        try:
            size = self.emitter.emit(timestamp, tag, record, sink)
        except EncodingError as e:
            self._error_count += 1
            self.logger.error(
                event=LogEvent.ENCODING_ERROR,
                message="Failed to encode record",
                exc_info=e,
                metadata={'tag': tag}
            )
            raise
        except WriteError as e:
            self._error_count += 1
            self.logger.warning(
                event=LogEvent.FLUENTD_EMIT_ERROR,
                message="Failed to send message, dropping connection",
                exc_info=e,
                metadata={'tag': tag, 'collector': self.config.address}
            )
            self.connection.invalidate()
            raise

        self._message_count += 1
        self.logger.debug(
            event=LogEvent.FLUENTD_EMIT_SUCCESS,
            message="Sent message",
            metadata={
                'tag': tag,
                'size': size,
                'message_count': self._message_count
            }
        )

    def publish(
        self,
        record: RecordInput,
        timestamp: Optional[TimestampInput] = None,
        tag: Optional[str] = None,
    ) -> None:
        """
        Send a record with the configured tag, stamped now unless given.
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)
        self.emit(timestamp, tag or self.config.tag, record)

    def close(self) -> None:
        """Release the connection. Idempotent."""
        self.connection.close()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get publisher statistics.

        Example:
            >>> stats = publisher.get_stats()
            >>> print(f"Sent {stats['message_count']} messages")
        """
        return {
            'message_count': self._message_count,
            'error_count': self._error_count,
            'connect_count': self.connection.connect_count,
            'connected': self.connection.is_connected,
            'tag': self.config.tag,
            'collector': self.config.address,
        }

    def __enter__(self) -> 'FluentdPublisher':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
