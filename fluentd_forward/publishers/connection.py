"""
Collector Connection Manager
============================

Bounded Context: TCP Transport

Owns the TCP socket to the collector and the byte sink wrapped around it.

Design:
- Lazy: nothing is opened until ensure_connected() is first called
- Self-healing: every ensure_connected() probes liveness and reconnects
  when the peer has gone away (TCP does not report a half-open peer
  until a write is attempted)
- Fail-loud: connect failures are logged at WARNING and raised
- Cleanup never raises: close-time errors are logged and swallowed

State Machine:
    DISCONNECTED --ensure_connected()--> CONNECTED
    CONNECTED --ensure_connected(), probe fails--> DISCONNECTED --> CONNECTED
    any --close() / invalidate()--> DISCONNECTED

Thread Safety:
    None. One thread of control per instance; callers sharing an instance
    across threads must serialize access.
"""

import select
import socket
import struct
import sys
from enum import Enum
from typing import BinaryIO, Optional

from ..config import SocketOptions
from ..errors import CleanupError, ConnectError
from ..logging import LogEvent, StructuredLogger, create_logger


# struct linger: two u_short on Windows, two int elsewhere
LINGER_FORMAT = 'HH' if sys.platform == 'win32' else 'ii'


class ConnectionState(str, Enum):
    """Connection lifecycle states."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class ConnectionManager:
    """
    Manages a single TCP connection to a Fluentd collector.

    The sink returned by ensure_connected() is only valid until the next
    ensure_connected(), invalidate() or close() call.

    Attributes:
        host: Collector hostname
        port: Collector port
        options: Socket options applied before connecting
        logger: Structured logger instance

    Example:
        >>> manager = ConnectionManager("127.0.0.1", 24224)
        >>> sink = manager.ensure_connected()
        >>> sink.write(payload)
        >>> sink.flush()
        >>> manager.close()
    """

    def __init__(
        self,
        host: str,
        port: int,
        options: Optional[SocketOptions] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.host = host
        self.port = port
        self.options = options or SocketOptions()
        self.logger = logger or create_logger("connection")

        self._socket: Optional[socket.socket] = None
        self._sink: Optional[BinaryIO] = None
        self._connect_count = 0

    @property
    def state(self) -> ConnectionState:
        if self._socket is not None and self._sink is not None:
            return ConnectionState.CONNECTED
        return ConnectionState.DISCONNECTED

    @property
    def is_connected(self) -> bool:
        """True when a socket is held (not a liveness guarantee)."""
        return self.state == ConnectionState.CONNECTED

    @property
    def connect_count(self) -> int:
        """Number of successful connects since construction."""
        return self._connect_count

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def ensure_connected(self) -> BinaryIO:
        """
        Return a sink connected to the collector, (re)connecting if needed.

        Returns:
            Writable binary sink over the socket

        Raises:
            ConnectError: If a connection had to be opened and could not be
        """
        if self.is_connected:
            if self._peer_alive():
                return self._sink

            self.logger.info(
                event=LogEvent.FLUENTD_CONNECTION_STALE,
                message="Collector connection is no longer alive, reconnecting",
                metadata={'collector': self.address}
            )
            self._release()

        return self._connect()

    def invalidate(self) -> None:
        """Drop the current connection after a transport failure."""
        if self.is_connected:
            self._release()

    def close(self) -> None:
        """
        Release the connection. Safe to call in any state, any number of times.
        """
        was_connected = self.is_connected
        self._release()
        if was_connected:
            self.logger.info(
                event=LogEvent.FLUENTD_DISCONNECTED,
                message="Closed collector connection",
                metadata={'collector': self.address, 'connect_count': self._connect_count}
            )

    def _connect(self) -> BinaryIO:
        self.logger.debug(
            event=LogEvent.FLUENTD_CONNECTING,
            message="Connecting to collector",
            metadata={'collector': self.address}
        )

        try:
            addresses = socket.getaddrinfo(self.host, self.port, 0, socket.SOCK_STREAM)
        except OSError as e:
            raise self._connect_failed("Failed to resolve collector address", e) from e

        last_error: Optional[OSError] = None
        for family, socktype, proto, _, sockaddr in addresses:
            sock = None
            try:
                sock = socket.socket(family, socktype, proto)
                self._apply_options(sock)
                sock.connect(sockaddr)
            except OSError as e:
                last_error = e
                if sock is not None:
                    sock.close()
                continue

            self._socket = sock
            self._sink = sock.makefile('wb')
            self._connect_count += 1
            self.logger.info(
                event=LogEvent.FLUENTD_CONNECTED,
                message="Connected to collector",
                metadata={
                    'collector': self.address,
                    'connect_count': self._connect_count
                }
            )
            return self._sink

        raise self._connect_failed("Failed to connect to collector", last_error) from last_error

    def _connect_failed(self, message: str, cause: Optional[BaseException]) -> ConnectError:
        self.logger.warning(
            event=LogEvent.FLUENTD_CONNECTION_ERROR,
            message=message,
            metadata={'collector': self.address},
            exc_info=cause
        )
        return ConnectError(
            f"{message}: {cause}" if cause else message,
            host=self.host,
            port=self.port,
            component="ConnectionManager",
        )

    def _apply_options(self, sock: socket.socket) -> None:
        """Apply socket options; raises OSError if the platform rejects one."""
        options = self.options
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, int(options.no_delay))
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, options.receive_buffer_size)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, options.send_buffer_size)
        sock.setsockopt(
            socket.SOL_SOCKET,
            socket.SO_LINGER,
            struct.pack(LINGER_FORMAT, int(options.linger_enabled), options.linger_time_s)
        )
        # Windows takes a DWORD of milliseconds, not a timeval
        if hasattr(socket, 'SO_RCVTIMEO') and sys.platform != 'win32':
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVTIMEO, _timeval(options.receive_timeout_ms))
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDTIMEO, _timeval(options.send_timeout_ms))
        # Bounds connect() and every write
        sock.settimeout(options.send_timeout_s)

    def _peer_alive(self) -> bool:
        """
        Probe the socket without consuming data.

        A collector never sends in message mode without acks, so a readable
        socket means EOF (peer closed) or a pending error.
        """
        sock = self._socket
        try:
            readable, _, errored = select.select([sock], [], [sock], 0)
        except (OSError, ValueError):
            return False
        if errored:
            return False
        if not readable:
            return True
        try:
            data = sock.recv(1, socket.MSG_PEEK)
        except (BlockingIOError, socket.timeout):
            return True
        except OSError:
            return False
        return bool(data)

    def _release(self) -> None:
        """Close sink and socket; failures are logged, never raised."""
        sink, sock = self._sink, self._socket
        self._sink = None
        self._socket = None

        if sink is not None:
            try:
                sink.close()
            except (OSError, ValueError) as e:
                self._log_cleanup_error("sink", e)
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                self._log_cleanup_error("socket", e)

    def _log_cleanup_error(self, resource: str, cause: BaseException) -> None:
        error = CleanupError(
            f"Failed to close {resource}: {cause}",
            resource=resource,
            component="ConnectionManager",
        )
        self.logger.warning(
            event=LogEvent.CLEANUP_ERROR,
            message=str(error),
            metadata={'collector': self.address, 'resource': resource},
            exc_info=cause
        )


def _timeval(milliseconds: int) -> bytes:
    seconds, remainder = divmod(milliseconds, 1000)
    return struct.pack('ll', seconds, remainder * 1000)
