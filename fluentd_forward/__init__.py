"""
Fluentd Forward Protocol Client
===============================

Bounded Context: Log Shipping over the Fluentd Forward Protocol

This package forwards structured log records to a Fluentd-compatible
collector over TCP, encoded as MessagePack ("Message" mode):

    [tag, time, record]

Architecture:
- schemas/: Immutable value tree, EventTime, ForwardMessage
- codec/: MessagePack encoder and EventTime extension encoder
- publishers/: Connection manager, message emitter, publisher
- logging/: Structured JSON logging for the library's own diagnostics
- handler: logging.Handler integration
- config: Frozen configuration (YAML loadable)

Design Philosophy:
- Fire-and-forget, synchronous, at most once per call
- Fail-loud: connect, encode and write failures reach the caller
- Self-healing transport: every emit revalidates the connection
- No batching, acknowledgements, TLS or retry queues

Public API
----------
Configuration:
    FluentdConfig, SocketOptions

Schemas:
    EventTime, ForwardMessage, to_value

Publishing:
    FluentdPublisher, ForwardEmitter, ConnectionManager, ConnectionState
    FluentdHandler

Errors:
    FluentdError, ConnectError, EncodingError, WriteError, FlushError,
    CleanupError, ConfigurationError

Example (direct):
    >>> from fluentd_forward import FluentdPublisher, FluentdConfig, EventTime
    >>> with FluentdPublisher(FluentdConfig(tag="demo", use_event_time=True)) as publisher:
    ...     publisher.emit(EventTime.now(), "demo", {"message": "hi"})

Example (logging):
    >>> import logging
    >>> from fluentd_forward import FluentdHandler, FluentdConfig
    >>> logging.getLogger("demo").addHandler(FluentdHandler(FluentdConfig(tag="demo")))
    >>> logging.getLogger("demo").warning("Test Message")
"""

__version__ = "1.0.0"

# Errors
from .errors import (
    FluentdError,
    ConnectError,
    EncodingError,
    WriteError,
    FlushError,
    CleanupError,
    ConfigurationError,
)

# Configuration
from .config import FluentdConfig, SocketOptions

# Schemas
from .schemas import EventTime, ForwardMessage, to_value

# Codec
from .codec import encode, encode_event_time

# Publishers
from .publishers import (
    ConnectionManager,
    ConnectionState,
    ForwardEmitter,
    FluentdPublisher,
)

# Logging integration
from .handler import FluentdHandler

__all__ = [
    '__version__',
    # Errors
    'FluentdError',
    'ConnectError',
    'EncodingError',
    'WriteError',
    'FlushError',
    'CleanupError',
    'ConfigurationError',
    # Configuration
    'FluentdConfig',
    'SocketOptions',
    # Schemas
    'EventTime',
    'ForwardMessage',
    'to_value',
    # Codec
    'encode',
    'encode_event_time',
    # Publishers
    'ConnectionManager',
    'ConnectionState',
    'ForwardEmitter',
    'FluentdPublisher',
    'FluentdHandler',
]
