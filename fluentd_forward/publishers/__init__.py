"""
Fluentd Publishers
==================

Bounded Context: Message Production

Design:
- ConnectionManager: TCP connection lifecycle (lazy, self-healing)
- ForwardEmitter: [tag, time, record] encoding onto a sink
- FluentdPublisher: One target instance combining both

Public API
----------
    FluentdPublisher: Target instance (emit, publish, close)
    ForwardEmitter: Message encoder
    ConnectionManager, ConnectionState: Transport lifecycle

Example:
    >>> from fluentd_forward.publishers import FluentdPublisher
    >>> from fluentd_forward.config import FluentdConfig
    >>>
    >>> publisher = FluentdPublisher(FluentdConfig(host="localhost", tag="demo"))
    >>> publisher.emit(1700000000, "demo", {"message": "hi"})
"""

from .connection import ConnectionManager, ConnectionState
from .emitter import ForwardEmitter
from .fluentd import FluentdPublisher

__all__ = [
    'ConnectionManager',
    'ConnectionState',
    'ForwardEmitter',
    'FluentdPublisher',
]
