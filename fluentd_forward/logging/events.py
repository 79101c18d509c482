"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for the library's own diagnostics.

Event Naming Convention:
    <component>.<category>.<action>

    component: fluentd, handler, error
    category: connected, emit, stale
    action: success, failed

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.collector
    | filter event = "error.fluentd_connection"
    | stats count() by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - fluentd.*: Collector connection and emission
    - error.*: Error conditions
    """

    # ========== Fluentd Events ==========
    FLUENTD_CONNECTING = "fluentd.connecting"
    """Opening a TCP connection to the collector."""

    FLUENTD_CONNECTED = "fluentd.connected"
    """TCP connection to the collector established."""

    FLUENTD_DISCONNECTED = "fluentd.disconnected"
    """TCP connection released (explicit close or failure)."""

    FLUENTD_CONNECTION_STALE = "fluentd.connection.stale"
    """Liveness probe found the peer gone; reconnecting."""

    FLUENTD_EMIT_SUCCESS = "fluentd.emit.success"
    """Message written and flushed to the collector."""

    # ========== Error Events ==========
    FLUENTD_CONNECTION_ERROR = "error.fluentd_connection"
    """Failed to connect to the collector."""

    FLUENTD_EMIT_ERROR = "error.fluentd_emit"
    """Transport failure while writing or flushing a message."""

    ENCODING_ERROR = "error.encoding"
    """Record could not be encoded as MessagePack."""

    CLEANUP_ERROR = "error.cleanup"
    """Failure while closing a socket or sink."""


FLUENTD_EVENTS = {
    LogEvent.FLUENTD_CONNECTING,
    LogEvent.FLUENTD_CONNECTED,
    LogEvent.FLUENTD_DISCONNECTED,
    LogEvent.FLUENTD_CONNECTION_STALE,
    LogEvent.FLUENTD_EMIT_SUCCESS,
}

ERROR_EVENTS = {
    LogEvent.FLUENTD_CONNECTION_ERROR,
    LogEvent.FLUENTD_EMIT_ERROR,
    LogEvent.ENCODING_ERROR,
    LogEvent.CLEANUP_ERROR,
}
