"""
Fluentd Forward Errors
======================

Bounded Context: Error Taxonomy

Exception hierarchy:
- FluentdError (base)
  - ConnectError: Host unreachable, refused, or socket option rejected
  - EncodingError: Value cannot be represented in MessagePack
  - WriteError: Transport failure while writing a message
    - FlushError: Transport failure while flushing a message
  - CleanupError: Failure while closing a socket or sink (logged, never raised)
  - ConfigurationError: Invalid configuration value

Propagation:
    ConnectError, EncodingError and WriteError reach the caller of emit().
    Nothing is retried internally.
"""

from typing import Any, Dict, Optional


class FluentdError(Exception):
    """Base exception for all fluentd_forward errors."""

    def __init__(
        self,
        message: str,
        *,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.details:
            parts.append(f"[details={self.details}]")
        return " ".join(parts)


class ConnectError(FluentdError):
    """Raised when a connection to the collector cannot be established."""

    def __init__(
        self,
        message: str,
        *,
        host: Optional[str] = None,
        port: Optional[int] = None,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.host = host
        self.port = port
        details = details or {}
        if host:
            details["collector"] = f"{host}:{port}"
        super().__init__(message, component=component, details=details)


class EncodingError(FluentdError, ValueError):
    """Raised when a value has no MessagePack representation."""

    def __init__(
        self,
        message: str,
        *,
        value_type: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.value_type = value_type
        details = details or {}
        if value_type:
            details["value_type"] = value_type
        super().__init__(message, component=component, details=details)


class WriteError(FluentdError):
    """Raised when the transport fails while a message is written."""

    def __init__(
        self,
        message: str,
        *,
        tag: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.tag = tag
        details = details or {}
        if tag:
            details["tag"] = tag
        super().__init__(message, component=component, details=details)


class FlushError(WriteError):
    """Raised when the transport fails while a message is flushed."""


class CleanupError(FluentdError):
    """Describes a failure while releasing a socket or sink."""

    def __init__(
        self,
        message: str,
        *,
        resource: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.resource = resource
        details = details or {}
        if resource:
            details["resource"] = resource
        super().__init__(message, component=component, details=details)


class ConfigurationError(FluentdError, ValueError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.field = field
        self.value = value
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, component=component, details=details)
