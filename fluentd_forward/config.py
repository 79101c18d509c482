"""
Configuration schema for the Fluentd forward target.

This module defines the collector address, tag, socket options and
encoding switches consumed by FluentdPublisher and FluentdHandler.
"""

import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml

from .errors import ConfigurationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 24224


def default_tag() -> str:
    """Tag derived from the running script's name ("python" when unknown)."""
    name = Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else ""
    return name or "python"


@dataclass(frozen=True)
class SocketOptions:
    """
    TCP socket options applied before connecting.

    Timeouts are in milliseconds; 0 blocks indefinitely. linger_time_s is
    how long close() may block flushing unsent data when linger is enabled.
    """

    no_delay: bool = False
    receive_buffer_size: int = 8192
    send_buffer_size: int = 8192
    receive_timeout_ms: int = 1000
    send_timeout_ms: int = 1000
    linger_enabled: bool = True
    linger_time_s: int = 1000

    def __post_init__(self):
        """Validate socket options."""
        for name in ("receive_buffer_size", "send_buffer_size"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(
                    f"{name} must be positive",
                    field=name,
                    value=value,
                )

        for name in ("receive_timeout_ms", "send_timeout_ms", "linger_time_s"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(
                    f"{name} must be non-negative",
                    field=name,
                    value=value,
                )

    @property
    def send_timeout_s(self) -> Optional[float]:
        """Send timeout in seconds, None when blocking indefinitely."""
        return self.send_timeout_ms / 1000 if self.send_timeout_ms else None

    @property
    def receive_timeout_s(self) -> Optional[float]:
        return self.receive_timeout_ms / 1000 if self.receive_timeout_ms else None


@dataclass(frozen=True)
class FluentdConfig:
    """
    Main configuration for a Fluentd forward target.

    Immutable after construction (frozen dataclass).

    Attributes:
        host: Collector hostname or address
        port: Collector forward port
        tag: Tag attached to every message
        socket: TCP socket options
        use_event_time: Encode timestamps as EventTime (nanosecond precision)
            instead of integer seconds
        binary_as_raw: Encode bytes with the str family for legacy collectors
        emit_stack_trace: Add a "stacktrace" list to records carrying
            exception info
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    tag: str = field(default_factory=default_tag)
    socket: SocketOptions = field(default_factory=SocketOptions)
    use_event_time: bool = False
    binary_as_raw: bool = False
    emit_stack_trace: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if not self.host:
            raise ConfigurationError("host cannot be empty", field="host")

        if not 1 <= self.port <= 65535:
            raise ConfigurationError(
                f"port must be in [1, 65535], got {self.port}",
                field="port",
                value=self.port,
            )

        if not self.tag:
            raise ConfigurationError("tag cannot be empty", field="tag")

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FluentdConfig":
        """
        Build configuration from a plain dict.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {sorted(unknown)}",
                field=sorted(unknown)[0],
            )

        socket_data = data.pop("socket", None) or {}
        socket_known = {f.name for f in fields(SocketOptions)}
        socket_unknown = set(socket_data) - socket_known
        if socket_unknown:
            raise ConfigurationError(
                f"Unknown socket options: {sorted(socket_unknown)}",
                field=f"socket.{sorted(socket_unknown)[0]}",
            )

        return cls(socket=SocketOptions(**socket_data), **data)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "FluentdConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            host: "127.0.0.1"
            port: 24224
            tag: "app.web"
            use_event_time: true
            binary_as_raw: false
            emit_stack_trace: true

            socket:
              no_delay: true
              send_timeout_ms: 1000
              receive_timeout_ms: 1000
              linger_enabled: true
              linger_time_s: 5
        """
        path = Path(yaml_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}", field="config")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", field="config") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                f"Config root must be a mapping, got {type(data).__name__}",
                field="config",
            )

        return cls.from_dict(data or {})
