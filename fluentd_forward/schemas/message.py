"""
Forward Message
===============

Bounded Context: Forward Protocol Message Mode

One log event on the wire:

    [tag, time, record]

A ForwardMessage is built per log event, handed to the emitter and dropped.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .event_time import EventTime, Timestamp
from .values import Mapping, to_python, to_value


@dataclass(frozen=True)
class ForwardMessage:
    """
    Immutable Fluentd forward message.

    Attributes:
        tag: Routing tag (e.g. "app.web")
        timestamp: Integer seconds or EventTime
        record: Record body

    Example:
        >>> msg = ForwardMessage.create("demo", 1700000000, {"message": "hi"})
        >>> msg.to_dict()
        {'tag': 'demo', 'timestamp': 1700000000, 'record': {'message': 'hi'}}
    """
    tag: str
    timestamp: Timestamp
    record: Mapping

    def __post_init__(self):
        """Validate invariants."""
        if not isinstance(self.record, Mapping):
            raise TypeError(
                f"ForwardMessage record must be a Mapping, got {type(self.record).__name__}"
            )

    @classmethod
    def create(cls, tag: str, timestamp: Timestamp, record: Dict[str, Any]) -> 'ForwardMessage':
        """Build a message from a native dict record."""
        return cls(tag=tag, timestamp=timestamp, record=to_value(record))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict (for diagnostics)."""
        timestamp = self.timestamp
        if isinstance(timestamp, EventTime):
            timestamp = {'seconds': timestamp.seconds, 'nanoseconds': timestamp.nanoseconds}
        return {
            'tag': self.tag,
            'timestamp': timestamp,
            'record': to_python(self.record),
        }
