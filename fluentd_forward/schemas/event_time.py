"""
Fluentd EventTime
=================

Bounded Context: Record Timestamps

A Fluentd timestamp is either a plain integer (seconds since the Unix epoch,
understood by every collector) or an EventTime carrying nanoseconds
(understood by Fluentd v0.14+ through MessagePack extension type 0).

Types:
- EventTime: (seconds, nanoseconds) pair, both unsigned 32-bit
- Timestamp: Union[int, EventTime]
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from ..errors import EncodingError

UINT32_MAX = 2 ** 32 - 1
NANOSECONDS_PER_SECOND = 1_000_000_000

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class EventTime:
    """
    Immutable Fluentd EventTime.

    Attributes:
        seconds: Whole seconds since the Unix epoch (UTC)
        nanoseconds: Sub-second remainder in nanoseconds

    Invariants:
        - 0 <= seconds <= 2**32 - 1
        - 0 <= nanoseconds < 10**9

    Example:
        >>> EventTime.from_datetime(datetime(2023, 11, 14, 22, 13, 20, 500000, tzinfo=timezone.utc))
        EventTime(seconds=1700000000, nanoseconds=500000000)
    """
    seconds: int
    nanoseconds: int = 0

    def __post_init__(self):
        """Validate invariants."""
        if not 0 <= self.seconds <= UINT32_MAX:
            raise EncodingError(
                f"EventTime seconds must fit in uint32, got {self.seconds}",
                value_type="EventTime",
            )
        if not 0 <= self.nanoseconds < NANOSECONDS_PER_SECOND:
            raise EncodingError(
                f"EventTime nanoseconds must be in [0, 1e9), got {self.nanoseconds}",
                value_type="EventTime",
            )

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'EventTime':
        """
        Create an EventTime from a datetime.

        Aware datetimes are converted to UTC; naive datetimes are taken
        as local time. The value is truncated to whole seconds and the
        remainder kept in nanoseconds.
        """
        delta = dt.astimezone(timezone.utc) - UNIX_EPOCH
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds=seconds, nanoseconds=delta.microseconds * 1000)

    @classmethod
    def from_epoch(cls, epoch: float) -> 'EventTime':
        """Create an EventTime from float seconds since the epoch (e.g. time.time())."""
        seconds = int(epoch)
        nanoseconds = min(
            int(round((epoch - seconds) * NANOSECONDS_PER_SECOND)),
            NANOSECONDS_PER_SECOND - 1,
        )
        return cls(seconds=seconds, nanoseconds=nanoseconds)

    @classmethod
    def now(cls) -> 'EventTime':
        """Create an EventTime for the current instant."""
        seconds, nanoseconds = divmod(time.time_ns(), NANOSECONDS_PER_SECOND)
        return cls(seconds=seconds, nanoseconds=nanoseconds)

    def to_datetime(self) -> datetime:
        """Convert to an aware UTC datetime (microsecond precision)."""
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc).replace(
            microsecond=self.nanoseconds // 1000
        )

    def __int__(self) -> int:
        return self.seconds


Timestamp = Union[int, EventTime]


def to_timestamp(value: Union[int, float, datetime, EventTime], use_event_time: bool) -> Timestamp:
    """
    Normalize a caller timestamp into the configured wire form.

    int is returned as given. datetime, float and EventTime values become
    EventTime when use_event_time is set, integer seconds otherwise.

    Raises:
        EncodingError: If value is not a supported timestamp type
    """
    if isinstance(value, EventTime):
        return value if use_event_time else value.seconds
    if isinstance(value, bool):
        raise EncodingError("bool is not a timestamp", value_type="bool")
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        event_time = EventTime.from_datetime(value)
    elif isinstance(value, float):
        event_time = EventTime.from_epoch(value)
    else:
        raise EncodingError(
            f"Unsupported timestamp type: {type(value).__name__}",
            value_type=type(value).__name__,
        )
    return event_time if use_event_time else event_time.seconds
