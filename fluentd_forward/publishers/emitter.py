"""
Forward Message Emitter
=======================

Bounded Context: Forward Protocol Message Mode

Composes [tag, time, record] into one MessagePack unit and hands it to a
sink as a single write followed by a flush.

Design:
- Stateless apart from encoding switches (event time, binary as raw)
- Message is staged in memory first: an EncodingError writes nothing
- The sink is borrowed for one call and never retained
- No retry; transport failures surface as WriteError / FlushError

Message Flow:
    tag, timestamp, record → array(3) → bytes → sink.write → sink.flush
"""

import io
from datetime import datetime
from typing import Any, BinaryIO, Dict, Union

import msgpack

from ..codec import encode, encode_event_time
from ..errors import EncodingError, FlushError, WriteError
from ..schemas import EventTime, ForwardMessage, Mapping, String, to_timestamp, to_value

TimestampInput = Union[int, float, datetime, EventTime]
RecordInput = Union[Mapping, Dict[str, Any]]


class ForwardEmitter:
    """
    Encoder of Fluentd forward messages onto a byte sink.

    Attributes:
        use_event_time: datetime/float timestamps become EventTime when
            True, integer seconds when False (EventTime inputs are
            truncated to seconds when False)
        binary_as_raw: Pack bytes with the str family

    Example:
        >>> emitter = ForwardEmitter(use_event_time=True)
        >>> buffer = io.BytesIO()
        >>> emitter.emit(EventTime(1700000000, 500000000), "demo", {"message": "hi"}, buffer)
    """

    def __init__(self, use_event_time: bool = False, binary_as_raw: bool = False):
        self.use_event_time = use_event_time
        self.binary_as_raw = binary_as_raw

    def encode_message(self, message: ForwardMessage) -> bytes:
        """
        Encode a complete message to bytes.

        Raises:
            EncodingError: If any part of the message cannot be encoded
        """
        buffer = io.BytesIO()
        buffer.write(msgpack.Packer().pack_array_header(3))
        encode(String(message.tag), buffer, self.binary_as_raw)
        encode_event_time(message.timestamp, buffer)
        encode(message.record, buffer, self.binary_as_raw)
        return buffer.getvalue()

    def build_message(self, timestamp: TimestampInput, tag: str, record: RecordInput) -> ForwardMessage:
        if not isinstance(tag, str):
            raise EncodingError(
                f"Tag must be str, got {type(tag).__name__}",
                value_type=type(tag).__name__,
            )
        value = to_value(record)
        if not isinstance(value, Mapping):
            raise EncodingError(
                f"Record must be a mapping, got {type(record).__name__}",
                value_type=type(record).__name__,
            )
        return ForwardMessage(
            tag=tag,
            timestamp=to_timestamp(timestamp, self.use_event_time),
            record=value,
        )

    def emit(self, timestamp: TimestampInput, tag: str, record: RecordInput, sink: BinaryIO) -> int:
        """
        Write one forward message to sink and flush it.

        Args:
            timestamp: int seconds, EventTime, datetime or float epoch
            tag: Message tag
            record: Mapping or native dict record
            sink: Object with write(bytes) and flush()

        Returns:
            Number of bytes written

        Raises:
            EncodingError: Record, tag or timestamp not encodable (nothing written)
            WriteError: Transport failure while writing
            FlushError: Transport failure while flushing
        """
        payload = self.encode_message(self.build_message(timestamp, tag, record))

        try:
            sink.write(payload)
        except (OSError, ValueError) as e:
            raise WriteError(
                f"Failed to write message: {e}",
                tag=tag,
                component="ForwardEmitter",
                details={'size': len(payload)},
            ) from e

        try:
            sink.flush()
        except (OSError, ValueError) as e:
            raise FlushError(
                f"Failed to flush message: {e}",
                tag=tag,
                component="ForwardEmitter",
                details={'size': len(payload)},
            ) from e

        return len(payload)
