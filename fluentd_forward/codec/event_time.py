"""
EventTime Extension Encoder
===========================

Bounded Context: Wire Encoding

Fluentd EventTime is MessagePack extension type 0 with an 8-byte payload:

    byte 0-3: seconds since Unix epoch (big-endian uint32)
    byte 4-7: nanoseconds within the second (big-endian uint32)

Written as fixext8, the whole value is 10 bytes: d7 00 <8 payload bytes>.

Plain integer timestamps (legacy collectors) are written as ordinary
unsigned integers.

Reference:
    https://github.com/fluent/fluentd/wiki/Forward-Protocol-Specification-v1#eventtime-ext-format
"""

import struct
from typing import BinaryIO

import msgpack

from ..errors import EncodingError
from ..schemas.event_time import EventTime, Timestamp
from .packer import new_packer, pack_with

EVENT_TIME_EXT_TYPE = 0x00


def encode_event_time(value: Timestamp, sink: BinaryIO) -> None:
    """
    Write a Fluentd timestamp to sink.

    Args:
        value: EventTime (extension form) or int seconds (legacy form)
        sink: Object with write(bytes)

    Raises:
        EncodingError: If value is neither form, or an int timestamp is
            negative or wider than uint64
    """
    packer = new_packer()
    if isinstance(value, EventTime):
        payload = struct.pack('>II', value.seconds, value.nanoseconds)
        sink.write(pack_with(packer, 'pack', msgpack.ExtType(EVENT_TIME_EXT_TYPE, payload), 'ext'))
    elif isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise EncodingError(f"Timestamp must not be negative: {value}", value_type='int')
        sink.write(pack_with(packer, 'pack', value, 'int'))
    else:
        raise EncodingError(
            f"Unsupported timestamp type: {type(value).__name__}",
            value_type=type(value).__name__,
        )
