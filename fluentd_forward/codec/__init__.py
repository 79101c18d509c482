"""
MessagePack Codec
=================

Bounded Context: Wire Encoding

Public API
----------
    encode: DynamicValue tree -> MessagePack bytes on a sink
    encode_event_time: Timestamp -> EventTime extension or uint on a sink
"""

from .packer import encode
from .event_time import EVENT_TIME_EXT_TYPE, encode_event_time

__all__ = [
    'encode',
    'encode_event_time',
    'EVENT_TIME_EXT_TYPE',
]
