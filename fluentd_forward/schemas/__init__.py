"""
Fluentd Forward Schemas
=======================

Bounded Context: Data Structures

This module defines immutable, typed data structures for forward protocol
messages.

Design:
- Frozen dataclasses (immutability)
- Closed value variant set (Nil, Bool, Integer, Float, String, Binary,
  Mapping, Sequence)
- to_value() / to_python() for native Python trees

Public API
----------
Values:
    DynamicValue, Nil, Bool, Integer, Float, String, Binary, Mapping, Sequence
    NIL, to_value, to_python

Timestamps:
    EventTime, Timestamp, to_timestamp

Messages:
    ForwardMessage

Example:
    >>> from fluentd_forward.schemas import ForwardMessage, EventTime
    >>> msg = ForwardMessage.create(
    ...     tag="app.web",
    ...     timestamp=EventTime.now(),
    ...     record={"message": "hi", "user": None},
    ... )
"""

from .values import (
    DynamicValue,
    Nil,
    Bool,
    Integer,
    Float,
    String,
    Binary,
    Mapping,
    Sequence,
    NIL,
    to_value,
    to_python,
)
from .event_time import EventTime, Timestamp, to_timestamp
from .message import ForwardMessage

__all__ = [
    # Values
    'DynamicValue',
    'Nil',
    'Bool',
    'Integer',
    'Float',
    'String',
    'Binary',
    'Mapping',
    'Sequence',
    'NIL',
    'to_value',
    'to_python',
    # Timestamps
    'EventTime',
    'Timestamp',
    'to_timestamp',
    # Messages
    'ForwardMessage',
]
