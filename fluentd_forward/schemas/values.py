"""
Dynamic Value Model
===================

Bounded Context: Record Payload Structures

This module defines the closed set of value types a Fluentd record may carry.

Design Principles:
- Closed variant set: Nil, Bool, Integer, Float, String, Binary, Mapping, Sequence
- Immutability: frozen=True prevents accidental mutation
- Validation: Constructors reject values MessagePack cannot represent
- Trees only: cyclic structures are not detected and must not be built

Types:
- Mapping: Ordered (key, value) pairs, keys are strings, duplicates kept
- Sequence: Ordered values
- Scalars: Nil, Bool, Integer, Float, String, Binary

Example:
    >>> record = to_value({"message": "hi", "stacktrace": [{"line": 10}]})
    >>> record.entries[0]
    ('message', String(value='hi'))
"""

from dataclasses import dataclass
from collections.abc import Mapping as MappingABC
from typing import Any, Iterable, Tuple, Union

from ..errors import EncodingError

INT64_MIN = -(2 ** 63)
UINT64_MAX = 2 ** 64 - 1


@dataclass(frozen=True)
class Nil:
    """Explicit null; always encoded, never omitted."""


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Integer:
    """
    Signed or unsigned 64-bit integer.

    Invariants:
        - INT64_MIN <= value <= UINT64_MAX
    """
    value: int

    def __post_init__(self):
        """Validate range."""
        if not INT64_MIN <= self.value <= UINT64_MAX:
            raise EncodingError(
                f"Integer out of 64-bit range: {self.value}",
                value_type="int",
            )


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Binary:
    value: bytes


@dataclass(frozen=True)
class Mapping:
    """
    Ordered sequence of (key, value) pairs.

    Keys need not be unique; the encoder writes every pair in order.

    Attributes:
        entries: Tuple of (str, DynamicValue) pairs
    """
    entries: Tuple[Tuple[str, 'DynamicValue'], ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def of(cls, pairs: Iterable[Tuple[str, 'DynamicValue']]) -> 'Mapping':
        """Build a Mapping from an iterable of pairs."""
        return cls(entries=tuple(pairs))


@dataclass(frozen=True)
class Sequence:
    """Ordered sequence of values."""
    items: Tuple['DynamicValue', ...] = ()

    def __len__(self) -> int:
        return len(self.items)


DynamicValue = Union[Nil, Bool, Integer, Float, String, Binary, Mapping, Sequence]

VARIANTS = (Nil, Bool, Integer, Float, String, Binary, Mapping, Sequence)

NIL = Nil()


def to_value(obj: Any) -> DynamicValue:
    """
    Convert a native Python tree into a DynamicValue.

    Dictionaries become Mapping (insertion order kept), lists and tuples
    become Sequence, bytes-like objects become Binary. Existing DynamicValue
    instances are returned unchanged.

    Args:
        obj: None, bool, int, float, str, bytes-like, dict, list or tuple

    Returns:
        Equivalent DynamicValue

    Raises:
        EncodingError: If obj (or anything nested in it) has no variant,
            or a mapping key is not a string
    """
    if isinstance(obj, VARIANTS):
        return obj
    if obj is None:
        return NIL
    # bool is a subclass of int
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, int):
        return Integer(obj)
    if isinstance(obj, float):
        return Float(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Binary(bytes(obj))
    if isinstance(obj, MappingABC):
        pairs = []
        for key, item in obj.items():
            if not isinstance(key, str):
                raise EncodingError(
                    f"Mapping keys must be str, got {type(key).__name__}",
                    value_type=type(key).__name__,
                )
            pairs.append((key, to_value(item)))
        return Mapping(entries=tuple(pairs))
    if isinstance(obj, (list, tuple)):
        return Sequence(items=tuple(to_value(item) for item in obj))
    raise EncodingError(
        f"Unsupported value type: {type(obj).__name__}",
        value_type=type(obj).__name__,
    )


def to_python(value: DynamicValue) -> Any:
    """Convert a DynamicValue back into native Python objects."""
    if isinstance(value, Nil):
        return None
    if isinstance(value, Mapping):
        return {key: to_python(item) for key, item in value.entries}
    if isinstance(value, Sequence):
        return [to_python(item) for item in value.items]
    if isinstance(value, VARIANTS):
        return value.value
    raise EncodingError(
        f"Unsupported value type: {type(value).__name__}",
        value_type=type(value).__name__,
    )
