"""
MessagePack Encoder
===================

Bounded Context: Wire Encoding

This module turns a DynamicValue tree into MessagePack bytes.

Design:
- One recursive walk over the closed DynamicValue variants
- Headers and scalars are written by msgpack.Packer, which always picks
  the shortest format that fits
- Nil is always written, never omitted
- No I/O policy: writes to any object with write(bytes)

Compatibility:
    binary_as_raw=True packs with use_bin_type=False: Binary goes into the
    str family and str8 is never emitted, for collectors built against the
    pre-2013 MessagePack format.
"""

from typing import BinaryIO

import msgpack

from ..errors import EncodingError
from ..schemas.values import (
    Binary,
    Bool,
    DynamicValue,
    Float,
    Integer,
    Mapping,
    Nil,
    Sequence,
    String,
)


def new_packer(binary_as_raw: bool = False) -> msgpack.Packer:
    return msgpack.Packer(use_bin_type=not binary_as_raw, autoreset=True)


def pack_with(packer: msgpack.Packer, method: str, obj, value_type: str) -> bytes:
    """Run one packer call, turning library failures into EncodingError."""
    try:
        return getattr(packer, method)(obj)
    except (ValueError, OverflowError, TypeError) as e:
        raise EncodingError(
            f"Cannot encode {value_type}: {e}",
            value_type=value_type,
        ) from e


def _encode(value: DynamicValue, sink: BinaryIO, packer: msgpack.Packer) -> None:
    if isinstance(value, Mapping):
        sink.write(pack_with(packer, 'pack_map_header', len(value.entries), 'map'))
        for key, item in value.entries:
            if not isinstance(key, str):
                raise EncodingError(
                    f"Mapping keys must be str, got {type(key).__name__}",
                    value_type=type(key).__name__,
                )
            sink.write(pack_with(packer, 'pack', key, 'str'))
            _encode(item, sink, packer)
    elif isinstance(value, Sequence):
        sink.write(pack_with(packer, 'pack_array_header', len(value.items), 'array'))
        for item in value.items:
            _encode(item, sink, packer)
    elif isinstance(value, String):
        sink.write(pack_with(packer, 'pack', value.value, 'str'))
    elif isinstance(value, Binary):
        sink.write(pack_with(packer, 'pack', bytes(value.value), 'bytes'))
    elif isinstance(value, (Bool, Integer, Float)):
        sink.write(pack_with(packer, 'pack', value.value, type(value.value).__name__))
    elif isinstance(value, Nil):
        sink.write(pack_with(packer, 'pack', None, 'nil'))
    else:
        raise EncodingError(
            f"Not a DynamicValue: {type(value).__name__}",
            value_type=type(value).__name__,
        )


def encode(value: DynamicValue, sink: BinaryIO, binary_as_raw: bool = False) -> None:
    """
    Write the MessagePack representation of value to sink.

    Mapping and Sequence are encoded recursively; recursion depth follows
    the depth of the tree.

    Args:
        value: DynamicValue tree (must not contain cycles)
        sink: Object with write(bytes)
        binary_as_raw: Pack Binary with the str family (legacy collectors)

    Raises:
        EncodingError: If value (or anything nested in it) is not a
            DynamicValue or exceeds a MessagePack size limit

    Example:
        >>> buffer = io.BytesIO()
        >>> encode(to_value({"message": "hi"}), buffer)
        >>> buffer.getvalue()
        b'\\x81\\xa7message\\xa2hi'
    """
    _encode(value, sink, new_packer(binary_as_raw))
