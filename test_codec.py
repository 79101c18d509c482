"""
Tests for the MessagePack encoder and the EventTime extension encoder.
"""

import io
from datetime import datetime, timezone

import msgpack
import pytest

from fluentd_forward import EncodingError, EventTime, encode, encode_event_time, to_value
from fluentd_forward.schemas import (
    NIL,
    Binary,
    Integer,
    Mapping,
    Sequence,
    String,
    to_python,
    to_timestamp,
)


def _encode(value, binary_as_raw=False) -> bytes:
    buffer = io.BytesIO()
    encode(value, buffer, binary_as_raw)
    return buffer.getvalue()


class TestEncodeRoundTrip:
    """Encoded trees decode back to the same tree with a conformant decoder."""

    def test_nested_record_round_trips(self):
        record = {
            "message": "hi",
            "level": "INFO",
            "sequence_id": 42,
            "ratio": 0.25,
            "ok": True,
            "user": None,
            "tags": ["a", "b", 3],
            "context": {"request": {"id": -7, "path": "/"}},
            "empty_map": {},
            "empty_list": [],
            "unicode": "héllo ✓",
        }

        decoded = msgpack.unpackb(_encode(to_value(record)), raw=False)

        assert decoded == record
        assert list(decoded) == list(record)

    def test_stacktrace_scenario(self):
        record = {"stacktrace": [{"line": 10}]}

        decoded = msgpack.unpackb(_encode(to_value(record)), raw=False)

        assert decoded == {"stacktrace": [{"line": 10}]}
        assert isinstance(decoded["stacktrace"], list)

    def test_nulls_are_encoded_not_omitted(self):
        encoded = _encode(to_value({"a": None}))

        assert encoded == b"\x81\xa1a\xc0"

    def test_binary_round_trips_as_bytes(self):
        decoded = msgpack.unpackb(_encode(to_value({"blob": b"\x00\xff"})), raw=False)

        assert decoded == {"blob": b"\x00\xff"}

    def test_to_python_inverts_to_value(self):
        record = {"a": [1, {"b": None}], "c": b"x"}

        assert to_python(to_value(record)) == record


class TestEncodeFormats:
    """Canonical (shortest) header selection."""

    @pytest.mark.parametrize("number, expected", [
        (0, b"\x00"),
        (127, b"\x7f"),
        (128, b"\xcc\x80"),
        (65535, b"\xcd\xff\xff"),
        (65536, b"\xce\x00\x01\x00\x00"),
        (2 ** 64 - 1, b"\xcf" + b"\xff" * 8),
        (-1, b"\xff"),
        (-32, b"\xe0"),
        (-33, b"\xd0\xdf"),
        (-(2 ** 63), b"\xd3\x80" + b"\x00" * 7),
    ])
    def test_integer_widths(self, number, expected):
        assert _encode(Integer(number)) == expected

    def test_integer_out_of_range(self):
        with pytest.raises(EncodingError):
            Integer(2 ** 64)
        with pytest.raises(EncodingError):
            to_value(-(2 ** 63) - 1)

    def test_float_is_float64(self):
        assert _encode(to_value(1.5)) == b"\xcb\x3f\xf8" + b"\x00" * 6

    def test_bool_and_nil(self):
        assert _encode(to_value(True)) == b"\xc3"
        assert _encode(to_value(False)) == b"\xc2"
        assert _encode(NIL) == b"\xc0"

    def test_string_headers(self):
        assert _encode(String("a" * 31))[:1] == b"\xbf"
        assert _encode(String("a" * 32))[:2] == b"\xd9\x20"
        assert _encode(String("a" * 256))[:3] == b"\xda\x01\x00"

    def test_string_length_counts_utf8_bytes(self):
        # 11 characters, 12 UTF-8 bytes
        assert _encode(String("héllo world"))[:1] == b"\xac"

    def test_raw_mode_never_uses_str8(self):
        assert _encode(String("a" * 32), binary_as_raw=True)[:3] == b"\xda\x00\x20"
        assert _encode(String("a" * 5), binary_as_raw=True)[:1] == b"\xa5"

    def test_binary_family(self):
        assert _encode(Binary(b"abc")) == b"\xc4\x03abc"
        assert _encode(Binary(b"abc"), binary_as_raw=True) == b"\xa3abc"

    def test_container_headers(self):
        sixteen = {f"k{i}": i for i in range(16)}

        assert _encode(to_value(sixteen))[:3] == b"\xde\x00\x10"
        assert _encode(to_value(list(range(15))))[:1] == b"\x9f"
        assert _encode(to_value(list(range(16))))[:3] == b"\xdc\x00\x10"
        assert _encode(Mapping()) == b"\x80"
        assert _encode(Sequence()) == b"\x90"

    @pytest.mark.parametrize("binary_as_raw", [False, True])
    def test_matches_reference_packer(self, binary_as_raw):
        native = {
            "ints": [0, 127, 128, 255, 256, 65536, 2 ** 32, 2 ** 64 - 1, -1, -33, -129, -(2 ** 63)],
            "short": "a" * 31,
            "str8_range": "b" * 200,
            "str16_range": "c" * 300,
            "blob": b"\x01" * 300,
            "nested": {"list": [None, True, 1.5, {"deep": []}]},
        }

        expected = msgpack.packb(native, use_bin_type=not binary_as_raw)

        assert _encode(to_value(native), binary_as_raw) == expected

    def test_duplicate_keys_are_kept_in_order(self):
        value = Mapping.of([("a", Integer(1)), ("a", Integer(2))])

        assert _encode(value) == b"\x82\xa1a\x01\xa1a\x02"


class TestEncodeErrors:

    def test_unsupported_python_type(self):
        with pytest.raises(EncodingError) as exc_info:
            to_value({"when": datetime(2024, 1, 1)})
        assert exc_info.value.value_type == "datetime"

    def test_non_string_key(self):
        with pytest.raises(EncodingError):
            to_value({1: "one"})

    def test_not_a_dynamic_value(self):
        with pytest.raises(EncodingError):
            _encode({"raw": "dict"})

    def test_unencodable_string(self):
        with pytest.raises(EncodingError):
            _encode(String("\ud800"))


class TestEventTime:

    def test_extension_bytes(self):
        buffer = io.BytesIO()
        encode_event_time(EventTime(seconds=1700000000, nanoseconds=500000000), buffer)

        encoded = buffer.getvalue()
        assert len(encoded) == 10
        assert encoded == bytes.fromhex("d7 00 65 53 f1 00 1d cd 65 00")

    def test_extension_decodes_to_type_zero(self):
        buffer = io.BytesIO()
        encode_event_time(EventTime(seconds=0xFFFFFFFF, nanoseconds=999999999), buffer)

        ext = msgpack.unpackb(buffer.getvalue())
        assert isinstance(ext, msgpack.ExtType)
        assert ext.code == 0
        assert int.from_bytes(ext.data[:4], "big") == 0xFFFFFFFF
        assert int.from_bytes(ext.data[4:], "big") == 999999999

    def test_plain_integer_timestamp(self):
        buffer = io.BytesIO()
        encode_event_time(1700000000, buffer)

        assert buffer.getvalue() == b"\xce\x65\x53\xf1\x00"
        assert msgpack.unpackb(buffer.getvalue()) == 1700000000

    def test_negative_plain_timestamp_rejected(self):
        with pytest.raises(EncodingError):
            encode_event_time(-1, io.BytesIO())

    def test_invalid_fields_rejected(self):
        with pytest.raises(EncodingError):
            EventTime(seconds=2 ** 32)
        with pytest.raises(EncodingError):
            EventTime(seconds=0, nanoseconds=1_000_000_000)

    def test_event_time_downgraded_without_flag(self):
        assert to_timestamp(EventTime(1700000000, 500000000), use_event_time=False) == 1700000000

    def test_from_datetime_truncates_to_seconds(self):
        dt = datetime(2023, 11, 14, 22, 13, 20, 500000, tzinfo=timezone.utc)

        assert EventTime.from_datetime(dt) == EventTime(1700000000, 500000000)

    def test_from_epoch(self):
        assert EventTime.from_epoch(1700000000.25) == EventTime(1700000000, 250000000)

    def test_to_timestamp_follows_configuration(self):
        dt = datetime(2023, 11, 14, 22, 13, 20, 500000, tzinfo=timezone.utc)

        assert to_timestamp(dt, use_event_time=False) == 1700000000
        assert to_timestamp(dt, use_event_time=True) == EventTime(1700000000, 500000000)
        assert to_timestamp(EventTime(5, 6), use_event_time=True) == EventTime(5, 6)
        assert to_timestamp(7, use_event_time=True) == 7
