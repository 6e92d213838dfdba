import struct

import pytest

from attribute_table import TOMBSTONE, CodecError, JsonCodec, Utf8Codec
from attribute_table.codec import decode_snapshot, encode_snapshot
from attribute_table.compression import compress
from attribute_table.const import (FLAG_EMPTY, FLAG_OCCUPIED, HEADER_FMT, HEADER_SIZE,
                                   MAGIC, SLOT_KIND_PLAIN, SLOT_KIND_TOMBSTONE,
                                   VERSION_MINOR)


def _snapshot(body: bytes, capacity: int, kind: int = SLOT_KIND_PLAIN) -> bytes:
    packed = compress(body)
    return struct.pack(HEADER_FMT, MAGIC, VERSION_MINOR, kind, capacity, len(packed)) + packed


class TestSnapshot:
    def test_header_records_capacity(self):
        data = encode_snapshot([None, "a", None], Utf8Codec())

        magic, ver, kind, capacity, body_len = struct.unpack_from(HEADER_FMT, data)
        assert magic == MAGIC
        assert kind == SLOT_KIND_PLAIN
        assert capacity == 3
        assert body_len == len(data) - HEADER_SIZE

    def test_positions_are_preserved(self):
        slots = [None, "x", None, None, "y"]

        assert decode_snapshot(encode_snapshot(slots, Utf8Codec()), 5, Utf8Codec()) == slots

    def test_empty_string_is_not_empty_slot(self):
        slots = ["", None]

        decoded = decode_snapshot(encode_snapshot(slots, Utf8Codec()), 2, Utf8Codec())

        assert decoded == ["", None]

    def test_hand_built_body(self):
        body = bytes([FLAG_EMPTY, FLAG_OCCUPIED]) + struct.pack("<I", 2) + b"hi"

        assert decode_snapshot(_snapshot(body, 2), 2, Utf8Codec()) == [None, "hi"]

    def test_trailing_bytes(self):
        body = bytes([FLAG_EMPTY, FLAG_EMPTY, FLAG_EMPTY])

        with pytest.raises(CodecError, match="trailing"):
            decode_snapshot(_snapshot(body, 2), 2, Utf8Codec())

    def test_short_body(self):
        body = bytes([FLAG_EMPTY])

        with pytest.raises(CodecError, match="truncated"):
            decode_snapshot(_snapshot(body, 2), 2, Utf8Codec())

    def test_short_item(self):
        body = bytes([FLAG_OCCUPIED]) + struct.pack("<I", 10) + b"abc"

        with pytest.raises(CodecError, match="truncated"):
            decode_snapshot(_snapshot(body, 1), 1, Utf8Codec())

    def test_bad_flag(self):
        with pytest.raises(CodecError, match="bad flag"):
            decode_snapshot(_snapshot(bytes([7]), 1), 1, Utf8Codec())

    def test_tombstone_flag_rejected_in_plain_table(self):
        data = encode_snapshot([TOMBSTONE], Utf8Codec(), SLOT_KIND_TOMBSTONE)
        body = data[HEADER_SIZE:]
        relabeled = struct.pack(HEADER_FMT, MAGIC, VERSION_MINOR, SLOT_KIND_PLAIN, 1, len(body)) + body

        with pytest.raises(CodecError, match="bad flag"):
            decode_snapshot(relabeled, 1, Utf8Codec())

    def test_corrupt_compression(self):
        junk = b"\x00" * 12
        data = struct.pack(HEADER_FMT, MAGIC, VERSION_MINOR, SLOT_KIND_PLAIN, 1, len(junk)) + junk

        with pytest.raises(CodecError, match="corrupt"):
            decode_snapshot(data, 1, Utf8Codec())

    def test_undecodable_item(self):
        body = bytes([FLAG_OCCUPIED]) + struct.pack("<I", 2) + b"\xff\xfe"

        with pytest.raises(CodecError, match="failed to decode"):
            decode_snapshot(_snapshot(body, 1), 1, Utf8Codec())

    def test_unsupported_version(self):
        data = bytearray(encode_snapshot([None], Utf8Codec()))
        struct.pack_into("<H", data, 4, VERSION_MINOR + 1)

        with pytest.raises(CodecError, match="version"):
            decode_snapshot(bytes(data), 1, Utf8Codec())


class TestJsonCodec:
    def test_key_order_does_not_change_encoding(self):
        codec = JsonCodec()

        assert codec.encode({"a": 1, "b": 2}) == codec.encode({"b": 2, "a": 1})
