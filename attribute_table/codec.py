# ==================================================
# attribute_table/codec.py
# ==================================================
"""
Item codecs and the whole‑table snapshot format.

A codec turns one item into bytes and back.  The snapshot functions wrap the
codec: they lay the slot array out as flag/length/payload records, compress
the body with zstd and prefix it with a fixed header that records the
capacity, so a file written for one capacity never loads into another.
"""
from __future__ import annotations

import json
import struct
from typing import Any, Optional, Protocol, Sequence

from .const import *
from .compression import compress, decompress
from .errors import CodecError


class ItemCodec(Protocol):
    def encode(self, item: Any) -> bytes: ...
    def decode(self, data: bytes) -> Any: ...


class Utf8Codec:
    """Plain ``str`` items."""

    def encode(self, item: str) -> bytes:
        return item.encode("utf-8")

    def decode(self, data: bytes) -> str:
        return data.decode("utf-8")


class JsonCodec:
    """JSON‑compatible items; keys are sorted so equal values encode equally."""

    def encode(self, item: Any) -> bytes:
        return json.dumps(item, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class _Tombstone:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "TOMBSTONE"

    def __reduce__(self):
        return (_Tombstone, ())


TOMBSTONE = _Tombstone()

# ---------------------------------------------------------------------------

def encode_snapshot(slots: Sequence[Any], codec: ItemCodec,
                    slot_kind: int = SLOT_KIND_PLAIN) -> bytes:
    body = bytearray()
    flag = struct.Struct(FLAG_FMT)
    length = struct.Struct(ITEM_LEN_FMT)
    for slot in slots:
        if slot is None:
            body += flag.pack(FLAG_EMPTY)
        elif slot is TOMBSTONE:
            body += flag.pack(FLAG_TOMBSTONE)
        else:
            try:
                payload = codec.encode(slot)
            except Exception as e:
                raise CodecError(f"item {slot!r} cannot be encoded: {e}") from e
            body += flag.pack(FLAG_OCCUPIED)
            body += length.pack(len(payload))
            body += payload
    packed = compress(bytes(body))
    header = struct.pack(HEADER_FMT, MAGIC, VERSION_MINOR, slot_kind,
                         len(slots), len(packed))
    return header + packed


def decode_snapshot(data: bytes, capacity: int, codec: ItemCodec,
                    slot_kind: int = SLOT_KIND_PLAIN) -> list[Optional[Any]]:
    if len(data) < HEADER_SIZE:
        raise CodecError(f"snapshot too short for header ({len(data)} bytes)")
    magic, ver, kind, stored_cap, body_len = struct.unpack_from(HEADER_FMT, data, 0)
    if magic != MAGIC:
        raise CodecError("Invalid table file")
    if ver != VERSION_MINOR:
        raise CodecError(f"Unsupported format version {ver}")
    if kind != slot_kind:
        raise CodecError(f"Slot kind mismatch: file {kind}, table {slot_kind}")
    if stored_cap != capacity:
        raise CodecError(f"Capacity mismatch: file {stored_cap}, table {capacity}")
    packed = data[HEADER_SIZE:]
    if len(packed) != body_len:
        raise CodecError(f"Body length mismatch: header {body_len}, file {len(packed)}")

    body = decompress(packed)
    slots: list[Optional[Any]] = []
    off = 0
    try:
        for _ in range(capacity):
            (flag,) = struct.unpack_from(FLAG_FMT, body, off)
            off += struct.calcsize(FLAG_FMT)
            if flag == FLAG_EMPTY:
                slots.append(None)
            elif flag == FLAG_TOMBSTONE and slot_kind == SLOT_KIND_TOMBSTONE:
                slots.append(TOMBSTONE)
            elif flag == FLAG_OCCUPIED:
                (size,) = struct.unpack_from(ITEM_LEN_FMT, body, off)
                off += struct.calcsize(ITEM_LEN_FMT)
                payload = body[off:off + size]
                if len(payload) != size:
                    raise CodecError(f"slot {len(slots)} truncated")
                off += size
                slots.append(codec.decode(payload))
            else:
                raise CodecError(f"slot {len(slots)} has bad flag {flag}")
    except struct.error as e:
        raise CodecError(f"snapshot body truncated at slot {len(slots)}") from e
    except (ValueError, TypeError) as e:   # item codec failures
        raise CodecError(f"slot {len(slots)} failed to decode: {e}") from e
    if off != len(body):
        raise CodecError(f"{len(body) - off} trailing bytes after {capacity} slots")
    return slots
