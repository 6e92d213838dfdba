# ==================================================
# attribute_table/table.py
# ==================================================
"""
Fixed‑capacity open‑addressing hash table with whole‑file snapshots.

Collisions are resolved by linear probing from the item's home slot
``hash(item) % capacity``.  Every mutating call rewrites the backing file in
full; ``search`` only reads memory.

Not thread‑safe.  Callers that share a table must hold one lock around each
call, so that a save never interleaves with another call's in‑memory update.
"""
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional

import xxhash

from .const import SLOT_KIND_PLAIN, SLOT_KIND_TOMBSTONE
from .codec import TOMBSTONE, ItemCodec, Utf8Codec, decode_snapshot, encode_snapshot
from .errors import CodecError, TableIOError

log = logging.getLogger(__name__)


class InsertStatus(enum.Enum):
    STORED = "stored"
    EXISTS = "exists"
    NO_SPACE = "no_space"


@dataclass(frozen=True)
class InsertResult:
    status: InsertStatus
    position: Optional[int] = None

    @property
    def stored(self) -> bool:
        return self.status is InsertStatus.STORED


class HashTable:
    """Key‑set of items persisted to ``path``.

    ``codec`` converts items to bytes for the snapshot file.  ``hasher`` maps
    an item to a non‑negative int; by default it is xxh64 of the encoded item,
    which stays stable across restarts (``hash()`` on ``str`` does not).
    """

    slot_kind = SLOT_KIND_PLAIN
    _vacated: Any = None        # what delete leaves behind

    def __init__(self, capacity: int, path: str | os.PathLike,
                 codec: Optional[ItemCodec] = None,
                 hasher: Optional[Callable[[Any], int]] = None):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self.path     = Path(path)
        self.codec    = codec if codec is not None else Utf8Codec()
        self.hasher   = hasher if hasher is not None else self._xxh64

        if self.path.exists():
            self._data = self._load()
        else:
            self._data = [None] * capacity

    # ------------------------------------------------------------------
    def _xxh64(self, item) -> int:
        try:
            data = self.codec.encode(item)
        except Exception as e:
            raise CodecError(f"item {item!r} cannot be encoded: {e}") from e
        return xxhash.xxh64(data).intdigest()

    def _probe(self, item) -> Iterator[int]:
        # one full pass starting at the home slot
        home = self.hasher(item) % self.capacity
        for step in range(self.capacity):
            yield (home + step) % self.capacity

    def _find(self, item) -> Optional[int]:
        for pos in self._probe(item):
            slot = self._data[pos]
            if slot is None:
                return None
            if slot is not TOMBSTONE and slot == item:
                return pos
        return None

    # ------------------------------------------------------------------
    def insert(self, item) -> InsertResult:
        """Store ``item`` unless an equal one is present or no slot is free."""
        free = None
        for pos in self._probe(item):
            slot = self._data[pos]
            if slot is None:
                if free is None:
                    free = pos
                break
            if slot is TOMBSTONE:
                if free is None:
                    free = pos
                continue
            if slot == item:
                return InsertResult(InsertStatus.EXISTS, pos)
        if free is None:
            log.debug("insert %r: no space in %s", item, self.path)
            return InsertResult(InsertStatus.NO_SPACE)

        self._set(free, item)
        return InsertResult(InsertStatus.STORED, free)

    def search(self, item) -> bool:
        return self._find(item) is not None

    def delete(self, item) -> None:
        """Remove ``item`` if present; absent items are ignored."""
        pos = self._find(item)
        if pos is not None:
            self._set(pos, self._vacated)

    def fill(self, items: Iterable[Any]) -> int:
        """Bulk‑load ``items`` and save once.

        No duplicate check is made.  Items that find no free slot are dropped;
        the number dropped is returned.
        """
        before = list(self._data)
        dropped = 0
        try:
            for item in items:
                if self._fill_one(item) is None:
                    dropped += 1
            self._save()
        except Exception:
            # the batch applies whole or not at all
            self._data = before
            raise
        if dropped:
            log.warning("fill dropped %d item(s): %s is full", dropped, self.path)
        return dropped

    def _fill_one(self, item) -> Optional[int]:
        for pos in self._probe(item):
            slot = self._data[pos]
            if slot is None or slot is TOMBSTONE:
                self._data[pos] = item
                return pos
        return None

    # ------------------------------------------------------------------
    def _set(self, pos: int, value) -> None:
        previous = self._data[pos]
        self._data[pos] = value
        try:
            self._save()
        except Exception:
            self._data[pos] = previous
            raise

    def _load(self) -> list[Any]:
        try:
            with open(self.path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise TableIOError(f"reading {self.path} failed: {e}") from e
        slots = decode_snapshot(raw, self.capacity, self.codec, self.slot_kind)
        log.debug("loaded %d/%d slots from %s",
                  sum(s is not None and s is not TOMBSTONE for s in slots),
                  self.capacity, self.path)
        return slots

    def _save(self) -> None:
        data = encode_snapshot(self._data, self.codec, self.slot_kind)
        try:
            with open(self.path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise TableIOError(f"writing {self.path} failed: {e}") from e

    # ------------------------------------------------------------------
    @property
    def slots(self) -> tuple:
        return tuple(self._data)

    def __len__(self) -> int:
        return sum(1 for s in self._data if s is not None and s is not TOMBSTONE)

    def __contains__(self, item) -> bool:
        return self.search(item)

    def __iter__(self) -> Iterator[Any]:
        return (s for s in self._data if s is not None and s is not TOMBSTONE)

    def __repr__(self):
        return (f"{type(self).__name__}(capacity={self.capacity}, "
                f"path={str(self.path)!r}, used={len(self)})")


class TombstoneHashTable(HashTable):
    """Variant whose deletes leave a tombstone instead of an empty slot.

    Search and delete probe past tombstones and insert reuses the first one
    it passed, so deleting an item never hides another item further along the
    same chain.  Snapshot files of the two variants are not interchangeable.
    """

    slot_kind = SLOT_KIND_TOMBSTONE
    _vacated = TOMBSTONE
