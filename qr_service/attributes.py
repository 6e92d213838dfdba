# qr_service/attributes.py   – attribute pool kept in a HashTable
from __future__ import annotations
import json, logging, os
from dataclasses import dataclass
from typing import Optional

import numpy as np
from attribute_table import HashTable

from . import config

log = logging.getLogger(__name__)

# ── record + codec ───────────────────────────────────────────
@dataclass(frozen=True)
class Attribute:
    trait_type: Optional[str]
    value: str

class AttributeCodec:
    def encode(self, item: Attribute) -> bytes:
        return json.dumps({"trait_type": item.trait_type, "value": item.value},
                          sort_keys=True, separators=(",", ":")).encode("utf-8")

    def decode(self, data: bytes) -> Attribute:
        obj = json.loads(data.decode("utf-8"))
        try:
            return Attribute(trait_type=obj.get("trait_type"), value=obj["value"])
        except (KeyError, AttributeError) as e:
            raise ValueError(f"not an attribute record: {obj!r}") from e

# present once the pool has been seeded
MARKER = Attribute(trait_type="Flying Fish Tea Discount", value="20%")

SPONSORS = (
    "Flying Fish Tea", "Harbor Books", "Old Mill Bakery", "Copper Kettle",
    "Riverside Cinema", "Blue Door Records", "Cedar Yoga", "Lantern Ramen",
    "North Pier Cycles", "Saffron Market", "Tidewater Coffee", "Quarry Climbing",
)
PERCENTS = range(1, 51)

# ── pool generation ──────────────────────────────────────────
def candidate_attributes() -> list[Attribute]:
    """Every distinct discount the pool can draw from, marker excluded."""
    out = []
    for sponsor in SPONSORS:
        for pct in PERCENTS:
            attr = Attribute(trait_type=f"{sponsor} Discount", value=f"{pct}%")
            if attr != MARKER:
                out.append(attr)
    return out

def populate_attributes(size: int, seed: int = 0) -> list[Attribute]:
    """Return ``size`` distinct attributes including ``MARKER``."""
    if size < 1:
        raise ValueError("pool size must be positive")
    candidates = candidate_attributes()
    if size - 1 > len(candidates):
        raise ValueError(f"pool size {size} exceeds {len(candidates) + 1} distinct attributes")
    rng  = np.random.default_rng(seed)
    pick = rng.choice(len(candidates), size=size - 1, replace=False)
    pool = [candidates[int(i)] for i in pick]
    pool.insert(int(rng.integers(0, size)), MARKER)
    return pool

# ── boot ─────────────────────────────────────────────────────
def seed_attributes(path: str | os.PathLike = config.ATTRIBUTES_PATH,
                    capacity: int = config.ATTRIBUTES_CAPACITY,
                    seed: int = config.ATTRIBUTES_SEED) -> HashTable:
    """Open the attribute table, filling it once if the marker is missing.

    Table errors propagate; the service does not start on a corrupt or
    unreadable table file.
    """
    table = HashTable(capacity, path, codec=AttributeCodec())
    if table.search(MARKER):
        log.info("attribute table %s already seeded (%d entries)", path, len(table))
        return table

    dropped = table.fill(populate_attributes(capacity, seed))
    log.info("seeded attribute table %s with %d entries", path, capacity - dropped)
    return table
