# ==================================================
# attribute_table/const.py
# ==================================================
MAGIC = b"HTB1"          # 4‑byte magic + format major «1»
HEADER_FMT = "<4sHBxQI"   # magic, version_minor (H), slot_kind (B), pad, capacity (Q), body_len (I)
HEADER_SIZE = 20          # bytes (4+2+1+1+8+4)
VERSION_MINOR = 0

SLOT_KIND_PLAIN = 0       # empty | occupied
SLOT_KIND_TOMBSTONE = 1   # empty | tombstone | occupied

FLAG_EMPTY = 0
FLAG_OCCUPIED = 1
FLAG_TOMBSTONE = 2

FLAG_FMT = "<B"
ITEM_LEN_FMT = "<I"       # length prefix of an encoded item
