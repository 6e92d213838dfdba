# ==================================================
# attribute_table/errors.py
# ==================================================

class TableError(Exception):
    """Base class for hash table failures."""


class TableIOError(TableError):
    """Backing file could not be read or written."""


class CodecError(TableError):
    """Stored bytes do not decode into a well‑formed slot array."""
