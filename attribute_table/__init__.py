from .codec import TOMBSTONE, ItemCodec, JsonCodec, Utf8Codec
from .errors import CodecError, TableError, TableIOError
from .table import HashTable, InsertResult, InsertStatus, TombstoneHashTable
__all__ = ["HashTable", "TombstoneHashTable", "InsertResult", "InsertStatus",
           "ItemCodec", "Utf8Codec", "JsonCodec", "TOMBSTONE",
           "TableError", "TableIOError", "CodecError"]
