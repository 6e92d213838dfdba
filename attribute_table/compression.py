# ==================================================
# attribute_table/compression.py
# ==================================================
import zstandard as zstd

from .errors import CodecError

# -------- zstd wrappers ---------------------------------------------------

cctx = zstd.ZstdCompressor(level=3)
dctx = zstd.ZstdDecompressor()

def compress(data: bytes) -> bytes:
    return cctx.compress(data)

def decompress(data: bytes) -> bytes:
    try:
        return dctx.decompress(data)
    except zstd.ZstdError as e:
        raise CodecError(f"corrupt snapshot body: {e}") from e
