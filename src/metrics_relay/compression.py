"""Transparent gzip handling for single records."""
from __future__ import annotations

import gzip
import zlib

from .errors import DecompressionError

GZIP_MAGIC = b"\x1f\x8b"


def is_gzipped(data: bytes) -> bool:
    """Return True when ``data`` starts with the gzip magic bytes."""
    return len(data) >= 2 and data[:2] == GZIP_MAGIC


def decompress_if_gzipped(data: bytes) -> bytes:
    """Inflate ``data`` if it is gzip framed, otherwise return it unchanged."""
    if not is_gzipped(data):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecompressionError(f"corrupt gzip record: {exc}") from exc
