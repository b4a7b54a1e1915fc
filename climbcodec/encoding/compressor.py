"""Generic byte compressors for the encoded envelope.

Anything with ``name``, ``compress`` and ``decompress`` can stand in.
Decompression never returns a partial result: truncated streams and
trailing bytes are both CorruptPayload.
"""

from __future__ import annotations

import zlib
from typing import Protocol

from climbcodec.encoding.format import COMPRESSION_LEVEL
from climbcodec.errors import CorruptPayload


class Compressor(Protocol):
    name: str

    def compress(self, data: bytes) -> bytes: ...

    def decompress(self, data: bytes) -> bytes: ...


class DeflateCompressor:
    """Deflate with a configurable container (zlib or gzip header)."""

    name = "deflate"
    wbits = -zlib.MAX_WBITS  # raw stream, no header or checksum

    def __init__(self, level: int = COMPRESSION_LEVEL) -> None:
        if level < 0 or level > 9:
            raise ValueError(f"{self.name} level must be 0..9, got {level}")
        self.level = level

    def compress(self, data: bytes) -> bytes:
        c = zlib.compressobj(self.level, zlib.DEFLATED, self.wbits)
        return c.compress(data) + c.flush()

    def decompress(self, data: bytes) -> bytes:
        d = zlib.decompressobj(self.wbits)
        try:
            out = d.decompress(data) + d.flush()
        except zlib.error as exc:
            raise CorruptPayload(f"{self.name} payload could not be decompressed: {exc}") from exc
        if not d.eof:
            raise CorruptPayload(f"{self.name} payload is truncated")
        if d.unused_data:
            raise CorruptPayload(
                f"{len(d.unused_data)} trailing byte(s) after {self.name} stream"
            )
        return out

    def __repr__(self) -> str:
        return f"{type(self).__name__}(level={self.level})"


class ZlibCompressor(DeflateCompressor):
    """zlib container: 2-byte header and Adler-32 trailer."""

    name = "zlib"
    wbits = zlib.MAX_WBITS


class GzipCompressor(DeflateCompressor):
    """gzip container with a zero mtime, so output is deterministic."""

    name = "gzip"
    wbits = zlib.MAX_WBITS | 16


COMPRESSORS: dict[str, type[DeflateCompressor]] = {
    "zlib": ZlibCompressor,
    "gzip": GzipCompressor,
}


def get_compressor(name: str, level: int = COMPRESSION_LEVEL) -> Compressor:
    """Look up a compressor by name."""
    try:
        cls = COMPRESSORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown compressor '{name}'. Available: {sorted(COMPRESSORS)}"
        ) from None
    return cls(level)
