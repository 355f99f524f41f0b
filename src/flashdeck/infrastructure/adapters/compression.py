"""
Gzip compressor: Infrastructure adapter for the share codec.

Implements Compressor with the standard gzip container so tokens stay
interchangeable with the web client's CompressionStream("gzip").
"""

import gzip
import zlib

from flashdeck.domain.ports import Compressor


class GzipCompressor(Compressor):
    """
    Gzip with a fixed header timestamp.

    The header mtime is pinned to 0 so equal input always yields equal
    output, which keeps share tokens deterministic.
    """

    def __init__(self, level: int = 9):
        self.level = level

    def compress(self, data: bytes) -> bytes:
        return gzip.compress(data, compresslevel=self.level, mtime=0)

    def decompress(self, data: bytes) -> bytes:
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise ValueError(f"Invalid gzip stream: {e}") from e
