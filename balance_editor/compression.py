"""
Compression collaborator for balance archive entries.

Archive entries are stored compressed. The codec itself is not part of this
package: anything with ``compress(bytes) -> bytes`` and
``decompress(bytes) -> bytes`` that round-trips losslessly can be injected.
``ZlibCompressor`` is the default and is what the tests use.
"""

from __future__ import annotations

import zlib
from typing import Protocol

from balance_editor.errors import DecompressionError
from balance_editor.log import log


class Compressor(Protocol):
    def compress(self, data: bytes) -> bytes: ...

    def decompress(self, data: bytes) -> bytes: ...


class ZlibCompressor:
    """zlib stream per entry.

    Archive slices carry alignment padding after the stream, so decompression
    stops at the end of the stream and ignores what follows.
    """

    def __init__(self, level: int = 9) -> None:
        self.level = level

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(data, self.level)

    def decompress(self, data: bytes) -> bytes:
        decompressor = zlib.decompressobj()
        result = decompressor.decompress(data)
        if not decompressor.eof:
            raise zlib.error('Incomplete or truncated zlib stream')
        return result


def decompress_entry(compressor: Compressor, data: bytes | memoryview, index: int) -> bytes:
    """Decompress one archive entry.

    Raises:
        DecompressionError: If the collaborator fails. The input is static, so
            there is no retry.
    """
    try:
        result = compressor.decompress(bytes(data))
    except Exception as e:
        raise DecompressionError(f'Failed to decompress entry {index}: {e}') from e

    log.debug(f'Decompressed entry {index}: {len(data)} -> {len(result)} bytes')
    return result
