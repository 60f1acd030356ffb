"""Binary reader with position tracking for balance archive parsing."""

from __future__ import annotations

import struct

from balance_editor.errors import MalformedContainerError


class Reader:
    """Binary reader with position tracking and little-endian support.

    Wraps the buffer in a memoryview so slices share memory with the source.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(data)
        self._position = 0

    @property
    def position(self) -> int:
        """Current read position."""
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        """Set read position."""
        if value < 0 or value > len(self._data):
            raise MalformedContainerError(f'Position {value} out of range [0, {len(self._data)}]')
        self._position = value

    @property
    def size(self) -> int:
        """Total size of data."""
        return len(self._data)

    @property
    def remaining(self) -> int:
        """Bytes remaining to read."""
        return len(self._data) - self._position

    def read_bytes(self, count: int) -> bytes:
        """Read raw bytes."""
        if count < 0 or self._position + count > len(self._data):
            raise MalformedContainerError(
                f'Cannot read {count} bytes at position {self._position}, only {self.remaining} remaining'
            )
        result = bytes(self._data[self._position : self._position + count])
        self._position += count
        return result

    def _unpack(self, fmt: str, size: int) -> int:
        if self._position + size > len(self._data):
            raise MalformedContainerError(
                f'Cannot read {size} bytes at position {self._position}, only {self.remaining} remaining'
            )
        value = struct.unpack_from(fmt, self._data, self._position)[0]
        self._position += size
        return value

    def read_uint8(self) -> int:
        """Read unsigned 8-bit integer."""
        return self._unpack('<B', 1)

    def read_int16(self) -> int:
        """Read signed 16-bit integer (little-endian)."""
        return self._unpack('<h', 2)

    def read_int32(self) -> int:
        """Read signed 32-bit integer (little-endian)."""
        return self._unpack('<i', 4)

    def read_int64(self) -> int:
        """Read signed 64-bit integer (little-endian)."""
        return self._unpack('<q', 8)

    def read_fixed_string(self, size: int) -> str:
        """Read a NUL-padded ASCII field of ``size`` bytes.

        Trailing NULs are trimmed. Bytes outside ASCII are kept as surrogate
        escapes so that ``Writer.write_fixed_string`` reproduces them.
        """
        raw = self.read_bytes(size)
        return raw.rstrip(b'\x00').decode('ascii', errors='surrogateescape')

    def peek_int64(self, offset: int) -> int:
        """Read a signed 64-bit integer at ``offset`` without moving."""
        if offset < 0 or offset + 8 > len(self._data):
            raise MalformedContainerError(f'Cannot read int64 at {offset:#x}, buffer is {len(self._data):#x} bytes')
        return struct.unpack_from('<q', self._data, offset)[0]

    def skip(self, count: int) -> None:
        """Skip bytes."""
        self.position = self._position + count
