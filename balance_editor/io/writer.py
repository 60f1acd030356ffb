"""Binary writer with seek support for archive serialization."""

from __future__ import annotations

import io
import struct

from balance_editor.errors import FieldTooLongError, InvalidTextError


class Writer:
    """Binary writer with seek support for two-pass offset patching."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()

    @property
    def position(self) -> int:
        """Current write position."""
        return self._buffer.tell()

    @position.setter
    def position(self, value: int) -> None:
        """Seek to position."""
        self._buffer.seek(value)

    @property
    def size(self) -> int:
        """Current size of written data."""
        current = self._buffer.tell()
        self._buffer.seek(0, io.SEEK_END)
        size = self._buffer.tell()
        self._buffer.seek(current)
        return size

    def to_bytes(self) -> bytes:
        """Get all written data as bytes."""
        return self._buffer.getvalue()

    def write_bytes(self, data: bytes | bytearray | memoryview) -> None:
        """Write raw bytes."""
        self._buffer.write(data)

    def write_uint8(self, value: int) -> None:
        """Write unsigned 8-bit integer."""
        self._buffer.write(struct.pack('<B', value))

    def write_int16(self, value: int) -> None:
        """Write signed 16-bit integer (little-endian)."""
        self._buffer.write(struct.pack('<h', value))

    def write_int32(self, value: int) -> None:
        """Write signed 32-bit integer (little-endian)."""
        self._buffer.write(struct.pack('<i', value))

    def write_uint32(self, value: int) -> None:
        """Write unsigned 32-bit integer (little-endian)."""
        self._buffer.write(struct.pack('<I', value))

    def write_int64(self, value: int) -> None:
        """Write signed 64-bit integer (little-endian)."""
        self._buffer.write(struct.pack('<q', value))

    def write_fixed_string(self, value: str, size: int) -> None:
        """Write ASCII text NUL-padded to exactly ``size`` bytes.

        Raises:
            FieldTooLongError: If the encoded text is longer than ``size``.
            InvalidTextError: If the text has characters outside ASCII.
        """
        try:
            encoded = value.encode('ascii', errors='surrogateescape')
        except UnicodeEncodeError as e:
            raise InvalidTextError(f'Text {value!r} is not ASCII: {e}') from e
        if len(encoded) > size:
            raise FieldTooLongError(f'Text {value!r} is {len(encoded)} bytes, field holds {size}')
        self._buffer.write(encoded)
        self.write_zeros(size - len(encoded))

    def write_zeros(self, count: int) -> None:
        """Write zero bytes (for placeholders)."""
        self._buffer.write(b'\x00' * count)

    def align(self, alignment: int, fill: int = 0) -> None:
        """Pad with ``fill`` until the size is a multiple of ``alignment``."""
        remainder = self.size % alignment
        if remainder:
            self._buffer.seek(0, io.SEEK_END)
            self._buffer.write(bytes([fill]) * (alignment - remainder))
