"""SIR0 relocatable container.

A container blob is laid out as:

- Header (0x20 bytes): ``b'SIR0'``, zero uint32, subheader offset (int64),
  footer offset (int64), zero padding
- Data: the payload regions written by the record codecs
- Subheader: record-specific counts and pointers into the data
- Footer: every location in the blob that holds a pointer, delta-encoded

Pointers are absolute offsets from the start of the blob, so a container
embedded in a parent's data parses with its own header unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.const import ALIGNMENT, SIR0_HEADER_SIZE, SIR0_MAGIC
from balance_editor.errors import MalformedContainerError
from balance_editor.io.reader import Reader
from balance_editor.io.writer import Writer

# Header fields at 0x08 and 0x10 are pointers themselves
HEADER_POINTER_LOCATIONS = (0x08, 0x10)


def encode_pointer_offsets(locations: list[int]) -> bytes:
    """Encode pointer locations as the SIR0 footer.

    Each delta from the previous location is written as big-endian 7-bit
    groups, high bit set on all but the last group. A zero byte ends the list.
    """
    output = bytearray()
    previous = 0
    for location in sorted(set(locations)):
        delta = location - previous
        previous = location

        groups = [delta & 0x7F]
        delta >>= 7
        while delta:
            groups.append(0x80 | (delta & 0x7F))
            delta >>= 7
        output.extend(reversed(groups))

    output.append(0)
    return bytes(output)


def decode_pointer_offsets(data: bytes | memoryview) -> list[int]:
    """Decode a SIR0 footer back into absolute pointer locations."""
    locations = []
    location = 0
    accumulator = 0
    for byte in bytes(data):
        accumulator = (accumulator << 7) | (byte & 0x7F)
        if byte & 0x80:
            continue
        if accumulator == 0:
            break
        location += accumulator
        locations.append(location)
        accumulator = 0
    return locations


@dataclass
class Sir0:
    """Parsed view over a container blob. Regions are zero-copy slices."""

    data: memoryview
    subheader_offset: int
    footer_offset: int

    @classmethod
    def parse(cls, data: bytes | bytearray | memoryview) -> Sir0:
        """Parse the container header.

        Raises:
            MalformedContainerError: On a bad magic or out-of-bounds header offsets.
        """
        reader = Reader(data)
        if reader.size < SIR0_HEADER_SIZE:
            raise MalformedContainerError(f'Container is {reader.size} bytes, header needs {SIR0_HEADER_SIZE}')

        magic = reader.read_bytes(4)
        if magic != SIR0_MAGIC:
            raise MalformedContainerError(f'Invalid container magic: {magic!r}')
        reader.skip(4)

        subheader_offset = reader.read_int64()
        footer_offset = reader.read_int64()
        if not SIR0_HEADER_SIZE <= subheader_offset <= footer_offset <= reader.size:
            raise MalformedContainerError(
                f'Subheader {subheader_offset:#x} / footer {footer_offset:#x} '
                f'outside container of {reader.size:#x} bytes'
            )

        return cls(data=memoryview(data), subheader_offset=subheader_offset, footer_offset=footer_offset)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def subheader(self) -> Reader:
        """Reader positioned at the start of the subheader."""
        return Reader(self.data[self.subheader_offset : self.footer_offset])

    def region(self, start: int, end: int) -> memoryview:
        """Slice ``[start, end)`` of the blob."""
        if not 0 <= start <= end <= self.size:
            raise MalformedContainerError(f'Region [{start:#x}, {end:#x}) outside container of {self.size:#x} bytes')
        return self.data[start:end]

    def read_pointers(self, count: int, offset: int = 0) -> list[int]:
        """Read ``count`` int64 pointers from the subheader starting at ``offset``."""
        subheader = self.subheader
        subheader.position = offset
        pointers = [subheader.read_int64() for _ in range(count)]
        for pointer in pointers:
            if not 0 <= pointer <= self.size:
                raise MalformedContainerError(f'Pointer {pointer:#x} outside container of {self.size:#x} bytes')
        return pointers

    def regions(self, count: int) -> list[memoryview]:
        """Split the data into ``count`` regions bounded by consecutive subheader pointers.

        The last region ends where the subheader begins.
        """
        bounds = self.read_pointers(count) + [self.subheader_offset]
        return [self.region(bounds[i], bounds[i + 1]) for i in range(count)]

    def pointer_locations(self) -> list[int]:
        """Locations of all pointers listed in the footer."""
        return decode_pointer_offsets(self.data[self.footer_offset :])


@dataclass
class Sir0Builder:
    """Append-only builder for a container blob.

    Callers write their regions first, remembering the offsets returned by
    ``write``, then open the subheader and write counts and pointers in the
    order their record kind expects.
    """

    _writer: Writer = field(default_factory=Writer, repr=False)
    _pointer_locations: list[int] = field(default_factory=list, repr=False)
    subheader_offset: int | None = None

    def __post_init__(self) -> None:
        self._writer.write_zeros(SIR0_HEADER_SIZE)

    @property
    def length(self) -> int:
        return self._writer.size

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Append bytes and return their start offset."""
        start = self.length
        self._writer.write_bytes(data)
        return start

    def align(self, alignment: int = ALIGNMENT, fill: int = 0) -> None:
        self._writer.align(alignment, fill)

    def write_pointer(self, value: int) -> int:
        """Append an int64 pointer and register its location for the footer."""
        start = self.length
        self._pointer_locations.append(start)
        self._writer.write_int64(value)
        return start

    def write_int64(self, value: int) -> int:
        start = self.length
        self._writer.write_int64(value)
        return start

    def write_int32(self, value: int) -> int:
        start = self.length
        self._writer.write_int32(value)
        return start

    def begin_subheader(self) -> int:
        """Align and mark the current position as the subheader start."""
        self.align(ALIGNMENT)
        self.subheader_offset = self.length
        return self.subheader_offset

    def build(self) -> bytes:
        """Write the footer, patch the header and return the blob."""
        if self.subheader_offset is None:
            self.begin_subheader()

        self.align(ALIGNMENT)
        footer_offset = self.length
        self._writer.write_bytes(encode_pointer_offsets([*HEADER_POINTER_LOCATIONS, *self._pointer_locations]))
        self.align(ALIGNMENT)

        end = self._writer.position
        self._writer.position = 0
        self._writer.write_bytes(SIR0_MAGIC)
        self._writer.write_uint32(0)
        self._writer.write_int64(self.subheader_offset)
        self._writer.write_int64(footer_offset)
        self._writer.position = end

        return self._writer.to_bytes()


def read_record_pointers(data: bytes | memoryview) -> tuple[Sir0, list[int]]:
    """Parse a container whose subheader is a record count followed by record pointers."""
    sir0 = Sir0.parse(data)
    count = sir0.subheader.read_int64()
    if count < 0:
        raise MalformedContainerError(f'Negative record count: {count}')
    return sir0, sir0.read_pointers(count, offset=0x08)


def build_record_table(records: list[bytes]) -> bytes:
    """Build a container holding ``records`` back to back with a count-and-pointers subheader."""
    sir0 = Sir0Builder()
    pointers = [sir0.write(record) for record in records]

    sir0.begin_subheader()
    sir0.write_int64(len(records))
    for pointer in pointers:
        sir0.write_pointer(pointer)
    return sir0.build()
