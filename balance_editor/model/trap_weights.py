"""Trap spawn weights of a dungeon balance entry.

One record per floor, each a fixed run of 33 (index, weight, reserved)
entries. The last entry is a terminator with weight -1; it is kept aside on
decode and appended again on encode so ``entries`` only holds real traps.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.const import (
    TRAP_ENTRY_COUNT,
    TRAP_ENTRY_SIZE,
    TRAP_MIN_ITEM_INDEX,
    TRAP_RECORD_COUNT,
    TRAP_TERMINATOR_WEIGHT,
)
from balance_editor.io.reader import Reader
from balance_editor.io.writer import Writer
from balance_editor.model.sir0 import build_record_table, read_record_pointers


@dataclass
class TrapWeightEntry:
    """Weight of one trap kind (8 bytes)."""

    index: int = 0  # int16 @ 0x00, offset from the first trap item
    weight: int = 0  # int16 @ 0x02
    reserved: int = 0  # int32 @ 0x04, always 0 in shipped data

    SIZE = TRAP_ENTRY_SIZE

    @classmethod
    def read(cls, reader: Reader) -> TrapWeightEntry:
        """Read TrapWeightEntry from reader."""
        return cls(
            index=reader.read_int16(),
            weight=reader.read_int16(),
            reserved=reader.read_int32(),
        )

    def write(self, writer: Writer) -> None:
        """Write TrapWeightEntry to writer."""
        writer.write_int16(self.index)
        writer.write_int16(self.weight)
        writer.write_int32(self.reserved)


def _terminator() -> TrapWeightEntry:
    return TrapWeightEntry(weight=TRAP_TERMINATOR_WEIGHT)


@dataclass
class TrapWeightRecord:
    """Trap weights of one floor: 32 visible entries plus the terminator."""

    entries: list[TrapWeightEntry] = field(
        default_factory=lambda: [TrapWeightEntry() for _ in range(TRAP_ENTRY_COUNT - 1)]
    )
    terminator: TrapWeightEntry = field(default_factory=_terminator)

    SIZE = TRAP_ENTRY_COUNT * TRAP_ENTRY_SIZE

    @classmethod
    def read(cls, reader: Reader) -> TrapWeightRecord:
        """Read TrapWeightRecord from reader."""
        entries = [TrapWeightEntry.read(reader) for _ in range(TRAP_ENTRY_COUNT - 1)]
        return cls(entries=entries, terminator=TrapWeightEntry.read(reader))

    def write(self, writer: Writer) -> None:
        """Write TrapWeightRecord to writer, terminator last."""
        for entry in self.entries:
            entry.write(writer)
        self.terminator.write(writer)

    def weights(self, trap_min: int = TRAP_MIN_ITEM_INDEX) -> dict[int, int]:
        """Map trap item index to weight. The first entry for an index wins."""
        result: dict[int, int] = {}
        for entry in self.entries:
            result.setdefault(trap_min + entry.index, entry.weight)
        return result

    def update_weights(self, weights: dict[int, int], trap_min: int = TRAP_MIN_ITEM_INDEX) -> None:
        """Overwrite weights of traps present in ``weights``; others are left as-is."""
        for entry in self.entries:
            key = trap_min + entry.index
            if key in weights:
                entry.weight = weights[key]


@dataclass
class TrapWeights:
    """Trap weight records, one per floor after the first."""

    records: list[TrapWeightRecord] = field(default_factory=list)

    @classmethod
    def new(cls, record_count: int = TRAP_RECORD_COUNT) -> TrapWeights:
        return cls(records=[TrapWeightRecord() for _ in range(record_count)])

    @classmethod
    def from_bytes(cls, data: bytes | memoryview) -> TrapWeights:
        """Parse the nested container."""
        sir0, pointers = read_record_pointers(data)
        records = [
            TrapWeightRecord.read(Reader(sir0.region(offset, offset + TrapWeightRecord.SIZE))) for offset in pointers
        ]
        return cls(records=records)

    def to_bytes(self) -> bytes:
        """Build the nested container."""
        blobs = []
        for record in self.records:
            writer = Writer()
            record.write(writer)
            blobs.append(writer.to_bytes())
        return build_record_table(blobs)
