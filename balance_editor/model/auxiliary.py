"""Fourth table of a dungeon balance entry.

45 records of 46 eight-byte entries. The meaning of the fields is unknown,
so they are carried as raw integers and written back bit for bit.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.const import AUX_ENTRY_COUNT, AUX_ENTRY_SIZE, AUX_RECORD_COUNT
from balance_editor.io.reader import Reader
from balance_editor.io.writer import Writer
from balance_editor.model.sir0 import build_record_table, read_record_pointers


@dataclass
class AuxiliaryEntry:
    short00: int = 0  # 0 through 45, skipping 13
    short02: int = 0  # 60 in shipped data
    int04: int = 0

    SIZE = AUX_ENTRY_SIZE

    @classmethod
    def read(cls, reader: Reader) -> AuxiliaryEntry:
        return cls(
            short00=reader.read_int16(),
            short02=reader.read_int16(),
            int04=reader.read_int32(),
        )

    def write(self, writer: Writer) -> None:
        writer.write_int16(self.short00)
        writer.write_int16(self.short02)
        writer.write_int32(self.int04)


@dataclass
class AuxiliaryRecord:
    entries: list[AuxiliaryEntry] = field(default_factory=lambda: [AuxiliaryEntry() for _ in range(AUX_ENTRY_COUNT)])

    SIZE = AUX_ENTRY_COUNT * AUX_ENTRY_SIZE

    @classmethod
    def read(cls, reader: Reader) -> AuxiliaryRecord:
        return cls(entries=[AuxiliaryEntry.read(reader) for _ in range(AUX_ENTRY_COUNT)])

    def write(self, writer: Writer) -> None:
        for entry in self.entries:
            entry.write(writer)


@dataclass
class AuxiliaryTable:
    records: list[AuxiliaryRecord] = field(default_factory=list)

    @classmethod
    def new(cls, record_count: int = AUX_RECORD_COUNT) -> AuxiliaryTable:
        return cls(records=[AuxiliaryRecord() for _ in range(record_count)])

    @classmethod
    def from_bytes(cls, data: bytes | memoryview) -> AuxiliaryTable:
        sir0, pointers = read_record_pointers(data)
        records = [
            AuxiliaryRecord.read(Reader(sir0.region(offset, offset + AuxiliaryRecord.SIZE))) for offset in pointers
        ]
        return cls(records=records)

    def to_bytes(self) -> bytes:
        blobs = []
        for record in self.records:
            writer = Writer()
            record.write(writer)
            blobs.append(writer.to_bytes())
        return build_record_table(blobs)
