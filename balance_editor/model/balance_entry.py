"""One dungeon's balance entry.

The decompressed entry is a SIR0 container whose subheader holds four
pointers, in order: floor infos, wild spawns, trap weights, auxiliary table.
A table is present when the distance to the next pointer (the subheader for
the last table) is non-zero. The last three are nested SIR0 containers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.const import ALIGNMENT
from balance_editor.io.reader import Reader
from balance_editor.log import log
from balance_editor.model.auxiliary import AuxiliaryTable
from balance_editor.model.floor_info import FloorInfoEntry
from balance_editor.model.sir0 import Sir0, Sir0Builder
from balance_editor.model.trap_weights import TrapWeights
from balance_editor.model.wild_spawns import WildSpawnInfo

SLOT_COUNT = 4


@dataclass
class BalanceEntry:
    """Floor infos plus the optional wild spawn, trap weight and auxiliary tables."""

    floor_infos: list[FloorInfoEntry] = field(default_factory=list)
    wild_spawns: WildSpawnInfo | None = None
    trap_weights: TrapWeights | None = None
    auxiliary: AuxiliaryTable | None = None

    @classmethod
    def new(cls, floor_count: int) -> BalanceEntry:
        """Create an entry with ``floor_count`` blank floors and no other tables."""
        return cls(floor_infos=[FloorInfoEntry(index=i) for i in range(floor_count)])

    @classmethod
    def from_bytes(cls, data: bytes | memoryview) -> BalanceEntry:
        """Parse a decompressed entry.

        Raises:
            MalformedContainerError: If a slot points outside the buffer.
        """
        sir0 = Sir0.parse(data)
        floors_data, spawns_data, traps_data, aux_data = sir0.regions(SLOT_COUNT)

        floor_count = len(floors_data) // FloorInfoEntry.SIZE
        reader = Reader(floors_data)
        floor_infos = [FloorInfoEntry.read(reader) for _ in range(floor_count)]

        entry = cls(
            floor_infos=floor_infos,
            wild_spawns=WildSpawnInfo.from_bytes(spawns_data) if len(spawns_data) > 0 else None,
            trap_weights=TrapWeights.from_bytes(traps_data) if len(traps_data) > 0 else None,
            auxiliary=AuxiliaryTable.from_bytes(aux_data) if len(aux_data) > 0 else None,
        )
        log.debug(
            f'Balance entry: {floor_count} floors, '
            f'spawns={entry.wild_spawns is not None}, traps={entry.trap_weights is not None}, '
            f'auxiliary={entry.auxiliary is not None}'
        )
        return entry

    def to_bytes(self) -> bytes:
        """Build the decompressed entry.

        Absent tables produce zero-length slots.
        """
        sir0 = Sir0Builder()

        floors_pointer = sir0.length
        for floor in self.floor_infos:
            sir0.write(floor.to_bytes())

        pointers = [floors_pointer]
        for table in (self.wild_spawns, self.trap_weights, self.auxiliary):
            sir0.align(ALIGNMENT)
            pointers.append(sir0.length)
            if table is not None:
                sir0.write(table.to_bytes())

        sir0.begin_subheader()
        for pointer in pointers:
            sir0.write_pointer(pointer)
        return sir0.build()
