"""Wild creature spawn tables of a dungeon balance entry.

Stored as a nested SIR0 container:

- Data: one stats entry per creature, a pointer table to those entries, then
  for every floor one spawn entry per creature padded to 16 bytes with 0xFF
- Subheader: stats count (int64), pointer to the stats pointer table, floor
  count (int64), one pointer per floor
"""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.const import (
    ALIGNMENT,
    CREATURE_COUNT,
    MAX_FLOOR_COUNT,
    SPAWN_ENTRY_SIZE,
    SPAWN_PADDING_BYTE,
    STATS_ENTRY_SIZE,
)
from balance_editor.errors import MalformedContainerError
from balance_editor.io.reader import Reader
from balance_editor.io.writer import Writer
from balance_editor.log import log
from balance_editor.model.sir0 import Sir0, Sir0Builder


@dataclass
class StatsEntry:
    """Per-dungeon stats of one creature (16 bytes)."""

    index: int = 0  # position in the stats table, not stored
    xp_yield: int = 0  # int32 @ 0x00
    hit_points: int = 0  # int16 @ 0x04
    attack: int = 0
    special_attack: int = 0
    defense: int = 0
    special_defense: int = 0
    speed: int = 0
    strong_foe: int = 0  # byte @ 0x0B
    level: int = 0  # byte @ 0x0C
    trailing: bytes = field(default=bytes(3))  # 0x0D-0x0F

    SIZE = STATS_ENTRY_SIZE

    @property
    def creature_index(self) -> int:
        """Creature index this row describes (stats table is 1-based)."""
        return self.index + 1

    @classmethod
    def read(cls, reader: Reader, index: int) -> StatsEntry:
        """Read StatsEntry from reader."""
        return cls(
            index=index,
            xp_yield=reader.read_int32(),
            hit_points=reader.read_int16(),
            attack=reader.read_uint8(),
            special_attack=reader.read_uint8(),
            defense=reader.read_uint8(),
            special_defense=reader.read_uint8(),
            speed=reader.read_uint8(),
            strong_foe=reader.read_uint8(),
            level=reader.read_uint8(),
            trailing=reader.read_bytes(3),
        )

    def write(self, writer: Writer) -> None:
        """Write StatsEntry to writer."""
        writer.write_int32(self.xp_yield)
        writer.write_int16(self.hit_points)
        writer.write_uint8(self.attack)
        writer.write_uint8(self.special_attack)
        writer.write_uint8(self.defense)
        writer.write_uint8(self.special_defense)
        writer.write_uint8(self.speed)
        writer.write_uint8(self.strong_foe)
        writer.write_uint8(self.level)
        writer.write_bytes(self.trailing)

    def clear(self) -> None:
        """Reset to an unused row."""
        self.xp_yield = 0
        self.hit_points = 0
        self.attack = 0
        self.special_attack = 0
        self.defense = 0
        self.special_defense = 0
        self.speed = 0
        self.strong_foe = 0
        self.level = 0


@dataclass
class SpawnEntry:
    """Spawn slot of one creature on one floor (16 bytes)."""

    creature_index: int = 0  # int16 @ 0x00
    spawn_rate: int = 0  # byte @ 0x02
    bytes_03_to_09: bytes = field(default=bytes(7))
    recruitment_level: int = 0  # byte @ 0x0A
    byte0b: int = 0
    bytes_0c_to_0f: bytes = field(default=bytes(4))

    SIZE = SPAWN_ENTRY_SIZE

    @classmethod
    def read(cls, reader: Reader) -> SpawnEntry:
        """Read SpawnEntry from reader."""
        return cls(
            creature_index=reader.read_int16(),
            spawn_rate=reader.read_uint8(),
            bytes_03_to_09=reader.read_bytes(7),
            recruitment_level=reader.read_uint8(),
            byte0b=reader.read_uint8(),
            bytes_0c_to_0f=reader.read_bytes(4),
        )

    def write(self, writer: Writer) -> None:
        """Write SpawnEntry to writer."""
        writer.write_int16(self.creature_index)
        writer.write_uint8(self.spawn_rate)
        writer.write_bytes(self.bytes_03_to_09)
        writer.write_uint8(self.recruitment_level)
        writer.write_uint8(self.byte0b)
        writer.write_bytes(self.bytes_0c_to_0f)


@dataclass
class SpawnFloor:
    """Spawn table of one floor, one entry per creature."""

    entries: list[SpawnEntry] = field(default_factory=list)

    @classmethod
    def blank(cls, entry_count: int) -> SpawnFloor:
        return cls(entries=[SpawnEntry() for _ in range(entry_count)])


@dataclass
class WildSpawnInfo:
    """Creature stats plus per-floor spawn tables."""

    stats: list[StatsEntry] = field(default_factory=list)
    floors: list[SpawnFloor] = field(default_factory=list)

    @classmethod
    def new(cls, creature_count: int = CREATURE_COUNT, floor_count: int = MAX_FLOOR_COUNT) -> WildSpawnInfo:
        """Create blank tables with every creature unused."""
        return cls(
            stats=[StatsEntry(index=i) for i in range(creature_count)],
            floors=[SpawnFloor.blank(creature_count) for _ in range(floor_count)],
        )

    @classmethod
    def from_bytes(cls, data: bytes | memoryview) -> WildSpawnInfo:
        """Parse the nested container."""
        sir0 = Sir0.parse(data)
        subheader = sir0.subheader

        stats_count = subheader.read_int64()
        stats_table = subheader.read_int64()
        floor_count = subheader.read_int64()
        if stats_count < 0 or floor_count < 0:
            raise MalformedContainerError(f'Negative spawn table counts: {stats_count} stats, {floor_count} floors')

        body = Reader(sir0.data)
        stats = []
        for i in range(stats_count):
            offset = body.peek_int64(stats_table + i * 8)
            stats.append(StatsEntry.read(Reader(sir0.region(offset, offset + StatsEntry.SIZE)), i))

        floors = []
        for offset in sir0.read_pointers(floor_count, offset=0x18):
            reader = Reader(sir0.region(offset, offset + stats_count * SpawnEntry.SIZE))
            floors.append(SpawnFloor(entries=[SpawnEntry.read(reader) for _ in range(stats_count)]))

        log.debug(f'Wild spawns: {stats_count} creatures, {floor_count} floors')
        return cls(stats=stats, floors=floors)

    def to_bytes(self) -> bytes:
        """Build the nested container, regenerating every pointer table."""
        sir0 = Sir0Builder()

        stats_pointers = []
        for stats in self.stats:
            writer = Writer()
            stats.write(writer)
            stats_pointers.append(sir0.write(writer.to_bytes()))

        stats_table = sir0.length
        for pointer in stats_pointers:
            sir0.write_pointer(pointer)

        floor_pointers = []
        for floor in self.floors:
            writer = Writer()
            for entry in floor.entries:
                entry.write(writer)
            floor_pointers.append(sir0.write(writer.to_bytes()))
            sir0.align(ALIGNMENT, SPAWN_PADDING_BYTE)

        sir0.begin_subheader()
        sir0.write_int64(len(self.stats))
        sir0.write_pointer(stats_table)
        sir0.write_int64(len(self.floors))
        for pointer in floor_pointers:
            sir0.write_pointer(pointer)
        return sir0.build()
