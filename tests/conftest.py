"""
Pytest configuration and shared fixtures.

Archives are built in memory from synthetic balance entries; no game data is
needed to run the tests.
"""

from pathlib import Path

import pytest

from balance_editor.compression import ZlibCompressor
from balance_editor.const import ALIGNMENT
from balance_editor.dungeon_balance import DungeonBalance
from balance_editor.io.writer import Writer
from balance_editor.model.auxiliary import AuxiliaryTable
from balance_editor.model.balance_entry import BalanceEntry
from balance_editor.model.peers import (
    DungeonDataInfoEntry,
    DungeonExtraEntry,
    ItemArrangeEntry,
    ItemSet,
    RequestLevelEntry,
    RequestLevelFloor,
    RequestLevelMainEntry,
)
from balance_editor.model.trap_weights import TrapWeights
from balance_editor.model.wild_spawns import WildSpawnInfo
from balance_editor.rom import RomArchives

FLOOR_COUNT = 3
CREATURE_COUNT = 4


def make_balance_entry(floor_count: int = FLOOR_COUNT, creature_count: int = CREATURE_COUNT) -> BalanceEntry:
    """Small balance entry with every table present.

    Stats: creature 1 has hit points, creature 2 is a strong foe, creatures 3
    and 4 are blank. Creatures 1 and 4 spawn on floor 1, creature 2 on floor 2.
    """
    entry = BalanceEntry.new(floor_count)
    for floor in entry.floor_infos:
        floor.turn_limit = 1000
        floor.min_money_stack_size = 10
        floor.max_money_stack_size = 50
        floor.room_count = 6
        floor.bytes_5a_to_61 = bytes(range(1, 9))
    entry.floor_infos[1].event = 'boss'

    spawns = WildSpawnInfo.new(creature_count, floor_count - 1)
    spawns.stats[0].xp_yield = 100
    spawns.stats[0].hit_points = 30
    spawns.stats[0].level = 5
    spawns.stats[0].trailing = b'\x01\x02\x03'
    spawns.stats[1].strong_foe = 1
    for floor in spawns.floors:
        for i, spawn in enumerate(floor.entries):
            spawn.creature_index = i + 1
            spawn.bytes_03_to_09 = b'\xaa' * 7
    spawns.floors[0].entries[0].spawn_rate = 10
    spawns.floors[0].entries[0].recruitment_level = 3
    spawns.floors[0].entries[3].spawn_rate = 5
    spawns.floors[1].entries[1].spawn_rate = 7
    entry.wild_spawns = spawns

    traps = TrapWeights.new(floor_count - 1)
    for record in traps.records:
        for i, trap in enumerate(record.entries):
            trap.index = i
    traps.records[0].entries[0].weight = 20
    traps.records[0].entries[1].weight = 30
    entry.trap_weights = traps

    auxiliary = AuxiliaryTable.new(2)
    auxiliary.records[0].entries[0].short00 = 1
    auxiliary.records[0].entries[0].short02 = 60
    auxiliary.records[0].entries[0].int04 = 0x12345678
    entry.auxiliary = auxiliary
    return entry


def build_archive(entries: list, compressor=None) -> tuple[bytes, bytes]:
    """Write an archive from balance entries (or raw compressed slices)."""
    compressor = compressor if compressor is not None else ZlibCompressor()
    bin_writer = Writer()
    ent_writer = Writer()
    ent_writer.write_int32(0)
    for entry in entries:
        data = entry if isinstance(entry, bytes) else compressor.compress(entry.to_bytes())
        bin_writer.write_bytes(data)
        bin_writer.align(ALIGNMENT)
        ent_writer.write_int32(bin_writer.size)
    return bin_writer.to_bytes(), ent_writer.to_bytes()


@pytest.fixture()
def balance_entry() -> BalanceEntry:
    return make_balance_entry()


@pytest.fixture()
def archive_data() -> tuple[bytes, bytes]:
    """Three-entry archive: a full entry, a floors-only entry, another full entry."""
    return build_archive([make_balance_entry(), BalanceEntry.new(2), make_balance_entry()])


@pytest.fixture()
def dungeon_balance(archive_data: tuple[bytes, bytes]) -> DungeonBalance:
    bin_data, ent_data = archive_data
    return DungeonBalance(bin_data, ent_data)


@pytest.fixture()
def archive_files(tmp_path: Path, archive_data: tuple[bytes, bytes]) -> tuple[Path, Path]:
    bin_path = tmp_path / 'dungeon_balance.bin'
    ent_path = tmp_path / 'dungeon_balance.ent'
    bin_path.write_bytes(archive_data[0])
    ent_path.write_bytes(archive_data[1])
    return bin_path, ent_path


@pytest.fixture()
def rom(dungeon_balance: DungeonBalance) -> RomArchives:
    """Three dungeons over the fixture archive.

    Dungeon 0 has only an extra record, dungeon 1 has request level and item
    arrange records, dungeon 2 has neither. Sort keys order them 1, 2, 0.
    """
    request_floors = [RequestLevelFloor(name_id=i) for i in range(FLOOR_COUNT)]
    request_floors[2].is_boss_floor = 1

    return RomArchives(
        dungeon_data_info=[
            DungeonDataInfoEntry(sort_key=30, max_items=48, dungeon_balance_index=0),
            DungeonDataInfoEntry(sort_key=10, max_items=32, max_teammates=4, dungeon_balance_index=2),
            DungeonDataInfoEntry(sort_key=20, max_items=16, dungeon_balance_index=1),
        ],
        dungeon_balance=dungeon_balance,
        dungeon_extra={0: DungeonExtraEntry(floors=5)},
        item_arrange=[ItemArrangeEntry(item_sets=[ItemSet(item_kind_weights=[1, 2, 3], item_weights={5: 10})])],
        request_level={
            1: RequestLevelEntry(
                main_entry=RequestLevelMainEntry(
                    accessible_floor_count=3,
                    unk1=2,
                    total_floor_count=3,
                    floor_data=request_floors,
                )
            ),
        },
        dungeon_names={1: 'Beach Cave'},
    )
