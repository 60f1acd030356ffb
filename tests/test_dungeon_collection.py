"""
Tests for the dungeon collection: partial/full loads, dirty tracking and flush.
"""

import logging

import pytest

from balance_editor.const import TRAP_MIN_ITEM_INDEX, WANTED_LV_CREATURE_INDEX
from balance_editor.dungeon_balance import DungeonBalance
from balance_editor.dungeon_collection import DungeonCollection, is_dojo_dungeon
from balance_editor.errors import IndexOutOfRangeError
from balance_editor.model.dungeon import DungeonModel, PokemonSpawnModel
from balance_editor.model.wild_spawns import WildSpawnInfo
from balance_editor.rom import RomArchives


@pytest.fixture()
def collection(rom: RomArchives) -> DungeonCollection:
    return DungeonCollection(rom)


def test_partial_load(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1, mark_as_dirty=False)

    assert dungeon.floors is None
    assert dungeon.pokemon_stats is None
    assert dungeon.dungeon_name == 'Beach Cave'
    assert dungeon.max_teammates == 4
    assert not collection.is_dirty(1)
    assert not rom.dungeon_balance.is_loaded(2)


def test_dirty_transition_reloads_full(collection: DungeonCollection, rom: RomArchives) -> None:
    partial = collection.get_by_id(1, mark_as_dirty=False)
    full = collection.get_by_id(1)

    assert full is not partial
    assert full.floors is not None
    assert full.pokemon_stats is not None
    assert collection.is_dirty(1)
    assert rom.dungeon_balance.is_loaded(2)

    # Cached from now on, regardless of the flag
    assert collection.get_by_id(1) is full
    assert collection.get_by_id(1, mark_as_dirty=False) is full


def test_clean_partial_load_is_cached(collection: DungeonCollection) -> None:
    first = collection.get_by_id(0, mark_as_dirty=False)
    assert collection.get_by_id(0, mark_as_dirty=False) is first


def test_force_temporary_full_load(collection: DungeonCollection, rom: RomArchives) -> None:
    collection.get_by_id(1, mark_as_dirty=False)
    dungeon = collection.get_by_id(1, force_temporary_full_load=True)

    assert dungeon.floors is not None
    assert 1 not in collection.loaded_dungeons
    assert not collection.is_dirty(1)
    assert not rom.dungeon_balance.is_loaded(2)

    # Takes precedence over mark_as_dirty
    again = collection.get_by_id(1, mark_as_dirty=True, force_temporary_full_load=True)
    assert again is not dungeon
    assert not collection.is_dirty(1)


def test_index_out_of_range(collection: DungeonCollection) -> None:
    with pytest.raises(IndexOutOfRangeError):
        collection.get_by_id(3)
    with pytest.raises(IndexOutOfRangeError):
        collection.set_dungeon(-1, DungeonModel(id=-1))


def test_load_all_sorted(collection: DungeonCollection) -> None:
    dungeons = collection.load_all(mark_as_dirty=False)

    assert [d.id for d in dungeons] == [1, 2, 0]
    assert not any(collection.is_dirty(i) for i in range(3))

    dungeons = collection.load_all()
    assert all(d.floors is not None for d in dungeons)
    assert all(collection.is_dirty(i) for i in range(3))


def test_floor_counts(collection: DungeonCollection) -> None:
    assert collection.get_by_id(0, False).accessible_floor_count == 5
    assert collection.get_by_id(1, False).accessible_floor_count == 3
    assert collection.get_by_id(1, False).unknown_floor_count == 2
    assert collection.get_by_id(2, False).accessible_floor_count == -1
    assert collection.get_by_id(2, False).total_floor_count == -1


def test_dungeon_names(collection: DungeonCollection) -> None:
    assert collection.get_by_id(0, False).dungeon_name == '(Unknown: 0)'


def test_item_sets_loaded(collection: DungeonCollection) -> None:
    assert collection.get_by_id(0, False).item_sets == []

    (item_set,) = collection.get_by_id(1, False).item_sets
    assert item_set.item_kind_weights == {0: 1, 1: 2, 2: 3}
    assert item_set.item_weights == {5: 10}


def test_stats_selection(collection: DungeonCollection) -> None:
    stats = collection.get_by_id(1).pokemon_stats

    # 1: spawns and has hit points, 2: strong foe, 4: spawns; 3 unused
    assert [s.creature_index for s in stats] == [1, 2, 4]
    assert stats[0].hit_points == 30
    assert stats[0].level == 5
    assert stats[1].strong_foe is True
    assert stats[2].strong_foe is False


def test_stats_ignore_wanted_level_slot() -> None:
    info = WildSpawnInfo.new(creature_count=WANTED_LV_CREATURE_INDEX, floor_count=1)
    spawn = info.floors[0].entries[0]
    spawn.creature_index = WANTED_LV_CREATURE_INDEX
    spawn.spawn_rate = 10

    assert DungeonCollection._load_stats(info) == []


def test_floors_loaded(collection: DungeonCollection) -> None:
    floors = collection.get_by_id(1).floors

    assert [f.index for f in floors] == [0, 1, 2]
    assert floors[1].event == 'boss'
    assert floors[1].bytes_5a_to_61 == bytes(range(1, 9))

    # Floor 0 has no trap or spawn record
    assert floors[0].trap_weights is None
    assert floors[0].spawns is None

    assert floors[1].trap_weights[TRAP_MIN_ITEM_INDEX] == 20
    assert floors[1].trap_weights[TRAP_MIN_ITEM_INDEX + 1] == 30
    assert floors[1].spawns == [
        PokemonSpawnModel(stats_index=1, spawn_weight=10, recruitment_level=3, byte0b=0),
        PokemonSpawnModel(stats_index=4, spawn_weight=5, recruitment_level=0, byte0b=0),
    ]
    assert [s.stats_index for s in floors[2].spawns] == [2]

    assert [f.is_boss_floor for f in floors] == [False, False, True]


def test_floors_only_entry(collection: DungeonCollection) -> None:
    dungeon = collection.get_by_id(2)

    assert len(dungeon.floors) == 2
    assert dungeon.pokemon_stats is None
    assert all(f.trap_weights is None and f.spawns is None for f in dungeon.floors)


def test_flush_scalars(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1)
    dungeon.max_items = 9
    dungeon.sort_key = 99
    dungeon.accessible_floor_count = 2
    dungeon.total_floor_count = 4
    collection.flush(rom)

    data = rom.dungeon_data_info[1]
    assert data.max_items == 9
    assert data.sort_key == 99

    main_entry = rom.request_level[1].main_entry
    assert main_entry.accessible_floor_count == 2
    assert main_entry.total_floor_count == 4
    assert main_entry.unk1 == 2


def test_flush_extra_floor_count(collection: DungeonCollection, rom: RomArchives) -> None:
    collection.get_by_id(0).accessible_floor_count = 7
    collection.flush()

    assert rom.dungeon_extra[0].floors == 7


def test_flush_floors(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1)
    dungeon.floors[1].turn_limit = 500
    dungeon.floors[1].index = 42
    dungeon.floors[2].short02 = 11
    dungeon.floors[2].min_money_stack_size = 12
    dungeon.floors[2].is_boss_floor = False
    collection.flush(rom)

    entry = rom.dungeon_balance.get_entry(2)
    assert entry.floor_infos[1].turn_limit == 500
    assert entry.floor_infos[1].index == 1

    request_floor = rom.request_level[1].main_entry.floor_data[2]
    assert request_floor.short4 == 11
    assert request_floor.short6 == 12
    assert request_floor.short8 == 50
    assert request_floor.is_boss_floor == 0


def test_flush_trap_weights_only_present_keys(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1)
    dungeon.floors[1].trap_weights = {TRAP_MIN_ITEM_INDEX + 1: 77}
    collection.flush(rom)

    record = rom.dungeon_balance.get_entry(2).trap_weights.records[0]
    assert record.entries[0].weight == 20
    assert record.entries[1].weight == 77


def test_flush_spawns_resets_absent(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1)
    dungeon.floors[1].spawns = [PokemonSpawnModel(stats_index=1, spawn_weight=15, recruitment_level=4, byte0b=1)]
    collection.flush(rom)

    entries = rom.dungeon_balance.get_entry(2).wild_spawns.floors[0].entries
    assert (entries[0].spawn_rate, entries[0].recruitment_level, entries[0].byte0b) == (15, 4, 1)
    assert (entries[3].spawn_rate, entries[3].recruitment_level, entries[3].byte0b) == (0, 0, 0)
    # Opaque bytes untouched
    assert entries[3].bytes_03_to_09 == b'\xaa' * 7


def test_flush_stats_clears_absent(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1)
    dungeon.pokemon_stats = [s for s in dungeon.pokemon_stats if s.creature_index != 1]
    dungeon.pokemon_stats[0].level = 40
    collection.flush(rom)

    stats = rom.dungeon_balance.get_entry(2).wild_spawns.stats
    assert stats[0].hit_points == 0
    assert stats[0].xp_yield == 0
    assert stats[0].trailing == b'\x01\x02\x03'
    assert stats[1].level == 40
    assert stats[1].strong_foe == 1


def test_flush_item_sets(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1)
    dungeon.item_sets[0].item_kind_weights[16] = 4
    dungeon.item_sets[0].item_weights[6] = 1
    collection.flush(rom)

    (item_set,) = rom.item_arrange[0].item_sets
    assert item_set.item_kind_weights == [1, 2, 3] + [0] * 13 + [4]
    assert item_set.item_weights == {5: 10, 6: 1}


def test_flush_partial_load_skips_balance(collection: DungeonCollection, rom: RomArchives) -> None:
    collection.get_by_id(0, mark_as_dirty=False).max_items = 1
    collection.flush(rom)

    assert rom.dungeon_data_info[0].max_items == 1
    assert not rom.dungeon_balance.is_loaded(0)


def test_flush_round_trip_through_archive(collection: DungeonCollection, rom: RomArchives) -> None:
    collection.get_by_id(1).floors[2].room_count = 2
    collection.flush(rom)

    reopened = DungeonBalance(*rom.dungeon_balance.build())
    assert reopened.get_entry(2).floor_infos[2].room_count == 2
    assert reopened.get_entry(0) == rom.dungeon_balance.get_entry(0, temporary=True)


def test_unedited_flush_is_identity(
    collection: DungeonCollection,
    rom: RomArchives,
    archive_data: tuple[bytes, bytes],
) -> None:
    collection.load_all()
    collection.flush(rom)

    assert rom.dungeon_balance.build() == archive_data


def test_is_dojo_dungeon() -> None:
    assert is_dojo_dungeon(80)
    assert is_dojo_dungeon(92)
    assert not is_dojo_dungeon(79)
    assert not is_dojo_dungeon(93)


def test_excluded_dungeon_is_not_flushed(
    rom: RomArchives,
    archive_data: tuple[bytes, bytes],
    caplog: pytest.LogCaptureFixture,
) -> None:
    collection = DungeonCollection(rom, skip_flush=lambda index: index == 0)
    dungeon = collection.get_by_id(0)
    dungeon.max_items = 1
    dungeon.floors[1].turn_limit = 5

    with caplog.at_level(logging.WARNING):
        collection.flush(rom)

    assert rom.dungeon_data_info[0].max_items == 48
    # Loaded in temporary mode, never cached
    assert not rom.dungeon_balance.is_loaded(0)
    assert rom.dungeon_balance.build() == archive_data
    assert 'Not flushing dungeon 0' in caplog.text


def test_set_dungeon(collection: DungeonCollection, rom: RomArchives) -> None:
    model = DungeonModel(id=2, sort_key=1, max_items=3)
    collection.set_dungeon(2, model)

    assert collection.is_dirty(2)
    assert collection.get_by_id(2) is model

    collection.flush(rom)
    assert rom.dungeon_data_info[2].max_items == 3


def test_set_dungeon_takes_index(collection: DungeonCollection, rom: RomArchives) -> None:
    model = DungeonModel(id=1, sort_key=5, max_items=7)
    collection.set_dungeon(2, model)

    assert model.id == 2
    collection.flush(rom)
    assert rom.dungeon_data_info[2].max_items == 7
    assert rom.dungeon_data_info[1].max_items == 32


def test_flush_rejects_negative_item_kind(collection: DungeonCollection, rom: RomArchives) -> None:
    dungeon = collection.get_by_id(1)
    dungeon.max_items = 1
    dungeon.item_sets[0].item_kind_weights[-1] = 9

    with pytest.raises(IndexOutOfRangeError):
        collection.flush(rom)

    assert rom.dungeon_data_info[1].max_items == 32
    assert rom.item_arrange[0].item_sets[0].item_kind_weights == [1, 2, 3]
