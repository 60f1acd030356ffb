"""
Dungeon collection: merges the balance archive with its peer archives into one
editable ``DungeonModel`` per dungeon and writes edits back on ``flush``.

Models start as light-weight partial loads (no balance tables). Requesting a
model for editing reloads it with the balance tables and marks it dirty.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Callable

from balance_editor.const import DOJO_DUNGEON_INDICES, ITEM_KIND_COUNT, TRAP_MIN_ITEM_INDEX, WANTED_LV_CREATURE_INDEX
from balance_editor.errors import IndexOutOfRangeError
from balance_editor.log import log
from balance_editor.model.balance_entry import BalanceEntry
from balance_editor.model.dungeon import (
    DungeonFloorModel,
    DungeonModel,
    ItemSetModel,
    PokemonSpawnModel,
    PokemonStatsModel,
)
from balance_editor.model.floor_info import FloorInfoEntry
from balance_editor.model.peers import ItemArrangeEntry, ItemSet, RequestLevelMainEntry
from balance_editor.model.wild_spawns import SpawnFloor, WildSpawnInfo
from balance_editor.rom import RomArchives

FLOOR_INFO_FIELDS = [f.name for f in fields(FloorInfoEntry)]


def is_dojo_dungeon(index: int) -> bool:
    """Dojo dungeons are shown but never flushed: their spawn data is corrupt at the source."""
    return index in DOJO_DUNGEON_INDICES


def _element_at(items: list | None, index: int):
    if items is None or not 0 <= index < len(items):
        return None
    return items[index]


class DungeonCollection:
    """Lazily loaded, dirty-tracked dungeon models over a ``RomArchives``."""

    def __init__(
        self,
        rom: RomArchives,
        skip_flush: Callable[[int], bool] = is_dojo_dungeon,
        trap_min: int = TRAP_MIN_ITEM_INDEX,
    ) -> None:
        self.rom = rom
        self.skip_flush = skip_flush
        self.trap_min = trap_min
        self.loaded_dungeons: dict[int, DungeonModel] = {}
        self.dirty_dungeons: set[int] = set()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.rom.dungeon_count:
            raise IndexOutOfRangeError(f'Dungeon index {index} out of range [0, {self.rom.dungeon_count})')

    def get_by_id(
        self,
        index: int,
        mark_as_dirty: bool = True,
        force_temporary_full_load: bool = False,
    ) -> DungeonModel:
        """Get a dungeon model.

        Args:
            index: Dungeon index
            mark_as_dirty: The caller intends to edit. A clean cached model is
                replaced by a full load before the dungeon is marked dirty.
            force_temporary_full_load: Return a full load decoded in the
                balance archive's temporary mode. The cached model is dropped,
                the result is not cached and nothing is marked dirty.
        """
        self._check_index(index)

        if force_temporary_full_load:
            self.loaded_dungeons.pop(index, None)
            return self._load_dungeon(index, full_load=True, temporary=True)

        if mark_as_dirty and index not in self.dirty_dungeons:
            # Cached model is a partial load
            self.loaded_dungeons.pop(index, None)

        if index not in self.loaded_dungeons:
            # Dirty models are always full loads
            self.loaded_dungeons[index] = self._load_dungeon(
                index,
                full_load=mark_as_dirty or index in self.dirty_dungeons,
                temporary=self.skip_flush(index),
            )

        if mark_as_dirty:
            self.dirty_dungeons.add(index)
        return self.loaded_dungeons[index]

    def set_dungeon(self, index: int, model: DungeonModel) -> None:
        """Replace the model for ``index`` and mark it dirty. ``model.id`` is set to ``index``."""
        self._check_index(index)
        model.id = index
        self.dirty_dungeons.add(index)
        self.loaded_dungeons[index] = model

    def is_dirty(self, index: int) -> bool:
        return index in self.dirty_dungeons

    def load_all(self, mark_as_dirty: bool = True) -> list[DungeonModel]:
        """Load every dungeon and return the models ordered by sort key."""
        for index in range(self.rom.dungeon_count):
            self.get_by_id(index, mark_as_dirty)
        return sorted(self.loaded_dungeons.values(), key=lambda dungeon: dungeon.sort_key)

    def _load_dungeon(self, index: int, full_load: bool, temporary: bool) -> DungeonModel:
        """Build a model from the archives.

        Args:
            index: Dungeon index
            full_load: Include the balance tables (floors, stats). Needed for editing.
            temporary: Decode the balance entry without caching it in the archive.
        """
        rom = self.rom
        data = rom.dungeon_data_info[index]
        extra = rom.dungeon_extra.get(index)
        request_level = rom.request_level.get(index)
        main_entry = request_level.main_entry if request_level is not None else None
        item_arrange = rom.get_item_arrange(index)
        balance = rom.dungeon_balance.get_entry(data.dungeon_balance_index, temporary) if full_load else None

        if main_entry is not None:
            accessible_floor_count = main_entry.accessible_floor_count
        elif extra is not None:
            accessible_floor_count = extra.floors
        else:
            accessible_floor_count = -1

        log.debug(f'Loading dungeon {index} (full={full_load}, temporary={temporary})')
        return DungeonModel(
            id=index,
            dungeon_name=rom.get_dungeon_name(index),
            features=data.features,
            data_info_short0a=data.short0a,
            sort_key=data.sort_key,
            data_info_byte13=data.byte13,
            max_items=data.max_items,
            max_teammates=data.max_teammates,
            data_info_byte17=data.byte17,
            data_info_byte18=data.byte18,
            data_info_byte19=data.byte19,
            name_id=data.name_id,
            accessible_floor_count=accessible_floor_count,
            unknown_floor_count=main_entry.unk1 if main_entry is not None else -1,
            total_floor_count=main_entry.total_floor_count if main_entry is not None else -1,
            item_sets=self._load_item_sets(item_arrange),
            pokemon_stats=self._load_stats(balance.wild_spawns) if balance and balance.wild_spawns else None,
            floors=self._load_floors(balance, main_entry) if balance is not None else None,
        )

    @staticmethod
    def _load_stats(wild_spawns: WildSpawnInfo) -> list[PokemonStatsModel]:
        # Every dungeon carries a stats row for every creature; keep only the ones in use
        spawned = {
            entry.creature_index
            for floor in wild_spawns.floors
            for entry in floor.entries
            if entry.spawn_rate > 0 and entry.creature_index != WANTED_LV_CREATURE_INDEX
        }
        return [
            PokemonStatsModel(
                creature_index=stats.creature_index,
                xp_yield=stats.xp_yield,
                hit_points=stats.hit_points,
                attack=stats.attack,
                defense=stats.defense,
                special_attack=stats.special_attack,
                special_defense=stats.special_defense,
                speed=stats.speed,
                strong_foe=stats.strong_foe != 0,
                level=stats.level,
            )
            for stats in wild_spawns.stats
            if stats.creature_index in spawned or stats.strong_foe != 0 or stats.hit_points != 0
        ]

    @staticmethod
    def _load_item_sets(item_arrange: ItemArrangeEntry | None) -> list[ItemSetModel]:
        if item_arrange is None:
            return []
        return [
            ItemSetModel(
                item_kind_weights=dict(enumerate(item_set.item_kind_weights)),
                item_weights=dict(item_set.item_weights),
            )
            for item_set in item_arrange.item_sets
        ]

    def _load_floors(self, balance: BalanceEntry, main_entry: RequestLevelMainEntry | None) -> list[DungeonFloorModel]:
        floors = []
        request_floors = main_entry.floor_data if main_entry is not None else None
        trap_records = balance.trap_weights.records if balance.trap_weights is not None else None
        spawn_floors = balance.wild_spawns.floors if balance.wild_spawns is not None else None

        for i, info in enumerate(balance.floor_infos):
            request_floor = _element_at(request_floors, i)
            # Trap and spawn tables have no row for floor 0
            trap_record = _element_at(trap_records, i - 1) if i > 0 else None
            spawn_floor = _element_at(spawn_floors, i - 1) if i > 0 else None

            floors.append(
                DungeonFloorModel(
                    **{name: getattr(info, name) for name in FLOOR_INFO_FIELDS},
                    is_boss_floor=request_floor is not None and request_floor.is_boss_floor != 0,
                    trap_weights=trap_record.weights(self.trap_min) if trap_record is not None else None,
                    spawns=self._load_spawns(spawn_floor) if spawn_floor is not None else None,
                )
            )
        return floors

    @staticmethod
    def _load_spawns(spawn_floor: SpawnFloor) -> list[PokemonSpawnModel]:
        return [
            PokemonSpawnModel(
                stats_index=entry.creature_index,
                spawn_weight=entry.spawn_rate,
                recruitment_level=entry.recruitment_level,
                byte0b=entry.byte0b,
            )
            for entry in spawn_floor.entries
            if entry.spawn_rate > 0
        ]

    def flush(self, rom: RomArchives | None = None) -> None:
        """Write every loaded model back into the archive records.

        Dungeons matched by ``skip_flush`` are left untouched.

        Raises:
            IndexOutOfRangeError: If an item set has a negative item kind.
                Nothing is written in that case.
        """
        rom = rom if rom is not None else self.rom
        for index, dungeon in self.loaded_dungeons.items():
            if not self.skip_flush(index) and dungeon.item_sets is not None:
                self._check_item_sets(index, dungeon.item_sets)

        flushed = 0

        for index, dungeon in self.loaded_dungeons.items():
            if self.skip_flush(index):
                if index in self.dirty_dungeons:
                    log.warning(f'Not flushing dungeon {index}: excluded from writes')
                continue

            data = rom.dungeon_data_info[index]
            extra = rom.dungeon_extra.get(index)
            request_level = rom.request_level.get(index)
            main_entry = request_level.main_entry if request_level is not None else None
            item_arrange = rom.get_item_arrange(index)

            data.features = dungeon.features
            data.short0a = dungeon.data_info_short0a
            data.sort_key = dungeon.sort_key
            data.byte13 = dungeon.data_info_byte13
            data.max_items = dungeon.max_items
            data.max_teammates = dungeon.max_teammates
            data.byte17 = dungeon.data_info_byte17
            data.byte18 = dungeon.data_info_byte18
            data.byte19 = dungeon.data_info_byte19
            data.name_id = dungeon.name_id

            if dungeon.accessible_floor_count > -1:
                if extra is not None:
                    extra.floors = dungeon.accessible_floor_count
                if main_entry is not None:
                    main_entry.accessible_floor_count = dungeon.accessible_floor_count
            if main_entry is not None:
                if dungeon.unknown_floor_count > -1:
                    main_entry.unk1 = dungeon.unknown_floor_count
                if dungeon.total_floor_count > -1:
                    main_entry.total_floor_count = dungeon.total_floor_count

            if dungeon.pokemon_stats is not None or dungeon.floors is not None:
                balance = rom.dungeon_balance.get_entry(data.dungeon_balance_index)
                if dungeon.pokemon_stats is not None and balance.wild_spawns is not None:
                    self._flush_stats(dungeon.pokemon_stats, balance.wild_spawns)
                if dungeon.floors is not None:
                    self._flush_floors(dungeon.floors, balance, main_entry)

            if dungeon.item_sets is not None and item_arrange is not None:
                self._flush_item_sets(dungeon.item_sets, item_arrange)

            flushed += 1

        log.info(f'Flushed {flushed}/{len(self.loaded_dungeons)} loaded dungeons')

    @staticmethod
    def _flush_stats(models: list[PokemonStatsModel], wild_spawns: WildSpawnInfo) -> None:
        by_creature = {model.creature_index: model for model in models}
        for stats in wild_spawns.stats:
            model = by_creature.get(stats.creature_index)
            if model is None:
                stats.clear()
                continue
            stats.xp_yield = model.xp_yield
            stats.hit_points = model.hit_points
            stats.attack = model.attack
            stats.special_attack = model.special_attack
            stats.defense = model.defense
            stats.special_defense = model.special_defense
            stats.speed = model.speed
            stats.strong_foe = 1 if model.strong_foe else 0
            stats.level = model.level

    @staticmethod
    def _check_item_sets(index: int, models: list[ItemSetModel]) -> None:
        for model in models:
            negative = [kind for kind in model.item_kind_weights if kind < 0]
            if negative:
                raise IndexOutOfRangeError(f'Dungeon {index} item set has negative item kinds: {negative}')

    @staticmethod
    def _flush_item_sets(models: list[ItemSetModel], item_arrange: ItemArrangeEntry) -> None:
        item_arrange.item_sets.clear()
        for model in models:
            kind_weights = [0] * max(ITEM_KIND_COUNT, max(model.item_kind_weights, default=-1) + 1)
            for kind, weight in model.item_kind_weights.items():
                kind_weights[kind] = weight
            item_arrange.item_sets.append(ItemSet(item_kind_weights=kind_weights, item_weights=dict(model.item_weights)))

    def _flush_floors(
        self,
        models: list[DungeonFloorModel],
        balance: BalanceEntry,
        main_entry: RequestLevelMainEntry | None,
    ) -> None:
        request_floors = main_entry.floor_data if main_entry is not None else None
        trap_records = balance.trap_weights.records if balance.trap_weights is not None else None
        spawn_floors = balance.wild_spawns.floors if balance.wild_spawns is not None else None

        for i, info in enumerate(balance.floor_infos):
            model = _element_at(models, i)
            if model is None:
                continue

            for name in FLOOR_INFO_FIELDS:
                if name != 'index':
                    setattr(info, name, getattr(model, name))

            request_floor = _element_at(request_floors, i)
            if request_floor is not None:
                request_floor.short4 = model.short02
                request_floor.short6 = model.min_money_stack_size
                request_floor.short8 = model.max_money_stack_size
                request_floor.name_id = model.name_id
                request_floor.is_boss_floor = 1 if model.is_boss_floor else 0

            if i == 0:
                continue

            trap_record = _element_at(trap_records, i - 1)
            if model.trap_weights is not None and trap_record is not None:
                trap_record.update_weights(model.trap_weights, self.trap_min)

            spawn_floor = _element_at(spawn_floors, i - 1)
            if model.spawns is not None and spawn_floor is not None:
                self._flush_spawns(model.spawns, spawn_floor)

    @staticmethod
    def _flush_spawns(models: list[PokemonSpawnModel], spawn_floor: SpawnFloor) -> None:
        by_creature = {model.stats_index: model for model in models}
        for entry in spawn_floor.entries:
            model = by_creature.get(entry.creature_index)
            if model is None:
                entry.spawn_rate = 0
                entry.recruitment_level = 0
                entry.byte0b = 0
                continue
            entry.spawn_rate = model.spawn_weight
            entry.recruitment_level = model.recruitment_level
            entry.byte0b = model.byte0b
