"""Editable dungeon aggregate built by the dungeon collection.

Scalar values are copies of the archive records; edits reach the archives
only through ``DungeonCollection.flush``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.model.floor_info import FloorInfoEntry


@dataclass
class PokemonStatsModel:
    creature_index: int
    xp_yield: int = 0
    hit_points: int = 0
    attack: int = 0
    defense: int = 0
    special_attack: int = 0
    special_defense: int = 0
    speed: int = 0
    strong_foe: bool = False
    level: int = 0


@dataclass
class PokemonSpawnModel:
    stats_index: int  # creature index
    spawn_weight: int = 0
    recruitment_level: int = 0
    byte0b: int = 0


@dataclass
class ItemSetModel:
    item_kind_weights: dict[int, int] = field(default_factory=dict)
    item_weights: dict[int, int] = field(default_factory=dict)


@dataclass
class DungeonFloorModel(FloorInfoEntry):
    """Floor info fields plus data merged from the request level and trap/spawn tables.

    ``trap_weights`` maps trap item index to weight; ``None`` when the floor
    has no trap record. ``spawns`` lists creatures with a positive spawn rate.
    """

    is_boss_floor: bool = False
    trap_weights: dict[int, int] | None = None
    spawns: list[PokemonSpawnModel] | None = None


@dataclass
class DungeonModel:
    """One dungeon as seen by an editor.

    ``pokemon_stats`` and ``floors`` are only populated by a full load.
    Floor counts of -1 mean the source record does not exist.
    """

    id: int
    dungeon_name: str = ''
    features: int = 0
    data_info_short0a: int = 0
    sort_key: int = 0
    data_info_byte13: int = 0
    max_items: int = 0
    max_teammates: int = 0
    data_info_byte17: int = 0
    data_info_byte18: int = 0
    data_info_byte19: int = 0
    name_id: int = 0
    accessible_floor_count: int = -1
    unknown_floor_count: int = -1
    total_floor_count: int = -1

    item_sets: list[ItemSetModel] = field(default_factory=list)
    pokemon_stats: list[PokemonStatsModel] | None = None
    floors: list[DungeonFloorModel] | None = None
