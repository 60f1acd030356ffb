"""Records from the archives that sit beside the balance archive.

These are decoded elsewhere; only the fields the dungeon collection reads and
writes back are modelled here.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DungeonDataInfoEntry:
    """Dungeon metadata (always present for every dungeon index)."""

    features: int = 0  # dungeon feature flags
    short0a: int = 0
    sort_key: int = 0
    byte13: int = 0
    max_items: int = 0
    max_teammates: int = 0
    byte17: int = 0
    byte18: int = 0
    byte19: int = 0
    name_id: int = 0
    dungeon_balance_index: int = 0


@dataclass
class DungeonExtraEntry:
    floors: int = 0


@dataclass
class RequestLevelFloor:
    short4: int = 0
    short6: int = 0
    short8: int = 0
    name_id: int = 0
    is_boss_floor: int = 0


@dataclass
class RequestLevelMainEntry:
    accessible_floor_count: int = 0
    unk1: int = 0
    total_floor_count: int = 0
    floor_data: list[RequestLevelFloor] = field(default_factory=list)


@dataclass
class RequestLevelEntry:
    main_entry: RequestLevelMainEntry | None = None


@dataclass
class ItemSet:
    """Item spawn weights: one weight per item kind plus per-item weights."""

    item_kind_weights: list[int] = field(default_factory=list)
    item_weights: dict[int, int] = field(default_factory=dict)


@dataclass
class ItemArrangeEntry:
    item_sets: list[ItemSet] = field(default_factory=list)
