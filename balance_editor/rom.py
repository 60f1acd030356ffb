"""Set of archives a dungeon collection loads from and flushes into."""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.const import DUNGEON_INDEX_NONE
from balance_editor.dungeon_balance import DungeonBalance
from balance_editor.model.peers import (
    DungeonDataInfoEntry,
    DungeonExtraEntry,
    ItemArrangeEntry,
    RequestLevelEntry,
)


@dataclass
class RomArchives:
    """Decoded archives, all keyed by dungeon index.

    ``item_arrange`` has no row for dungeon index 0, so dungeon ``i`` uses
    ``item_arrange[i - 1]``.
    """

    dungeon_data_info: list[DungeonDataInfoEntry]
    dungeon_balance: DungeonBalance
    dungeon_extra: dict[int, DungeonExtraEntry] = field(default_factory=dict)
    item_arrange: list[ItemArrangeEntry] = field(default_factory=list)
    request_level: dict[int, RequestLevelEntry] = field(default_factory=dict)
    dungeon_names: dict[int, str] = field(default_factory=dict)

    @property
    def dungeon_count(self) -> int:
        return len(self.dungeon_data_info)

    def get_dungeon_name(self, index: int) -> str:
        return self.dungeon_names.get(index) or f'(Unknown: {index})'

    def get_item_arrange(self, index: int) -> ItemArrangeEntry | None:
        if index <= DUNGEON_INDEX_NONE or index > len(self.item_arrange):
            return None
        return self.item_arrange[index - 1]
