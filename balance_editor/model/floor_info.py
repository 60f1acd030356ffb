"""Per-floor parameters of a dungeon balance entry.

Each floor is a fixed 98-byte record. Field names ending in a hex offset
(``byte2d``, ``short30``...) have no known meaning yet and are kept as raw
values.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from balance_editor.const import EVENT_NAME_SIZE, FLOOR_INFO_SIZE
from balance_editor.io.reader import Reader
from balance_editor.io.writer import Writer

TRAILING_BYTES_SIZE = 0x61 - 0x5A + 1


@dataclass
class FloorInfoEntry:
    """Floor info record (98 bytes)."""

    index: int = 0  # int16 @ 0x00
    short02: int = 0  # int16 @ 0x02
    event: str = ''  # char[32] @ 0x04
    turn_limit: int = 0  # int16 @ 0x24
    min_money_stack_size: int = 0  # int16 @ 0x26
    max_money_stack_size: int = 0  # int16 @ 0x28
    dungeon_map_data_info_index: int = 0  # int16 @ 0x2A
    name_id: int = 0  # byte @ 0x2C
    byte2d: int = 0
    byte2e: int = 0
    byte2f: int = 0
    short30: int = 0  # int16 @ 0x30
    short32: int = 0  # int16 @ 0x32
    byte34: int = 0
    byte35: int = 0
    room_count: int = 0  # byte @ 0x36
    byte37: int = 0
    byte38: int = 0
    byte39: int = 0
    floor_item_set_index: int = 0  # byte @ 0x3A
    kecleon_shop_item_set_index: int = 0
    possible_item_set_index_3c: int = 0
    normal_treasure_box_item_set_index: int = 0
    monster_house_item_set_index: int = 0
    deluxe_treasure_box_item_set_index: int = 0  # byte @ 0x3F
    byte40: int = 0
    byte41: int = 0
    min_item_density: int = 0  # byte @ 0x42
    max_item_density: int = 0
    buried_item_set_index: int = 0
    max_buried_items: int = 0
    byte46: int = 0
    sticky_item_chance: int = 0  # byte @ 0x47
    kecleon_shop_chance: int = 0
    byte49: int = 0
    byte4a: int = 0
    min_trap_density: int = 0  # byte @ 0x4B
    max_trap_density: int = 0
    min_enemy_density: int = 0
    max_enemy_density: int = 0
    byte4f: int = 0
    byte50: int = 0
    byte51: int = 0
    mystery_house_chance: int = 0  # byte @ 0x52
    mystery_house_size: int = 0  # 0 = large, 1 = small
    invitation_index: int = 0
    monster_house_chance: int = 0
    byte56: int = 0
    byte57: int = 0
    byte58: int = 0
    weather: int = 0  # byte @ 0x59, dungeon status index
    bytes_5a_to_61: bytes = field(default=bytes(TRAILING_BYTES_SIZE))

    SIZE = FLOOR_INFO_SIZE

    @classmethod
    def read(cls, reader: Reader) -> FloorInfoEntry:
        """Read FloorInfoEntry from reader."""
        return cls(
            index=reader.read_int16(),
            short02=reader.read_int16(),
            event=reader.read_fixed_string(EVENT_NAME_SIZE),
            turn_limit=reader.read_int16(),
            min_money_stack_size=reader.read_int16(),
            max_money_stack_size=reader.read_int16(),
            dungeon_map_data_info_index=reader.read_int16(),
            name_id=reader.read_uint8(),
            byte2d=reader.read_uint8(),
            byte2e=reader.read_uint8(),
            byte2f=reader.read_uint8(),
            short30=reader.read_int16(),
            short32=reader.read_int16(),
            byte34=reader.read_uint8(),
            byte35=reader.read_uint8(),
            room_count=reader.read_uint8(),
            byte37=reader.read_uint8(),
            byte38=reader.read_uint8(),
            byte39=reader.read_uint8(),
            floor_item_set_index=reader.read_uint8(),
            kecleon_shop_item_set_index=reader.read_uint8(),
            possible_item_set_index_3c=reader.read_uint8(),
            normal_treasure_box_item_set_index=reader.read_uint8(),
            monster_house_item_set_index=reader.read_uint8(),
            deluxe_treasure_box_item_set_index=reader.read_uint8(),
            byte40=reader.read_uint8(),
            byte41=reader.read_uint8(),
            min_item_density=reader.read_uint8(),
            max_item_density=reader.read_uint8(),
            buried_item_set_index=reader.read_uint8(),
            max_buried_items=reader.read_uint8(),
            byte46=reader.read_uint8(),
            sticky_item_chance=reader.read_uint8(),
            kecleon_shop_chance=reader.read_uint8(),
            byte49=reader.read_uint8(),
            byte4a=reader.read_uint8(),
            min_trap_density=reader.read_uint8(),
            max_trap_density=reader.read_uint8(),
            min_enemy_density=reader.read_uint8(),
            max_enemy_density=reader.read_uint8(),
            byte4f=reader.read_uint8(),
            byte50=reader.read_uint8(),
            byte51=reader.read_uint8(),
            mystery_house_chance=reader.read_uint8(),
            mystery_house_size=reader.read_uint8(),
            invitation_index=reader.read_uint8(),
            monster_house_chance=reader.read_uint8(),
            byte56=reader.read_uint8(),
            byte57=reader.read_uint8(),
            byte58=reader.read_uint8(),
            weather=reader.read_uint8(),
            bytes_5a_to_61=reader.read_bytes(TRAILING_BYTES_SIZE),
        )

    def write(self, writer: Writer) -> None:
        """Write FloorInfoEntry to writer."""
        writer.write_int16(self.index)
        writer.write_int16(self.short02)
        writer.write_fixed_string(self.event, EVENT_NAME_SIZE)
        writer.write_int16(self.turn_limit)
        writer.write_int16(self.min_money_stack_size)
        writer.write_int16(self.max_money_stack_size)
        writer.write_int16(self.dungeon_map_data_info_index)
        writer.write_uint8(self.name_id)
        writer.write_uint8(self.byte2d)
        writer.write_uint8(self.byte2e)
        writer.write_uint8(self.byte2f)
        writer.write_int16(self.short30)
        writer.write_int16(self.short32)
        writer.write_uint8(self.byte34)
        writer.write_uint8(self.byte35)
        writer.write_uint8(self.room_count)
        writer.write_uint8(self.byte37)
        writer.write_uint8(self.byte38)
        writer.write_uint8(self.byte39)
        writer.write_uint8(self.floor_item_set_index)
        writer.write_uint8(self.kecleon_shop_item_set_index)
        writer.write_uint8(self.possible_item_set_index_3c)
        writer.write_uint8(self.normal_treasure_box_item_set_index)
        writer.write_uint8(self.monster_house_item_set_index)
        writer.write_uint8(self.deluxe_treasure_box_item_set_index)
        writer.write_uint8(self.byte40)
        writer.write_uint8(self.byte41)
        writer.write_uint8(self.min_item_density)
        writer.write_uint8(self.max_item_density)
        writer.write_uint8(self.buried_item_set_index)
        writer.write_uint8(self.max_buried_items)
        writer.write_uint8(self.byte46)
        writer.write_uint8(self.sticky_item_chance)
        writer.write_uint8(self.kecleon_shop_chance)
        writer.write_uint8(self.byte49)
        writer.write_uint8(self.byte4a)
        writer.write_uint8(self.min_trap_density)
        writer.write_uint8(self.max_trap_density)
        writer.write_uint8(self.min_enemy_density)
        writer.write_uint8(self.max_enemy_density)
        writer.write_uint8(self.byte4f)
        writer.write_uint8(self.byte50)
        writer.write_uint8(self.byte51)
        writer.write_uint8(self.mystery_house_chance)
        writer.write_uint8(self.mystery_house_size)
        writer.write_uint8(self.invitation_index)
        writer.write_uint8(self.monster_house_chance)
        writer.write_uint8(self.byte56)
        writer.write_uint8(self.byte57)
        writer.write_uint8(self.byte58)
        writer.write_uint8(self.weather)
        writer.write_bytes(self.bytes_5a_to_61)

    @classmethod
    def from_bytes(cls, data: bytes | memoryview) -> FloorInfoEntry:
        """Decode a single 98-byte record."""
        return cls.read(Reader(data))

    def to_bytes(self) -> bytes:
        """Encode to a 98-byte buffer.

        Raises:
            FieldTooLongError: If ``event`` does not fit in 32 bytes. Nothing
                is returned in that case.
            InvalidTextError: If ``event`` has characters outside ASCII.
        """
        writer = Writer()
        self.write(writer)
        data = writer.to_bytes()
        if len(data) != self.SIZE:
            raise ValueError(f'Floor info encoded to {len(data)} bytes, expected {self.SIZE}')
        return data
