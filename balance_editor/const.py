"""
Constants for the dungeon balance editor.

Record sizes and table dimensions are fixed by the file format. The index
tables at the bottom mirror the game's item, creature and dungeon enums.
"""

# Container
SIR0_MAGIC = b'SIR0'
SIR0_HEADER_SIZE = 0x20
ALIGNMENT = 16

# Floor info
FLOOR_INFO_SIZE = 98
EVENT_NAME_SIZE = 32

# Wild spawns
STATS_ENTRY_SIZE = 16
SPAWN_ENTRY_SIZE = 16
SPAWN_PADDING_BYTE = 0xFF

# Trap weights
TRAP_RECORD_COUNT = 99
TRAP_ENTRY_COUNT = 33
TRAP_ENTRY_SIZE = 8
TRAP_TERMINATOR_WEIGHT = -1

# Auxiliary table
AUX_RECORD_COUNT = 45
AUX_ENTRY_COUNT = 46
AUX_ENTRY_SIZE = 8

# Default floor count for blank spawn tables
MAX_FLOOR_COUNT = 99

# Rebuild fan-out (None lets the executor pick)
BUILD_WORKERS: int | None = None

# Game index tables
CREATURE_COUNT = 1154
WANTED_LV_CREATURE_INDEX = 1003
TRAP_MIN_ITEM_INDEX = 1501
ITEM_KIND_COUNT = 17
DUNGEON_INDEX_NONE = 0
DOJO_DUNGEON_INDICES = frozenset(range(80, 93))
