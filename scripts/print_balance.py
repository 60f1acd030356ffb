#!/usr/bin/env python3
"""
Print the contents of a dungeon balance archive.

Usage:
    uv run python scripts/print_balance.py --bin dungeon_balance.bin --ent dungeon_balance.ent
    uv run python scripts/print_balance.py --bin dungeon_balance.bin --ent dungeon_balance.ent --index 3
"""

import argparse
from pathlib import Path

from balance_editor.dungeon_balance import DungeonBalance
from balance_editor.errors import BalanceEditorError
from balance_editor.log import log
from balance_editor.model.balance_entry import BalanceEntry


def print_entry(index: int, entry: BalanceEntry) -> None:
    log.info(f'Entry {index}: {len(entry.floor_infos)} floors')
    for floor in entry.floor_infos:
        event = f' event="{floor.event}"' if floor.event else ''
        log.info(
            f'  Floor {floor.index}: turns={floor.turn_limit} rooms={floor.room_count} '
            f'items={floor.min_item_density}-{floor.max_item_density} '
            f'enemies={floor.min_enemy_density}-{floor.max_enemy_density}{event}'
        )

    if entry.wild_spawns is not None:
        spawning = {e.creature_index for floor in entry.wild_spawns.floors for e in floor.entries if e.spawn_rate > 0}
        log.info(
            f'  Wild spawns: {len(entry.wild_spawns.stats)} stats rows, '
            f'{len(entry.wild_spawns.floors)} floors, {len(spawning)} spawning creatures'
        )
    else:
        log.info('  Wild spawns: none')

    if entry.trap_weights is not None:
        log.info(f'  Trap weights: {len(entry.trap_weights.records)} records')
    else:
        log.info('  Trap weights: none')

    if entry.auxiliary is not None:
        log.info(f'  Auxiliary: {len(entry.auxiliary.records)} records')
    else:
        log.info('  Auxiliary: none')


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Print a dungeon balance archive')
    parser.add_argument('--bin', type=Path, required=True, help='Archive data file (dungeon_balance.bin)')
    parser.add_argument('--ent', type=Path, required=True, help='Archive index file (dungeon_balance.ent)')
    parser.add_argument('--index', type=int, help='Only print this entry')

    args = parser.parse_args(argv)

    try:
        balance = DungeonBalance.load(args.bin, args.ent)
        log.info(f'Archive has {balance.entry_count} entries')

        indices = [args.index] if args.index is not None else range(balance.entry_count)
        for index in indices:
            # Read-only, keep the cache empty
            print_entry(index, balance.get_entry(index, temporary=True))
    except (BalanceEditorError, OSError) as e:
        log.error(f'Failed to read balance archive: {e}')
        return 1

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
