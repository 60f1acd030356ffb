#!/usr/bin/env python3
"""
Decode and rebuild a dungeon balance archive.

Decodes the selected entries (all by default) and writes the archive back,
which re-encodes them through the codecs. Useful for checking that an archive
survives a round trip unchanged.

Usage:
    uv run python scripts/rebuild_balance.py --bin dungeon_balance.bin --ent dungeon_balance.ent
    uv run python scripts/rebuild_balance.py --bin in.bin --ent in.ent --output-bin out.bin --output-ent out.ent --workers 4
"""

import argparse
from pathlib import Path

from balance_editor.const import BUILD_WORKERS
from balance_editor.dungeon_balance import DungeonBalance
from balance_editor.errors import BalanceEditorError
from balance_editor.log import log


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Decode and rebuild a dungeon balance archive')
    parser.add_argument('--bin', type=Path, required=True, help='Archive data file (dungeon_balance.bin)')
    parser.add_argument('--ent', type=Path, required=True, help='Archive index file (dungeon_balance.ent)')
    parser.add_argument('--index', type=int, action='append', help='Entry to re-encode (repeatable, default: all)')
    parser.add_argument('--output-bin', type=Path, help='Output data file (default: input_rebuilt.bin)')
    parser.add_argument('--output-ent', type=Path, help='Output index file (default: input_rebuilt.ent)')
    parser.add_argument('--workers', type=int, default=BUILD_WORKERS, help='Encoder threads (default: automatic)')

    args = parser.parse_args(argv)

    output_bin = args.output_bin or args.bin.parent / f'{args.bin.stem}_rebuilt{args.bin.suffix}'
    output_ent = args.output_ent or args.ent.parent / f'{args.ent.stem}_rebuilt{args.ent.suffix}'

    try:
        balance = DungeonBalance.load(args.bin, args.ent)
        indices = args.index if args.index is not None else range(balance.entry_count)
        for index in indices:
            balance.get_entry(index)
        log.info(f'Decoded {len(indices)}/{balance.entry_count} entries')

        balance.save(output_bin, output_ent, max_workers=args.workers)
    except (BalanceEditorError, OSError) as e:
        log.error(f'Failed to rebuild balance archive: {e}')
        return 1

    log.info(f'Wrote {output_bin} and {output_ent}')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
