"""
Dungeon balance archive (``dungeon_balance.bin`` / ``dungeon_balance.ent``).

The .ent file is a table of N+1 little-endian int32 offsets into the .bin
file; entry ``i`` is the compressed slice ``[offset[i], offset[i+1])``.

Entries are decoded on first access and cached so that edits made through
the returned object are kept. ``build()`` re-encodes only cached entries and
copies every other slice through untouched.
"""

from __future__ import annotations

import struct
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path

from balance_editor.compression import Compressor, ZlibCompressor, decompress_entry
from balance_editor.const import ALIGNMENT, BUILD_WORKERS
from balance_editor.errors import IndexOutOfRangeError, MalformedContainerError
from balance_editor.io.reader import Reader
from balance_editor.io.writer import Writer
from balance_editor.log import log
from balance_editor.model.balance_entry import BalanceEntry


class DungeonBalance:
    """Keyed store of balance entries for one opened .bin/.ent pair."""

    def __init__(self, bin_data: bytes, ent_data: bytes, compressor: Compressor | None = None) -> None:
        self.compressor = compressor if compressor is not None else ZlibCompressor()

        bin_view = memoryview(bin_data)
        ent = Reader(ent_data)
        if ent.size % 4 != 0 or ent.size < 4:
            raise MalformedContainerError(f'Index file size {ent.size} is not a non-empty multiple of 4')

        offsets = [ent.read_int32() for _ in range(ent.size // 4)]
        self._entry_data: list[memoryview] = []
        for i, (start, end) in enumerate(zip(offsets, offsets[1:])):
            if not 0 <= start <= end <= len(bin_view):
                raise MalformedContainerError(
                    f'Entry {i} spans [{start:#x}, {end:#x}), data file is {len(bin_view):#x} bytes'
                )
            self._entry_data.append(bin_view[start:end])

        self._entries: list[BalanceEntry | None] = [None] * len(self._entry_data)
        log.debug(f'Opened balance archive: {self.entry_count} entries, {len(bin_view)} bytes')

    @classmethod
    def new(cls, entry_count: int, compressor: Compressor | None = None) -> DungeonBalance:
        """Create an archive with no source data where every entry is blank."""
        balance = cls(b'', struct.pack('<i', 0), compressor)
        balance._entry_data = [memoryview(b'')] * entry_count
        balance._entries = [BalanceEntry.new(0) for _ in range(entry_count)]
        return balance

    @classmethod
    def load(cls, bin_path: Path, ent_path: Path, compressor: Compressor | None = None) -> DungeonBalance:
        """Open an archive from its data and index files."""
        return cls(bin_path.read_bytes(), ent_path.read_bytes(), compressor)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.entry_count:
            raise IndexOutOfRangeError(f'Balance index {index} out of range [0, {self.entry_count})')

    def _decode(self, index: int) -> BalanceEntry:
        data = decompress_entry(self.compressor, self._entry_data[index], index)
        return BalanceEntry.from_bytes(data)

    def is_loaded(self, index: int) -> bool:
        """Whether ``index`` has a cached (and possibly edited) entry."""
        self._check_index(index)
        return self._entries[index] is not None

    def get_entry(self, index: int, temporary: bool = False) -> BalanceEntry:
        """Get a balance entry.

        Args:
            index: Entry index
            temporary: Decode a fresh copy without reading or writing the cache.
                Edits to a temporary entry are never written back.

        Raises:
            IndexOutOfRangeError: If ``index`` is outside the archive.
        """
        self._check_index(index)

        if temporary:
            return self._decode(index)

        entry = self._entries[index]
        if entry is None:
            entry = self._decode(index)
            self._entries[index] = entry
        return entry

    def _build_entry(self, index: int) -> bytes:
        entry = self._entries[index]
        if entry is None:
            return bytes(self._entry_data[index])
        return self.compressor.compress(entry.to_bytes())

    def build(self, max_workers: int | None = BUILD_WORKERS) -> tuple[bytes, bytes]:
        """Serialize the archive.

        Cached entries are re-encoded and compressed in parallel; results are
        concatenated in index order, each padded to 16 bytes. The first
        failure cancels the entries not yet started and aborts the build.

        Must not run concurrently with ``get_entry``.

        Returns:
            Tuple of (bin data, ent data)
        """
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(self._build_entry, index) for index in range(self.entry_count)]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            failed = next((future for future in futures if future in done and future.exception() is not None), None)
            if failed is not None:
                executor.shutdown(cancel_futures=True)
                log.debug(f'Build failed at entry {futures.index(failed)}, pending entries cancelled')
                failed.result()
            compressed = [future.result() for future in futures]

        bin_writer = Writer()
        offsets = [0]
        for data in compressed:
            bin_writer.write_bytes(data)
            bin_writer.align(ALIGNMENT)
            offsets.append(bin_writer.size)

        ent_writer = Writer()
        for offset in offsets:
            ent_writer.write_int32(offset)

        rebuilt = sum(entry is not None for entry in self._entries)
        log.debug(f'Built balance archive: {rebuilt}/{self.entry_count} entries re-encoded, {offsets[-1]} bytes')
        return bin_writer.to_bytes(), ent_writer.to_bytes()

    def save(self, bin_path: Path, ent_path: Path, max_workers: int | None = BUILD_WORKERS) -> None:
        """Build and write the data and index files."""
        bin_data, ent_data = self.build(max_workers)
        bin_path.write_bytes(bin_data)
        ent_path.write_bytes(ent_data)
