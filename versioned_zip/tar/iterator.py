"""Iterator over the files (not directories) of a tar stream."""

import logging
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from ..exceptions import TarReadError
from ..files import MemoryRelativeFile, RelativeFile, TempFileRelativeFile
from .buffer import DEFAULT_RECORDS_PER_BLOCK
from .entry import TarEntry
from .reader import TarReader

log = logging.getLogger(__name__)

# Entries up to this size are kept in memory, larger ones go to a temp file
MAX_MEMORY_FILE_SIZE = 1024 * 1024


class IteratorState(Enum):
    POSITIONED = "positioned"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class TarFileIterator:
    """Yields a ``RelativeFile`` for every non-directory entry.

    Each entry's content is copied out (to memory or a temp file) before
    the iterator moves on, since the underlying stream is forward-only.
    Temp files stay valid until ``dispose()``.
    """

    def __init__(
        self,
        stream: BinaryIO,
        memory_threshold: int = MAX_MEMORY_FILE_SIZE,
        records_per_block: int = DEFAULT_RECORDS_PER_BLOCK,
        temp_dir: Optional[Union[str, Path]] = None,
    ):
        self._reader: Optional[TarReader] = TarReader(stream, records_per_block)
        self.memory_threshold = memory_threshold
        self.temp_dir = temp_dir
        self._spooled: List[TempFileRelativeFile] = []
        self._entry: Optional[TarEntry] = None
        self._state = IteratorState.EXHAUSTED
        try:
            self._advance()
        except BaseException:
            self.dispose()
            raise

    def __enter__(self) -> "TarFileIterator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __iter__(self) -> "TarFileIterator":
        return self

    def __next__(self) -> RelativeFile:
        if self._state is IteratorState.FAILED:
            raise TarReadError("Tar iterator failed on an earlier entry")
        if self._state is IteratorState.EXHAUSTED:
            raise StopIteration

        entry = self._entry
        try:
            relative_file = self._copy_out(entry)
        except BaseException:
            self._state = IteratorState.FAILED
            raise
        self._advance()
        return relative_file

    next = __next__

    @property
    def state(self) -> IteratorState:
        return self._state

    @property
    def current_entry(self) -> Optional[TarEntry]:
        """Entry the next call to ``next()`` will return."""
        return self._entry

    def has_next(self) -> bool:
        return self._state is IteratorState.POSITIONED

    def dispose(self) -> None:
        """Close the stream and delete every spooled temp file."""
        if self._reader is not None:
            reader, self._reader = self._reader, None
            reader.close()
        for relative_file in self._spooled:
            relative_file.dispose()
        self._spooled.clear()
        if self._state is IteratorState.POSITIONED:
            self._state = IteratorState.EXHAUSTED
        self._entry = None

    close = dispose

    def _copy_out(self, entry: TarEntry) -> RelativeFile:
        if entry.size <= self.memory_threshold:
            return MemoryRelativeFile(entry.name, self._reader.read())

        log.debug("Spooling %s (%d bytes) to a temp file", entry.name, entry.size)
        relative_file = TempFileRelativeFile.spool(
            entry.name, self._reader.copy_entry_contents, self.temp_dir
        )
        self._spooled.append(relative_file)
        return relative_file

    def _advance(self) -> None:
        try:
            self._entry = self._next_file()
        except BaseException:
            self._entry = None
            self._state = IteratorState.FAILED
            raise
        self._state = IteratorState.POSITIONED if self._entry else IteratorState.EXHAUSTED

    def _next_file(self) -> Optional[TarEntry]:
        if self._reader is None:
            return None
        for entry in self._reader:
            if not entry.is_directory:
                return entry
            log.debug("Skipping directory %s", entry.name)
        return None
