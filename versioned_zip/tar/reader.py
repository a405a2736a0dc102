"""Tar archive entry stream."""

import logging
from typing import BinaryIO, Iterator, Optional

from ..exceptions import TruncatedArchiveError
from ..utils.binary import RECORD_SIZE, records_for
from .buffer import DEFAULT_RECORDS_PER_BLOCK, BlockReader
from .entry import TarEntry
from .field import FIELD_ENCODING
from .header import Action, TarHeader

log = logging.getLogger(__name__)

# Chunk size for copy_entry_contents()
COPY_CHUNK_SIZE = 65536


class TarReader:
    """Reader walking the entries of an uncompressed tar stream.

    Only the current entry's content can be read; moving to the next entry
    skips whatever is left of it. The stream is read strictly forward.
    """

    def __init__(self, stream: BinaryIO, records_per_block: int = DEFAULT_RECORDS_PER_BLOCK):
        self._buffer = BlockReader(stream, records_per_block)
        self._entry: Optional[TarEntry] = None
        self._remaining = 0  # content bytes of the current entry not yet read
        self._records_left = 0  # content records not yet pulled from the buffer
        self._chunk = b""  # unread content of the last pulled record
        self._long_name: Optional[str] = None
        self._finished = False

    def __enter__(self) -> "TarReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[TarEntry]:
        while True:
            entry = self.next_entry()
            if entry is None:
                return
            yield entry

    @property
    def buffer(self) -> BlockReader:
        return self._buffer

    @property
    def current_entry(self) -> Optional[TarEntry]:
        return self._entry

    @property
    def remaining(self) -> int:
        """Unread content bytes of the current entry."""
        return self._remaining

    def close(self) -> None:
        self._buffer.close()

    def next_entry(self) -> Optional[TarEntry]:
        """Advance to the next entry, None at the end of the archive."""
        self._skip_content()
        self._entry = None
        if self._finished:
            return None

        while True:
            record = self._buffer.read_record()
            if record is None or self._buffer.is_end_record(record):
                self._finished = True
                return None

            header = TarHeader.from_record(record)
            self._start_content(header.size)

            if header.action is Action.EXTENDED:
                self._long_name = self._read_long_name()
                log.debug("GNU long name for next entry: %s", self._long_name)
                continue
            if header.action.is_ignore:
                log.debug("Ignoring tar entry: %s", header)
                self._skip_content()
                continue

            self._entry = TarEntry(header, self._long_name)
            self._long_name = None
            return self._entry

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes of the current entry's content."""
        if size < 0 or size > self._remaining:
            size = self._remaining

        parts = []
        needed = size
        while needed > 0:
            if not self._chunk:
                self._chunk = self._pull_record()[: min(RECORD_SIZE, self._remaining)]
            piece = self._chunk[:needed]
            self._chunk = self._chunk[len(piece) :]
            self._remaining -= len(piece)
            needed -= len(piece)
            parts.append(piece)
        return b"".join(parts)

    def copy_entry_contents(self, out: BinaryIO, chunk_size: int = COPY_CHUNK_SIZE) -> int:
        """Copy the rest of the current entry into ``out``. Returns bytes copied."""
        copied = 0
        while True:
            data = self.read(chunk_size)
            if not data:
                return copied
            out.write(data)
            copied += len(data)

    def _start_content(self, size: int) -> None:
        self._remaining = size
        self._records_left = records_for(size)
        self._chunk = b""

    def _pull_record(self) -> bytes:
        record = self._buffer.read_record()
        if record is None:
            raise TruncatedArchiveError(
                f"Archive ended with {self._remaining} bytes of entry content outstanding"
            )
        self._records_left -= 1
        return record

    def _skip_content(self) -> None:
        while self._records_left > 0:
            self._pull_record()
        self._remaining = 0
        self._chunk = b""

    def _read_long_name(self) -> str:
        data = self.read()
        end = data.find(b"\x00")
        if end != -1:
            data = data[:end]
        return data.decode(FIELD_ENCODING)
