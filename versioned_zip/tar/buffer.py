"""Block-buffered record reader for tar streams."""

import logging
from typing import BinaryIO, Optional

from ..utils.binary import RECORD_SIZE, is_zero_record, pad_to, read_fully

log = logging.getLogger(__name__)

DEFAULT_RECORDS_PER_BLOCK = 20
DEFAULT_BLOCK_SIZE = RECORD_SIZE * DEFAULT_RECORDS_PER_BLOCK


class BlockReader:
    """Forward-only reader handing out one 512-byte record at a time.

    The underlying stream is read a whole block at a time. A final block
    shorter than the block size is accepted; only an empty read marks the
    physical end of the stream.
    """

    def __init__(self, stream: BinaryIO, records_per_block: int = DEFAULT_RECORDS_PER_BLOCK):
        if not isinstance(records_per_block, int) or records_per_block <= 0:
            raise ValueError(f"records_per_block must be a positive int, got {records_per_block!r}")
        self._stream: Optional[BinaryIO] = stream
        self.records_per_block = records_per_block
        self._block = b""
        self._block_records = 0  # records actually present in the current block
        self._block_index = -1
        self._record_index = records_per_block
        self._finished = False

    def __enter__(self) -> "BlockReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def record_size(self) -> int:
        return RECORD_SIZE

    @property
    def block_size(self) -> int:
        return RECORD_SIZE * self.records_per_block

    @property
    def block_index(self) -> int:
        """Zero-based index of the block in memory (-1 before the first read)."""
        return self._block_index

    @property
    def record_index(self) -> int:
        """Zero-based index, within its block, of the last record returned."""
        return self._record_index - 1

    @property
    def closed(self) -> bool:
        return self._stream is None

    @staticmethod
    def is_end_record(record: bytes) -> bool:
        """An all-zero record marks the logical end of the archive."""
        return is_zero_record(record)

    def read_record(self) -> Optional[bytes]:
        """Return the next record, or None once the stream is exhausted."""
        if self._record_index >= self._block_records and not self._read_block():
            return None

        start = self._record_index * RECORD_SIZE
        self._record_index += 1
        return self._block[start : start + RECORD_SIZE]

    def _read_block(self) -> bool:
        """Pull the next block from the stream. False at end of stream."""
        if self._finished:
            return False
        if self._stream is None:
            raise ValueError("read from a closed BlockReader")

        data = read_fully(self._stream, self.block_size)
        if not data:
            self._finished = True
            return False

        self._block_index += 1
        self._record_index = 0
        if len(data) < self.block_size:
            # Short final block: keep the records that hold data, padding
            # a trailing partial record with zeros.
            self._block_records = (len(data) + RECORD_SIZE - 1) // RECORD_SIZE
            self._block = pad_to(data, self._block_records * RECORD_SIZE)
            self._finished = True
            log.debug(
                "Short block %d: %d bytes, %d records",
                self._block_index,
                len(data),
                self._block_records,
            )
        else:
            self._block_records = self.records_per_block
            self._block = data
            log.debug("Read block %d", self._block_index)
        return True

    def close(self) -> None:
        """Close the underlying stream. Calling it again does nothing."""
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.close()
