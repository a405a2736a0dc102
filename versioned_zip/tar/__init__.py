"""Tar archive reading."""

from .buffer import DEFAULT_BLOCK_SIZE, DEFAULT_RECORDS_PER_BLOCK, BlockReader
from .entry import TarEntry
from .field import HeaderField
from .header import HEADER_LAYOUT, HEADER_SIZE, Action, Dialect, TarHeader, TypeFlag
from .iterator import MAX_MEMORY_FILE_SIZE, IteratorState, TarFileIterator
from .reader import TarReader

__all__ = [
    "BlockReader",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_RECORDS_PER_BLOCK",
    "HeaderField",
    "HEADER_LAYOUT",
    "HEADER_SIZE",
    "Action",
    "Dialect",
    "TarHeader",
    "TypeFlag",
    "TarEntry",
    "TarReader",
    "TarFileIterator",
    "IteratorState",
    "MAX_MEMORY_FILE_SIZE",
]
