"""Binary reading utilities for record-oriented tar data."""

from typing import BinaryIO

# Size of one tar record
RECORD_SIZE = 512


def read_fully(stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, looping over short reads.

    Pipes and decompressors may hand back fewer bytes than asked for;
    only an empty read is treated as end of stream.
    """
    chunks = []
    needed = size
    while needed > 0:
        chunk = stream.read(needed)
        if not chunk:
            break
        chunks.append(chunk)
        needed -= len(chunk)
    return b"".join(chunks)


def pad_to(data: bytes, length: int) -> bytes:
    """Zero-pad (or cut) data to exactly ``length`` bytes."""
    if len(data) >= length:
        return bytes(data[:length])
    return bytes(data) + b"\x00" * (length - len(data))


def is_zero_record(record: bytes) -> bool:
    """True if every byte of the record is NUL."""
    return not any(record)


def records_for(size: int, record_size: int = RECORD_SIZE) -> int:
    """Number of records needed to hold ``size`` bytes of content."""
    return (size + record_size - 1) // record_size
