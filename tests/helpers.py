"""Builders for raw tar records used across the tests."""

import io
import tarfile
from typing import Iterable, Tuple

RECORD = 512
ZERO_RECORD = b"\x00" * RECORD


def octal_field(value: int, width: int) -> bytes:
    """Zero-padded octal digits followed by a NUL, as tar writers emit them."""
    return b"%0*o\x00" % (width - 1, value)


def text_field(value: bytes, width: int) -> bytes:
    return value[:width].ljust(width, b"\x00")


def create_tar_header(
    name: bytes = b"file.txt",
    size: int = 0,
    typeflag: bytes = b"0",
    magic: bytes = b"ustar\x00",
    version: bytes = b"00",
    prefix: bytes = b"",
    mode: int = 0o644,
    uid: int = 1000,
    gid: int = 100,
    mtime: int = 1_600_000_000,
    uname: bytes = b"alice",
    gname: bytes = b"staff",
    linkname: bytes = b"",
    devmajor: int = 0,
    devminor: int = 0,
) -> bytes:
    """Create a 512-byte tar header record.

    Byte layout (offsets):
    - 0 name(100), 100 mode(8), 108 uid(8), 116 gid(8), 124 size(12)
    - 136 mtime(12), 148 chksum(8), 156 typeflag(1), 157 linkname(100)
    - 257 magic(6), 263 version(2), 265 uname(32), 297 gname(32)
    - 329 devmajor(8), 337 devminor(8), 345 prefix(155), 500 padding(12)
    """
    head = (
        text_field(name, 100)
        + octal_field(mode, 8)
        + octal_field(uid, 8)
        + octal_field(gid, 8)
        + octal_field(size, 12)
        + octal_field(mtime, 12)
    )
    tail = (
        typeflag[:1].ljust(1, b"\x00")
        + text_field(linkname, 100)
        + text_field(magic, 6)
        + text_field(version, 2)
        + text_field(uname, 32)
        + text_field(gname, 32)
        + octal_field(devmajor, 8)
        + octal_field(devminor, 8)
        + text_field(prefix, 155)
    )
    record = head + b" " * 8 + tail + b"\x00" * 12
    checksum = sum(record)
    record = head + b"%06o\x00 " % checksum + tail + b"\x00" * 12
    assert len(record) == RECORD
    return record


def pad_content(data: bytes) -> bytes:
    remainder = len(data) % RECORD
    if remainder:
        data += b"\x00" * (RECORD - remainder)
    return data


def build_archive(members: Iterable[Tuple[bytes, bytes]], end_records: int = 2) -> bytes:
    """Concatenate (header, content) pairs and the end-of-archive records."""
    out = b""
    for header, content in members:
        out += header + pad_content(content)
    return out + ZERO_RECORD * end_records


def file_member(name: bytes, content: bytes = b"", **kwargs) -> Tuple[bytes, bytes]:
    return create_tar_header(name=name, size=len(content), **kwargs), content


def dir_member(name: bytes, **kwargs) -> Tuple[bytes, bytes]:
    return create_tar_header(name=name, size=0, typeflag=b"5", **kwargs), b""


def stdlib_tar(members, format=tarfile.USTAR_FORMAT) -> bytes:
    """Build an archive with the standard library writer.

    ``members`` holds (name, content) pairs; content None makes a directory.
    """
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=format) as tf:
        for name, content in members:
            info = tarfile.TarInfo(name=name)
            if content is None:
                info.type = tarfile.DIRTYPE
                tf.addfile(info)
            else:
                info.size = len(content)
                tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


class TrickleStream(io.RawIOBase):
    """Readable stream that returns at most ``step`` bytes per read."""

    def __init__(self, data: bytes, step: int = 100):
        self._data = io.BytesIO(data)
        self._step = step
        self.close_count = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if size < 0 or size > self._step:
            size = self._step
        return self._data.read(size)

    def close(self) -> None:
        self.close_count += 1
        super().close()
