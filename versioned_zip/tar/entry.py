"""Tar entry: read-only view over a decoded header."""

from datetime import datetime
from typing import Optional

from .header import Action, Dialect, TarHeader, TypeFlag


class TarEntry:
    """One archived item as seen by callers.

    ``long_name`` comes from a preceding GNU long-name entry and replaces
    the (possibly truncated) name stored in the header.
    """

    def __init__(self, header: TarHeader, long_name: Optional[str] = None):
        self._header = header
        self._long_name = long_name

    @classmethod
    def from_record(cls, record: bytes) -> "TarEntry":
        return cls(TarHeader.from_record(record))

    @property
    def header(self) -> TarHeader:
        return self._header

    @property
    def name(self) -> str:
        if self._long_name is not None:
            return self._long_name
        return self._header.name

    @property
    def size(self) -> int:
        return self._header.size

    @property
    def is_directory(self) -> bool:
        return self._header.action.is_directory or self.name.endswith("/")

    @property
    def mtime(self) -> int:
        return self._header.mtime

    @property
    def modification_time(self) -> datetime:
        return self._header.modification_time

    @property
    def mode(self) -> int:
        return self._header.mode

    @property
    def uid(self) -> int:
        return self._header.uid

    @property
    def gid(self) -> int:
        return self._header.gid

    @property
    def uname(self) -> str:
        return self._header.uname

    @property
    def gname(self) -> str:
        return self._header.gname

    @property
    def linkname(self) -> str:
        return self._header.linkname

    @property
    def dialect(self) -> Dialect:
        return self._header.dialect

    @property
    def type_flag(self) -> TypeFlag:
        return self._header.type_flag

    @property
    def action(self) -> Action:
        return self._header.action

    def __repr__(self) -> str:
        return f"TarEntry(name={self.name!r}, size={self.size}, dir={self.is_directory})"
