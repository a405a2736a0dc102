"""Tar header layout, dialects and type flags."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple

from ..exceptions import InvalidHeaderError, UnsupportedEntryError
from ..utils.binary import pad_to
from .field import HeaderField

log = logging.getLogger(__name__)

# (name, width) in on-disk order; offsets are the running sum of widths
HEADER_LAYOUT: Tuple[Tuple[str, int], ...] = (
    ("name", 100),
    ("mode", 8),
    ("uid", 8),
    ("gid", 8),
    ("size", 12),
    ("mtime", 12),
    ("chksum", 8),
    ("typeflag", 1),
    ("linkname", 100),  # last field of the original unix header
    ("magic", 6),
    ("version", 2),
    ("uname", 32),
    ("gname", 32),
    ("devmajor", 8),
    ("devminor", 8),
    ("prefix", 155),
)

# Significant bytes of a header record; the rest of the 512 is padding
HEADER_SIZE = sum(width for _, width in HEADER_LAYOUT)

USTAR_MAGIC = "ustar"


class Dialect(Enum):
    """Header dialect, told apart by the magic field."""

    LEGACY_UNIX = "legacy-unix"  # magic == ""
    USTAR = "ustar"  # magic == "ustar"
    GNU = "gnu"  # magic == "ustar  " (anything longer than "ustar")

    @classmethod
    def from_magic(cls, magic: str) -> Optional["Dialect"]:
        """Classify a decoded magic string, None if unrecognised."""
        if not magic:
            return cls.LEGACY_UNIX
        if magic == USTAR_MAGIC:
            return cls.USTAR
        if magic.startswith(USTAR_MAGIC):
            return cls.GNU
        return None


class Action(Enum):
    """What a reader does with an entry of a given type."""

    NORMAL = "normal"
    DIRECTORY = "directory"
    IGNORE = "ignore"
    REPORT_PROCEED = "report-proceed"
    REPORT_IGNORE = "report-ignore"  # no type flag maps here yet
    REPORT_EXTENDED = "report-extended"
    EXTENDED = "extended"
    ERROR = "error"

    @property
    def is_directory(self) -> bool:
        return self is Action.DIRECTORY

    @property
    def is_error(self) -> bool:
        return self is Action.ERROR

    @property
    def is_report(self) -> bool:
        return self in (Action.REPORT_PROCEED, Action.REPORT_IGNORE, Action.REPORT_EXTENDED)

    @property
    def is_ignore(self) -> bool:
        return self in (Action.IGNORE, Action.REPORT_IGNORE)

    @property
    def is_extended(self) -> bool:
        return self in (Action.EXTENDED, Action.REPORT_EXTENDED)


class TypeFlag(Enum):
    """Entry types known to the reader."""

    NORMAL = "normal"  # all formats
    HARD_LINK = "hard-link"  # all formats
    SYMLINK = "symlink"  # all formats but old GNU
    CHARACTER_SPECIAL = "character-special"
    BLOCK_SPECIAL = "block-special"
    DIRECTORY = "directory"
    FIFO = "fifo"
    CONTIGUOUS = "contiguous"
    GLOBAL_EXTENDED_HEADER = "global-extended-header"
    EXTENDED_HEADER = "extended-header"
    SOLARIS_ACL = "solaris-acl"
    SOLARIS_EXTENDED_ATTRIBUTE = "solaris-extended-attribute"
    INODE_ONLY = "inode-only"  # as in star
    OBSOLETE_GNU_LONG_NAME = "obsolete-gnu-long-name"
    POSIX_EXTENDED = "posix-extended"  # 1003.1-2001 VU and Solaris
    GNU_DUMP_DIR = "gnu-dump-dir"
    GNU_LONG_LINK = "gnu-long-link"  # next entry has a long link name
    GNU_LONG_NAME = "gnu-long-name"  # next entry has a long name
    GNU_MULTI_VOLUME = "gnu-multi-volume"
    GNU_SPARSE = "gnu-sparse"
    GNU_VOLUME_HEADER = "gnu-volume-header"


TYPE_FLAG_CODES: Dict[int, TypeFlag] = {
    0: TypeFlag.NORMAL,
    ord("0"): TypeFlag.NORMAL,
    ord("1"): TypeFlag.HARD_LINK,
    ord("2"): TypeFlag.SYMLINK,
    ord("3"): TypeFlag.CHARACTER_SPECIAL,
    ord("4"): TypeFlag.BLOCK_SPECIAL,
    ord("5"): TypeFlag.DIRECTORY,
    ord("6"): TypeFlag.FIFO,
    ord("7"): TypeFlag.CONTIGUOUS,
    ord("g"): TypeFlag.GLOBAL_EXTENDED_HEADER,
    ord("x"): TypeFlag.EXTENDED_HEADER,
    ord("A"): TypeFlag.SOLARIS_ACL,
    ord("E"): TypeFlag.SOLARIS_EXTENDED_ATTRIBUTE,
    ord("I"): TypeFlag.INODE_ONLY,
    ord("N"): TypeFlag.OBSOLETE_GNU_LONG_NAME,
    ord("X"): TypeFlag.POSIX_EXTENDED,
    ord("D"): TypeFlag.GNU_DUMP_DIR,
    ord("K"): TypeFlag.GNU_LONG_LINK,
    ord("L"): TypeFlag.GNU_LONG_NAME,
    ord("M"): TypeFlag.GNU_MULTI_VOLUME,
    ord("S"): TypeFlag.GNU_SPARSE,
    ord("V"): TypeFlag.GNU_VOLUME_HEADER,
}

# Flags not listed here are reported and processed as-is
TYPE_FLAG_ACTIONS: Dict[TypeFlag, Action] = {
    TypeFlag.NORMAL: Action.NORMAL,
    TypeFlag.DIRECTORY: Action.DIRECTORY,
    TypeFlag.SYMLINK: Action.ERROR,
    TypeFlag.GLOBAL_EXTENDED_HEADER: Action.REPORT_EXTENDED,
    TypeFlag.EXTENDED_HEADER: Action.REPORT_EXTENDED,
    TypeFlag.SOLARIS_EXTENDED_ATTRIBUTE: Action.REPORT_EXTENDED,
    TypeFlag.OBSOLETE_GNU_LONG_NAME: Action.REPORT_EXTENDED,
    TypeFlag.POSIX_EXTENDED: Action.REPORT_EXTENDED,
    TypeFlag.GNU_DUMP_DIR: Action.IGNORE,
    TypeFlag.GNU_LONG_LINK: Action.REPORT_EXTENDED,
    TypeFlag.GNU_LONG_NAME: Action.EXTENDED,
    TypeFlag.GNU_MULTI_VOLUME: Action.ERROR,
    TypeFlag.GNU_SPARSE: Action.ERROR,
    TypeFlag.GNU_VOLUME_HEADER: Action.IGNORE,
}


def type_flag_for(code: int) -> Optional[TypeFlag]:
    """Look up the type flag for a raw typeflag byte."""
    return TYPE_FLAG_CODES.get(code)


def action_for(type_flag: TypeFlag) -> Action:
    """Policy applied to entries of the given type."""
    return TYPE_FLAG_ACTIONS.get(type_flag, Action.REPORT_PROCEED)


def split_fields(record: bytes) -> Dict[str, HeaderField]:
    """Slice a header record into its named fields.

    A record shorter than the layout is zero-padded rather than rejected.
    """
    data = pad_to(record, HEADER_SIZE)
    fields = {}
    offset = 0
    for name, width in HEADER_LAYOUT:
        fields[name] = HeaderField(name, data[offset : offset + width])
        offset += width
    return fields


def parse_file_name(fields: Dict[str, HeaderField]) -> str:
    """Rebuild the entry name from the ustar ``prefix`` and ``name`` fields."""
    prefix = fields["prefix"]
    name = fields["name"].as_string
    if prefix.as_byte != 0:
        return f"{prefix.as_string}/{name}"
    return name


@dataclass(frozen=True)
class TarHeader:
    """Decoded tar header (500 significant bytes of a 512-byte record)."""

    dialect: Dialect
    name: str
    mode: int
    uid: int
    gid: int
    size: int  # content length in bytes
    mtime: int  # seconds since the epoch
    checksum: int  # parsed, never verified
    type_flag: TypeFlag
    linkname: str
    uname: str = ""  # ustar only
    gname: str = ""  # ustar only
    devmajor: int = 0  # ustar only
    devminor: int = 0  # ustar only
    fields: Dict[str, HeaderField] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_record(cls, record: bytes) -> "TarHeader":
        """Decode a header record.

        Raises:
            InvalidHeaderError: Unknown magic or type flag, or a malformed
                numeric field.
            UnsupportedEntryError: The type flag's action is ``ERROR``.
        """
        fields = split_fields(record)

        magic = fields["magic"]
        dialect = Dialect.from_magic(magic.as_string)
        if dialect is None:
            raise InvalidHeaderError(
                f"Unrecognized: {magic.describe()}", field_name=magic.name, raw=magic.raw
            )

        values = dict(
            name=parse_file_name(fields),
            mode=fields["mode"].as_octal,
            uid=fields["uid"].as_octal,
            gid=fields["gid"].as_octal,
            size=fields["size"].as_octal,
            mtime=fields["mtime"].as_octal,
            checksum=fields["chksum"].as_octal,
            linkname=fields["linkname"].as_string,
        )
        if dialect is Dialect.USTAR:
            values.update(
                uname=fields["uname"].as_string,
                gname=fields["gname"].as_string,
                devmajor=fields["devmajor"].as_octal,
                devminor=fields["devminor"].as_octal,
            )

        typeflag = fields["typeflag"]
        type_flag = type_flag_for(typeflag.as_byte)
        if type_flag is None:
            raise InvalidHeaderError(
                f"Unrecognized: {typeflag.describe()}", field_name=typeflag.name, raw=typeflag.raw
            )

        header = cls(dialect=dialect, type_flag=type_flag, fields=fields, **values)

        action = header.action
        if action.is_error:
            raise UnsupportedEntryError(f"Unable to process: {header}")
        if action.is_report:
            log.warning("Reported tar entry: %s", header)
        return header

    @property
    def action(self) -> Action:
        return action_for(self.type_flag)

    @property
    def is_directory(self) -> bool:
        # Some archives mark directories only by a trailing slash
        return self.action.is_directory or self.name.endswith("/")

    @property
    def is_ustar(self) -> bool:
        return self.dialect is Dialect.USTAR

    @property
    def is_gnu(self) -> bool:
        return self.dialect is Dialect.GNU

    @property
    def is_legacy_unix(self) -> bool:
        return self.dialect is Dialect.LEGACY_UNIX

    @property
    def modification_time(self) -> datetime:
        return datetime.fromtimestamp(self.mtime, tz=timezone.utc)

    def has_descendant(self, other: "TarHeader") -> bool:
        """True if ``other``'s name starts with this header's name.

        Plain string prefix test: ``foo`` also claims ``foobar``.
        """
        return other.name.startswith(self.name)

    def __str__(self) -> str:
        return (
            f"[{self.dialect.value}-{self.type_flag.value}"
            f", name={self.name}"
            f", isDir={self.is_directory}"
            f", size={self.size}"
            f", userId={self.uid}"
            f", user={self.uname}"
            f", groupId={self.gid}"
            f", group={self.gname}]"
        )
