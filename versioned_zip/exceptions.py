"""Exception hierarchy for versioned-zip.

All exceptions inherit from ``VersionedZipError`` so callers can catch the
package's entire error surface with a single ``except`` clause.
"""

from typing import Optional


class VersionedZipError(Exception):
    """Base exception for all versioned-zip errors."""


class TarReadError(VersionedZipError):
    """Raised when a tar stream cannot be read or decoded."""


class InvalidHeaderError(TarReadError):
    """A tar header is malformed.

    Raised for non-octal bytes in numeric fields and for unrecognised
    magic or type flag values. When a single field is at fault its name
    and raw bytes are kept on the exception.
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        raw: Optional[bytes] = None,
    ) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.raw = raw


class UnsupportedEntryError(TarReadError):
    """The archive holds an entry type that cannot be processed.

    Symlinks, GNU multi-volume continuations and GNU sparse files abort
    the whole read.
    """


class TruncatedArchiveError(TarReadError):
    """The stream ended inside an entry's content."""


class SourceError(VersionedZipError):
    """The package source is neither a directory, a zip nor a gzipped tar."""


class PackageError(VersionedZipError):
    """Packaging parameters are missing or invalid."""
