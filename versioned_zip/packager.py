"""Write a source's files into ``<output_dir>/<target>/<version>.zip``."""

import logging
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .exceptions import PackageError
from .files import ContentsRelativeFile, RelativeFile
from .sources import SourceType, open_source, parse_gz_name

log = logging.getLogger(__name__)

VERSION_FILE = "version.txt"


@dataclass
class PackageParameters:
    """What to package and where to put it."""

    source: Path
    target: Optional[str] = None  # e.g. "jre"
    version: Optional[str] = None  # e.g. "7u60"
    output_dir: Optional[Path] = None

    @classmethod
    def from_source(
        cls,
        source: Union[str, Path],
        target: Optional[str] = None,
        version: Optional[str] = None,
        output_dir: Optional[Union[str, Path]] = None,
    ) -> "PackageParameters":
        """Build parameters, taking target/version from a gz name when missing."""
        source = Path(source)
        if SourceType.for_path(source) is SourceType.GZ:
            gz_target, gz_version = parse_gz_name(source)
            target = target or gz_target
            version = version or gz_version
        return cls(
            source=source,
            target=target,
            version=version,
            output_dir=Path(output_dir) if output_dir is not None else None,
        )

    @property
    def zip_path(self) -> Path:
        return self.output_dir / self.target / f"{self.version}.zip"

    def validate(self) -> None:
        """Raise PackageError naming every missing parameter."""
        missing = [
            name
            for name, value in (
                ("target", self.target),
                ("version", self.version),
                ("output_dir", self.output_dir),
            )
            if not value
        ]
        if missing:
            raise PackageError(f"Missing package parameters: {', '.join(missing)}")
        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise PackageError(f"Output dir is not a directory: {self.output_dir}")


class ZipPackager:
    """Zip writer that only replaces the destination once complete.

    Entries go to ``<zip>.new``; ``close()`` moves an existing zip aside to
    ``<zip>.bak`` and renames the new file into place.
    """

    def __init__(self, zip_path: Union[str, Path]):
        self.zip_path = Path(zip_path)
        self.new_path = self.zip_path.with_name(self.zip_path.name + ".new")
        self.backup_path = self.zip_path.with_name(self.zip_path.name + ".bak")
        self.zip_path.parent.mkdir(parents=True, exist_ok=True)
        self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(
            self.new_path, "w", compression=zipfile.ZIP_DEFLATED
        )
        self.count = 0

    def __enter__(self) -> "ZipPackager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def add(self, relative_file: RelativeFile) -> None:
        """Copy one file into the zip under its forward-slash path."""
        if self._zip is None:
            raise ValueError("ZipPackager is closed")
        arcname = relative_file.relative_path.replace("\\", "/")
        with relative_file.open() as src, self._zip.open(arcname, "w") as dst:
            shutil.copyfileobj(src, dst)
        self.count += 1

    def close(self) -> None:
        """Finish the zip and roll it into place."""
        if self._zip is None:
            return
        self._zip.close()
        self._zip = None
        if self.zip_path.exists():
            self.zip_path.replace(self.backup_path)
        self.new_path.replace(self.zip_path)
        log.info("Produced %s (%d entries)", self.zip_path, self.count)

    def abort(self) -> None:
        """Drop the partial zip, leaving any existing one untouched."""
        if self._zip is None:
            return
        self._zip.close()
        self._zip = None
        self.new_path.unlink(missing_ok=True)


def package(params: PackageParameters, on_add=None, **tar_options) -> Path:
    """Write ``version.txt`` plus every source file into the versioned zip.

    ``on_add`` is called with each ``RelativeFile`` as it is added.
    Returns the path of the produced zip.
    """
    params.validate()
    source = open_source(params.source, **tar_options)
    try:
        with ZipPackager(params.zip_path) as zipper:
            for relative_file in _with_version(params.version, source):
                if on_add:
                    on_add(relative_file)
                zipper.add(relative_file)
                # Spooled temp files go as soon as their copy is in the zip
                relative_file.dispose()
    finally:
        source.dispose()
    return params.zip_path


def _with_version(version: str, source):
    yield ContentsRelativeFile(VERSION_FILE, f"{version}\n")
    yield from source
