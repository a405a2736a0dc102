"""Package sources: directories, zip files and (gzipped) tar files.

Every source is an iterator of ``RelativeFile`` handles with ``has_next()``
and ``dispose()``, and works as a context manager.
"""

import gzip
import logging
import zipfile
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Tuple, Union

from .exceptions import SourceError
from .files import PathRelativeFile, RelativeFile
from .tar.iterator import TarFileIterator

log = logging.getLogger(__name__)


class SourceType(Enum):
    DIR = "dir"
    ZIP = "zip"
    GZ = "gz"  # gzipped tar
    TAR = "tar"

    @classmethod
    def for_path(cls, path: Path) -> "SourceType":
        if path.is_dir():
            return cls.DIR
        if path.is_file():
            suffix = path.suffix.lower()
            if suffix == ".zip":
                return cls.ZIP
            if suffix in (".gz", ".tgz"):
                return cls.GZ
            if suffix == ".tar":
                return cls.TAR
        raise SourceError(f"Neither a Dir nor 'zip', 'gz' or 'tar' file: {path.resolve()}")


class _ListIterator:
    """Shared iteration over a precomputed list of files."""

    def __init__(self, files: List[RelativeFile]):
        self._files = files
        self._index = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __iter__(self):
        return self

    def __next__(self) -> RelativeFile:
        if not self.has_next():
            raise StopIteration
        relative_file = self._files[self._index]
        self._index += 1
        return relative_file

    def has_next(self) -> bool:
        return self._index < len(self._files)

    def dispose(self) -> None:
        self._index = len(self._files)


class DirectoryFileIterator(_ListIterator):
    """Every file below ``root``, sorted by relative path."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        files = [
            PathRelativeFile(path.relative_to(self.root).as_posix(), path)
            for path in sorted(self.root.rglob("*"))
            if path.is_file()
        ]
        super().__init__(files)


class ZipMemberFile(RelativeFile):
    """A member of an open zip archive."""

    def __init__(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo):
        super().__init__(info.filename)
        self._archive = archive
        self._info = info

    def open(self) -> BinaryIO:
        return self._archive.open(self._info)


class ZipFileIterator(_ListIterator):
    """Non-directory members of a zip file, in archive order."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self._archive: Optional[zipfile.ZipFile] = zipfile.ZipFile(self.path)
        except zipfile.BadZipFile as e:
            raise SourceError(f"Not a readable zip file: {self.path}: {e}") from e
        files = [
            ZipMemberFile(self._archive, info)
            for info in self._archive.infolist()
            if not info.is_dir()
        ]
        super().__init__(files)

    def dispose(self) -> None:
        super().dispose()
        if self._archive is not None:
            archive, self._archive = self._archive, None
            archive.close()


class TarGzFileIterator(TarFileIterator):
    """``TarFileIterator`` over a gzipped tar file on disk."""

    def __init__(self, path: Union[str, Path], **kwargs):
        self.path = Path(path)
        super().__init__(gzip.open(self.path, "rb"), **kwargs)


def open_source(path: Union[str, Path], **tar_options) -> Iterator[RelativeFile]:
    """Open the right iterator for ``path``.

    ``tar_options`` (memory_threshold, records_per_block, temp_dir) only
    apply to tar sources.
    """
    path = Path(path)
    source_type = SourceType.for_path(path)
    log.debug("Source %s is a %s", path, source_type.value)
    if source_type is SourceType.DIR:
        return DirectoryFileIterator(path)
    if source_type is SourceType.ZIP:
        return ZipFileIterator(path)
    if source_type is SourceType.GZ:
        return TarGzFileIterator(path, **tar_options)
    return TarFileIterator(open(path, "rb"), **tar_options)


def parse_gz_name(path: Union[str, Path]) -> Tuple[Optional[str], Optional[str]]:
    """Split ``Target-Version-rest.gz`` into (target, version).

    ``jre-7u60-linux-x64.gz`` gives ``("jre", "7u60")``. Parts that cannot
    be found are None.
    """
    name = Path(path).name
    first_dash = name.find("-")
    if first_dash <= 0:
        return None, None
    target = name[:first_dash]
    second_dash = name.find("-", first_dash + 1)
    if second_dash <= first_dash + 1:
        return target, None
    return target, name[first_dash + 1 : second_dash]
