"""Content handles for files headed into a package.

A ``RelativeFile`` pairs the forward-slash path a file will have inside the
package with a way to open its bytes.
"""

import logging
import os
import tempfile
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

log = logging.getLogger(__name__)


class RelativeFile:
    """Base class: a relative path plus openable content."""

    def __init__(self, relative_path: str):
        self.relative_path = relative_path

    def open(self) -> BinaryIO:
        raise NotImplementedError

    def read_bytes(self) -> bytes:
        with self.open() as stream:
            return stream.read()

    def dispose(self) -> None:
        """Release anything backing the content."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.relative_path!r})"


class MemoryRelativeFile(RelativeFile):
    """Content held in memory; can be opened any number of times."""

    def __init__(self, relative_path: str, data: bytes):
        super().__init__(relative_path)
        self._data = bytes(data)

    @property
    def size(self) -> int:
        return len(self._data)

    def open(self) -> BinaryIO:
        return BytesIO(self._data)


class ContentsRelativeFile(MemoryRelativeFile):
    """Text content, stored UTF-8 encoded."""

    def __init__(self, relative_path: str, contents: str):
        super().__init__(relative_path, contents.encode("utf-8"))


class PathRelativeFile(RelativeFile):
    """A file already on disk."""

    def __init__(self, relative_path: str, path: Union[str, Path]):
        super().__init__(relative_path)
        self.path = Path(path)

    def open(self) -> BinaryIO:
        return open(self.path, "rb")


class TempFileRelativeFile(PathRelativeFile):
    """Content spooled to a temporary file, deleted on dispose()."""

    def __init__(self, relative_path: str, path: Union[str, Path]):
        super().__init__(relative_path, path)
        self._disposed = False

    @classmethod
    def spool(
        cls,
        relative_path: str,
        copy: Callable[[BinaryIO], int],
        temp_dir: Optional[Union[str, Path]] = None,
    ) -> "TempFileRelativeFile":
        """Create a temp file and let ``copy`` write the content into it.

        The temp file is removed again if ``copy`` fails.
        """
        # Keep long entry paths from producing over-long file names
        prefix = ("temp-" + relative_path.replace("/", "_"))[:100] + "-"
        fd, temp_path = tempfile.mkstemp(prefix=prefix, suffix=".tmp", dir=temp_dir)
        try:
            with os.fdopen(fd, "wb") as out:
                copy(out)
        except BaseException:
            _unlink(temp_path)
            raise
        log.debug("Spooled %s to %s", relative_path, temp_path)
        return cls(relative_path, temp_path)

    def open(self) -> BinaryIO:
        if self._disposed:
            raise ValueError(f"{self.relative_path}: temp file already disposed")
        return super().open()

    def dispose(self) -> None:
        if not self._disposed:
            self._disposed = True
            _unlink(self.path)


def _unlink(path: Union[str, Path]) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning("Could not delete temp file %s: %s", path, e)
