"""Tests for package sources."""

import gzip
import zipfile

import pytest

from versioned_zip.exceptions import SourceError
from versioned_zip.files import ContentsRelativeFile, PathRelativeFile
from versioned_zip.sources import (
    DirectoryFileIterator,
    SourceType,
    TarGzFileIterator,
    ZipFileIterator,
    open_source,
    parse_gz_name,
)
from versioned_zip.tar.iterator import TarFileIterator

from .helpers import stdlib_tar


@pytest.fixture
def source_dir(tmp_path):
    root = tmp_path / "src"
    (root / "bin").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "bin" / "tool").write_bytes(b"#!tool")
    (root / "README").write_text("read me")
    return root


@pytest.fixture
def source_zip(tmp_path):
    path = tmp_path / "app.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("lib/", "")
        zf.writestr("lib/core.py", "print('core')")
        zf.writestr("setup.cfg", "[metadata]")
    return path


@pytest.fixture
def source_tgz(tmp_path):
    path = tmp_path / "jre-7u60-linux-x64.gz"
    path.write_bytes(
        gzip.compress(stdlib_tar([("jre", None), ("jre/bin/java", b"JAVA"), ("jre/COPYRIGHT", b"(c)")]))
    )
    return path


class TestParseGzName:
    def test_target_and_version(self):
        assert parse_gz_name("jre-7u60-linux-x64.gz") == ("jre", "7u60")

    def test_path_is_reduced_to_name(self, tmp_path):
        assert parse_gz_name(tmp_path / "node-18.1-x.gz") == ("node", "18.1")

    def test_target_only(self):
        assert parse_gz_name("jre-7u60.gz") == ("jre", None)

    def test_no_dash(self):
        assert parse_gz_name("archive.gz") == (None, None)

    def test_leading_dash(self):
        assert parse_gz_name("-7u60-x.gz") == (None, None)


class TestSourceType:
    def test_dir(self, source_dir):
        assert SourceType.for_path(source_dir) is SourceType.DIR

    def test_zip(self, source_zip):
        assert SourceType.for_path(source_zip) is SourceType.ZIP

    def test_gz(self, source_tgz):
        assert SourceType.for_path(source_tgz) is SourceType.GZ

    @pytest.mark.parametrize("name", ["jre-8.tgz", "JRE-8.GZ"])
    def test_gz_suffixes(self, tmp_path, name):
        path = tmp_path / name
        path.write_bytes(b"")
        assert SourceType.for_path(path) is SourceType.GZ

    def test_plain_tar(self, tmp_path):
        path = tmp_path / "app.tar"
        path.write_bytes(b"")
        assert SourceType.for_path(path) is SourceType.TAR

    def test_other_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x")
        with pytest.raises(SourceError, match="Neither a Dir"):
            SourceType.for_path(path)

    def test_corrupt_zip(self, tmp_path):
        path = tmp_path / "broken.zip"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(SourceError, match="Not a readable zip file") as excinfo:
            ZipFileIterator(path)
        assert excinfo.value.__cause__ is not None

    def test_missing(self, tmp_path):
        with pytest.raises(SourceError):
            open_source(tmp_path / "missing.zip")


class TestIterators:
    def test_directory(self, source_dir):
        with DirectoryFileIterator(source_dir) as files:
            found = list(files)
        assert [f.relative_path for f in found] == ["README", "bin/tool"]
        assert all(isinstance(f, PathRelativeFile) for f in found)
        assert found[1].read_bytes() == b"#!tool"

    def test_zip(self, source_zip):
        files = ZipFileIterator(source_zip)
        assert files.has_next()
        found = {f.relative_path: f.read_bytes() for f in files}
        files.dispose()
        assert found == {"lib/core.py": b"print('core')", "setup.cfg": b"[metadata]"}
        assert not files.has_next()

    def test_tar_gz(self, source_tgz):
        with TarGzFileIterator(source_tgz) as files:
            found = {f.relative_path: f.read_bytes() for f in files}
        assert found == {"jre/bin/java": b"JAVA", "jre/COPYRIGHT": b"(c)"}

    def test_open_source_dispatch(self, source_dir, source_zip, source_tgz, tmp_path):
        plain_tar = tmp_path / "plain.tar"
        plain_tar.write_bytes(stdlib_tar([("a", b"1")]))

        assert isinstance(open_source(source_dir), DirectoryFileIterator)
        zip_files = open_source(source_zip)
        assert isinstance(zip_files, ZipFileIterator)
        zip_files.dispose()
        with open_source(source_tgz, memory_threshold=1) as tgz_files:
            assert isinstance(tgz_files, TarGzFileIterator)
            assert tgz_files.memory_threshold == 1
        with open_source(plain_tar) as tar_files:
            assert type(tar_files) is TarFileIterator
            assert [f.read_bytes() for f in tar_files] == [b"1"]


class TestRelativeFiles:
    def test_contents(self):
        version = ContentsRelativeFile("version.txt", "1.0\n")
        assert version.read_bytes() == b"1.0\n"
        assert version.size == 4
        assert repr(version) == "ContentsRelativeFile('version.txt')"
