"""versioned-zip CLI."""

import gzip
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .exceptions import VersionedZipError
from .tar.buffer import DEFAULT_RECORDS_PER_BLOCK
from .tar.iterator import MAX_MEMORY_FILE_SIZE


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """versioned-zip - Package files into a versioned zip.

    \b
    Sources:
    - a directory
    - a .zip file
    - a .tar.gz / .tgz (or plain .tar) file
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("list")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--files-only",
    is_flag=True,
    help="Hide directory entries",
)
@click.option(
    "--records-per-block",
    type=click.IntRange(min=1),
    default=DEFAULT_RECORDS_PER_BLOCK,
    show_default=True,
    help="Tar blocking factor (records of 512 bytes per block)",
)
def list_entries(archive: Path, files_only: bool, records_per_block: int):
    """List the entries of a tar or tar.gz archive."""
    from .tar import TarReader

    click.echo(f"Opening: {archive}")

    try:
        with TarReader(_open_tar(archive), records_per_block) as reader:
            count = 0
            for entry in reader:
                if files_only and entry.is_directory:
                    continue
                count += 1
                click.echo(
                    f"  {entry.dialect.value:<11} {entry.type_flag.value:<10} "
                    f"{entry.size:>10} {entry.name}"
                )

        click.echo()
        click.echo(f"Entries: {count}")

    except (VersionedZipError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("source", type=click.Path(exists=True, path_type=Path))
@click.option("-t", "--target", help="Target name, e.g. 'jre' (default: from a gz file name)")
@click.option(
    "-V",
    "--pkg-version",
    "version",
    help="Version, e.g. '7u60' (default: from a gz file name)",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory receiving <target>/<version>.zip",
)
@click.option(
    "--memory-threshold",
    type=click.IntRange(min=0),
    default=MAX_MEMORY_FILE_SIZE,
    show_default=True,
    help="Tar entries larger than this many bytes are spooled to temp files",
)
@click.option(
    "--temp-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for spooled temp files",
)
def package(
    source: Path,
    target: Optional[str],
    version: Optional[str],
    output_dir: Path,
    memory_threshold: int,
    temp_dir: Optional[Path],
):
    """Package SOURCE into <output-dir>/<target>/<version>.zip.

    A gzipped tar named like 'jre-7u60-linux-x64.gz' supplies target
    'jre' and version '7u60' when they are not given.
    """
    from .packager import PackageParameters, package as build_package
    from .sources import SourceType

    click.echo(f"Source: {source}")

    try:
        params = PackageParameters.from_source(source, target, version, output_dir)
        params.validate()
        click.echo(f"Producing: {params.zip_path}")

        tar_options = {}
        if SourceType.for_path(source) in (SourceType.GZ, SourceType.TAR):
            tar_options = dict(memory_threshold=memory_threshold, temp_dir=temp_dir)

        count = 0

        def on_add(relative_file):
            nonlocal count
            count += 1
            click.echo(f"  {relative_file.relative_path}")

        zip_path = build_package(params, on_add=on_add, **tar_options)

        click.echo()
        click.echo(f"Packaged: {count} files")
        click.echo(f"Created: {zip_path}")

    except (VersionedZipError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _open_tar(path: Path):
    """Open a tar file, decompressing on the fly when it is gzipped."""
    if path.suffix.lower() in (".gz", ".tgz"):
        return gzip.open(path, "rb")
    return open(path, "rb")


if __name__ == "__main__":
    main()
