"""Blueprint materialisation: archive expansion or plain directory copy."""

from __future__ import annotations

import asyncio
import shutil
import tarfile
import zipfile
from pathlib import Path

from monoforge.errors import ArchiveExpansionError

from .copy import copy_directory
from .search import find_files


def supported_formats() -> list[str]:
    """Archive format names understood by :func:`expand_blueprint`."""
    return sorted(name for name, _, _ in shutil.get_unpack_formats())


async def expand_blueprint(source: str | Path, target_directory: str | Path) -> list[Path]:
    """Materialise a blueprint into *target_directory*.

    A directory *source* is treated as an uncompressed blueprint and copied
    file by file.  Any other *source* is unpacked with
    :func:`shutil.unpack_archive`, which picks the format from the file
    extension (``.zip``, ``.tar``, ``.tar.gz``/``.tgz``, ``.tar.bz2``,
    ``.tar.xz``).  Archives are checked member by member first: nothing is
    extracted when a member or link would land outside *target_directory*.

    Returns:
        Every file now present below *target_directory*.

    Raises:
        ArchiveExpansionError: If *source* is missing, has an unknown format,
            cannot be read, or has members escaping the target.
    """
    archive = Path(source)
    target = Path(target_directory)

    if archive.is_dir():
        return await asyncio.to_thread(copy_directory, archive, target, True)

    if not archive.is_file():
        raise ArchiveExpansionError(f'Blueprint archive "{archive}" not found.', archive)

    try:
        await asyncio.to_thread(_unpack, archive, target)
    except shutil.ReadError as exc:
        raise ArchiveExpansionError(
            f'Blueprint archive "{archive}" is not a readable archive '
            f"(supported: {', '.join(supported_formats())}).",
            archive,
        ) from exc
    except (OSError, EOFError, ValueError, zipfile.BadZipFile, tarfile.TarError) as exc:
        raise ArchiveExpansionError(
            f'Failed to expand blueprint archive "{archive}": {exc}', archive
        ) from exc

    return await asyncio.to_thread(find_files, target)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _unpack(archive: Path, target: Path) -> None:
    root = target.resolve()
    for name in _member_paths(archive):
        destination = (root / name).resolve()
        if destination != root and root not in destination.parents:
            raise ArchiveExpansionError(
                f'Blueprint archive "{archive}" has member "{name}" outside the target directory.',
                archive,
            )
    shutil.unpack_archive(str(archive), str(target))


def _member_paths(archive: Path) -> list[str]:
    """Paths (relative to the extraction root) an archive would write or link to."""
    if zipfile.is_zipfile(archive):
        with zipfile.ZipFile(archive) as zf:
            return zf.namelist()
    if not tarfile.is_tarfile(archive):
        # Unknown format; shutil.unpack_archive reports it.
        return []

    paths: list[str] = []
    with tarfile.open(archive) as tf:
        for member in tf.getmembers():
            paths.append(member.name)
            if member.issym():
                paths.append(str(Path(member.name).parent / member.linkname))
            elif member.islnk():
                paths.append(member.linkname)
    return paths
