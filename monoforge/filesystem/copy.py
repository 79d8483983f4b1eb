"""Filtered directory copy that preserves relative structure."""

from __future__ import annotations

import shutil
from pathlib import Path

from .search import SearchDirection, SearchOptions, iter_files


def copy_directory(
    source_root: str | Path,
    destination_root: str | Path,
    overwrite: bool = False,
    options: SearchOptions | None = None,
) -> list[Path]:
    """Copy every file found under *source_root* into *destination_root*.

    Files are enumerated with a forward search (the direction in *options* is
    ignored).  Each file keeps its path relative to *source_root*; missing
    destination directories are created on the way.  An existing destination
    file is only replaced when *overwrite* is true, otherwise it is skipped
    silently.

    Args:
        source_root: Directory to copy from.
        destination_root: Directory to copy into.  Created if missing.
        overwrite: Replace destination files that already exist.
        options: Optional search filters (names, directories, extensions,
            depth).

    Returns:
        Destination paths that were actually written, in search order.

    Raises:
        NotADirectoryError: If *source_root* is not a directory.
    """
    source = Path(source_root).resolve()
    destination = Path(destination_root).resolve()
    options = (options or SearchOptions()).model_copy(
        update={"direction": SearchDirection.FORWARD}
    )

    written: list[Path] = []
    for source_file in iter_files(source, options):
        target = destination / source_file.relative_to(source)
        if target.exists() and not overwrite:
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source_file, target)
        written.append(target)

    return written
