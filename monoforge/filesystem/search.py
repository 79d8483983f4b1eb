"""Recursive file search with include/exclude filters.

The walker is the primitive underneath blueprint copying, placeholder
rewriting and project discovery.  It runs in one of two directions:

``forward``
    Descend into child directories (depth first, results expanded inline).
    Used to collect every file below a package directory.

``reverse``
    Never descend.  Collect the files of the current directory, then climb to
    the parent and repeat.  Used to find the nearest enclosing marker file,
    e.g. the workspace ``package.json`` above a package.

``depth`` counts the remaining hops in either direction: ``0`` means "only the
files of the start directory".
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SEARCH_DEPTH = 999


class SearchDirection(str, Enum):
    """Direction in which :func:`iter_files` walks from the start directory."""

    FORWARD = "forward"
    REVERSE = "reverse"


class SearchOptions(BaseModel):
    """Filters and limits for a file search.

    An empty include set means "no restriction".  Exclusion always wins: a name
    listed in both an include set and the matching exclude set is never
    returned.
    """

    model_config = ConfigDict(frozen=True)

    depth: int = Field(default=DEFAULT_SEARCH_DEPTH, ge=0)
    include_file_names: frozenset[str] = Field(default_factory=frozenset)
    include_directories: frozenset[str] = Field(default_factory=frozenset)
    include_extensions: frozenset[str] = Field(default_factory=frozenset)
    exclude_file_names: frozenset[str] = Field(default_factory=frozenset)
    exclude_directories: frozenset[str] = Field(default_factory=frozenset)
    exclude_extensions: frozenset[str] = Field(default_factory=frozenset)
    direction: SearchDirection = SearchDirection.FORWARD

    def accepts_directory(self, name: str) -> bool:
        """Return ``True`` if a directory with bare *name* may be entered."""
        if self.include_directories and name not in self.include_directories:
            return False
        return name not in self.exclude_directories

    def accepts_file(self, name: str) -> bool:
        """Return ``True`` if a file with bare *name* should be collected."""
        extension = file_extension(name)
        if self.include_file_names and name not in self.include_file_names:
            return False
        if self.include_extensions and extension not in self.include_extensions:
            return False
        if name in self.exclude_file_names:
            return False
        return extension not in self.exclude_extensions

    def next_level(self) -> SearchOptions:
        """Copy of these options one hop further from the start directory."""
        return self.model_copy(update={"depth": self.depth - 1})


def file_extension(name: str) -> str:
    """Return the part of *name* after its last ``.``, or ``""`` without one.

    Examples::

        file_extension("index.ts")      -> "ts"
        file_extension("archive.tar.gz") -> "gz"
        file_extension("Makefile")      -> ""
    """
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def iter_files(
    start_directory: str | Path,
    options: SearchOptions | None = None,
) -> Iterator[Path]:
    """Lazily yield absolute paths of every file matching *options*.

    Children are visited in sorted name order so results are reproducible
    across platforms.

    Raises:
        NotADirectoryError: If *start_directory* is not a directory.
    """
    options = options or SearchOptions()
    directory = Path(start_directory).resolve()
    if not directory.is_dir():
        raise NotADirectoryError(f'"{directory}" is not a directory.')
    return _walk(directory, options)


def find_files(
    start_directory: str | Path,
    options: SearchOptions | None = None,
) -> list[Path]:
    """Eager form of :func:`iter_files`."""
    return list(iter_files(start_directory, options))


def search_options(
    *,
    depth: int = DEFAULT_SEARCH_DEPTH,
    include_file_names: Iterable[str] = (),
    include_directories: Iterable[str] = (),
    include_extensions: Iterable[str] = (),
    exclude_file_names: Iterable[str] = (),
    exclude_directories: Iterable[str] = (),
    exclude_extensions: Iterable[str] = (),
    direction: SearchDirection | str = SearchDirection.FORWARD,
) -> SearchOptions:
    """Build :class:`SearchOptions` from plain iterables (lists, tuples, sets)."""
    return SearchOptions(
        depth=depth,
        include_file_names=frozenset(include_file_names),
        include_directories=frozenset(include_directories),
        include_extensions=frozenset(include_extensions),
        exclude_file_names=frozenset(exclude_file_names),
        exclude_directories=frozenset(exclude_directories),
        exclude_extensions=frozenset(exclude_extensions),
        direction=SearchDirection(direction),
    )


# ---------------------------------------------------------------------------
# Internal walk
# ---------------------------------------------------------------------------


def _walk(directory: Path, options: SearchOptions) -> Iterator[Path]:
    remaining = options.depth - 1
    forward = options.direction is SearchDirection.FORWARD

    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if child.is_dir():
            if not forward or remaining < 0:
                continue
            if not options.accepts_directory(child.name):
                continue
            yield from _walk(child, options.next_level())
        elif child.is_file():
            if options.accepts_file(child.name):
                yield child
        # Sockets, fifos and dangling symlinks are neither.

    if forward or remaining < 0:
        return

    parent = directory.parent
    if parent == directory or parent.parent == parent:
        # Never climb onto the filesystem root.
        return
    if not options.accepts_directory(parent.name):
        return
    yield from _walk(parent, options.next_level())
