"""File system primitives used by the scaffolder.

Quick usage::

    from monoforge.filesystem import find_files, search_options

    sources = find_files(
        "packages/my-lib",
        search_options(include_extensions={"ts"}, exclude_directories={"node_modules"}),
    )
"""

from monoforge.filesystem.archive import expand_blueprint, supported_formats
from monoforge.filesystem.copy import copy_directory
from monoforge.filesystem.rewrite import replace_tokens, rewrite_placeholders
from monoforge.filesystem.search import (
    DEFAULT_SEARCH_DEPTH,
    SearchDirection,
    SearchOptions,
    file_extension,
    find_files,
    iter_files,
    search_options,
)

__all__ = [
    "DEFAULT_SEARCH_DEPTH",
    "SearchDirection",
    "SearchOptions",
    "copy_directory",
    "expand_blueprint",
    "file_extension",
    "find_files",
    "iter_files",
    "replace_tokens",
    "rewrite_placeholders",
    "search_options",
    "supported_formats",
]
