"""Literal placeholder substitution over a set of files.

Placeholders are plain substrings such as ``{{PACKAGE_NAME}}``; there is no
templating language involved.  Replacement is global and literal, so the order
of keys does not matter as long as they are disjoint.

Rewriting is applied twice safely only when no replacement value itself
contains a placeholder marker.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path


def replace_tokens(text: str, token_map: Mapping[str, str]) -> str:
    """Replace every occurrence of every key of *token_map* in *text*."""
    for token, value in token_map.items():
        text = text.replace(token, value)
    return text


def is_binary(content: bytes) -> bool:
    """Heuristic used to leave images, fonts and archives alone."""
    return b"\x00" in content


def rewrite_placeholders(
    files: Iterable[str | Path],
    token_map: Mapping[str, str],
) -> list[Path]:
    """Substitute *token_map* in each of *files* and write the result back.

    All files are read and substituted in memory before the first write, so a
    read or decode error leaves every file untouched.  A write error part way
    through is not rolled back: earlier files stay rewritten.

    Files without any token are not written at all, binary files (containing a
    NUL byte) are skipped.

    Returns:
        Paths of the files whose content changed.

    Raises:
        OSError: If a file cannot be read or written.
        UnicodeDecodeError: If a non-binary file is not valid UTF-8.
    """
    pending: list[tuple[Path, str]] = []
    for file in files:
        path = Path(file)
        raw = path.read_bytes()
        if is_binary(raw):
            continue
        original = raw.decode("utf-8")
        rewritten = replace_tokens(original, token_map)
        if rewritten != original:
            pending.append((path, rewritten))

    for path, content in pending:
        # newline="" keeps the file's own line endings.
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    return [path for path, _ in pending]
