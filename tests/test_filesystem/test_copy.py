"""Unit tests for copy_directory (monoforge.filesystem.copy)."""

from __future__ import annotations

from pathlib import Path

import pytest

from monoforge.filesystem.copy import copy_directory
from monoforge.filesystem.search import find_files, search_options

pytestmark = pytest.mark.unit


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def source(tree) -> Path:
    return tree(
        {
            "package.json": "{}",
            "src/index.ts": "export {};\n",
            "src/nested/deep.ts": "deep",
            "assets/logo.png": b"\x89PNG\x00\x01binary",
            "node_modules/dep/index.js": "dep",
        },
        name="source",
    )


class TestCopyDirectory:
    def test_copies_structure_and_bytes(self, source: Path, tmp_path: Path):
        destination = tmp_path / "destination"
        copy_directory(source, destination)
        assert _snapshot(destination) == _snapshot(source)

    def test_returns_manifest_of_written_files(self, source: Path, tmp_path: Path):
        destination = tmp_path / "destination"
        written = copy_directory(source, destination)
        assert sorted(written) == sorted(find_files(destination))

    def test_creates_missing_destination_directories(self, source: Path, tmp_path: Path):
        destination = tmp_path / "a" / "b" / "c"
        copy_directory(source, destination)
        assert (destination / "src" / "nested" / "deep.ts").read_text() == "deep"

    def test_existing_files_are_kept_without_overwrite(self, source: Path, tmp_path: Path):
        destination = tmp_path / "destination"
        (destination / "src").mkdir(parents=True)
        (destination / "src" / "index.ts").write_text("mine", encoding="utf-8")

        written = copy_directory(source, destination)

        assert (destination / "src" / "index.ts").read_text(encoding="utf-8") == "mine"
        assert (destination / "src" / "index.ts").resolve() not in written
        assert (destination / "package.json").exists()

    def test_existing_files_replaced_with_overwrite(self, source: Path, tmp_path: Path):
        destination = tmp_path / "destination"
        (destination / "src").mkdir(parents=True)
        (destination / "src" / "index.ts").write_text("mine", encoding="utf-8")

        copy_directory(source, destination, overwrite=True)

        assert (destination / "src" / "index.ts").read_text(encoding="utf-8") == "export {};\n"

    def test_idempotent_without_overwrite(self, source: Path, tmp_path: Path):
        destination = tmp_path / "destination"
        copy_directory(source, destination)
        first = _snapshot(destination)

        second_written = copy_directory(source, destination)

        assert second_written == []
        assert _snapshot(destination) == first

    def test_respects_search_filters(self, source: Path, tmp_path: Path):
        destination = tmp_path / "destination"
        copy_directory(
            source,
            destination,
            options=search_options(exclude_directories={"node_modules"}, exclude_extensions={"png"}),
        )
        copied = set(_snapshot(destination))
        assert copied == {"package.json", "src/index.ts", "src/nested/deep.ts"}

    def test_reverse_direction_is_ignored(self, source: Path, tmp_path: Path):
        destination = tmp_path / "destination"
        copy_directory(source, destination, options=search_options(direction="reverse", depth=0))
        assert set(_snapshot(destination)) == {"package.json"}

    def test_source_must_be_directory(self, source: Path, tmp_path: Path):
        with pytest.raises(NotADirectoryError):
            copy_directory(source / "package.json", tmp_path / "destination")
