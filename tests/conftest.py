"""Shared pytest fixtures for the monoforge test suite.

Provides reusable fixtures for:
- Building file trees from ``{relative path: content}`` mappings
- A temporary npm workspace monorepo with installed blueprint packages
- A Rich console that records output instead of printing
- Mock subprocess helpers and a fake install runner
"""

from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console


# ---------------------------------------------------------------------------
# File trees
# ---------------------------------------------------------------------------

def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create every ``relative path -> content`` entry below *root*."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def write_json(path: Path, data: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=4) + "\n", encoding="utf-8")
    return path


def zip_tree(archive: Path, files: dict[str, str | bytes]) -> Path:
    """Write *files* into a zip archive at *archive*."""
    archive.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive, "w") as zf:
        for relative, content in files.items():
            zf.writestr(relative, content)
    return archive


@pytest.fixture
def tree(tmp_path: Path):
    """Factory fixture: ``tree({"a/b.txt": "x"})`` returns the tree root."""
    counter = {"n": 0}

    def factory(files: dict[str, str | bytes], name: str | None = None) -> Path:
        counter["n"] += 1
        root = tmp_path / (name or f"tree-{counter['n']}")
        root.mkdir(parents=True, exist_ok=True)
        return write_tree(root, files)

    return factory


# ---------------------------------------------------------------------------
# Blueprint content
# ---------------------------------------------------------------------------

LIBRARY_BLUEPRINT: dict[str, str | bytes] = {
    "package.json": json.dumps(
        {"name": "{{PACKAGE_NAME}}", "version": "0.0.1", "main": "index.ts"}, indent=4
    ),
    "index.ts": "Hello {{PACKAGE_NAME}}",
    "README.md": "# {{PACKAGE_NAME}}\n\nFolder {{PROJECT_FOLDER}} in {{ROOT_PROJECT_FOLDER}}.\n",
    "source/id.ts": "export const ID = '{{PACKAGE_ID_NAME}}';\n",
    "assets/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00{{PACKAGE_NAME}}",
}


@pytest.fixture
def library_blueprint() -> dict[str, str | bytes]:
    return dict(LIBRARY_BLUEPRINT)


# ---------------------------------------------------------------------------
# Monorepo
# ---------------------------------------------------------------------------

@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """Temporary npm workspace monorepo.

    Layout::

        repo/
            package.json                 workspaces: ["packages/*"]
            repo.code-workspace
            packages/existing/package.json
            node_modules/@kg/blueprint-main/
                package.json             declares "library" and "library-zip"
                blueprints/library/...
                blueprints/library.zip
            node_modules/plain-dependency/package.json
    """
    root = tmp_path / "repo"
    write_json(
        root / "package.json",
        {"name": "repo", "private": True, "workspaces": ["packages/*"]},
    )
    write_json(root / "repo.code-workspace", {"folders": [{"path": "."}]})
    write_json(
        root / "packages" / "existing" / "package.json",
        {"name": "existing", "version": "1.0.0"},
    )

    provider = root / "node_modules" / "@kg" / "blueprint-main"
    write_json(
        provider / "package.json",
        {
            "name": "@kg/blueprint-main",
            "version": "2.0.0",
            "monoforge": {
                "packageBlueprints": {
                    "resolveClass": "placeholder",
                    "packages": {
                        "library": "./blueprints/library",
                        "library-zip": "./blueprints/library.zip",
                    },
                }
            },
        },
    )
    write_tree(provider / "blueprints" / "library", LIBRARY_BLUEPRINT)
    zip_tree(provider / "blueprints" / "library.zip", LIBRARY_BLUEPRINT)

    write_json(
        root / "node_modules" / "plain-dependency" / "package.json",
        {"name": "plain-dependency", "version": "3.1.4"},
    )
    return root


# ---------------------------------------------------------------------------
# Console & subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def recording_console() -> Console:
    """Rich console writing into a string buffer (``console.file.getvalue()``)."""
    return Console(file=io.StringIO(), force_terminal=False, color_system=None, width=120)


@pytest.fixture
def fake_runner() -> AsyncMock:
    """Install runner that always succeeds."""
    return AsyncMock(return_value=(0, "", ""))


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
