"""Unit tests for blueprint discovery (monoforge.blueprints.registry/models)."""

from __future__ import annotations

from pathlib import Path

import pytest

from monoforge.blueprints.models import (
    Blueprint,
    CliPackageInformation,
    FileTokens,
    PackageBlueprintDeclaration,
)
from monoforge.blueprints.registry import BlueprintRegistry
from monoforge.errors import BlueprintNotFoundError

pytestmark = pytest.mark.unit


def _package(name: str, directory: Path, configuration: dict | None = None) -> CliPackageInformation:
    return CliPackageInformation(
        package_name=name,
        directory=directory,
        version="1.0.0",
        configuration=configuration or {},
    )


def _declaring(name: str, directory: Path, packages: dict[str, str], resolver: str = "placeholder"):
    return _package(
        name,
        directory,
        {"packageBlueprints": {"resolveClass": resolver, "packages": packages}},
    )


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestModels:
    def test_declaration_uses_json_alias(self):
        declaration = PackageBlueprintDeclaration.model_validate(
            {"resolveClass": "placeholder", "packages": {"library": "./library.zip"}}
        )
        assert declaration.resolve_class == "placeholder"
        assert declaration.packages == {"library": "./library.zip"}

    def test_package_blueprints_missing(self, tmp_path: Path):
        assert _package("plain", tmp_path).package_blueprints is None

    def test_package_blueprints_malformed_is_ignored(self, tmp_path: Path):
        package = _package("broken", tmp_path, {"packageBlueprints": {"packages": {}}})
        assert package.package_blueprints is None

    def test_manifest_path(self, tmp_path: Path):
        assert _package("plain", tmp_path).manifest_path == tmp_path / "package.json"

    def test_file_tokens_mapping(self):
        tokens = FileTokens(
            package_id_name="id",
            package_name="name",
            project_folder="folder",
            root_project_folder="root",
        )
        assert tokens.as_mapping() == {
            "{{PACKAGE_ID_NAME}}": "id",
            "{{PACKAGE_NAME}}": "name",
            "{{PROJECT_FOLDER}}": "folder",
            "{{ROOT_PROJECT_FOLDER}}": "root",
        }


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestBlueprintRegistry:
    def test_discover_skips_packages_without_declaration(self, tmp_path: Path):
        registry = BlueprintRegistry.discover(
            [
                _package("plain", tmp_path / "plain"),
                _declaring("provider", tmp_path / "provider", {"library": "library.zip"}),
            ]
        )
        assert registry.names() == ["library"]
        assert len(registry) == 1

    def test_archive_path_resolved_against_owning_package(self, tmp_path: Path):
        provider_dir = tmp_path / "node_modules" / "provider"
        registry = BlueprintRegistry.discover(
            [_declaring("provider", provider_dir, {"library": "./blueprints/../library.zip"})]
        )
        blueprint = registry.get("library")
        assert blueprint.archive_path == (provider_dir / "library.zip").resolve()
        assert blueprint.archive_path.is_absolute()

    def test_blueprint_record(self, tmp_path: Path):
        provider = _declaring("provider", tmp_path, {"library": "lib.zip"}, resolver="custom")
        blueprint = BlueprintRegistry.discover([provider]).get("library")
        assert isinstance(blueprint, Blueprint)
        assert blueprint.name == "library"
        assert blueprint.resolver_identifier == "custom"
        assert blueprint.package_information.package_name == "provider"

    def test_unknown_blueprint_raises(self):
        registry = BlueprintRegistry()
        with pytest.raises(BlueprintNotFoundError, match='Blueprint "nope" not found.'):
            registry.get("nope")

    def test_last_write_wins_with_warning(self, tmp_path: Path, recording_console):
        registry = BlueprintRegistry.discover(
            [
                _declaring("first", tmp_path / "first", {"library": "a.zip"}),
                _declaring("second", tmp_path / "second", {"library": "b.zip"}),
            ],
            out=recording_console,
        )
        assert registry.get("library").package_information.package_name == "second"
        output = recording_console.file.getvalue()
        assert "overridden" in output
        assert "first" in output and "second" in output

    def test_container_protocol(self, tmp_path: Path):
        registry = BlueprintRegistry.discover(
            [_declaring("provider", tmp_path, {"zeta": "z.zip", "alpha": "a.zip"})]
        )
        assert "alpha" in registry
        assert "missing" not in registry
        assert [b.name for b in registry] == ["alpha", "zeta"]
