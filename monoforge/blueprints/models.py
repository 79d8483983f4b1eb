"""Pydantic models shared by the blueprint registry, resolvers and scaffolder."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------


class PackageBlueprintDeclaration(BaseModel):
    """The ``packageBlueprints`` section of a package's CLI configuration.

    Example ``package.json`` excerpt::

        "monoforge": {
            "packageBlueprints": {
                "resolveClass": "placeholder",
                "packages": {"library": "./blueprints/library.zip"}
            }
        }
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    resolve_class: str = Field(..., alias="resolveClass", min_length=1)
    packages: dict[str, str] = Field(default_factory=dict)


class CliPackageInformation(BaseModel):
    """A package found in the project together with its CLI configuration."""

    package_name: str
    directory: Path
    version: str = ""
    configuration: dict[str, Any] = Field(default_factory=dict)

    @property
    def manifest_path(self) -> Path:
        """Path to the package's ``package.json``."""
        return self.directory / "package.json"

    @property
    def package_blueprints(self) -> PackageBlueprintDeclaration | None:
        """Parsed ``packageBlueprints`` declaration, or ``None``.

        A malformed declaration is treated like a missing one.
        """
        raw = self.configuration.get("packageBlueprints")
        if not isinstance(raw, dict):
            return None
        try:
            return PackageBlueprintDeclaration.model_validate(raw)
        except ValidationError:
            return None


# ---------------------------------------------------------------------------
# Blueprint
# ---------------------------------------------------------------------------


class Blueprint(BaseModel):
    """An installable package template."""

    model_config = ConfigDict(frozen=True)

    name: str
    package_information: CliPackageInformation
    resolver_identifier: str
    archive_path: Path


# ---------------------------------------------------------------------------
# Placeholder tokens
# ---------------------------------------------------------------------------


class FileTokens(BaseModel):
    """Replacement values for the four placeholders a blueprint may contain."""

    model_config = ConfigDict(frozen=True)

    package_id_name: str
    package_name: str
    project_folder: str
    root_project_folder: str

    def as_mapping(self) -> dict[str, str]:
        """Return ``{"{{PLACEHOLDER}}": value}`` ready for substitution."""
        return {
            "{{PACKAGE_ID_NAME}}": self.package_id_name,
            "{{PACKAGE_NAME}}": self.package_name,
            "{{PROJECT_FOLDER}}": self.project_folder,
            "{{ROOT_PROJECT_FOLDER}}": self.root_project_folder,
        }


class BlueprintParameter(BaseModel):
    """What a resolver hook gets to know about the freshly copied package."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    package_id_name: str
    package_directory: Path
