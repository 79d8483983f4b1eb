"""monoforge configuration.

Centralised, typed configuration for the CLI.  Settings use Pydantic v2 models
so they can be validated at construction time and serialised to/from JSON or
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from monoforge.errors import ConfigurationError

CONFIG_FILE_NAME = "monoforge.json"


class Config(BaseModel):
    """Global monoforge configuration.

    Instances are typically created once by the CLI entry point (see
    :meth:`for_project`) and then passed to the project handler and the
    scaffold orchestrator.
    """

    packages_dir: str = Field(
        default="packages", description="Directory below the project root that receives new packages"
    )
    configuration_key: str = Field(
        default="monoforge",
        min_length=1,
        description="package.json section holding CLI configuration and blueprint declarations",
    )
    install_command: list[str] = Field(default_factory=lambda: ["npm", "install"], min_length=1)
    install_timeout: int = Field(default=600, ge=10, description="Install timeout in seconds")

    # Whole blueprint names, not single characters.
    blueprint_name_pattern: str = Field(default=r"^[a-z0-9-]+$")

    ignored_directories: list[str] = Field(default_factory=lambda: ["node_modules", ".git"])

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            MONOFORGE_PACKAGES_DIR, MONOFORGE_CONFIGURATION_KEY,
            MONOFORGE_INSTALL_COMMAND, MONOFORGE_INSTALL_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MONOFORGE_PACKAGES_DIR"):
            kwargs["packages_dir"] = os.environ["MONOFORGE_PACKAGES_DIR"]
        if os.environ.get("MONOFORGE_CONFIGURATION_KEY"):
            kwargs["configuration_key"] = os.environ["MONOFORGE_CONFIGURATION_KEY"]
        if os.environ.get("MONOFORGE_INSTALL_COMMAND"):
            kwargs["install_command"] = shlex.split(os.environ["MONOFORGE_INSTALL_COMMAND"])
        if os.environ.get("MONOFORGE_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["MONOFORGE_INSTALL_TIMEOUT"])
        return cls(**kwargs)

    @classmethod
    def for_project(cls, project_root: Path) -> "Config":
        """Load ``<project_root>/monoforge.json`` or fall back to :meth:`from_env`.

        Raises:
            ConfigurationError: If the file or the environment holds invalid
                values.
        """
        config_file = Path(project_root) / CONFIG_FILE_NAME
        source = str(config_file) if config_file.is_file() else "environment"
        try:
            if config_file.is_file():
                return cls.load(config_file)
            return cls.from_env()
        except (OSError, ValueError) as exc:
            # pydantic's ValidationError is a ValueError.
            raise ConfigurationError(f"Invalid monoforge configuration ({source}): {exc}") from exc
