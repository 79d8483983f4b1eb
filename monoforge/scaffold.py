"""Create-package orchestration.

Drives one scaffold request from validation to dependency installation::

    ValidateNames -> ResolveBlueprint -> CheckTargetFree -> CreateTargetDir
        -> ExpandArchive -> RunResolverHook -> RegisterInProject
        -> InstallDependencies

Any exception raised between ``CreateTargetDir`` and ``RunResolverHook``
deletes the target directory again and is re-raised unchanged.  Failures while
registering the package or installing dependencies leave the package directory
in place.

All collaborators (archive expander, process runner, console) are injected so
tests can substitute them.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from collections.abc import Awaitable, Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console

from monoforge.blueprints import BlueprintParameter, BlueprintRegistry, create_resolver
from monoforge.config import Config
from monoforge.errors import (
    DependencyInstallError,
    InvalidNameError,
    PackageAlreadyExistsError,
    TargetDirectoryExistsError,
)
from monoforge.filesystem import expand_blueprint
from monoforge.project import Project
from monoforge.utils import console, format_command, print_error, print_step, print_success, run_command

PACKAGE_NAME_PATTERN = re.compile(
    r"^(?:@[a-z0-9-*~][a-z0-9-*._~]*/)?[a-z0-9-~][a-z0-9-._~]*$"
)

# Configuration entry written into every scaffolded package.
BLUEPRINT_CONFIG_COMMAND = "package-blueprint"

Expander = Callable[[Path, Path], Awaitable[list[Path]]]
Runner = Callable[..., Awaitable[tuple[int, str, str]]]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ScaffoldRequest(BaseModel):
    """One create-package request, built from user input and consumed once."""

    model_config = ConfigDict(frozen=True)

    blueprint_name: str
    new_package_name: str
    target_directory: Path


class ScaffoldResult(BaseModel):
    """What a successful :meth:`ScaffoldOrchestrator.create_package` produced."""

    package_name: str
    package_id_name: str
    blueprint_name: str
    package_directory: Path
    files: list[Path] = Field(default_factory=list)


def validate_package_name(name: str) -> str:
    """Return *name* if it follows the npm package naming convention.

    Raises:
        InvalidNameError: Otherwise.
    """
    if not PACKAGE_NAME_PATTERN.fullmatch(name):
        raise InvalidNameError(name)
    return name


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ScaffoldOrchestrator:
    """Creates new packages in *project* from blueprints in *registry*."""

    def __init__(
        self,
        project: Project,
        registry: BlueprintRegistry,
        config: Config | None = None,
        *,
        expander: Expander = expand_blueprint,
        runner: Runner = run_command,
        out: Console | None = None,
    ) -> None:
        self.project = project
        self.registry = registry
        self.config = config or project.config
        self.expander = expander
        self.runner = runner
        self.out = out or console

    # -- Public API --------------------------------------------------------

    def list_blueprints(self) -> list[str]:
        return self.registry.names()

    def build_request(self, blueprint_name: str, package_name: str) -> ScaffoldRequest:
        """Derive the target directory for *package_name*.

        The blueprint name is matched case-insensitively.
        """
        id_name = self.project.package_to_id_name(package_name)
        return ScaffoldRequest(
            blueprint_name=blueprint_name.lower(),
            new_package_name=package_name,
            target_directory=self.project.packages_directory / id_name.lower(),
        )

    async def create_package(self, request: ScaffoldRequest) -> ScaffoldResult:
        """Run the full create-package flow for *request*.

        Raises:
            InvalidNameError: Package name does not follow the npm convention.
            BlueprintNotFoundError: Unknown blueprint.
            ResolverHookError: Unknown resolver, or the resolver failed.
            PackageAlreadyExistsError: The project already has the package.
            TargetDirectoryExistsError: The target path is occupied.
            ArchiveExpansionError: The blueprint could not be expanded.
            ProjectRegistrationError: Workspace or package config update failed.
            DependencyInstallError: The install command failed.
        """
        self.out.print("[bold]Create Package[/bold]")

        package_name = validate_package_name(request.new_package_name)
        blueprint = self.registry.get(request.blueprint_name)

        if self.project.package_exists(package_name):
            raise PackageAlreadyExistsError(package_name)
        target = Path(request.target_directory)
        if target.exists():
            raise TargetDirectoryExistsError(target)

        resolver = create_resolver(blueprint.resolver_identifier)
        id_name = self.project.package_to_id_name(package_name)

        try:
            print_step("Copy files...", self.out)
            await asyncio.to_thread(target.mkdir, parents=True)
            files = await self.expander(blueprint.archive_path, target)

            parameter = BlueprintParameter(
                package_name=package_name,
                package_id_name=id_name,
                package_directory=target,
            )
            print_step("Execute blueprint resolver...", self.out)
            await resolver.after_copy(parameter, self.project)
        except BaseException:
            print_error("ERROR: Try rollback.", self.out)
            await asyncio.to_thread(shutil.rmtree, target, ignore_errors=True)
            raise

        await self._register(package_name, request.blueprint_name, target)
        await self._install()

        print_success("Package successfully created.", self.out)
        return ScaffoldResult(
            package_name=package_name,
            package_id_name=id_name,
            blueprint_name=request.blueprint_name,
            package_directory=target,
            files=files,
        )

    # -- Steps ---------------------------------------------------------------

    async def _register(self, package_name: str, blueprint_name: str, target: Path) -> None:
        print_step("Add VsCode Workspace...", self.out)
        await asyncio.to_thread(self.project.add_workspace, package_name, target)

        package = await asyncio.to_thread(self.project.get_package_information, package_name)

        print_step("Set package configuration...", self.out)
        await asyncio.to_thread(
            self.project.write_cli_package_configuration,
            package,
            BLUEPRINT_CONFIG_COMMAND,
            blueprint_name,
        )
        await asyncio.to_thread(self.project.update_package_configuration, package_name)

    async def _install(self) -> None:
        print_step("Install packages...", self.out)
        command = list(self.config.install_command)
        returncode, _, stderr = await self.runner(
            command,
            cwd=self.project.project_root_directory,
            timeout=self.config.install_timeout,
            capture=False,
        )
        if returncode != 0:
            raise DependencyInstallError(format_command(command), returncode, stderr)
