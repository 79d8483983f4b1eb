"""npm workspace project handling.

A project is the directory holding a ``package.json`` that declares
``workspaces``.  This module finds it, lists its packages (workspace packages
and installed ``node_modules`` packages carrying monoforge configuration), and
performs the registration steps after a package has been scaffolded:

* add the package folder to the VS Code ``*.code-workspace`` file,
* store the CLI configuration in the new package's ``package.json``,
* make sure the root ``workspaces`` patterns cover the new package.
"""

from __future__ import annotations

import fnmatch
import json
from pathlib import Path
from typing import Any

from rich.console import Console

from monoforge.blueprints.models import CliPackageInformation
from monoforge.config import Config
from monoforge.errors import ProjectNotFoundError, ProjectRegistrationError
from monoforge.filesystem import SearchDirection, find_files, iter_files, search_options
from monoforge.utils import print_warning

MANIFEST_NAME = "package.json"
WORKSPACE_EXTENSION = "code-workspace"


# ---------------------------------------------------------------------------
# Manifest I/O
# ---------------------------------------------------------------------------


def read_manifest(path: str | Path) -> dict[str, Any]:
    """Load a JSON manifest (``package.json`` or ``*.code-workspace``).

    Raises:
        ProjectRegistrationError: If the file is unreadable, not valid JSON, or
            not a JSON object.
    """
    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ProjectRegistrationError(f'Cannot read "{file_path}": {exc}') from exc
    if not isinstance(data, dict):
        raise ProjectRegistrationError(f'"{file_path}" does not contain a JSON object.')
    return data


def write_manifest(path: str | Path, data: dict[str, Any]) -> None:
    """Write *data* with 4-space indentation and a trailing newline."""
    file_path = Path(path)
    try:
        file_path.write_text(json.dumps(data, indent=4, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ProjectRegistrationError(f'Cannot write "{file_path}": {exc}') from exc


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


class Project:
    """An npm workspace monorepo rooted at *root_directory*."""

    def __init__(
        self,
        root_directory: str | Path,
        config: Config | None = None,
        out: Console | None = None,
    ) -> None:
        self._root = Path(root_directory).resolve()
        self.config = config or Config.for_project(self._root)
        self.out = out
        self._packages: dict[str, CliPackageInformation] | None = None

    @classmethod
    def find(
        cls,
        start_directory: str | Path,
        config: Config | None = None,
        out: Console | None = None,
    ) -> Project:
        """Walk up from *start_directory* to the nearest workspace root.

        Raises:
            ProjectNotFoundError: If no enclosing ``package.json`` declares
                ``workspaces``.
        """
        options = search_options(
            include_file_names={MANIFEST_NAME},
            direction=SearchDirection.REVERSE,
        )
        for manifest in iter_files(start_directory, options):
            if "workspaces" in read_manifest(manifest):
                return cls(manifest.parent, config, out)
        raise ProjectNotFoundError(start_directory)

    # -- Paths -------------------------------------------------------------

    @property
    def project_root_directory(self) -> Path:
        return self._root

    @property
    def packages_directory(self) -> Path:
        """Directory that receives newly scaffolded packages."""
        return self._root / self.config.packages_dir

    @property
    def root_manifest_path(self) -> Path:
        return self._root / MANIFEST_NAME

    # -- Package discovery -------------------------------------------------

    def packages(self) -> dict[str, CliPackageInformation]:
        """Workspace packages keyed by package name (cached).

        A ``package.json`` counts when its directory is matched by one of the
        root ``workspaces`` patterns or sits directly in
        :attr:`packages_directory`.  Manifests anywhere else are never read.
        """
        if self._packages is None:
            patterns = self.workspace_patterns()
            options = search_options(
                include_file_names={MANIFEST_NAME},
                exclude_directories=self.config.ignored_directories,
            )
            found: dict[str, CliPackageInformation] = {}
            for manifest in iter_files(self._root, options):
                if manifest == self.root_manifest_path:
                    continue
                if not self._is_workspace_member(manifest.parent, patterns):
                    continue
                package = self._package_from_manifest(manifest)
                if package is not None:
                    found[package.package_name] = package
            self._packages = found
        return self._packages

    def workspace_patterns(self) -> list[str]:
        """Normalized root ``workspaces`` patterns (empty when none are declared).

        Raises:
            ProjectRegistrationError: If ``workspaces`` is neither a list nor
                an object with a ``packages`` list.
        """
        if not self.root_manifest_path.is_file():
            return []
        manifest = read_manifest(self.root_manifest_path)
        if "workspaces" not in manifest:
            return []
        patterns = _workspace_pattern_list(manifest, self.root_manifest_path)
        return [_normalize_pattern(p) for p in patterns if isinstance(p, str)]

    def installed_packages(self) -> list[CliPackageInformation]:
        """Packages below ``node_modules``, including scoped ones."""
        node_modules = self._root / "node_modules"
        if not node_modules.is_dir():
            return []
        options = search_options(
            depth=2,
            include_file_names={MANIFEST_NAME},
            exclude_directories={"node_modules"},
        )
        installed: list[CliPackageInformation] = []
        for manifest in find_files(node_modules, options):
            package = self._package_from_manifest(manifest)
            if package is not None:
                installed.append(package)
        return installed

    def cli_packages(self) -> list[CliPackageInformation]:
        """Every package carrying a monoforge configuration section.

        Workspace packages come first; an installed copy of a workspace package
        (npm links them into ``node_modules``) is not listed twice.
        """
        result: dict[str, CliPackageInformation] = {}
        for package in [*self.packages().values(), *self.installed_packages()]:
            if not package.configuration or package.package_name in result:
                continue
            result[package.package_name] = package
        return list(result.values())

    def refresh(self) -> None:
        """Forget cached package information."""
        self._packages = None

    def package_exists(self, package_name: str) -> bool:
        return package_name in self.packages()

    def get_package_information(self, package_name: str) -> CliPackageInformation:
        """Re-scan the workspace and return *package_name*.

        Raises:
            ProjectRegistrationError: If no workspace package has that name.
        """
        self.refresh()
        try:
            return self.packages()[package_name]
        except KeyError:
            raise ProjectRegistrationError(
                f'Package "{package_name}" not found in project {self._root}.'
            ) from None

    @staticmethod
    def package_to_id_name(package_name: str) -> str:
        """Turn an npm package name into a folder-friendly id.

        Examples::

            package_to_id_name("my-lib")            -> "my-lib"
            package_to_id_name("@scope/core.data")  -> "scope.core.data"
        """
        return package_name.lstrip("@").replace("/", ".")

    # -- Registration --------------------------------------------------------

    def add_workspace(self, name: str, directory: str | Path) -> bool:
        """Add *directory* to the root VS Code workspace file.

        Returns:
            ``True`` if the workspace file changed, ``False`` if there is no
            workspace file or the folder is already listed.
        """
        workspace_files = find_files(
            self._root,
            search_options(depth=0, include_extensions={WORKSPACE_EXTENSION}),
        )
        if not workspace_files:
            print_warning("No *.code-workspace file in project root; skipping.", self.out)
            return False

        workspace_file = workspace_files[0]
        workspace = read_manifest(workspace_file)
        folders = workspace.setdefault("folders", [])
        if not isinstance(folders, list):
            raise ProjectRegistrationError(f'"folders" in {workspace_file} is not a list.')

        relative = self._relative(directory)
        if any(isinstance(f, dict) and f.get("path") == relative for f in folders):
            return False

        folders.append({"name": name, "path": relative})
        write_manifest(workspace_file, workspace)
        return True

    def write_cli_package_configuration(
        self,
        package: CliPackageInformation,
        command: str,
        value: str,
    ) -> None:
        """Store ``<configuration_key>.config.<command> = value`` for *package*."""
        manifest = read_manifest(package.manifest_path)
        section = manifest.setdefault(self.config.configuration_key, {})
        if not isinstance(section, dict):
            raise ProjectRegistrationError(
                f'"{self.config.configuration_key}" in {package.manifest_path} is not an object.'
            )
        command_config = section.setdefault("config", {})
        if not isinstance(command_config, dict):
            raise ProjectRegistrationError(
                f'"{self.config.configuration_key}.config" in {package.manifest_path} is not an object.'
            )
        command_config[command] = value
        write_manifest(package.manifest_path, manifest)

    def update_package_configuration(self, package_name: str) -> bool:
        """Make sure the root ``workspaces`` patterns include *package_name*.

        Both the list form and the ``{"packages": [...]}`` form are supported.

        Returns:
            ``True`` if the root manifest had to be changed.
        """
        package = self.get_package_information(package_name)
        manifest = read_manifest(self.root_manifest_path)
        patterns = _workspace_pattern_list(manifest, self.root_manifest_path)

        relative = self._relative(package.directory)
        for pattern in patterns:
            if isinstance(pattern, str) and workspace_pattern_matches(relative, _normalize_pattern(pattern)):
                return False

        patterns.append(relative)
        write_manifest(self.root_manifest_path, manifest)
        return True

    # -- Internals -----------------------------------------------------------

    def _is_workspace_member(self, directory: Path, patterns: list[str]) -> bool:
        if directory.parent == self.packages_directory:
            return True
        relative = self._relative(directory)
        return any(workspace_pattern_matches(relative, pattern) for pattern in patterns)

    def _relative(self, directory: str | Path) -> str:
        path = Path(directory).resolve()
        try:
            return path.relative_to(self._root).as_posix()
        except ValueError:
            return path.as_posix()

    def _package_from_manifest(self, manifest: Path) -> CliPackageInformation | None:
        data = read_manifest(manifest)
        name = data.get("name")
        if not isinstance(name, str) or not name:
            return None
        section = data.get(self.config.configuration_key)
        return CliPackageInformation(
            package_name=name,
            directory=manifest.parent,
            version=str(data.get("version", "")),
            configuration=section if isinstance(section, dict) else {},
        )


def _normalize_pattern(pattern: str) -> str:
    pattern = pattern.strip()
    if pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern.rstrip("/")


def _workspace_pattern_list(manifest: dict[str, Any], manifest_path: Path) -> list[Any]:
    """The mutable ``workspaces`` list of a root manifest (either form)."""
    workspaces = manifest.get("workspaces")
    patterns = workspaces.get("packages") if isinstance(workspaces, dict) else workspaces
    if not isinstance(patterns, list):
        raise ProjectRegistrationError(
            f'"workspaces" in {manifest_path} is neither a list nor has "packages".'
        )
    return patterns


def workspace_pattern_matches(relative: str, pattern: str) -> bool:
    """Match a posix path against a workspaces glob, one segment at a time.

    ``*`` never crosses a ``/``; a ``**`` segment matches any number of
    segments, so ``packages/*`` covers ``packages/a`` but not
    ``packages/a/b`` while ``packages/**`` covers both.
    """
    return _match_segments(relative.split("/"), pattern.split("/"))


def _match_segments(parts: list[str], pattern_parts: list[str]) -> bool:
    if not pattern_parts:
        return not parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        return any(_match_segments(parts[index:], rest) for index in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)
