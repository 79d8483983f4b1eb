"""Exception taxonomy for monoforge.

Validation errors (name grammar, blueprint lookup, existence checks) are raised
before anything touches the file system.  Errors raised while a blueprint is
being materialised trigger a rollback in the orchestrator and are re-raised
unchanged.  Registration and installation errors surface directly.

A search started on something that is not a directory raises Python's builtin
``NotADirectoryError``.
"""

from __future__ import annotations

from pathlib import Path


class MonoforgeError(Exception):
    """Base class for every error monoforge raises on purpose."""


class InvalidNameError(MonoforgeError):
    """Raised when a package name does not follow the npm naming convention."""

    def __init__(self, name: str, message: str = "") -> None:
        self.name = name
        super().__init__(
            message or f'Package name "{name}" does not match NPM package name convention.'
        )


class BlueprintNotFoundError(MonoforgeError):
    """Raised when a blueprint name is not present in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Blueprint "{name}" not found.')


class PackageAlreadyExistsError(MonoforgeError):
    """Raised when the project already knows a package of the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Package "{name}" already exists.')


class TargetDirectoryExistsError(MonoforgeError):
    """Raised when the package target directory is already occupied."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f'Target directory "{self.path}" already exists.')


class ArchiveExpansionError(MonoforgeError):
    """Raised when a blueprint archive cannot be expanded into the target."""

    def __init__(self, message: str, archive: str | Path | None = None) -> None:
        self.archive = Path(archive) if archive is not None else None
        super().__init__(message)


class ResolverHookError(MonoforgeError):
    """Raised when a blueprint resolver cannot be created or fails after copy."""

    def __init__(self, message: str, identifier: str = "") -> None:
        self.identifier = identifier
        super().__init__(message)


class ConfigurationError(MonoforgeError):
    """Raised when ``monoforge.json`` or a ``MONOFORGE_*`` variable holds an invalid value."""


class ProjectRegistrationError(MonoforgeError):
    """Raised when project or package configuration cannot be read or written."""


class ProjectNotFoundError(ProjectRegistrationError):
    """Raised when no npm workspace root encloses the start directory."""

    def __init__(self, start_directory: str | Path) -> None:
        self.start_directory = Path(start_directory)
        super().__init__(
            f'No package.json declaring "workspaces" found above "{self.start_directory}".'
        )


class DependencyInstallError(MonoforgeError):
    """Raised when the dependency install command exits with a non-zero code."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Install command failed (exit {returncode}): {command}"
        if stderr:
            message = f"{message}\n{stderr}"
        super().__init__(message)
