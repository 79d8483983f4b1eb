"""Blueprint resolver hooks.

A blueprint names its resolver with a string identifier (``resolveClass`` in
the package configuration).  Identifiers map to factories registered here, so
no class is ever imported dynamically from package metadata.

Adding a resolver::

    @register_resolver("my-resolver")
    class MyResolver:
        async def after_copy(self, parameter, project):
            ...
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from monoforge.errors import ResolverHookError
from monoforge.filesystem import find_files, rewrite_placeholders

from .models import BlueprintParameter, FileTokens

if TYPE_CHECKING:
    from monoforge.project import Project


class BlueprintResolver(Protocol):
    """Post-copy behaviour of a blueprint."""

    async def after_copy(self, parameter: BlueprintParameter, project: Project) -> None:
        ...


ResolverFactory = Callable[[], BlueprintResolver]

_RESOLVERS: dict[str, ResolverFactory] = {}


def register_resolver(*identifiers: str) -> Callable[[ResolverFactory], ResolverFactory]:
    """Class decorator registering a resolver factory under *identifiers*."""

    def decorator(factory: ResolverFactory) -> ResolverFactory:
        for identifier in identifiers:
            _RESOLVERS[identifier] = factory
        return factory

    return decorator


def create_resolver(identifier: str) -> BlueprintResolver:
    """Instantiate the resolver registered as *identifier*.

    Raises:
        ResolverHookError: If nothing is registered under *identifier*.
    """
    factory = _RESOLVERS.get(identifier)
    if factory is None:
        known = ", ".join(available_resolvers()) or "none"
        raise ResolverHookError(
            f'Unknown blueprint resolver "{identifier}" (available: {known}).',
            identifier,
        )
    return factory()


def available_resolvers() -> list[str]:
    return sorted(_RESOLVERS)


# ---------------------------------------------------------------------------
# Built-in resolvers
# ---------------------------------------------------------------------------


@register_resolver("placeholder", "CliPackageBlueprint")
class PlaceholderResolver:
    """Replaces the four standard placeholders in every file of the package."""

    def tokens_for(self, parameter: BlueprintParameter, project: Project) -> FileTokens:
        return FileTokens(
            package_id_name=parameter.package_id_name,
            package_name=parameter.package_name,
            project_folder=parameter.package_directory.name,
            root_project_folder=project.project_root_directory.name,
        )

    async def after_copy(self, parameter: BlueprintParameter, project: Project) -> None:
        token_map = self.tokens_for(parameter, project).as_mapping()
        try:
            files = await asyncio.to_thread(find_files, parameter.package_directory)
            await asyncio.to_thread(rewrite_placeholders, files, token_map)
        except (OSError, UnicodeDecodeError) as exc:
            raise ResolverHookError(
                f"Failed to replace placeholders in {parameter.package_directory}: {exc}",
                "placeholder",
            ) from exc
