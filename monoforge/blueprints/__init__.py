"""Blueprint discovery and post-copy resolver hooks."""

from monoforge.blueprints.models import (
    Blueprint,
    BlueprintParameter,
    CliPackageInformation,
    FileTokens,
    PackageBlueprintDeclaration,
)
from monoforge.blueprints.registry import BlueprintRegistry
from monoforge.blueprints.resolvers import (
    BlueprintResolver,
    PlaceholderResolver,
    available_resolvers,
    create_resolver,
    register_resolver,
)

__all__ = [
    "Blueprint",
    "BlueprintParameter",
    "BlueprintRegistry",
    "BlueprintResolver",
    "CliPackageInformation",
    "FileTokens",
    "PackageBlueprintDeclaration",
    "PlaceholderResolver",
    "available_resolvers",
    "create_resolver",
    "register_resolver",
]
