"""Blueprint discovery.

Every package of the project may ship blueprints by declaring them in its CLI
configuration section.  The registry turns these declarations into a
``name -> Blueprint`` lookup for the lifetime of one CLI invocation.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from rich.console import Console

from monoforge.errors import BlueprintNotFoundError
from monoforge.utils import print_warning

from .models import Blueprint, CliPackageInformation


class BlueprintRegistry:
    """Name to :class:`Blueprint` lookup built from package metadata.

    When two packages declare the same blueprint name the one discovered last
    wins; the override is reported as a warning rather than an error.
    """

    def __init__(self, blueprints: dict[str, Blueprint] | None = None) -> None:
        self._blueprints: dict[str, Blueprint] = dict(blueprints or {})

    @classmethod
    def discover(
        cls,
        packages: Iterable[CliPackageInformation],
        out: Console | None = None,
    ) -> BlueprintRegistry:
        """Collect the blueprints declared by *packages*.

        Packages without a ``packageBlueprints`` declaration are skipped.
        Archive paths are resolved against the owning package's directory.
        """
        blueprints: dict[str, Blueprint] = {}
        for package in packages:
            declaration = package.package_blueprints
            if declaration is None:
                continue

            for name, relative_path in declaration.packages.items():
                previous = blueprints.get(name)
                if previous is not None:
                    print_warning(
                        f'Blueprint "{name}" of {previous.package_information.package_name} '
                        f"is overridden by {package.package_name}.",
                        out,
                    )
                blueprints[name] = Blueprint(
                    name=name,
                    package_information=package,
                    resolver_identifier=declaration.resolve_class,
                    archive_path=(package.directory / relative_path).resolve(),
                )
        return cls(blueprints)

    def get(self, name: str) -> Blueprint:
        """Return the blueprint called *name*.

        Raises:
            BlueprintNotFoundError: If no package declares *name*.
        """
        try:
            return self._blueprints[name]
        except KeyError:
            raise BlueprintNotFoundError(name) from None

    def names(self) -> list[str]:
        """Sorted blueprint names."""
        return sorted(self._blueprints)

    def __contains__(self, name: object) -> bool:
        return name in self._blueprints

    def __iter__(self) -> Iterator[Blueprint]:
        return iter(self._blueprints[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._blueprints)
