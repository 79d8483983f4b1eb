"""Command line entry point.

Usage::

    monoforge create --list
    monoforge create library @my-scope/my-lib
    monoforge create            # prompts for blueprint and package name
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.markup import escape

from monoforge.blueprints import BlueprintRegistry
from monoforge.errors import MonoforgeError
from monoforge.project import Project
from monoforge.scaffold import PACKAGE_NAME_PATTERN, ScaffoldOrchestrator
from monoforge.utils import console, print_blueprint_table, print_error, prompt_until_valid


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monoforge",
        description="monoforge -- scaffold monorepo packages from blueprints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  monoforge create --list\n"
            "  monoforge create library my-lib\n"
            "  monoforge create library @scope/my-lib --project ../my-repo\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create new package.")
    create.add_argument("blueprint_name", nargs="?", default="", help="Blueprint to copy")
    create.add_argument("package_name", nargs="?", default="", help="npm name of the new package")
    create.add_argument(
        "--list",
        action="store_true",
        help="List available blueprints and exit",
    )
    create.add_argument(
        "--details",
        action="store_true",
        help="With --list: also show the declaring package and archive path",
    )
    create.add_argument(
        "--project",
        default=".",
        help="Any directory inside the project (default: current directory)",
    )
    return parser


def run_create(args: argparse.Namespace) -> int:
    """Execute ``monoforge create`` and return the process exit code."""
    project = Project.find(Path(args.project), out=console)
    registry = BlueprintRegistry.discover(project.cli_packages(), out=console)
    orchestrator = ScaffoldOrchestrator(project, registry, out=console)

    if args.list:
        if args.details:
            print_blueprint_table(
                (
                    (b.name, b.package_information.package_name, str(b.archive_path))
                    for b in registry
                ),
                title="Available blueprints",
                out=console,
            )
            return 0
        console.print("Available blueprints:")
        for name in orchestrator.list_blueprints():
            console.print(f"-- {name}")
        return 0

    blueprint_name = args.blueprint_name.lower()
    if not blueprint_name:
        blueprint_name = prompt_until_valid(
            "Blueprint name",
            project.config.blueprint_name_pattern,
            normalize=str.lower,
            prompt_console=console,
        )

    package_name = args.package_name
    if not package_name:
        package_name = prompt_until_valid(
            "Package name", PACKAGE_NAME_PATTERN, prompt_console=console
        )

    request = orchestrator.build_request(blueprint_name, package_name)
    asyncio.run(orchestrator.create_package(request))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``monoforge`` and ``python -m monoforge``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        code = run_create(args)
    except (MonoforgeError, OSError) as exc:
        print_error(f"Error: {escape(str(exc))}", console)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
