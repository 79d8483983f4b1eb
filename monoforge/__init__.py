"""monoforge -- scaffold monorepo packages from blueprint templates.

Quick usage::

    from monoforge import BlueprintRegistry, Project, ScaffoldOrchestrator

    project = Project.find(".")
    registry = BlueprintRegistry.discover(project.cli_packages())
    orchestrator = ScaffoldOrchestrator(project, registry)
    request = orchestrator.build_request("library", "@scope/my-lib")
    result = await orchestrator.create_package(request)
"""

from monoforge.blueprints import Blueprint, BlueprintRegistry
from monoforge.config import Config
from monoforge.project import Project
from monoforge.scaffold import ScaffoldOrchestrator, ScaffoldRequest, ScaffoldResult

__version__ = "0.1.0"

__all__ = [
    "Blueprint",
    "BlueprintRegistry",
    "Config",
    "Project",
    "ScaffoldOrchestrator",
    "ScaffoldRequest",
    "ScaffoldResult",
    "__version__",
]
