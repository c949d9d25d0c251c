"""
Project builder — compile or bundle each project into its artifact.

The SDK's artifact is an executable whose name depends on the running
platform (``.exe`` on Windows); the build command receives that name
through its ``{artifact}`` placeholder.
"""

from __future__ import annotations

import logging
from pathlib import Path

from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.models.project import InstallPlan, ProjectSpec
from neuron_installer.core.services.commands import run_in_project

logger = logging.getLogger(__name__)

STAGE = "build"


def artifact_path(project: ProjectSpec, plan: InstallPlan) -> Path | None:
    """Where the project's build output lives (its checkout if no artifact)."""
    project_dir = plan.project_dir(project)
    name = project.artifact_name()
    return project_dir / name if name else None


def build(
    project: ProjectSpec,
    plan: InstallPlan,
    registry: AdapterRegistry,
) -> Path | None:
    """Run the project's build command and return its artifact path.

    Projects without a build command are not built; the return value is
    still the artifact path they declare (if any).

    Raises:
        CommandError: The build command exited non-zero.
    """
    if not project.build_command:
        logger.info("%s has no build step", project.display_name)
        return artifact_path(project, plan)

    command = project.expand(project.build_command)
    logger.info("Building %s...", project.display_name)
    run_in_project(STAGE, project, command, plan, registry)
    logger.info("%s built successfully", project.display_name)
    return artifact_path(project, plan)


def build_all(plan: InstallPlan, registry: AdapterRegistry) -> dict[str, Path | None]:
    """Build every planned project, in declared order."""
    return {project.name: build(project, plan, registry) for project in plan.projects}
