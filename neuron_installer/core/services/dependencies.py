"""
Dependency installer — resolve each project's dependencies.

``npm install`` for the Node projects, ``go mod tidy`` for the SDK.
"""

from __future__ import annotations

import logging

from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.models.action import Receipt
from neuron_installer.core.models.project import InstallPlan, ProjectSpec
from neuron_installer.core.services.commands import run_in_project

logger = logging.getLogger(__name__)

STAGE = "install"


def install(
    project: ProjectSpec,
    plan: InstallPlan,
    registry: AdapterRegistry,
) -> Receipt | None:
    """Run the project's dependency command. ``None`` if it declares none.

    Raises:
        CommandError: The command exited non-zero.
    """
    if not project.install_command:
        logger.info("%s has no dependency step", project.display_name)
        return None

    logger.info("Installing %s dependencies...", project.display_name)
    receipt = run_in_project(STAGE, project, project.install_command, plan, registry)
    logger.info("%s dependencies installed successfully", project.display_name)
    return receipt


def install_all(plan: InstallPlan, registry: AdapterRegistry) -> list[Receipt]:
    receipts = []
    for project in plan.projects:
        receipt = install(project, plan, registry)
        if receipt is not None:
            receipts.append(receipt)
    return receipts
