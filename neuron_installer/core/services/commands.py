"""
Project commands — run one shell command inside a project's checkout.

Shared by the dependency and build stages: both pass output through to
the terminal and treat any non-zero exit as fatal.
"""

from __future__ import annotations

import logging

from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.errors import CommandError
from neuron_installer.core.models.action import Action, Receipt
from neuron_installer.core.models.project import InstallPlan, ProjectSpec

logger = logging.getLogger(__name__)


def run_in_project(
    stage: str,
    project: ProjectSpec,
    command: str,
    plan: InstallPlan,
    registry: AdapterRegistry,
) -> Receipt:
    """Run ``command`` in the project's checkout.

    Raises:
        CommandError: The command exited non-zero or could not be started.
    """
    project_dir = plan.project_dir(project)
    receipt = registry.execute_action(
        Action(
            id=f"{stage}:{project.name}",
            name=command,
            adapter="shell",
            stage=stage,
            params={"command": command},
            for_project=project.name,
        ),
        base_dir=str(plan.base_dir),
        project_dir=str(project_dir),
    )

    if not receipt.ok:
        raise CommandError(command, receipt.exit_code, _detail(receipt))

    return receipt


def _detail(receipt: Receipt) -> str:
    """Error text worth showing, skipping the generic exit-code message."""
    error = receipt.error or ""
    if error.startswith("Command exited with code"):
        return ""
    return error
