"""
Domain models — Pydantic types for the installer.

    from neuron_installer.core.models import ProjectSpec, InstallPlan, LinkSpec, Action, Receipt
"""

from neuron_installer.core.models.action import Action, Receipt
from neuron_installer.core.models.link import LinkKind, LinkSpec
from neuron_installer.core.models.project import (
    InstallPlan,
    ProjectSpec,
    ToolRequirement,
    executable_name,
)

__all__ = [
    "Action",
    "InstallPlan",
    "LinkKind",
    "LinkSpec",
    "ProjectSpec",
    "Receipt",
    "ToolRequirement",
    "executable_name",
]
