"""
Artifact linker — expose build outputs inside the host project.

Each planned project with a ``link_target`` gets a LinkSpec: the SDK
binary lands in ``build/bin`` of the builder checkout, the registration
module in its ``node_modules``. The filesystem adapter does the work
and falls back from symlink to junction to copy on its own; only a
total failure reaches this stage as an error.
"""

from __future__ import annotations

import logging

from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.errors import LinkError
from neuron_installer.core.models.action import Action, Receipt
from neuron_installer.core.models.link import LinkKind, LinkSpec
from neuron_installer.core.models.project import InstallPlan
from neuron_installer.core.services.builder import artifact_path

logger = logging.getLogger(__name__)

STAGE = "link"


def link_specs(plan: InstallPlan, kind: LinkKind = LinkKind.SYMLINK) -> list[LinkSpec]:
    """LinkSpecs for every planned project that exposes an artifact."""
    specs = []
    for project in plan.projects:
        target = plan.link_target_path(project)
        if target is None:
            continue
        source = artifact_path(project, plan) or plan.project_dir(project)
        specs.append(
            LinkSpec(source_path=source, target_path=target, kind=kind, project=project.name)
        )
    return specs


def link(spec: LinkSpec, registry: AdapterRegistry) -> LinkKind:
    """Create one link. Returns the kind actually used.

    Raises:
        LinkError: Every strategy failed or none was available.
    """
    logger.info("Linking %s -> %s", spec.target_path, spec.source_path)
    receipt: Receipt = registry.execute_action(
        Action(
            id=f"{STAGE}:{spec.project or spec.target_path.name}",
            name=f"link {spec.target_path.name}",
            adapter="filesystem",
            stage=STAGE,
            params={
                "operation": "link",
                "source": str(spec.source_path),
                "target": str(spec.target_path),
                "kind": spec.kind.value,
            },
            for_project=spec.project or None,
        ),
        base_dir=str(spec.target_path.parent),
    )

    if not receipt.ok:
        raise LinkError(spec.source_path, spec.target_path, receipt.error or "")

    used = LinkKind(receipt.metadata.get("kind", spec.kind.value))
    if used != spec.kind:
        logger.warning("Linked %s using %s (fallback from %s)", spec.target_path, used.value, spec.kind.value)
    else:
        logger.info("Created %s: %s -> %s", used.value, spec.target_path, spec.source_path)
    return used


def link_all(plan: InstallPlan, registry: AdapterRegistry) -> dict[str, LinkKind]:
    return {spec.project: link(spec, registry) for spec in link_specs(plan)}
