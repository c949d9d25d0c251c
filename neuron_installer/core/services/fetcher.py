"""
Repository fetcher — clone each planned repository into its checkout.

An existing checkout is replaced, never updated: the operator confirms
the removal (or ``--force`` confirms it for them), the directory is
deleted, and a fresh ``git clone`` runs. A failed clone is not cleaned
up; the next run will offer to remove it.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
from pathlib import Path

from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.errors import FetchError, UserCancelled
from neuron_installer.core.models.action import Action, Receipt
from neuron_installer.core.models.project import InstallPlan, ProjectSpec
from neuron_installer.core.services.prompts import Prompter

logger = logging.getLogger(__name__)

STAGE = "fetch"


def _force_writable(func, path, _exc) -> None:
    """rmtree error hook: git pack files are read-only on Windows."""
    os.chmod(path, stat.S_IWRITE)
    func(path)


def remove_checkout(path: Path) -> None:
    """Recursively delete an existing checkout, read-only files included."""
    if path.is_symlink() or path.is_file():
        path.unlink()
        return
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_force_writable)
    else:
        shutil.rmtree(path, onerror=_force_writable)


def fetch(
    project: ProjectSpec,
    plan: InstallPlan,
    registry: AdapterRegistry,
    prompter: Prompter,
) -> Receipt:
    """Clone one project, replacing an existing checkout after confirmation.

    Raises:
        UserCancelled: The operator declined to replace an existing checkout.
        FetchError: The checkout could not be prepared, or ``git clone``
            exited non-zero.
    """
    dest = plan.project_dir(project)
    logger.info("Cloning %s repository...", project.display_name)

    replace = dest.exists() or dest.is_symlink()
    if replace:
        logger.warning("Directory %s already exists", dest)
        if not plan.force and not prompter.confirm(
            f"Directory {dest} already exists. Remove it and continue?",
            default=False,
        ):
            raise UserCancelled()

    try:
        if replace:
            remove_checkout(dest)
            logger.info("Removed existing %s", dest)
        plan.base_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FetchError(
            project.display_name, project.repo_url, None, f"could not prepare {dest}: {e}",
        ) from e

    receipt = registry.execute_action(
        Action(
            id=f"{STAGE}:{project.name}",
            name=f"git clone {project.display_name}",
            adapter="git",
            stage=STAGE,
            params={"operation": "clone", "url": project.repo_url, "dest": str(dest)},
            for_project=project.name,
        ),
        base_dir=str(plan.base_dir),
    )

    if not receipt.ok:
        raise FetchError(
            project.display_name,
            project.repo_url,
            receipt.exit_code,
            receipt.error or "",
        )

    logger.info("%s repository cloned successfully", project.display_name)
    return receipt


def fetch_all(
    plan: InstallPlan,
    registry: AdapterRegistry,
    prompter: Prompter,
) -> list[Receipt]:
    """Clone every planned project, in declared order."""
    return [fetch(project, plan, registry, prompter) for project in plan.projects]
