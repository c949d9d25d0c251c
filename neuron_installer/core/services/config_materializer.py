"""
Config materializer — derive the host's runtime configuration.

Three steps, all inside the builder checkout:

1. ``.env.example`` → ``.env`` (always overwritten, fresh defaults).
2. Computed paths upserted into ``.env``: the per-operator state
   directory, plus the link target of every planned project that
   declares an ``env_key`` (the SDK binary's ``NEURON_SDK_PATH``).
3. ``neuron/userdir/example.flows.json`` → ``flows.json``, first run only.

Missing templates are warnings; filesystem errors are a ``ConfigError``.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from neuron_installer.core.errors import ConfigError, ConfigWarning
from neuron_installer.core.models.project import InstallPlan
from neuron_installer.core.services.env_file import EnvFile

logger = logging.getLogger(__name__)

STAGE = "configure"

ENV_TEMPLATE = ".env.example"
ENV_FILE = ".env"
USER_PATH_KEY = "NEURON_USER_PATH"
FLOWS_DIR = Path("neuron") / "userdir"
EXAMPLE_FLOWS = "example.flows.json"
FLOWS = "flows.json"


def ensure_user_dir(plan: InstallPlan) -> Path:
    """Create the per-operator state directory if needed."""
    user_dir = plan.user_dir.expanduser().resolve()
    user_dir.mkdir(parents=True, exist_ok=True)
    logger.info("User directory ready: %s", user_dir)
    return user_dir


def computed_env(plan: InstallPlan, user_dir: Path) -> dict[str, str]:
    """Keys to upsert into the live .env, in write order."""
    values: dict[str, str] = {}
    for project in plan.projects:
        if not project.env_key:
            continue
        target = plan.link_target_path(project)
        if target is not None:
            values[project.env_key] = str(target)
    values[USER_PATH_KEY] = str(user_dir)
    return values


def write_env(plan: InstallPlan, user_dir: Path) -> list[ConfigWarning]:
    """Copy the template over .env and upsert the computed keys."""
    builder_dir = plan.builder_dir
    template = builder_dir / ENV_TEMPLATE
    live = builder_dir / ENV_FILE

    if not template.is_file():
        warning = ConfigWarning(f"{ENV_TEMPLATE} not found in {builder_dir}", template)
        logger.warning("Warning: %s", warning)
        return [warning]

    shutil.copyfile(template, live)
    logger.info("Copied %s to %s", ENV_TEMPLATE, ENV_FILE)

    env = EnvFile.load(live)
    for key, value in computed_env(plan, user_dir).items():
        result = env.upsert(key, value)
        logger.info("%s %s in %s", result.capitalize(), key, ENV_FILE)
    env.save()
    return []


def seed_flows(plan: InstallPlan) -> list[ConfigWarning]:
    """Rename the example flows file to its live name on first run."""
    flows_dir = plan.builder_dir / FLOWS_DIR
    example = flows_dir / EXAMPLE_FLOWS
    live = flows_dir / FLOWS

    if live.exists():
        logger.info("%s already exists, skipping rename of %s", FLOWS, EXAMPLE_FLOWS)
        return []

    if not example.is_file():
        warning = ConfigWarning(f"{EXAMPLE_FLOWS} not found in {flows_dir}", example)
        logger.warning("Warning: %s", warning)
        return [warning]

    example.rename(live)
    logger.info("Renamed %s to %s", EXAMPLE_FLOWS, FLOWS)
    return []


def materialize(plan: InstallPlan) -> list[ConfigWarning]:
    """Run every configuration step. Returns the non-fatal warnings.

    Raises:
        ConfigError: A directory or file could not be created, copied or renamed.
    """
    logger.info("Setting up configuration files...")
    try:
        user_dir = ensure_user_dir(plan)
        warnings = write_env(plan, user_dir)
        warnings.extend(seed_flows(plan))
    except OSError as e:
        raise ConfigError(f"Could not write configuration: {e}") from e
    return warnings
