"""
Configuration loader — built-in project table plus optional installer.yml.

The installer works with no configuration file at all: the default table
below describes the Neuron repositories. An ``installer.yml`` found in
the working directory (or an ancestor), or passed with ``--config``,
may override any field of any project and configure the registration
module, which has no public default repository.

Example::

    projects:
      sdk:
        repo_url: https://github.com/my-fork/neuron-sdk-websocket-wrapper.git
      registration:
        repo_url: https://example.com/neuron-registration.git
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from neuron_installer.core.errors import ConfigError
from neuron_installer.core.models.project import (
    BUILDER,
    REGISTRATION,
    SDK,
    ProjectSpec,
    ToolRequirement,
)

logger = logging.getLogger(__name__)

# Default config filename
INSTALLER_CONFIG_FILE = "installer.yml"

DEFAULT_SCRIPT_URL = (
    "https://raw.githubusercontent.com/NeuronInnovations/"
    "neuron-node-builder-installer/refs/heads/main/install.js"
)

DEFAULT_PROJECTS: tuple[ProjectSpec, ...] = (
    ProjectSpec(
        name=BUILDER,
        label="neuron-node-builder",
        repo_url="https://github.com/NeuronInnovations/neuron-node-builder.git",
        local_dir="neuron-node-builder",
        install_command="npm install",
        build_command="npm run build",
        required=True,
        description="Node.js visual programming host",
        requires=(
            ToolRequirement(tool="node", min_version="18"),
            ToolRequirement(tool="npm"),
        ),
    ),
    ProjectSpec(
        name=SDK,
        label="neuron-sdk-websocket-wrapper",
        repo_url="https://github.com/NeuronInnovations/neuron-sdk-websocket-wrapper.git",
        local_dir="neuron-sdk-websocket-wrapper",
        install_command="go mod tidy",
        build_command="go build -o {artifact}",
        artifact="neuron-sdk-websocket-wrapper",
        executable=True,
        link_target="build/bin/{artifact}",
        env_key="NEURON_SDK_PATH",
        description="Go companion SDK binary",
        requires=(ToolRequirement(tool="go", min_version="1.23"),),
    ),
    ProjectSpec(
        name=REGISTRATION,
        label="neuron-registration",
        local_dir="neuron-registration",
        install_command="npm install",
        link_target="node_modules/neuron-registration",
        description="Registration module linked into the host",
        requires=(ToolRequirement(tool="npm"),),
    ),
)


class InstallerConfig(BaseModel):
    """Resolved installer configuration."""

    projects: list[ProjectSpec] = Field(default_factory=lambda: list(DEFAULT_PROJECTS))
    script_url: str = DEFAULT_SCRIPT_URL
    source: Path | None = None   # installer.yml this was loaded from, if any

    def get(self, name: str) -> ProjectSpec | None:
        for project in self.projects:
            if project.name == name:
                return project
        return None

    @property
    def builder(self) -> ProjectSpec:
        """The host project's spec."""
        project = self.get(BUILDER)
        if project is None:
            raise ConfigError(f"No '{BUILDER}' project configured")
        return project


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for installer.yml starting from the given directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / INSTALLER_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, *, search: bool = True) -> InstallerConfig:
    """Load the installer configuration.

    Args:
        path: Explicit installer.yml. If None and ``search`` is set, searches upward.
        search: Whether to look for installer.yml when no path is given.

    Returns:
        InstallerConfig with overrides merged over the defaults.

    Raises:
        ConfigError: If the file is missing, not YAML, or fails validation.
    """
    if path is None and search:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using built-in project table", INSTALLER_CONFIG_FILE)
        return InstallerConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading installer config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    overrides = data.get("projects") or {}
    if not isinstance(overrides, dict):
        raise ConfigError(f"'projects' in {path} must be a mapping of project name to fields")

    projects = _merge_projects(overrides, path)

    config = InstallerConfig(
        projects=projects,
        script_url=data.get("script_url") or DEFAULT_SCRIPT_URL,
        source=path,
    )
    logger.info("Loaded installer config from %s (%d projects)", path, len(projects))
    return config


def _merge_projects(overrides: dict, path: Path) -> list[ProjectSpec]:
    """Apply per-project overrides to the default table."""
    unknown = set(overrides) - {p.name for p in DEFAULT_PROJECTS}
    if unknown:
        raise ConfigError(
            f"Unknown project(s) in {path}: {', '.join(sorted(unknown))}. "
            f"Known: {', '.join(p.name for p in DEFAULT_PROJECTS)}"
        )

    merged = []
    for default in DEFAULT_PROJECTS:
        fields = overrides.get(default.name) or {}
        if not isinstance(fields, dict):
            raise ConfigError(f"Project '{default.name}' in {path} must be a mapping")
        if "name" in fields and fields["name"] != default.name:
            raise ConfigError(f"Project '{default.name}' in {path} cannot be renamed")
        try:
            merged.append(
                ProjectSpec.model_validate({**default.model_dump(), **fields})
            )
        except Exception as e:
            raise ConfigError(f"Invalid configuration for project '{default.name}': {e}") from e
    return merged
