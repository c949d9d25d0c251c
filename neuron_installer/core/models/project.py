"""
Project model — one managed repository and the plan that selects them.

A ProjectSpec is a static declaration: where the repository lives, where
it is checked out, how its dependencies are resolved, how it is built,
and where its artifact is exposed inside the host project. The
InstallPlan is the resolved, immutable selection for a single run.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Checkout directory of the host project; every link target is relative to it.
BUILDER = "builder"
SDK = "sdk"
REGISTRATION = "registration"

USER_DIR_NAME = ".neuron-node-builder"


def executable_name(base: str, platform: str | None = None) -> str:
    """Platform-specific executable file name (``name`` or ``name.exe``)."""
    platform = platform or sys.platform
    if platform.startswith("win") and not base.endswith(".exe"):
        return f"{base}.exe"
    return base


class ToolRequirement(BaseModel):
    """A tool that must be on PATH, optionally at a minimum version."""

    model_config = ConfigDict(frozen=True)

    tool: str
    min_version: str | None = None

    def __str__(self) -> str:
        return f"{self.tool} {self.min_version}+" if self.min_version else self.tool


class ProjectSpec(BaseModel):
    """A managed repository.

    ``artifact`` is the build output relative to the checkout (``None`` means
    the checkout itself is the artifact). ``link_target`` is where the
    artifact is exposed, relative to the host checkout; both may contain
    ``{artifact}``, which expands to the platform-specific artifact name.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str = ""
    repo_url: str = ""
    local_dir: str
    install_command: str = ""
    build_command: str = ""
    artifact: str | None = None
    executable: bool = False
    link_target: str | None = None
    env_key: str | None = None
    required: bool = False
    description: str = ""
    requires: tuple[ToolRequirement, ...] = ()

    @property
    def display_name(self) -> str:
        return self.label or self.name

    @property
    def configured(self) -> bool:
        """Whether there is a repository to fetch."""
        return bool(self.repo_url)

    def artifact_name(self, platform: str | None = None) -> str | None:
        """Artifact file name as it exists on the running platform."""
        if not self.artifact:
            return None
        if self.executable:
            return executable_name(self.artifact, platform)
        return self.artifact

    def expand(self, template: str, platform: str | None = None) -> str:
        """Substitute ``{artifact}`` in a command or path template."""
        return template.replace("{artifact}", self.artifact_name(platform) or "")


class InstallPlan(BaseModel):
    """The projects and options selected for one pipeline run."""

    model_config = ConfigDict(frozen=True)

    projects: tuple[ProjectSpec, ...] = ()
    force: bool = False
    base_dir: Path = Field(default_factory=Path.cwd)
    user_dir: Path = Field(default_factory=lambda: Path.home() / USER_DIR_NAME)

    def has(self, name: str) -> bool:
        return any(p.name == name for p in self.projects)

    def get(self, name: str) -> ProjectSpec | None:
        for project in self.projects:
            if project.name == name:
                return project
        return None

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.projects]

    @property
    def builder(self) -> ProjectSpec:
        """The host project. Every plan contains it."""
        project = self.get(BUILDER)
        if project is None:
            raise LookupError("Install plan has no builder project")
        return project

    def project_dir(self, project: ProjectSpec) -> Path:
        """Absolute checkout directory of a project."""
        return (self.base_dir / project.local_dir).resolve()

    @property
    def builder_dir(self) -> Path:
        return self.project_dir(self.builder)

    def link_target_path(self, project: ProjectSpec) -> Path | None:
        """Absolute path where a project's artifact is exposed in the host."""
        if not project.link_target:
            return None
        return self.builder_dir / project.expand(project.link_target)

    def requirements(self) -> list[ToolRequirement]:
        """Tools needed by this plan: git first, then each project's, deduplicated.

        A tool required by several projects keeps its highest minimum version.
        """
        from neuron_installer.core.services.prerequisites import compare_versions

        seen: dict[str, ToolRequirement] = {"git": ToolRequirement(tool="git")}
        for project in self.projects:
            for req in project.requires:
                current = seen.get(req.tool)
                if current is None:
                    seen[req.tool] = req
                elif req.min_version and (
                    not current.min_version
                    or compare_versions(req.min_version, current.min_version) > 0
                ):
                    seen[req.tool] = req
        return list(seen.values())
