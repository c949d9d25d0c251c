"""
Shared test fixtures and configuration.

``toolchain`` wires a registry whose git, shell and filesystem adapters
are MockAdapters that behave like the real tools just enough for a
pipeline run: a clone creates a checkout with the builder's templates,
``go build -o NAME`` creates the binary.
"""

import logging
from pathlib import Path

import pytest

from neuron_installer.adapters.base import ExecutionContext
from neuron_installer.adapters.mock import MockAdapter
from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.adapters.shell.filesystem import FilesystemAdapter
from neuron_installer.core.config.loader import DEFAULT_PROJECTS
from neuron_installer.core.models.project import InstallPlan, ProjectSpec
from neuron_installer.core.services import prerequisites


def fake_clone(ctx: ExecutionContext) -> None:
    """What ``git clone`` leaves behind, for the files the installer touches."""
    dest = Path(ctx.action.params["dest"])
    dest.mkdir(parents=True)
    (dest / ".git").mkdir()
    if ctx.action.for_project == "builder":
        (dest / ".env.example").write_text("# Neuron settings\nFOO=bar\n")
        userdir = dest / "neuron" / "userdir"
        userdir.mkdir(parents=True)
        (userdir / "example.flows.json").write_text("[]")


def fake_build(ctx: ExecutionContext) -> None:
    """``go build -o NAME`` produces NAME in the project directory."""
    command = ctx.action.params.get("command", "")
    if command.startswith("go build -o "):
        binary = Path(ctx.working_dir) / command.split()[-1]
        binary.write_text("#!/bin/sh\n")


class Toolchain:
    """Mock adapters registered under the real adapter names."""

    def __init__(self, real_links: bool = True):
        self.git = MockAdapter(adapter_name="git", side_effect=fake_clone)
        self.shell = MockAdapter(adapter_name="shell", side_effect=fake_build)
        self.filesystem = MockAdapter(adapter_name="filesystem")
        self.registry = AdapterRegistry()
        self.registry.register(self.git)
        self.registry.register(self.shell)
        if real_links:
            self.registry.register(FilesystemAdapter())
        else:
            self.registry.register(self.filesystem)

    def commands(self, stage: str | None = None) -> list[str]:
        calls = self.shell.calls_for_stage(stage) if stage else self.shell.call_log
        return [c.action.params["command"] for c in calls]


@pytest.fixture(autouse=True)
def restore_logging():
    """CLI invocations reconfigure the root logger; undo that after each test."""
    root = logging.getLogger()
    package = logging.getLogger("neuron_installer")
    handlers, root_level, package_level = list(root.handlers), root.level, package.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(root_level)
    package.setLevel(package_level)


@pytest.fixture
def toolchain() -> Toolchain:
    return Toolchain()


@pytest.fixture
def mock_toolchain() -> Toolchain:
    """Toolchain whose filesystem adapter is mocked too (counts link calls)."""
    return Toolchain(real_links=False)


@pytest.fixture
def tools_ok(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every prerequisite check passes."""
    monkeypatch.setattr(prerequisites, "check_prerequisites", lambda plan: [])


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Directory the installer clones into."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A fake operator home directory."""
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("HOME", str(path))
    monkeypatch.setenv("USERPROFILE", str(path))
    return path


def project(name: str) -> ProjectSpec:
    for spec in DEFAULT_PROJECTS:
        if spec.name == name:
            return spec
    raise KeyError(name)


@pytest.fixture
def make_plan(base_dir: Path, home: Path):
    """Build an InstallPlan from default project names."""

    def _make(*names: str, force: bool = False, **overrides) -> InstallPlan:
        specs = [project(n).model_copy(update=overrides.get(n, {})) for n in names]
        return InstallPlan(
            projects=tuple(specs),
            force=force,
            base_dir=base_dir,
            user_dir=home / ".neuron-node-builder",
        )

    return _make
