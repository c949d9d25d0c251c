"""
Tests for adapter protocol, registry, mock, shell, git and filesystem adapters.
"""

import sys
from pathlib import Path

from neuron_installer.adapters.base import ExecutionContext
from neuron_installer.adapters.mock import MockAdapter
from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.adapters.shell.command import ShellCommandAdapter
from neuron_installer.adapters.shell.filesystem import FilesystemAdapter
from neuron_installer.adapters.vcs.git import GitAdapter
from neuron_installer.core.models.action import Action, Receipt

# ── Protocol Tests ───────────────────────────────────────────────────


class TestExecutionContext:
    def test_working_dir_project(self):
        ctx = ExecutionContext(
            action=Action(id="test", adapter="shell"),
            base_dir="/work",
            project_dir="/work/neuron-node-builder",
        )
        assert ctx.working_dir == "/work/neuron-node-builder"

    def test_working_dir_base(self):
        ctx = ExecutionContext(action=Action(id="test", adapter="shell"), base_dir="/work")
        assert ctx.working_dir == "/work"

    def test_working_dir_cwd_param_wins(self):
        ctx = ExecutionContext(
            action=Action(id="test", adapter="shell", params={"cwd": "/elsewhere"}),
            base_dir="/work",
            project_dir="/work/p",
        )
        assert ctx.working_dir == "/elsewhere"


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="shell")
        receipt = mock.execute(ExecutionContext(action=Action(id="op-1", adapter="shell")))
        assert receipt.ok
        assert receipt.exit_code == 0
        assert mock.call_count == 1

    def test_custom_response(self):
        mock = MockAdapter()
        mock.set_response("op-1", Receipt.success(adapter="mock", action_id="op-1", output="custom"))
        receipt = mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock")))
        assert receipt.output == "custom"

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("op-fail", error="Intentional failure", exit_code=3)
        receipt = mock.execute(ExecutionContext(action=Action(id="op-fail", adapter="mock")))
        assert receipt.failed
        assert receipt.exit_code == 3

    def test_side_effect_skipped_for_scripted_response(self):
        seen = []
        mock = MockAdapter(side_effect=seen.append)
        mock.set_failure("op-1")
        mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock")))
        mock.execute(ExecutionContext(action=Action(id="op-2", adapter="mock")))
        assert [c.action.id for c in seen] == ["op-2"]

    def test_calls_for_stage(self):
        mock = MockAdapter()
        for action_id, stage in [("install:builder", "install"), ("build:builder", "build"),
                                 ("install:sdk", "install")]:
            mock.execute(ExecutionContext(action=Action(id=action_id, adapter="mock", stage=stage)))
        assert [c.action.id for c in mock.calls_for_stage("install")] == ["install:builder", "install:sdk"]
        assert mock.calls_for_stage("link") == []

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("op-1")
        mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock")))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock"))).ok

    def test_is_available(self):
        assert MockAdapter(available=True).is_available()
        assert not MockAdapter(available=False).is_available()


# ── Registry Tests ──────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_register_and_get(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="test")
        registry.register(mock)
        assert registry.get("test") is mock
        assert "test" in registry.list_adapters()

    def test_unregister(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="temp"))
        registry.unregister("temp")
        assert registry.get("temp") is None

    def test_default_registry(self):
        assert sorted(AdapterRegistry.default().list_adapters()) == ["filesystem", "git", "shell"]

    def test_adapter_status(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="available", available=True))
        registry.register(MockAdapter(adapter_name="unavailable", available=False))
        status = registry.adapter_status()
        assert status["available"]["available"] is True
        assert status["unavailable"]["available"] is False

    def test_execute_unknown_adapter(self):
        receipt = AdapterRegistry().execute_action(Action(id="x", adapter="nope"))
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_execute_passes_dirs(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="shell")
        registry.register(mock)
        registry.execute_action(
            Action(id="install:sdk", adapter="shell"),
            base_dir="/work",
            project_dir="/work/sdk",
        )
        assert mock.call_log[0].working_dir == "/work/sdk"

    def test_adapter_exception_becomes_receipt(self):
        def explode(ctx):
            raise RuntimeError("kaboom")

        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="shell", side_effect=explode))
        receipt = registry.execute_action(Action(id="x", adapter="shell"))
        assert receipt.failed
        assert "kaboom" in receipt.error

    def test_validation_failure(self):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        receipt = registry.execute_action(Action(id="x", adapter="shell", params={}))
        assert receipt.failed
        assert "Validation failed" in receipt.error


# ── Shell Adapter Tests ─────────────────────────────────────────────


class TestShellCommandAdapter:
    def _run(self, command: str, cwd: Path, **params) -> Receipt:
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        return registry.execute_action(
            Action(id="cmd", adapter="shell", params={"command": command, **params}),
            base_dir=str(cwd),
        )

    def test_success_captured(self, tmp_path: Path):
        receipt = self._run(f'"{sys.executable}" -c "print(42)"', tmp_path, stream=False)
        assert receipt.ok
        assert receipt.output == "42"
        assert receipt.exit_code == 0

    def test_nonzero_exit(self, tmp_path: Path):
        receipt = self._run(f'"{sys.executable}" -c "import sys; sys.exit(3)"', tmp_path, stream=False)
        assert receipt.failed
        assert receipt.exit_code == 3

    def test_runs_in_working_dir(self, tmp_path: Path):
        receipt = self._run(
            f'"{sys.executable}" -c "import os; print(os.getcwd())"', tmp_path, stream=False,
        )
        assert Path(receipt.output).resolve() == tmp_path.resolve()

    def test_missing_working_dir(self, tmp_path: Path):
        receipt = self._run("echo hi", tmp_path / "absent")
        assert receipt.failed
        assert "does not exist" in receipt.error


# ── Git Adapter Tests ───────────────────────────────────────────────


class TestGitAdapter:
    def test_clone_requires_url_and_dest(self):
        adapter = GitAdapter()
        ctx = ExecutionContext(action=Action(id="x", adapter="git", params={"operation": "clone"}))
        valid, msg = adapter.validate(ctx)
        assert not valid
        assert "url" in msg

    def test_unknown_operation(self):
        adapter = GitAdapter()
        ctx = ExecutionContext(action=Action(id="x", adapter="git", params={"operation": "push"}))
        valid, msg = adapter.validate(ctx)
        assert not valid
        assert "push" in msg


# ── Filesystem Adapter Tests ────────────────────────────────────────


class TestFilesystemAdapter:
    def _registry(self) -> AdapterRegistry:
        registry = AdapterRegistry()
        registry.register(FilesystemAdapter())
        return registry

    def test_remove(self, tmp_path: Path):
        stale = tmp_path / "stale"
        stale.mkdir()
        receipt = self._registry().execute_action(
            Action(id="rm", adapter="filesystem", params={"operation": "remove", "target": str(stale)}),
        )
        assert receipt.ok
        assert receipt.metadata["removed"] is True
        assert not stale.exists()

    def test_relative_paths_resolve_against_base_dir(self, tmp_path: Path):
        (tmp_path / "artifact").write_text("x")
        receipt = self._registry().execute_action(
            Action(
                id="ln",
                adapter="filesystem",
                params={"operation": "link", "source": "artifact", "target": "out/artifact", "kind": "copy"},
            ),
            base_dir=str(tmp_path),
        )
        assert receipt.ok
        assert receipt.metadata["kind"] == "copy"
        assert receipt.metadata["fallback"] is False
        assert (tmp_path / "out" / "artifact").read_text() == "x"

    def test_unknown_kind_rejected(self, tmp_path: Path):
        receipt = self._registry().execute_action(
            Action(
                id="ln",
                adapter="filesystem",
                params={"operation": "link", "source": "a", "target": "b", "kind": "hardlink"},
            ),
            base_dir=str(tmp_path),
        )
        assert receipt.failed
        assert "hardlink" in receipt.error
