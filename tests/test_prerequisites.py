"""
Tests for prerequisite checks — version parsing, comparison, tool probes.

Tool probes are exercised by patching ``shutil.which`` and
``subprocess.run`` in the prerequisites module; nothing is executed.
"""

import subprocess
from types import SimpleNamespace

import pytest

from neuron_installer.core.errors import MissingToolError, VersionTooLowError
from neuron_installer.core.services import prerequisites
from neuron_installer.core.services.prerequisites import (
    check_prerequisites,
    check_tool,
    compare_versions,
    extract_version,
    parse_version,
    survey_prerequisites,
)


def fake_tools(monkeypatch, outputs: dict[str, str]) -> None:
    """Pretend exactly the tools in ``outputs`` are installed."""

    def which(name):
        return f"/usr/bin/{name}" if name in outputs else None

    def run(cmd, **kwargs):
        name = cmd[0].rsplit("/", 1)[-1]
        return SimpleNamespace(stdout=outputs.get(name, ""), stderr="", returncode=0)

    monkeypatch.setattr(prerequisites.shutil, "which", which)
    monkeypatch.setattr(prerequisites.subprocess, "run", run)


ALL_TOOLS = {
    "git": "git version 2.43.0\n",
    "node": "v20.11.1\n",
    "npm": "10.2.4\n",
    "go": "go version go1.23.1 linux/amd64\n",
}


# ── Versions ────────────────────────────────────────────────────────


class TestVersions:
    def test_parse(self):
        assert parse_version("1.23.1") == (1, 23, 1)
        assert parse_version("v18") == (18,)

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_version("devel")

    def test_numeric_not_lexicographic(self):
        assert compare_versions("1.9", "1.10") == -1
        assert compare_versions("1.10", "1.9") == 1

    def test_zero_padding(self):
        assert compare_versions("1.23", "1.23.0") == 0
        assert compare_versions("18", "18.0.0") == 0

    def test_go_version_line(self):
        assert extract_version("go", "go version go1.23.1 linux/amd64") == "1.23.1"

    def test_node_version_line(self):
        assert extract_version("node", "v18.19.0") == "18.19.0"

    def test_git_version_line(self):
        assert extract_version("git", "git version 2.39.3 (Apple Git-145)") == "2.39.3"

    def test_unparseable(self):
        assert extract_version("go", "command not found") is None


# ── check_tool ──────────────────────────────────────────────────────


class TestCheckTool:
    def test_found_without_minimum(self, monkeypatch):
        fake_tools(monkeypatch, ALL_TOOLS)
        check = check_tool("npm")
        assert check.path == "/usr/bin/npm"
        assert check.version is None

    def test_found_with_minimum(self, monkeypatch):
        fake_tools(monkeypatch, ALL_TOOLS)
        check = check_tool("go", "1.23")
        assert check.version == "1.23.1"
        assert check.required == "1.23"

    def test_missing(self, monkeypatch):
        fake_tools(monkeypatch, {})
        with pytest.raises(MissingToolError) as exc:
            check_tool("git")
        assert exc.value.tool == "git"
        assert "git-scm.com" in str(exc.value)

    def test_too_low(self, monkeypatch):
        fake_tools(monkeypatch, {"go": "go version go1.9.7 linux/amd64"})
        with pytest.raises(VersionTooLowError) as exc:
            check_tool("go", "1.23")
        assert exc.value.found == "1.9.7"
        assert exc.value.required == "1.23"

    def test_unreadable_version_is_too_low(self, monkeypatch):
        fake_tools(monkeypatch, {"node": "something odd"})
        with pytest.raises(VersionTooLowError):
            check_tool("node", "18")

    def test_probe_timeout_is_unreadable(self, monkeypatch):
        monkeypatch.setattr(prerequisites.shutil, "which", lambda name: f"/usr/bin/{name}")

        def run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, 15)

        monkeypatch.setattr(prerequisites.subprocess, "run", run)
        with pytest.raises(VersionTooLowError):
            check_tool("node", "18")


# ── Plan-level checks ───────────────────────────────────────────────


class TestCheckPrerequisites:
    def test_builder_only_skips_go(self, monkeypatch, make_plan):
        fake_tools(monkeypatch, {k: v for k, v in ALL_TOOLS.items() if k != "go"})
        checks = check_prerequisites(make_plan("builder"))
        assert [c.tool for c in checks] == ["git", "node", "npm"]

    def test_sdk_requires_go(self, monkeypatch, make_plan):
        fake_tools(monkeypatch, {k: v for k, v in ALL_TOOLS.items() if k != "go"})
        with pytest.raises(MissingToolError) as exc:
            check_prerequisites(make_plan("builder", "sdk"))
        assert exc.value.tool == "go"

    def test_stops_at_first_failure(self, monkeypatch, make_plan):
        fake_tools(monkeypatch, {"node": "v20.0.0", "npm": "10.0.0"})
        with pytest.raises(MissingToolError) as exc:
            check_prerequisites(make_plan("builder"))
        assert exc.value.tool == "git"

    def test_survey_reports_every_tool(self, monkeypatch, make_plan):
        fake_tools(monkeypatch, {"git": ALL_TOOLS["git"], "node": "v16.20.0"})
        results = survey_prerequisites(make_plan("builder", "sdk"))
        by_tool = {r["tool"]: r for r in results}
        assert set(by_tool) == {"git", "node", "npm", "go"}
        assert by_tool["git"]["ok"] is True
        assert by_tool["node"]["ok"] is False
        assert "18" in by_tool["node"]["error"]
        assert by_tool["go"]["ok"] is False
