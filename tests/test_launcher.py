"""
Tests for the launcher — remote install script and application start.
"""

import io
import urllib.error
from pathlib import Path

import pytest

from neuron_installer.adapters.mock import MockAdapter
from neuron_installer.core.errors import (
    CheckoutMissingError,
    CommandError,
    DownloadError,
    VersionTooLowError,
)
from neuron_installer.core.services import launcher
from neuron_installer.core.services.launcher import (
    download_script,
    run_remote_installer,
    should_start,
    start_application,
)
from neuron_installer.core.services.prompts import AutoPrompter, ScriptedPrompter

SCRIPT_URL = "https://example.com/install.js"


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture
def node_ok(monkeypatch):
    monkeypatch.setattr(launcher, "check_node", lambda: [])


@pytest.fixture
def served(monkeypatch):
    """Serve a fixed install script for any HTTPS request."""
    requests = []

    def urlopen(req, timeout=None):
        requests.append(req)
        return FakeResponse(b"console.log('installing');\n")

    monkeypatch.setattr(launcher.urllib.request, "urlopen", urlopen)
    return requests


class TestDownload:
    def test_https_only(self, tmp_path: Path):
        with pytest.raises(DownloadError, match="https"):
            download_script("http://example.com/install.js", tmp_path / "install.js")

    def test_writes_file(self, tmp_path: Path, served):
        dest = download_script(SCRIPT_URL, tmp_path / "install.js")
        assert dest.read_bytes() == b"console.log('installing');\n"
        assert served[0].get_header("User-agent").startswith("neuron-installer/")

    def test_network_error(self, tmp_path: Path, monkeypatch):
        def urlopen(req, timeout=None):
            raise urllib.error.URLError("no route to host")

        monkeypatch.setattr(launcher.urllib.request, "urlopen", urlopen)
        with pytest.raises(DownloadError, match="no route"):
            download_script(SCRIPT_URL, tmp_path / "install.js")
        assert not (tmp_path / "install.js").exists()


class TestRunRemoteInstaller:
    def test_runs_and_cleans_up(self, tmp_path: Path, node_ok, served, mock_toolchain):
        seen = []
        shell = MockAdapter(
            adapter_name="shell",
            side_effect=lambda ctx: seen.append((tmp_path / "install.js").exists()),
        )
        mock_toolchain.registry.register(shell)

        run_remote_installer(SCRIPT_URL, tmp_path, mock_toolchain.registry)

        assert [c.action.params["command"] for c in shell.call_log] == ["node install.js"]
        assert seen == [True]
        assert not (tmp_path / "install.js").exists()

    def test_force_forwarded(self, tmp_path: Path, node_ok, served, mock_toolchain):
        run_remote_installer(SCRIPT_URL, tmp_path, mock_toolchain.registry, force=True)
        assert mock_toolchain.commands() == ["node install.js --force"]

    def test_script_failure_still_cleans_up(self, tmp_path: Path, node_ok, served, mock_toolchain):
        mock_toolchain.shell.set_failure("bootstrap:install-script", exit_code=1)

        with pytest.raises(CommandError):
            run_remote_installer(SCRIPT_URL, tmp_path, mock_toolchain.registry)

        assert not (tmp_path / "install.js").exists()

    def test_old_node_stops_before_download(self, tmp_path: Path, served, mock_toolchain, monkeypatch):
        def old_node():
            raise VersionTooLowError("node", "16.20.0", "18")

        monkeypatch.setattr(launcher, "check_node", old_node)

        with pytest.raises(VersionTooLowError):
            run_remote_installer(SCRIPT_URL, tmp_path, mock_toolchain.registry)

        assert served == []
        assert mock_toolchain.shell.call_count == 0


class TestStart:
    def test_explicit_flag_wins(self):
        prompter = ScriptedPrompter([True])
        assert should_start(prompter, False) is False
        assert prompter.questions == []

    def test_asks_when_unset(self):
        prompter = ScriptedPrompter([True])
        assert should_start(prompter, None) is True
        assert prompter.questions == [launcher.START_QUESTION]

    def test_force_prompter_starts(self):
        assert should_start(AutoPrompter(True), None) is True

    def test_start_runs_npm(self, tmp_path: Path, mock_toolchain):
        start_application(tmp_path, mock_toolchain.registry)
        (call,) = mock_toolchain.shell.call_log
        assert call.action.params["command"] == "npm run start"
        assert Path(call.working_dir) == tmp_path

    def test_missing_checkout(self, tmp_path: Path, mock_toolchain):
        with pytest.raises(CheckoutMissingError, match="not found"):
            start_application(tmp_path / "neuron-node-builder", mock_toolchain.registry)
        assert mock_toolchain.shell.call_count == 0
