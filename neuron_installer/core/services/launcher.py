"""
Launcher — the thin bootstrap entry point and application start.

``bootstrap`` mirrors the one-line installers the project ships for
each platform: check Node.js and npm, download the published
``install.js`` over HTTPS, run it with ``node``, delete it. ``start``
runs the installed host with ``npm run start``.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from pathlib import Path

from neuron_installer import __version__
from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.errors import CheckoutMissingError, CommandError, DownloadError
from neuron_installer.core.models.action import Action, Receipt
from neuron_installer.core.services.prerequisites import ToolCheck, check_tool
from neuron_installer.core.services.prompts import Prompter

logger = logging.getLogger(__name__)

SCRIPT_NAME = "install.js"
REQUIRED_NODE_VERSION = "18"
START_COMMAND = "npm run start"
START_QUESTION = "Would you like to start the Neuron Node Builder now?"


def check_node() -> list[ToolCheck]:
    """Node.js 18+ and npm, the launcher's only prerequisites."""
    logger.info("Checking Node.js installation...")
    return [check_tool("node", REQUIRED_NODE_VERSION), check_tool("npm")]


def download_script(url: str, dest: Path, timeout: int = 30) -> Path:
    """Download ``url`` to ``dest``.

    Raises:
        DownloadError: Not an HTTPS URL, or the request failed.
    """
    if not url.startswith("https://"):
        raise DownloadError(url, "only https:// URLs are allowed")

    logger.info("Downloading install script from %s", url)
    req = urllib.request.Request(
        url, headers={"User-Agent": f"neuron-installer/{__version__}"},
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            content = resp.read()
    except (urllib.error.URLError, OSError) as e:
        raise DownloadError(url, str(e)) from e

    dest.write_bytes(content)
    logger.info("Install script downloaded successfully (%d bytes)", len(content))
    return dest


def run_remote_installer(
    url: str,
    workdir: Path,
    registry: AdapterRegistry,
    force: bool = False,
) -> Receipt:
    """Download, run and delete the published install script.

    The downloaded file is removed whether or not the script succeeded.

    Raises:
        MissingToolError, VersionTooLowError: Node.js or npm unusable.
        DownloadError: The script could not be fetched.
        CommandError: The script exited non-zero.
    """
    check_node()

    script = workdir / SCRIPT_NAME
    download_script(url, script)

    command = f"node {SCRIPT_NAME}" + (" --force" if force else "")
    try:
        receipt = registry.execute_action(
            Action(
                id="bootstrap:install-script",
                name=command,
                adapter="shell",
                stage="bootstrap",
                params={"command": command},
            ),
            base_dir=str(workdir),
        )
    finally:
        script.unlink(missing_ok=True)
        logger.debug("Removed %s", script)

    if not receipt.ok:
        raise CommandError(command, receipt.exit_code)
    return receipt


def should_start(prompter: Prompter, start: bool | None) -> bool:
    """Whether to launch the host after installing.

    An explicit ``--start/--no-start`` wins; otherwise the operator is
    asked (an automatic prompter answers yes).
    """
    if start is not None:
        return start
    return prompter.confirm(START_QUESTION, default=False)


def start_application(builder_dir: Path, registry: AdapterRegistry) -> Receipt:
    """Run the host with ``npm run start`` in its checkout.

    Raises:
        CheckoutMissingError: The builder checkout does not exist.
        CommandError: ``npm run start`` exited non-zero.
    """
    if not builder_dir.is_dir():
        raise CheckoutMissingError(builder_dir)

    logger.info("Starting Neuron Node Builder...")
    receipt = registry.execute_action(
        Action(
            id="start:builder",
            name=START_COMMAND,
            adapter="shell",
            stage="start",
            params={"command": START_COMMAND},
        ),
        base_dir=str(builder_dir),
    )
    if not receipt.ok:
        raise CommandError(START_COMMAND, receipt.exit_code)
    return receipt
