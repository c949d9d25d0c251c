"""
Prerequisite checks — is each tool on PATH, and is it new enough?

Read-only probes: ``shutil.which`` for presence, the tool's own version
command for the version. Run before any stage that touches disk.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass

from neuron_installer.core.errors import MissingToolError, VersionTooLowError
from neuron_installer.core.models.project import InstallPlan, ToolRequirement

logger = logging.getLogger(__name__)

_NUM = r"(\d+(?:\.\d+)*)"

VERSION_COMMANDS: dict[str, tuple[list[str], str]] = {
    "node": (["node", "--version"],  rf"v{_NUM}"),
    "npm":  (["npm", "--version"],   _NUM),
    "go":   (["go", "version"],      rf"go{_NUM}"),
    "git":  (["git", "--version"],   rf"git version\s+{_NUM}"),
}

INSTALL_HINTS: dict[str, str] = {
    "node": "Please install Node.js from: https://nodejs.org/",
    "npm": "npm usually comes with Node.js. Please reinstall Node.js.",
    "go": "Please install Go from: https://golang.org/dl/",
    "git": "Please install git from: https://git-scm.com/downloads",
}


@dataclass
class ToolCheck:
    """Outcome of a successful tool check."""

    tool: str
    path: str
    version: str | None = None
    required: str | None = None

    def to_dict(self) -> dict:
        return {
            "tool": self.tool,
            "path": self.path,
            "version": self.version,
            "required": self.required,
        }


def parse_version(text: str) -> tuple[int, ...]:
    """Numeric components of a dotted version (``"1.23.1"`` → ``(1, 23, 1)``).

    Raises:
        ValueError: If ``text`` is not a dotted number.
    """
    text = text.strip().lstrip("v")
    if not re.fullmatch(_NUM, text):
        raise ValueError(f"Not a version: {text!r}")
    return tuple(int(part) for part in text.split("."))


def compare_versions(found: str, required: str) -> int:
    """-1, 0 or 1 as ``found`` is below, equal to or above ``required``.

    Components are compared as integers, missing ones count as zero,
    so ``"1.9" < "1.10"`` and ``"1.23" == "1.23.0"``.
    """
    a = parse_version(found)
    b = parse_version(required)
    width = max(len(a), len(b))
    a = a + (0,) * (width - len(a))
    b = b + (0,) * (width - len(b))
    return (a > b) - (a < b)


def extract_version(tool: str, output: str) -> str | None:
    """Pull the version number out of a tool's self-reported version string."""
    entry = VERSION_COMMANDS.get(tool)
    pattern = entry[1] if entry else _NUM
    match = re.search(pattern, output)
    return match.group(1) if match else None


def get_tool_version(tool: str) -> tuple[str | None, str]:
    """Run the tool's version command.

    Returns:
        (parsed version or None, raw output).
    """
    cmd = VERSION_COMMANDS.get(tool, ([tool, "--version"], _NUM))[0]
    # Resolve through PATHEXT so "npm" finds npm.cmd on Windows
    exe = shutil.which(cmd[0]) or cmd[0]
    try:
        result = subprocess.run(
            [exe, *cmd[1:]], capture_output=True, text=True, timeout=15,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Version probe for %s failed: %s", tool, e)
        return None, ""

    output = ((result.stdout or "") + (result.stderr or "")).strip()
    return extract_version(tool, output), output


def check_tool(name: str, min_version: str | None = None) -> ToolCheck:
    """Verify that ``name`` is on PATH and at least ``min_version``.

    Raises:
        MissingToolError: The executable cannot be resolved.
        VersionTooLowError: The reported version is below the minimum,
            or cannot be read at all.
    """
    path = shutil.which(name)
    if path is None:
        raise MissingToolError(name, INSTALL_HINTS.get(name, ""))

    if min_version is None:
        logger.info("Found %s at %s", name, path)
        return ToolCheck(tool=name, path=path)

    version, raw = get_tool_version(name)
    if version is None:
        raise VersionTooLowError(name, raw or "unknown", min_version)

    logger.info("Found %s version %s", name, version)
    if compare_versions(version, min_version) < 0:
        raise VersionTooLowError(name, version, min_version)

    return ToolCheck(tool=name, path=path, version=version, required=min_version)


def check_requirement(req: ToolRequirement) -> ToolCheck:
    return check_tool(req.tool, req.min_version)


def check_prerequisites(plan: InstallPlan) -> list[ToolCheck]:
    """Check every tool the plan needs, stopping at the first failure."""
    return [check_requirement(req) for req in plan.requirements()]


def survey_prerequisites(plan: InstallPlan) -> list[dict]:
    """Check every tool the plan needs without stopping, for reporting."""
    results = []
    for req in plan.requirements():
        try:
            check = check_requirement(req)
        except (MissingToolError, VersionTooLowError) as e:
            results.append({
                "tool": req.tool,
                "required": req.min_version,
                "ok": False,
                "error": str(e),
            })
        else:
            results.append({**check.to_dict(), "ok": True})
    return results
