"""
Installer error taxonomy.

Every fatal condition is an ``InstallerError``. Stages raise them, the
pipeline driver records them as the abort reason, and the CLI turns any
of them into exit status 1. ``ConfigWarning`` is the one non-fatal kind:
it is collected, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class InstallerError(Exception):
    """Base class for fatal installer errors."""


class MissingToolError(InstallerError):
    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        self.hint = hint
        message = f"{tool} is not installed (not found on PATH)"
        if hint:
            message += f". {hint}"
        super().__init__(message)


class VersionTooLowError(InstallerError):
    def __init__(self, tool: str, found: str, required: str):
        self.tool = tool
        self.found = found
        self.required = required
        super().__init__(
            f"{tool} version {required} or higher is required (found: {found})"
        )


class UserCancelled(InstallerError):
    def __init__(self, message: str = "Installation cancelled"):
        super().__init__(message)


class FetchError(InstallerError):
    def __init__(self, project: str, url: str, exit_code: int | None, detail: str = ""):
        self.project = project
        self.url = url
        self.exit_code = exit_code
        message = f"Failed to clone {project} from {url}"
        if exit_code is not None:
            message += f" (exit code {exit_code})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class CommandError(InstallerError):
    def __init__(self, command: str, exit_code: int | None, detail: str = ""):
        self.command = command
        self.exit_code = exit_code
        message = f"Command failed: {command}"
        if exit_code is not None:
            message += f" (exit code {exit_code})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class LinkError(InstallerError):
    def __init__(self, source: Path, target: Path, detail: str = ""):
        self.source = source
        self.target = target
        message = f"Could not link {target} -> {source}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class DownloadError(InstallerError):
    def __init__(self, url: str, detail: str = ""):
        self.url = url
        super().__init__(f"Failed to download {url}" + (f": {detail}" if detail else ""))


class CheckoutMissingError(InstallerError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"{path} not found. Installation may have failed.")


class ConfigError(InstallerError):
    """installer.yml is invalid or unreadable, or the runtime config could not be written."""


@dataclass(frozen=True)
class ConfigWarning:
    """A non-fatal configuration problem (missing template, already-seeded file)."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        return self.message
