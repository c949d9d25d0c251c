"""
Shell adapter — package-manager and build commands.

``npm install``, ``go mod tidy``, ``npm run build`` and the like run
here. Output normally goes straight to the operator's terminal and only
the exit status is kept; ``stream=False`` captures it into the Receipt.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from neuron_installer.adapters.base import Adapter, ExecutionContext
from neuron_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(Adapter):
    """One shell command per Action.

    Action params:
        command (str): Command line, run through the platform shell.
        stream (bool): Pass output through (default: True).
        timeout (int | None): Seconds before giving up (default: no limit).
        cwd (str): Overrides the project checkout as working directory.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return any(shutil.which(sh) for sh in ("sh", "cmd"))

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.action.params.get("command"):
            return False, "Missing required param: 'command'"
        if not Path(context.working_dir).is_dir():
            return False, f"Working directory does not exist: {context.working_dir}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        command = params["command"]
        timeout = params.get("timeout")
        cwd = context.working_dir
        action_id = context.action.id

        logger.debug("$ %s  (in %s)", command, cwd)
        started = time.monotonic()
        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                capture_output=not params.get("stream", True),
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=f"Command timed out after {timeout}s",
                metadata={"command": command, "timeout": timeout},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=f"Could not run '{command}': {e}",
                metadata={"command": command},
            )

        stdout = (result.stdout or "").strip()
        common = {
            "exit_code": result.returncode,
            "duration_ms": int((time.monotonic() - started) * 1000),
        }
        if result.returncode != 0:
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=(result.stderr or "").strip() or f"Command exited with code {result.returncode}",
                metadata={"command": command, "cwd": cwd, "stdout": stdout},
                **common,
            )
        return Receipt.success(
            adapter=self.name,
            action_id=action_id,
            output=stdout,
            metadata={"command": command, "cwd": cwd},
            **common,
        )
