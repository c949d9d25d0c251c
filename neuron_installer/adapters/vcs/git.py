"""
Git adapter — clone the managed repositories with the git CLI.

Clone progress is passed through to the operator's terminal; only the
exit status (and stderr, when captured) ends up in the Receipt.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from neuron_installer.adapters.base import Adapter, ExecutionContext
from neuron_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(Adapter):
    """``git clone`` as a receipt-returning operation.

    Action params:
        operation (str): 'clone'.
        url (str): Repository URL.
        dest (str): Checkout directory; must not exist yet.
        stream (bool): Show clone progress on the terminal (default: True).
        timeout (int | None): Seconds before giving up (default: no limit).
    """

    OPERATIONS = ("clone",)

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if operation not in self.OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(self.OPERATIONS)}"
        missing = [key for key in ("url", "dest") if not params.get(key)]
        if missing:
            return False, f"Missing required param(s) for clone: {', '.join(missing)}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        url, dest = params["url"], params["dest"]
        stream = params.get("stream", True)
        timeout = params.get("timeout")
        action_id = context.action.id

        logger.debug("git clone %s %s (cwd=%s)", url, dest, context.base_dir)
        started = time.monotonic()
        try:
            result = subprocess.run(
                ["git", "clone", url, dest],
                cwd=context.base_dir,
                capture_output=not stream,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=f"git clone timed out after {timeout}s",
                metadata={"url": url, "dest": dest},
            )
        except OSError as e:
            return Receipt.failure(adapter=self.name, action_id=action_id, error=f"Git error: {e}")

        elapsed_ms = int((time.monotonic() - started) * 1000)
        common = {
            "exit_code": result.returncode,
            "duration_ms": elapsed_ms,
            "metadata": {"url": url, "dest": dest},
        }
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=stderr or f"git clone exited with code {result.returncode}",
                **common,
            )
        return Receipt.success(
            adapter=self.name,
            action_id=action_id,
            output=f"Cloned {url} into {dest}",
            **common,
        )
