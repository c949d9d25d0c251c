"""
Adapter registry — routes each Action to the adapter named in it.

Stages hold a registry, never an adapter. ``AdapterRegistry.default()``
wires the real git, shell and filesystem adapters; tests build an empty
registry and register MockAdapters under the same names.
"""

from __future__ import annotations

import logging
import time

from neuron_installer.adapters.base import Adapter, ExecutionContext
from neuron_installer.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Name → adapter table plus the single dispatch point for Actions."""

    def __init__(self) -> None:
        self._adapters: dict[str, Adapter] = {}

    @classmethod
    def default(cls) -> AdapterRegistry:
        """Registry wired with the real shell, git and filesystem adapters."""
        from neuron_installer.adapters.shell.command import ShellCommandAdapter
        from neuron_installer.adapters.shell.filesystem import FilesystemAdapter
        from neuron_installer.adapters.vcs.git import GitAdapter

        registry = cls()
        for adapter in (ShellCommandAdapter(), GitAdapter(), FilesystemAdapter()):
            registry.register(adapter)
        return registry

    def register(self, adapter: Adapter) -> None:
        """Register ``adapter`` under its name, replacing any previous one."""
        if adapter.name in self._adapters:
            logger.debug("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def adapter_status(self) -> dict[str, dict]:
        """Availability of every registered adapter's underlying tool."""
        return {
            name: {
                "name": name,
                "available": _probe(adapter),
                "type": type(adapter).__name__,
            }
            for name, adapter in self._adapters.items()
        }

    def execute_action(
        self,
        action: Action,
        base_dir: str = ".",
        project_dir: str | None = None,
    ) -> Receipt:
        """Validate and run ``action``. Never raises; every failure is a Receipt."""
        started = time.monotonic()
        adapter = self._adapters.get(action.adapter)

        if adapter is None:
            receipt = _failed(action, f"No adapter registered for '{action.adapter}'")
        else:
            context = ExecutionContext(
                action=action,
                base_dir=base_dir,
                project_dir=project_dir,
                params=action.params,
            )
            receipt = _dispatch(adapter, context)

        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        if receipt.failed:
            logger.debug("%s failed: %s", action.id, receipt.error)
        return receipt


def _failed(action: Action, error: str) -> Receipt:
    return Receipt.failure(adapter=action.adapter, action_id=action.id, error=error)


def _dispatch(adapter: Adapter, context: ExecutionContext) -> Receipt:
    action = context.action
    try:
        valid, reason = adapter.validate(context)
    except Exception as e:
        return _failed(action, f"Validation error: {e}")
    if not valid:
        return _failed(action, f"Validation failed: {reason}")

    logger.debug("Running %s via %s (cwd=%s)", action.id, adapter.name, context.working_dir)
    try:
        return adapter.execute(context)
    except Exception as e:
        logger.error("Adapter %s raised during %s: %s", adapter.name, action.id, e)
        return _failed(action, f"Unexpected error: {e}")


def _probe(adapter: Adapter) -> bool:
    try:
        return adapter.is_available()
    except Exception:
        return False
