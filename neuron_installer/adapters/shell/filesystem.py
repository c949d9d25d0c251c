"""
Filesystem adapter — expose build artifacts inside the host project.

Provides a receipt-returning interface for the link operation so the
linker stage is recorded, counted and testable like every other stage.
"""

from __future__ import annotations

import logging
from pathlib import Path

from neuron_installer.adapters.base import Adapter, ExecutionContext
from neuron_installer.adapters.shell.links import (
    DEFAULT_STRATEGIES,
    LinkStrategy,
    remove_path,
    strategies_for,
)
from neuron_installer.core.models.action import Receipt
from neuron_installer.core.models.link import LinkKind

logger = logging.getLogger(__name__)


class FilesystemAdapter(Adapter):
    """Link and remove operations with receipts.

    Action params:
        operation (str): One of 'link', 'remove'.
        source (str): Artifact to expose (for 'link').
        target (str): Where to expose it / what to remove.
        kind (str): Preferred link kind: 'symlink', 'junction' or 'copy'
            (default: 'symlink'). Weaker kinds are tried on failure.
    """

    def __init__(self, strategies: tuple[LinkStrategy, ...] = DEFAULT_STRATEGIES):
        self._strategies = strategies

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if operation not in ("link", "remove"):
            return False, f"Unknown operation '{operation}'. Valid: link, remove"
        required = ("source", "target") if operation == "link" else ("target",)
        missing = [key for key in required if not params.get(key)]
        if missing:
            return False, f"Missing required param(s) for {operation}: {', '.join(missing)}"
        if params.get("kind", LinkKind.SYMLINK.value) not in {k.value for k in LinkKind}:
            return False, f"Unknown link kind '{params['kind']}'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        target = self._resolve(context, context.action.params["target"])
        run = self._link if operation == "link" else self._remove
        try:
            return run(context, target)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation, "target": str(target)},
            )

    # ── Operations ──────────────────────────────────────────────

    def _link(self, ctx: ExecutionContext, target: Path) -> Receipt:
        source = self._resolve(ctx, ctx.action.params["source"])
        kind = LinkKind(ctx.action.params.get("kind", LinkKind.SYMLINK.value))

        if not source.exists():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Link source does not exist: {source}",
                metadata={"source": str(source), "target": str(target)},
            )

        target.parent.mkdir(parents=True, exist_ok=True)
        if remove_path(target):
            logger.debug("Removed existing %s", target)

        errors: list[str] = []
        for strategy in strategies_for(kind, self._strategies):
            if not strategy.supports(source):
                logger.debug("%s not available for %s", strategy.kind.value, source)
                continue
            try:
                strategy.create(source, target)
            except OSError as e:
                logger.warning(
                    "Could not create %s for %s (%s), falling back",
                    strategy.kind.value, target, e,
                )
                errors.append(f"{strategy.kind.value}: {e}")
                # Clear any partial result before the next strategy runs
                if target.exists() or target.is_symlink():
                    remove_path(target)
                continue

            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=f"{target} -> {source} ({strategy.kind.value})",
                metadata={
                    "source": str(source),
                    "target": str(target),
                    "kind": strategy.kind.value,
                    "requested": kind.value,
                    "fallback": strategy.kind != kind,
                },
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=ctx.action.id,
            error="; ".join(errors) or "No link strategy available",
            metadata={"source": str(source), "target": str(target), "requested": kind.value},
        )

    def _remove(self, ctx: ExecutionContext, target: Path) -> Receipt:
        removed = remove_path(target)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Removed {target}" if removed else f"Nothing at {target}",
            metadata={"target": str(target), "removed": removed},
        )

    # ── Helpers ─────────────────────────────────────────────────

    @staticmethod
    def _resolve(ctx: ExecutionContext, raw_path: str) -> Path:
        """Resolve a path relative to the working directory."""
        path = Path(raw_path)
        if not path.is_absolute():
            path = Path(ctx.working_dir) / path
        return path
