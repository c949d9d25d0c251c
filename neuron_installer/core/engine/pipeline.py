"""
Pipeline — the six provisioning stages, driven strictly in order.

Flow:
    checking_prereqs → fetching → configuring → installing_deps → building → linking → done

Any ``InstallerError`` raised by a stage moves the run to ``aborted``
with that error as the reason; later stages never start. Nothing is
retried and nothing is rolled back: completed stages' side effects stay
on disk for the next run to build on.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.errors import ConfigWarning, InstallerError, UserCancelled
from neuron_installer.core.models.action import Receipt
from neuron_installer.core.models.link import LinkKind
from neuron_installer.core.models.project import InstallPlan
from neuron_installer.core.persistence.audit import AuditEntry, AuditWriter
from neuron_installer.core.services import (
    builder,
    config_materializer,
    dependencies,
    fetcher,
    linker,
    prerequisites,
)
from neuron_installer.core.services.prompts import Prompter

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    NOT_STARTED = "not_started"
    CHECKING_PREREQS = "checking_prereqs"
    FETCHING = "fetching"
    CONFIGURING = "configuring"
    INSTALLING_DEPS = "installing_deps"
    BUILDING = "building"
    LINKING = "linking"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def label(self) -> str:
        return STAGE_TITLES.get(self, self.value)


STAGE_TITLES = {
    Stage.CHECKING_PREREQS: "Checking prerequisites",
    Stage.FETCHING: "Cloning repositories",
    Stage.CONFIGURING: "Setting up configuration",
    Stage.INSTALLING_DEPS: "Installing dependencies",
    Stage.BUILDING: "Building projects",
    Stage.LINKING: "Linking artifacts",
}

StageCallback = Callable[[Stage], None]


@dataclass
class PipelineReport:
    """Result of one pipeline run."""

    operation_id: str = ""
    state: Stage = Stage.NOT_STARTED
    aborted_at: Stage | None = None
    error: InstallerError | None = None
    completed: list[Stage] = field(default_factory=list)
    receipts: list[Receipt] = field(default_factory=list)
    warnings: list[ConfigWarning] = field(default_factory=list)
    tools: list[prerequisites.ToolCheck] = field(default_factory=list)
    artifacts: dict[str, Path | None] = field(default_factory=dict)
    links: dict[str, LinkKind] = field(default_factory=dict)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.state == Stage.DONE

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, UserCancelled)

    @property
    def reason(self) -> str:
        return str(self.error) if self.error else ""

    @property
    def status(self) -> str:
        if self.ok:
            return "ok"
        return "cancelled" if self.cancelled else "failed"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "status": self.status,
            "state": self.state.value,
            "aborted_at": self.aborted_at.value if self.aborted_at else None,
            "reason": self.reason or None,
            "error_type": type(self.error).__name__ if self.error else None,
            "completed": [s.value for s in self.completed],
            "warnings": [str(w) for w in self.warnings],
            "tools": [t.to_dict() for t in self.tools],
            "artifacts": {k: str(v) if v else None for k, v in self.artifacts.items()},
            "links": {k: v.value for k, v in self.links.items()},
            "receipts": [
                {
                    "action_id": r.action_id,
                    "status": r.status,
                    "duration_ms": r.duration_ms,
                    "error": r.error,
                }
                for r in self.receipts
            ],
            "duration_ms": self.duration_ms,
        }


def run_pipeline(
    plan: InstallPlan,
    registry: AdapterRegistry,
    prompter: Prompter | None = None,
    on_stage: StageCallback | None = None,
    audit_writer: AuditWriter | None = None,
) -> PipelineReport:
    """Run every stage for ``plan``. Never raises ``InstallerError``.

    Args:
        plan: The resolved, immutable install plan.
        registry: Adapters for git, shell and filesystem actions.
        prompter: Answers confirmations; defaults to one matching ``plan.force``.
        on_stage: Called as each stage starts (used for progress output).
        audit_writer: If given, the run is appended to the audit ledger.

    Returns:
        PipelineReport whose ``state`` is ``DONE`` or ``ABORTED``.
    """
    if prompter is None:
        prompter = Prompter.for_force(plan.force)

    report = PipelineReport(operation_id=generate_operation_id())
    start = time.monotonic()

    stages: list[tuple[Stage, Callable[[], None]]] = [
        (Stage.CHECKING_PREREQS, lambda: report.tools.extend(
            prerequisites.check_prerequisites(plan))),
        (Stage.FETCHING, lambda: report.receipts.extend(
            fetcher.fetch_all(plan, registry, prompter))),
        (Stage.CONFIGURING, lambda: report.warnings.extend(
            config_materializer.materialize(plan))),
        (Stage.INSTALLING_DEPS, lambda: report.receipts.extend(
            dependencies.install_all(plan, registry))),
        (Stage.BUILDING, lambda: report.artifacts.update(
            builder.build_all(plan, registry))),
        (Stage.LINKING, lambda: report.links.update(
            linker.link_all(plan, registry))),
    ]

    logger.info("Starting installation %s (%s)", report.operation_id, ", ".join(plan.names))

    for stage, run_stage in stages:
        report.state = stage
        if on_stage is not None:
            on_stage(stage)
        logger.debug("Entering stage %s", stage.value)
        try:
            run_stage()
        except InstallerError as e:
            report.aborted_at = stage
            report.state = Stage.ABORTED
            report.error = e
            logger.error("Installation aborted during %s: %s", stage.value, e)
            break
        report.completed.append(stage)
    else:
        report.state = Stage.DONE
        logger.info("Installation completed successfully")

    report.duration_ms = int((time.monotonic() - start) * 1000)

    if audit_writer is not None:
        write_audit_entry(report, plan, audit_writer)

    return report


def write_audit_entry(
    report: PipelineReport,
    plan: InstallPlan,
    audit_writer: AuditWriter,
) -> None:
    """Append the run's outcome to the audit ledger."""
    entry = AuditEntry(
        operation_id=report.operation_id,
        status=report.status,
        stage=report.state.value,
        aborted_at=report.aborted_at.value if report.aborted_at else "",
        projects=plan.names,
        force=plan.force,
        actions_total=len(report.receipts),
        actions_failed=sum(1 for r in report.receipts if r.failed),
        duration_ms=report.duration_ms,
        errors=[report.reason] if report.error else [],
        warnings=[str(w) for w in report.warnings],
        context={"base_dir": str(plan.base_dir)},
    )
    audit_writer.write(entry)


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"install-{now}-{short}"
