"""
Install use case — from CLI flags to a finished (or aborted) pipeline run.

This is the top-level orchestrator behind ``neuron-installer install``:
it loads configuration, resolves the InstallPlan (asking about optional
projects unless flags or ``--force`` answer for the operator), asks for
a final go-ahead, runs the pipeline and audits the result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from neuron_installer.adapters.registry import AdapterRegistry
from neuron_installer.core.config.loader import InstallerConfig
from neuron_installer.core.engine.pipeline import (
    PipelineReport,
    Stage,
    StageCallback,
    generate_operation_id,
    run_pipeline,
    write_audit_entry,
)
from neuron_installer.core.errors import InstallerError, UserCancelled
from neuron_installer.core.models.project import (
    REGISTRATION,
    SDK,
    USER_DIR_NAME,
    InstallPlan,
    ProjectSpec,
)
from neuron_installer.core.persistence.audit import AuditWriter
from neuron_installer.core.services.prompts import Prompter

logger = logging.getLogger(__name__)

Echo = Callable[[str], None]


@dataclass
class InstallResult:
    """Result of an install request."""

    plan: InstallPlan | None = None
    report: PipelineReport | None = None
    error: InstallerError | None = None
    summary: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None and self.report.ok

    @property
    def failure(self) -> InstallerError | None:
        """The error that stopped the request, before or during the pipeline."""
        if self.error is not None:
            return self.error
        return self.report.error if self.report else None

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = str(self.error)
            result["error_type"] = type(self.error).__name__
        if self.plan:
            result["projects"] = self.plan.names
            result["base_dir"] = str(self.plan.base_dir)
            result["user_dir"] = str(self.plan.user_dir)
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def _choose(
    project: ProjectSpec | None,
    flag: bool | None,
    force: bool,
    prompter: Prompter,
    question: str,
) -> bool:
    """Decide whether an optional project joins the plan."""
    if project is None:
        return False
    if not project.configured:
        if flag:
            logger.warning("%s has no repository configured, skipping", project.display_name)
        return False
    if flag is not None:
        return flag
    if force:
        return True
    return prompter.confirm(question, default=False)


def select_projects(
    config: InstallerConfig,
    prompter: Prompter,
    force: bool = False,
    with_sdk: bool | None = None,
    with_registration: bool | None = None,
) -> list[ProjectSpec]:
    """Required projects plus the optional ones the operator opted into."""
    sdk = config.get(SDK)
    registration = config.get(REGISTRATION)

    chosen = {p.name for p in config.projects if p.required}
    if _choose(
        sdk, with_sdk, force, prompter,
        f"Would you like to install/build the {sdk.display_name if sdk else 'SDK'} (requires Go)?",
    ):
        chosen.add(SDK)
    if _choose(
        registration, with_registration, force, prompter,
        "Would you like to install the "
        f"{registration.display_name if registration else 'registration module'}?",
    ):
        chosen.add(REGISTRATION)

    return [p for p in config.projects if p.name in chosen]


def make_plan(
    projects: list[ProjectSpec],
    force: bool = False,
    base_dir: Path | None = None,
    user_dir: Path | None = None,
) -> InstallPlan:
    base = (base_dir or Path.cwd()).resolve()
    return InstallPlan(
        projects=tuple(projects),
        force=force,
        base_dir=base,
        user_dir=user_dir or Path.home() / USER_DIR_NAME,
    )


def describe_plan(plan: InstallPlan) -> list[str]:
    """Human-readable summary of what a run will do."""
    lines = ["Will install:"]
    for project in plan.projects:
        lines.append(f"- {project.display_name} ({project.description or project.name})")
    lines.append("")
    lines.append("Prerequisites will be checked:")
    for req in plan.requirements():
        lines.append(f"- {req}")
    return lines


def confirm_plan(plan: InstallPlan, prompter: Prompter, echo: Echo | None = None) -> None:
    """Show what the run will do and ask for the go-ahead (skipped with force).

    Raises:
        UserCancelled: The operator declined the installation.
    """
    if plan.force:
        return
    for line in describe_plan(plan):
        (echo or logger.info)(line)
    if not prompter.confirm("Continue with installation?", default=False):
        raise UserCancelled()


def run_install(
    config: InstallerConfig,
    prompter: Prompter | None = None,
    force: bool = False,
    with_sdk: bool | None = None,
    with_registration: bool | None = None,
    base_dir: Path | None = None,
    user_dir: Path | None = None,
    registry: AdapterRegistry | None = None,
    on_stage: StageCallback | None = None,
    echo: Echo | None = None,
    audit: bool = True,
) -> InstallResult:
    """Plan, confirm and run a full installation.

    A declined confirmation is recorded in the ledger as a ``cancelled``
    run that never left ``not_started``.

    Returns:
        InstallResult; ``error`` is set when the run never started.
    """
    result = InstallResult()
    if prompter is None:
        prompter = Prompter.for_force(force)

    projects = select_projects(
        config, prompter, force=force,
        with_sdk=with_sdk, with_registration=with_registration,
    )
    plan = make_plan(projects, force=force, base_dir=base_dir, user_dir=user_dir)
    result.plan = plan
    audit_writer = AuditWriter(base_dir=plan.base_dir) if audit else None

    try:
        confirm_plan(plan, prompter, echo)
    except UserCancelled as e:
        result.error = e
        if audit_writer is not None:
            declined = PipelineReport(
                operation_id=generate_operation_id(),
                state=Stage.ABORTED,
                aborted_at=Stage.NOT_STARTED,
                error=e,
            )
            write_audit_entry(declined, plan, audit_writer)
        return result

    if registry is None:
        registry = AdapterRegistry.default()

    result.report = run_pipeline(
        plan,
        registry,
        prompter=prompter,
        on_stage=on_stage,
        audit_writer=audit_writer,
    )

    if result.report.ok:
        result.summary = [
            f"  {p.display_name}: {plan.project_dir(p)}" for p in plan.projects
        ]
    return result
