"""
Action and Receipt models — what a stage asks for and what it gets back.

Stages never touch git, npm, go or the link machinery directly: they build
an Action, hand it to the adapter registry, and get a Receipt back.
Adapters never raise — a failed clone or a non-zero ``npm install`` is a
Receipt with status ``failed`` and the process exit code attached.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class Action(BaseModel):
    """One external operation issued by a pipeline stage."""

    id: str                          # "<stage>:<project>", e.g. "install:sdk"
    adapter: str                     # "git", "shell" or "filesystem"
    stage: str = ""
    for_project: str | None = None   # None for installer-wide actions
    name: str = ""                   # shown in logs, usually the command line
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Outcome of one Action."""

    adapter: str
    action_id: str
    status: Literal["ok", "failed"] = "ok"
    exit_code: int | None = None     # None when no process ran
    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    finished_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)
