"""
Adapter base — the seam between pipeline stages and external tools.

Stages reach git, the shell and the link machinery only through this
interface, so tests can register a ``MockAdapter`` under the same name
and count exactly which commands a run issued.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from neuron_installer.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """An Action plus where it runs."""

    action: Action
    base_dir: str = "."                 # directory the repositories are cloned into
    project_dir: str | None = None      # checkout the action targets, if any
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str:
        """An explicit ``cwd`` param, else the project checkout, else the base dir."""
        return str(self.action.params.get("cwd") or self.project_dir or self.base_dir)


class Adapter(ABC):
    """A tool binding. Implementations report failure in the Receipt, never by raising."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key: 'git', 'shell' or 'filesystem'."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be used on this host."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action's params. Returns ``(ok, reason)``."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
