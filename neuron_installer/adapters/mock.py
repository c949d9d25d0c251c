"""
Mock adapter — stands in for git, the shell or the filesystem in tests.

Registered under a real adapter's name it records every Action a stage
issues and answers with success, or with a failure scripted per action
id (``"install:sdk"``), without running anything. A side effect can
reproduce what the real tool would leave on disk, such as the checkout
a clone creates.
"""

from __future__ import annotations

from typing import Callable

from neuron_installer.adapters.base import Adapter, ExecutionContext
from neuron_installer.core.models.action import Receipt

SideEffect = Callable[[ExecutionContext], None]


class MockAdapter(Adapter):
    """Records calls; succeeds unless told otherwise."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
        side_effect: SideEffect | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._side_effect = side_effect
        self._scripted: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    def calls_for_stage(self, stage: str) -> list[ExecutionContext]:
        """Calls issued by one pipeline stage (``"install"``, ``"build"``...)."""
        return [c for c in self.call_log if c.action.stage == stage]

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._scripted[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure", exit_code: int = 1) -> None:
        """Make ``action_id`` fail as a process exiting with ``exit_code`` would."""
        self.set_response(
            action_id,
            Receipt.failure(adapter=self._name, action_id=action_id, error=error, exit_code=exit_code),
        )

    def reset(self) -> None:
        self.call_log.clear()
        self._scripted.clear()

    def is_available(self) -> bool:
        return self._available

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        action_id = context.action.id

        scripted = self._scripted.get(action_id)
        if scripted is not None:
            return scripted

        if self._side_effect is not None:
            self._side_effect(context)
        return Receipt.success(
            adapter=self._name,
            action_id=action_id,
            output=self._default_output,
            exit_code=0,
            metadata={"mock": True},
        )
