"""
Operator prompts.

Every interactive decision in a run goes through a Prompter, so force
mode can answer all of them at once and tests can script them.
"""

from __future__ import annotations

import logging

import click

logger = logging.getLogger(__name__)


class Prompter:
    """Asks the operator yes/no questions on the terminal."""

    interactive = True

    def confirm(self, question: str, default: bool = False) -> bool:
        return click.confirm(question, default=default)

    @classmethod
    def for_force(cls, force: bool) -> Prompter:
        """The prompter a run should use: automatic when ``force`` is set."""
        return AutoPrompter(answer=True) if force else cls()


class AutoPrompter(Prompter):
    """Answers every question with a fixed answer, never touching stdin."""

    interactive = False

    def __init__(self, answer: bool = True):
        self.answer = answer

    def confirm(self, question: str, default: bool = False) -> bool:
        logger.info("%s -> %s (non-interactive)", question, "yes" if self.answer else "no")
        return self.answer


class ScriptedPrompter(Prompter):
    """Replays queued answers in order and records every question asked."""

    def __init__(self, answers: list[bool] | None = None):
        self.answers = list(answers or [])
        self.questions: list[str] = []

    def confirm(self, question: str, default: bool = False) -> bool:
        self.questions.append(question)
        if not self.answers:
            return default
        return self.answers.pop(0)
