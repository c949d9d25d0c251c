"""
.env file editing — line-preserving key upserts.

Handles:
- KEY=value
- KEY="value" / KEY='value' (quotes stripped on read)
- export KEY=value
- Comments (#) and blank lines, kept verbatim
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

UpsertResult = Literal["added", "updated", "unchanged"]


def _split_assignment(line: str) -> tuple[str, str] | None:
    """``(key, raw value)`` for an assignment line, ``None`` otherwise."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    if stripped.startswith("export "):
        stripped = stripped[7:].strip()
    if "=" not in stripped:
        return None
    key, _, value = stripped.partition("=")
    return key.strip(), value.strip()


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


class EnvFile:
    """An ordered ``KEY=value`` file that can be edited without reflowing it."""

    def __init__(self, path: Path, lines: list[str] | None = None):
        self.path = path
        self.lines: list[str] = lines if lines is not None else []

    @classmethod
    def load(cls, path: Path) -> EnvFile:
        """Read ``path``; a missing file loads as empty."""
        if not path.is_file():
            return cls(path)
        return cls(path, path.read_text(encoding="utf-8").splitlines())

    def _find(self, key: str) -> int | None:
        for i, line in enumerate(self.lines):
            parsed = _split_assignment(line)
            if parsed and parsed[0] == key:
                return i
        return None

    def __contains__(self, key: str) -> bool:
        return self._find(key) is not None

    def get(self, key: str, default: str | None = None) -> str | None:
        index = self._find(key)
        if index is None:
            return default
        parsed = _split_assignment(self.lines[index])
        return _unquote(parsed[1]) if parsed else default

    def keys(self) -> list[str]:
        result = []
        for line in self.lines:
            parsed = _split_assignment(line)
            if parsed:
                result.append(parsed[0])
        return result

    def to_dict(self) -> dict[str, str]:
        values: dict[str, str] = {}
        for line in self.lines:
            parsed = _split_assignment(line)
            if parsed:
                values[parsed[0]] = _unquote(parsed[1])
        return values

    def upsert(self, key: str, value: str) -> UpsertResult:
        """Replace the first ``KEY=`` line in place, or append one.

        Returns:
            'updated', 'added' or 'unchanged'.
        """
        new_line = f"{key}={value}"
        index = self._find(key)
        if index is None:
            self.lines.append(new_line)
            return "added"
        if self.lines[index] == new_line:
            return "unchanged"
        self.lines[index] = new_line
        return "updated"

    def render(self) -> str:
        """File content with a trailing newline."""
        final = "\n".join(self.lines)
        if not final.endswith("\n"):
            final += "\n"
        return final

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.render(), encoding="utf-8")
        logger.debug("Wrote %d lines to %s", len(self.lines), self.path)


def upsert_env_value(path: Path, key: str, value: str) -> UpsertResult:
    """Upsert one key into the .env file at ``path`` and save it."""
    env = EnvFile.load(path)
    result = env.upsert(key, value)
    if result != "unchanged":
        env.save()
    return result
