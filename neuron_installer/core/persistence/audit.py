"""
Install history — one NDJSON line per installer run.

The ledger lives at ``<base_dir>/.state/audit.ndjson`` next to the
checkouts it describes, so ``neuron-installer history --dir <base_dir>``
finds it without any global state. Lines are only ever appended.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

STATE_DIR = ".state"
LEDGER_NAME = "audit.ndjson"


def _now() -> str:
    return datetime.now(UTC).isoformat()


class AuditEntry(BaseModel):
    """Outcome of a single ``run_pipeline`` call."""

    timestamp: str = Field(default_factory=_now)
    operation_id: str = ""
    projects: list[str] = Field(default_factory=list)    # plan order
    force: bool = False
    status: str = ""            # ok | failed | cancelled
    stage: str = ""             # PipelineState the run ended in
    aborted_at: str = ""        # state that raised, empty on success
    actions_total: int = 0      # receipts produced (clone + install)
    actions_failed: int = 0
    duration_ms: int = 0
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


class AuditWriter:
    """Appends runs to, and reads them back from, one ledger file."""

    def __init__(self, path: Path | None = None, base_dir: Path | None = None):
        root = base_dir if base_dir is not None else Path(".")
        self._path = path if path is not None else root / STATE_DIR / LEDGER_NAME

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append ``entry``. An unwritable ledger is logged; the run already happened."""
        record = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as ledger:
                ledger.write(record + "\n")
        except OSError as e:
            logger.error("Could not record run %s in %s: %s", entry.operation_id, self._path, e)
            return
        logger.debug("Recorded run %s (%s)", entry.operation_id, entry.status)

    def _lines(self) -> Iterator[tuple[int, str]]:
        if not self._path.is_file():
            return
        try:
            with self._path.open(encoding="utf-8") as ledger:
                for number, raw in enumerate(ledger, start=1):
                    if raw.strip():
                        yield number, raw
        except OSError as e:
            logger.error("Could not read %s: %s", self._path, e)

    def read_all(self) -> list[AuditEntry]:
        """Every recorded run, oldest first. Unparseable lines are skipped."""
        entries: list[AuditEntry] = []
        for number, raw in self._lines():
            try:
                entries.append(AuditEntry.model_validate_json(raw))
            except ValidationError as e:
                logger.warning("%s line %d is not a run record: %s", self._path.name, number, e)
        return entries

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        return self.read_all()[-n:] if n > 0 else []

    def entry_count(self) -> int:
        return sum(1 for _ in self._lines())
