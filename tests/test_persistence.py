"""
Tests for persistence — the audit ledger.
"""

import json
from pathlib import Path

from neuron_installer.core.persistence.audit import AuditEntry, AuditWriter


class TestAuditWriter:
    """Tests for the append-only audit ledger."""

    def test_default_location(self, tmp_path: Path):
        writer = AuditWriter(base_dir=tmp_path)
        assert writer.path == tmp_path / ".state" / "audit.ndjson"

    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(base_dir=tmp_path)
        writer.write(AuditEntry(operation_id="install-1", status="ok", projects=["builder"]))

        entries = writer.read_all()
        assert len(entries) == 1
        assert entries[0].operation_id == "install-1"
        assert entries[0].projects == ["builder"]

    def test_append_only(self, tmp_path: Path):
        writer = AuditWriter(path=tmp_path / "audit.ndjson")
        for i in range(3):
            writer.write(AuditEntry(operation_id=f"install-{i}"))
        assert writer.entry_count() == 3
        assert [e.operation_id for e in writer.read_all()] == ["install-0", "install-1", "install-2"]

    def test_ndjson_format(self, tmp_path: Path):
        writer = AuditWriter(path=tmp_path / "audit.ndjson")
        writer.write(AuditEntry(operation_id="install-1", aborted_at="fetching"))
        writer.write(AuditEntry(operation_id="install-2"))

        lines = writer.path.read_text().strip().split("\n")
        assert len(lines) == 2
        assert json.loads(lines[0])["aborted_at"] == "fetching"

    def test_read_recent(self, tmp_path: Path):
        writer = AuditWriter(path=tmp_path / "audit.ndjson")
        for i in range(10):
            writer.write(AuditEntry(operation_id=f"install-{i}"))

        recent = writer.read_recent(3)
        assert [e.operation_id for e in recent] == ["install-7", "install-8", "install-9"]
        assert writer.read_recent(0) == []

    def test_missing_ledger(self, tmp_path: Path):
        writer = AuditWriter(base_dir=tmp_path)
        assert writer.read_all() == []
        assert writer.entry_count() == 0

    def test_corrupt_line_skipped(self, tmp_path: Path):
        writer = AuditWriter(path=tmp_path / "audit.ndjson")
        writer.write(AuditEntry(operation_id="good-1"))
        with writer.path.open("a") as f:
            f.write("{not json\n")
        writer.write(AuditEntry(operation_id="good-2"))

        assert [e.operation_id for e in writer.read_all()] == ["good-1", "good-2"]

    def test_unwritable_ledger_is_not_fatal(self, tmp_path: Path):
        blocker = tmp_path / ".state"
        blocker.write_text("a file where the directory should be")
        writer = AuditWriter(base_dir=tmp_path)

        writer.write(AuditEntry(operation_id="install-1"))

        assert writer.entry_count() == 0
