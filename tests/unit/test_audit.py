"""Unit tests for the audit log."""

import json
from pathlib import Path

from shipitctl.core.audit import AuditEventType, AuditLogger, AuditResult


def read_events(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_writes_json_lines(self, tmp_path):
        log_path = tmp_path / "state" / "audit.log"
        audit = AuditLogger(log_path=log_path)

        audit.log_session_start("stop", Path("servers.list"))
        audit.log_host("stop", "web1", "2201", 0)
        audit.log_host("stop", "web2", "2202", 255)
        audit.log_session_end("stop", succeeded=1, failed=1)

        events = read_events(log_path)
        assert [e["event_type"] for e in events] == [
            AuditEventType.SESSION_START.value,
            AuditEventType.HOST_DISPATCH.value,
            AuditEventType.HOST_DISPATCH.value,
            AuditEventType.SESSION_END.value,
        ]
        assert events[1]["target"] == {"hostname": "web1", "port": "2201"}
        assert events[1]["result"] == AuditResult.SUCCESS.value
        assert events[2]["result"] == AuditResult.FAILURE.value
        assert events[2]["return_code"] == 255
        assert events[3]["result"] == AuditResult.PARTIAL.value

    def test_session_id_shared(self, tmp_path):
        log_path = tmp_path / "audit.log"
        audit = AuditLogger(log_path=log_path)

        audit.log_host("stop", "a", "1", 0)
        audit.log_host("stop", "b", "2", 0)

        ids = {e["session_id"] for e in read_events(log_path)}
        assert ids == {audit.session_id}

    def test_dry_run_result(self, tmp_path):
        log_path = tmp_path / "audit.log"
        AuditLogger(log_path=log_path).log_host("restart", "a", "1", 0, dry_run=True)
        assert read_events(log_path)[0]["result"] == "dry_run"

    def test_session_end_results(self, tmp_path):
        log_path = tmp_path / "audit.log"
        audit = AuditLogger(log_path=log_path)

        audit.log_session_end("stop", succeeded=2, failed=0)
        audit.log_session_end("stop", succeeded=0, failed=2)

        assert [e["result"] for e in read_events(log_path)] == ["success", "failure"]

    def test_disabled(self, tmp_path):
        log_path = tmp_path / "audit.log"
        AuditLogger(log_path=log_path, enabled=False).log_host("stop", "a", "1", 0)
        assert not log_path.exists()

    def test_unwritable_location_is_ignored(self, tmp_path):
        """An audit failure never raises."""
        blocker = tmp_path / "file"
        blocker.write_text("")
        audit = AuditLogger(log_path=blocker / "audit.log")

        audit.log_host("stop", "a", "1", 0)

    def test_rotation(self, tmp_path):
        log_path = tmp_path / "audit.log"
        audit = AuditLogger(log_path=log_path, max_size_mb=0, backup_count=2)

        audit.log_host("stop", "a", "1", 0)
        audit.log_host("stop", "b", "2", 0)
        audit.log_host("stop", "c", "3", 0)

        assert (tmp_path / "audit.log.1").exists()
        assert (tmp_path / "audit.log.2").exists()
        assert not (tmp_path / "audit.log.3").exists()
        assert log_path.read_text() == ""

    def test_expands_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        audit = AuditLogger(log_path=Path("~/audit.log"))
        assert audit.log_path == tmp_path / "audit.log"
