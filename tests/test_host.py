"""Tests for envhide.host: documents and the manual scheduler."""

from __future__ import annotations

import os
import stat

import pytest

from envhide.host import FileDocument, ManualScheduler, MemoryDocument

# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def test_handles_are_unique():
    a = MemoryDocument("a.env")
    b = MemoryDocument("b.env")
    assert a.handle != b.handle


def test_set_lines_marks_modified_and_notifies():
    doc = MemoryDocument(".env", ["A=1"])
    seen = []
    doc.subscribe(lambda d: seen.append(d.get_lines()))
    doc.set_lines(["A=2"])
    assert doc.modified is True
    assert seen == [["A=2"]]


def test_closed_document_rejects_writes():
    doc = MemoryDocument(".env", ["A=1"])
    doc.close()
    assert not doc.is_valid()
    with pytest.raises(RuntimeError):
        doc.set_lines(["A=2"])


def test_file_document_reads_lines(tmp_path):
    f = tmp_path / ".env"
    f.write_text("# db\nDB_HOST=localhost\n\nDB_PORT=5432\n")
    doc = FileDocument(f)
    assert doc.get_lines() == ["# db", "DB_HOST=localhost", "", "DB_PORT=5432"]
    assert doc.name == str(f)
    assert doc.modified is False


def test_file_document_missing_file_is_empty(tmp_path):
    doc = FileDocument(tmp_path / "new.env")
    assert doc.get_lines() == []


def test_write_round_trip_keeps_bytes(tmp_path):
    f = tmp_path / ".env"
    original = b"A=1\r\nexport B='two'\r\n\r\n# c\r\n"
    f.write_bytes(original)
    doc = FileDocument(f)
    doc.write(doc.get_lines())
    assert f.read_bytes() == original


def test_write_without_final_newline(tmp_path):
    f = tmp_path / ".env"
    f.write_text("A=1\nB=2")
    doc = FileDocument(f)
    doc.write(doc.get_lines())
    assert f.read_text() == "A=1\nB=2"


def test_write_marks_clean(tmp_path):
    doc = FileDocument(tmp_path / ".env")
    doc.set_lines(["A=1"])
    assert doc.modified
    doc.write(doc.get_lines())
    assert not doc.modified
    assert (tmp_path / ".env").read_text() == "A=1\n"


# ---------------------------------------------------------------------------
# Security: file permissions and atomic writes
# ---------------------------------------------------------------------------


def test_new_file_gets_owner_only_permissions(tmp_path):
    f = tmp_path / ".env"
    FileDocument(f).write(["SECRET=value"])
    mode = os.stat(f).st_mode
    assert mode & stat.S_IRUSR  # owner can read
    assert mode & stat.S_IWUSR  # owner can write
    assert not (mode & stat.S_IRGRP)  # group cannot read
    assert not (mode & stat.S_IROTH)  # others cannot read


def test_existing_file_keeps_permissions(tmp_path):
    f = tmp_path / ".env"
    f.write_text("A=1\n")
    os.chmod(f, 0o640)
    FileDocument(f).write(["A=2"])
    assert stat.S_IMODE(os.stat(f).st_mode) == 0o640


def test_no_temp_file_left_on_success(tmp_path):
    f = tmp_path / ".env"
    FileDocument(f).write(["A=1"])
    leftover = list(tmp_path.glob(".*.tmp.*"))
    assert leftover == []


# ---------------------------------------------------------------------------
# ManualScheduler
# ---------------------------------------------------------------------------


def test_callbacks_wait_for_their_delay():
    scheduler = ManualScheduler()
    ran = []
    scheduler.defer(lambda: ran.append("late"), 100)
    scheduler.defer(lambda: ran.append("early"), 50)
    assert scheduler.advance(49) == 0
    assert scheduler.advance(1) == 1
    assert ran == ["early"]
    scheduler.advance(50)
    assert ran == ["early", "late"]
    assert scheduler.now == 100


def test_same_delay_runs_in_order():
    scheduler = ManualScheduler()
    ran = []
    for n in range(3):
        scheduler.defer(lambda n=n: ran.append(n), 10)
    scheduler.run_pending()
    assert ran == [0, 1, 2]


def test_run_pending_runs_newly_deferred():
    scheduler = ManualScheduler()
    ran = []
    scheduler.defer(lambda: scheduler.defer(lambda: ran.append("second"), 10), 10)
    assert scheduler.run_pending() == 2
    assert ran == ["second"]
    assert scheduler.now == 20


def test_failing_callback_does_not_stop_others(caplog):
    scheduler = ManualScheduler()
    ran = []

    def boom():
        raise RuntimeError("boom")

    scheduler.defer(boom, 1)
    scheduler.defer(lambda: ran.append("ok"), 2)
    scheduler.run_pending()
    assert ran == ["ok"]
    assert "failed" in caplog.text
