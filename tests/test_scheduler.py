import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from PySide6.QtTest import QTest

from linked_notes.services.scheduler import DebouncedTask


def _task(calls, interval_ms=30):
    return DebouncedTask(interval_ms=interval_ms, callback=calls.append, name="test")


def test_burst_coalesces_into_one_run(qapp):
    calls = []
    task = _task(calls)
    for _ in range(5):
        task.schedule("note-a")
        QTest.qWait(5)
    assert calls == []
    QTest.qWait(150)
    assert calls == ["note-a"]
    assert not task.is_pending


def test_new_key_replaces_pending_run(qapp):
    calls = []
    task = _task(calls)
    task.schedule("note-a")
    task.schedule("note-b")
    assert task.pending_key == "note-b"
    QTest.qWait(150)
    assert calls == ["note-b"]


def test_cancel(qapp):
    calls = []
    task = _task(calls)
    task.schedule("note-a")
    task.cancel()
    QTest.qWait(150)
    assert calls == []
    assert task.pending_key is None


def test_flush_runs_now(qapp):
    calls = []
    task = _task(calls, interval_ms=10_000)
    assert not task.flush()
    task.schedule("note-a")
    assert task.flush()
    assert calls == ["note-a"]
    QTest.qWait(50)
    assert calls == ["note-a"]


def test_interval(qapp):
    assert _task([], interval_ms=400).interval_ms == 400
