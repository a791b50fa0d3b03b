"""
tests/test_history.py

Bounded undo/redo history of position snapshots on a QUndoStack.
"""

from __future__ import annotations

import pytest

from history import HistoryManager, SnapshotCommand
from models import Diagram, Entity


def _snap(n: float):
    return {"a": (n, n)}


@pytest.fixture(autouse=True)
def _app(qapp):
    yield


class TestHistoryManager:
    def test_empty(self):
        h = HistoryManager()
        assert h.index == -1
        assert len(h) == 0
        assert not h.can_undo
        assert not h.can_redo
        assert h.undo() is None
        assert h.redo() is None
        assert h.current() is None

    def test_push_moves_cursor_to_tail(self):
        h = HistoryManager()
        for i in range(3):
            h.push(_snap(i))
        assert h.index == 2
        assert h.current() == _snap(2)

    def test_undo_redo(self):
        h = HistoryManager()
        for i in range(3):
            h.push(_snap(i))
        assert h.undo() == _snap(1)
        assert h.undo() == _snap(0)
        assert h.undo() is None
        assert h.index == 0
        assert h.redo() == _snap(1)
        assert h.redo() == _snap(2)
        assert h.redo() is None

    def test_push_discards_redo_branch(self):
        h = HistoryManager()
        for i in range(3):
            h.push(_snap(i))
        h.undo()
        h.undo()
        h.push(_snap(9))
        assert len(h) == 2
        assert not h.can_redo
        assert h.entries == [_snap(0), _snap(9)]

    def test_limit_evicts_oldest(self):
        h = HistoryManager(limit=20)
        for i in range(25):
            h.push(_snap(i))
        assert len(h) == 20
        assert h.index == 19
        assert h.entries[0] == _snap(5)
        assert h.current() == _snap(24)

    def test_recent_entries_reachable_by_undo(self):
        h = HistoryManager(limit=5)
        for i in range(12):
            h.push(_snap(i))
        seen = [h.current()]
        while h.can_undo:
            seen.append(h.undo())
        assert seen == [_snap(i) for i in range(11, 6, -1)]

    def test_limit_after_undo(self):
        h = HistoryManager(limit=3)
        for i in range(3):
            h.push(_snap(i))
        h.undo()
        h.push(_snap(7))
        h.push(_snap(8))
        assert h.entries == [_snap(1), _snap(7), _snap(8)]
        assert h.index == 2

    def test_snapshots_are_copies(self):
        h = HistoryManager()
        snap = {"a": (1.0, 2.0)}
        h.push(snap)
        snap["a"] = (5.0, 5.0)
        assert h.current() == {"a": (1.0, 2.0)}
        returned = h.current()
        returned["b"] = (0.0, 0.0)
        assert "b" not in h.current()

    def test_single_slot_keeps_latest(self):
        h = HistoryManager(limit=1)
        h.push(_snap(0))
        h.push(_snap(1))
        assert len(h) == 1
        assert h.current() == _snap(1)
        assert not h.can_undo

    def test_commands_on_stack(self):
        h = HistoryManager()
        h.push(_snap(0))
        h.push(_snap(1), "Move a")
        assert h.stack.count() == 1
        assert h.stack.undoText() == "Move a"

    def test_stack_limit_follows_history_limit(self):
        assert HistoryManager(limit=5).stack.undoLimit() == 4

    def test_clear(self):
        h = HistoryManager()
        h.push(_snap(0))
        h.push(_snap(1))
        h.clear()
        assert h.index == -1
        assert h.stack.count() == 0


class TestStackSignals:
    def test_can_undo_and_redo_follow_cursor(self):
        can_undo, can_redo = [], []
        h = HistoryManager()
        h.stack.canUndoChanged.connect(can_undo.append)
        h.stack.canRedoChanged.connect(can_redo.append)
        h.push(_snap(0))
        h.push(_snap(1))
        assert can_undo[-1] is True
        h.undo()
        assert can_undo[-1] is False
        assert can_redo[-1] is True
        h.redo()
        assert can_redo[-1] is False


class TestDiagramBinding:
    def _diagram(self):
        return Diagram([Entity("a", "A", x=0, y=0)])

    def test_undo_and_redo_move_entities(self):
        d = self._diagram()
        h = HistoryManager(diagram=d)
        h.push(d.snapshot())
        d.get("a").move_by(30, 40)
        h.push(d.snapshot())
        # Pushing leaves the diagram where it is
        assert d.snapshot() == {"a": (30.0, 40.0)}
        h.undo()
        assert d.snapshot() == {"a": (0.0, 0.0)}
        h.redo()
        assert d.snapshot() == {"a": (30.0, 40.0)}

    def test_command_swaps_snapshots(self):
        d = self._diagram()
        cmd = SnapshotCommand(d, {"a": (0, 0)}, {"a": (5, 5)})
        cmd.redo()
        assert d.snapshot() == {"a": (0.0, 0.0)}
        cmd.redo()
        assert d.snapshot() == {"a": (5.0, 5.0)}
        cmd.undo()
        assert d.snapshot() == {"a": (0.0, 0.0)}
