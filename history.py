"""
history.py

Bounded undo/redo history of entity position snapshots, kept on a
QUndoStack.
"""

from __future__ import annotations

from typing import List, Optional

from PyQt6.QtGui import QUndoCommand, QUndoStack

from models import Diagram, Snapshot

DEFAULT_LIMIT = 20


def copy_snapshot(snapshot: Snapshot) -> Snapshot:
    """Deep copy of a snapshot (positions are stored as fresh tuples)."""
    return {entity_id: (float(x), float(y)) for entity_id, (x, y) in snapshot.items()}


class SnapshotCommand(QUndoCommand):
    """Command that switches every entity position between two snapshots."""

    def __init__(self, diagram: Optional[Diagram], before: Snapshot, after: Snapshot,
                 text: str = "Move", parent=None):
        super().__init__(parent)
        self.diagram = diagram
        self.before = copy_snapshot(before)
        self.after = copy_snapshot(after)
        self.setText(text)
        # The diagram already shows ``after`` when the command is pushed
        self._first_redo = True

    def undo(self):
        self._apply(self.before)

    def redo(self):
        if self._first_redo:
            self._first_redo = False
            return
        self._apply(self.after)

    def _apply(self, snapshot: Snapshot) -> None:
        if self.diagram is not None:
            self.diagram.apply_snapshot(snapshot)


class HistoryManager:
    """Linear history of snapshots with a cursor.

    The first snapshot pushed is the base state. Every later push becomes a
    SnapshotCommand from the current state to the new one, so entry ``i`` is
    the state after ``i`` commands and ``index`` is the stack index (-1 only
    when empty). The stack drops the redo branch on push and, through
    ``setUndoLimit``, evicts the oldest commands once ``limit`` snapshots
    are exceeded.

    Args:
        limit: Maximum number of snapshots kept (at least 1).
        diagram: Diagram that undo/redo write positions into.
        parent: Optional QObject parent for the stack.

    Attributes:
        stack: The QUndoStack; connect to its ``canUndoChanged`` and
            ``canRedoChanged`` signals to follow availability.
    """

    def __init__(self, limit: int = DEFAULT_LIMIT, diagram: Optional[Diagram] = None, parent=None):
        self.limit = max(1, int(limit))
        self.diagram = diagram
        self.stack = QUndoStack(parent)
        # An undo limit of 0 means unlimited; a single slot never keeps a command
        if self.limit > 1:
            self.stack.setUndoLimit(self.limit - 1)
        self._base: Optional[Snapshot] = None

    def __len__(self) -> int:
        if self._base is None:
            return 0
        return self.stack.count() + 1

    @property
    def index(self) -> int:
        if self._base is None:
            return -1
        return self.stack.index()

    @property
    def entries(self) -> List[Snapshot]:
        """Copies of all stored snapshots, oldest first."""
        if self._base is None:
            return []
        commands = self._commands()
        first = commands[0].before if commands else self._base
        return [copy_snapshot(first)] + [copy_snapshot(cmd.after) for cmd in commands]

    @property
    def can_undo(self) -> bool:
        return self.stack.canUndo()

    @property
    def can_redo(self) -> bool:
        return self.stack.canRedo()

    def clear(self) -> None:
        self.stack.clear()
        self._base = None

    def push(self, snapshot: Snapshot, text: str = "Move") -> None:
        """Record *snapshot* as the new current state."""
        if self._base is None or self.limit == 1:
            self.stack.clear()
            self._base = copy_snapshot(snapshot)
            return
        self.stack.push(SnapshotCommand(self.diagram, self._at_cursor(), snapshot, text))

    def undo(self) -> Optional[Snapshot]:
        """Step back; returns the restored snapshot or None at the start."""
        if not self.stack.canUndo():
            return None
        self.stack.undo()
        return self.current()

    def redo(self) -> Optional[Snapshot]:
        """Step forward; returns the restored snapshot or None at the end."""
        if not self.stack.canRedo():
            return None
        self.stack.redo()
        return self.current()

    def current(self) -> Optional[Snapshot]:
        if self._base is None:
            return None
        return copy_snapshot(self._at_cursor())

    def _commands(self) -> List[SnapshotCommand]:
        return [self.stack.command(i) for i in range(self.stack.count())]

    def _at_cursor(self) -> Snapshot:
        idx = self.stack.index()
        if idx > 0:
            return self.stack.command(idx - 1).after
        if self.stack.count():
            return self.stack.command(0).before
        return self._base
