"""
layout/worker.py

Timer-driven runner that spreads the auto-layout iterations across event
loop ticks so the window stays responsive on large diagrams.
The result is only published once the full iteration budget has run.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from debug_trace import trace
from layout.simulator import Sizes, iter_layout
from models import Relationship, Snapshot
from settings import LayoutSettings


class LayoutRunner(QObject):
    """
    Advances the layout simulation a few iterations per timer tick.

    Signals:
        progress(int, int): Emitted with iterations done and the total
        finished(object): Emitted with the final snapshot dict
    """

    progress = pyqtSignal(int, int)
    # object: tuple positions must survive the signal unconverted
    finished = pyqtSignal(object)

    def __init__(self, snapshot: Snapshot, relationships: Iterable[Relationship],
                 params: LayoutSettings, sizes: Optional[Sizes] = None, parent=None):
        """
        Initialize the layout runner.

        Args:
            snapshot: Starting positions
            relationships: Springs between entities
            params: Force constants, iteration count and steps per tick
            sizes: Entity box sizes so forces act between centers
        """
        super().__init__(parent)
        self.total = max(0, params.iterations)
        self.steps_per_tick = max(1, params.steps_per_tick)
        self._steps: Iterator[Snapshot] = iter_layout(snapshot, list(relationships), params, sizes)
        self._result: Snapshot = dict(snapshot)
        self._done = 0
        self._timer = QTimer(self)
        self._timer.setInterval(0)
        self._timer.timeout.connect(self._tick)

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self):
        """Begin stepping on the next event loop iteration."""
        trace(f"Layout runner: {self.total} iterations, {self.steps_per_tick} per tick", "LAYOUT")
        self._timer.start()

    def stop(self):
        """Abandon the run without emitting finished."""
        self._timer.stop()

    def _tick(self):
        exhausted = False
        for _ in range(self.steps_per_tick):
            step = next(self._steps, None)
            if step is None:
                exhausted = True
                break
            self._result = step
            self._done += 1
        self.progress.emit(self._done, self.total)
        if exhausted or self._done >= self.total:
            self._finish()

    def _finish(self):
        self._timer.stop()
        trace(f"Layout runner finished after {self._done} iterations", "LAYOUT")
        self.finished.emit(self._result)
