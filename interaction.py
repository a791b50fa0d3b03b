"""
interaction.py

Pointer gesture state machine for the diagram canvas.

Only one gesture is active at a time:
- Press on an entity drags that entity (screen delta / scale in world units)
- Press on empty canvas pans the viewport
- Release or leaving the canvas ends the gesture; a finished entity drag
  records one history snapshot
- The wheel zooms regardless of the current gesture
"""

from __future__ import annotations

from typing import Callable, Optional

from debug_trace import trace
from history import HistoryManager
from models import Diagram
from viewport import Viewport

WHEEL_SENSITIVITY = 0.001


class InteractionState:
    """Gesture state constants."""
    IDLE = "idle"
    PANNING = "panning"
    DRAGGING = "dragging"


class InteractionController:
    """Consumes pointer events and mutates the viewport and entity positions.

    Args:
        diagram: Diagram whose entities are dragged.
        viewport: Camera that is panned and zoomed.
        history: Receives a snapshot at the end of each entity drag.
        wheel_sensitivity: Scale change per wheel delta unit.
    """

    def __init__(self, diagram: Diagram, viewport: Viewport, history: HistoryManager,
                 wheel_sensitivity: float = WHEEL_SENSITIVITY):
        self.diagram = diagram
        self.viewport = viewport
        self.history = history
        self.wheel_sensitivity = wheel_sensitivity
        self.state = InteractionState.IDLE
        self.dragging_id: Optional[str] = None
        self._last: Optional[tuple] = None
        self._origin: Optional[tuple] = None
        self._moved = False
        self._locked = False
        self._on_changed: Optional[Callable[[], None]] = None
        self._hit_test: Optional[Callable[[float, float], Optional[str]]] = None

    def set_on_changed(self, callback: Optional[Callable[[], None]]):
        """Set callback for any change that needs a repaint."""
        self._on_changed = callback

    def set_hit_test(self, callback: Optional[Callable[[float, float], Optional[str]]]):
        """Set the screen-space entity lookup (the canvas uses its item index).

        Without one, entities are hit-tested against their world rectangles.
        """
        self._hit_test = callback

    @property
    def locked(self) -> bool:
        return self._locked

    def set_locked(self, locked: bool) -> None:
        """Block new gestures while auto-layout output is pending.

        Locking cancels a gesture in progress without recording history; a
        dragged entity goes back to where the drag started.
        """
        self._locked = locked
        if locked and self.state != InteractionState.IDLE:
            if self.state == InteractionState.DRAGGING and self._moved:
                entity = self.diagram.get(self.dragging_id)
                if entity is not None:
                    entity.x, entity.y = self._origin
                trace(f"Drag cancelled: {self.dragging_id}", "GESTURE")
            self._reset()
            self._notify()

    def reset(self, diagram: Optional[Diagram] = None) -> None:
        """Drop any gesture; optionally switch to a freshly loaded diagram."""
        if diagram is not None:
            self.diagram = diagram
        self._locked = False
        self._reset()

    # ----------------------------
    # Pointer events (screen coordinates)
    # ----------------------------

    def pointer_down(self, sx: float, sy: float) -> bool:
        """Start a drag or pan gesture.

        Returns:
            True if a gesture started. A press while another gesture is
            active, or while locked, is ignored.
        """
        if self._locked or self.state != InteractionState.IDLE:
            return False

        if self._hit_test is not None:
            hit_id = self._hit_test(sx, sy)
            hit = self.diagram.get(hit_id) if hit_id is not None else None
        else:
            hit = self.diagram.entity_at(*self.viewport.screen_to_world(sx, sy))
        if hit is not None:
            self.state = InteractionState.DRAGGING
            self.dragging_id = hit.id
            self._origin = (hit.x, hit.y)
            trace(f"Drag start: {hit.id}", "GESTURE")
        else:
            self.state = InteractionState.PANNING
            trace("Pan start", "GESTURE")
        self._last = (sx, sy)
        self._moved = False
        self._notify()
        return True

    def pointer_move(self, sx: float, sy: float) -> bool:
        """Apply the delta since the previous pointer position.

        Returns:
            True if the viewport or an entity moved.
        """
        if self.state == InteractionState.IDLE or self._last is None:
            return False

        dx = sx - self._last[0]
        dy = sy - self._last[1]
        self._last = (sx, sy)
        if dx == 0 and dy == 0:
            return False

        if self.state == InteractionState.PANNING:
            self.viewport.pan_by(dx, dy)
        else:
            entity = self.diagram.get(self.dragging_id)
            if entity is None:
                return False
            wdx, wdy = self.viewport.screen_delta_to_world(dx, dy)
            entity.move_by(wdx, wdy)
            self._moved = True
        self._notify()
        return True

    def pointer_up(self) -> bool:
        """End the gesture; commits an entity drag to history.

        Returns:
            True if a history entry was recorded.
        """
        committed = False
        if self.state == InteractionState.DRAGGING and self._moved:
            self.history.push(self.diagram.snapshot(), f"Move {self.dragging_id}")
            committed = True
            trace(f"Drag end: {self.dragging_id} (history {self.history.index})", "GESTURE")
        was_active = self.state != InteractionState.IDLE
        self._reset()
        if was_active:
            self._notify()
        return committed

    def pointer_leave(self) -> bool:
        """Pointer left the canvas: treated as a release so no drag sticks."""
        return self.pointer_up()

    def wheel(self, delta_y: float) -> None:
        """Zoom by ``-delta_y * wheel_sensitivity``; positive delta_y zooms out."""
        self.viewport.zoom_by(-delta_y * self.wheel_sensitivity)
        self._notify()

    def _reset(self) -> None:
        self.state = InteractionState.IDLE
        self.dragging_id = None
        self._last = None
        self._origin = None
        self._moved = False

    def _notify(self) -> None:
        if self._on_changed is not None:
            self._on_changed()
