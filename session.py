"""
session.py

Per-diagram context owned by the hosting window: the diagram, its
viewport, history and gesture controller. Loading a diagram resets all of
them together.
"""

from __future__ import annotations

from typing import Optional

from debug_trace import trace
from export import ExportWorker
from history import HistoryManager
from interaction import InteractionController
from layout.simulator import Sizes, run_layout
from models import Diagram, Snapshot
from settings import AppSettings
from viewport import Viewport


class DiagramSession:
    """Everything the canvas needs for one loaded diagram.

    Args:
        settings: Application settings (defaults when None).
        diagram: Initial diagram; an empty one when None.
    """

    def __init__(self, settings: Optional[AppSettings] = None, diagram: Optional[Diagram] = None):
        self.settings = settings or AppSettings()
        zoom = self.settings.canvas.zoom
        self.diagram = Diagram()
        self.viewport = Viewport.from_settings(zoom)
        self.history = HistoryManager(self.settings.history.limit, self.diagram)
        self.controller = InteractionController(
            self.diagram, self.viewport, self.history, zoom.wheel_sensitivity
        )
        if diagram is not None:
            self.load(diagram)

    def load(self, diagram: Diagram) -> None:
        """Replace the diagram and reset viewport, history and gestures."""
        self.diagram = diagram
        self.viewport.reset()
        self.history.clear()
        self.history.diagram = diagram
        self.controller.reset(diagram)
        if len(diagram):
            self.history.push(diagram.snapshot())
        trace(f"Loaded diagram: {len(diagram)} entities, "
              f"{len(diagram.relationships)} relationships", "SESSION")

    # ----------------------------
    # History
    # ----------------------------

    def undo(self) -> bool:
        """Restore the previous positions; False at the start of history."""
        return self.history.undo() is not None

    def redo(self) -> bool:
        return self.history.redo() is not None

    # ----------------------------
    # Layout
    # ----------------------------

    def entity_sizes(self) -> Sizes:
        return {ent.id: (ent.width, ent.height) for ent in self.diagram}

    def auto_layout(self, container_w: float = 0.0, container_h: float = 0.0) -> Snapshot:
        """Run the full simulation synchronously and apply it."""
        result = run_layout(self.diagram.snapshot(), self.diagram.relationships,
                            self.settings.layout, self.entity_sizes())
        self.apply_layout(result, container_w, container_h)
        return result

    def apply_layout(self, snapshot: Snapshot, container_w: float = 0.0,
                     container_h: float = 0.0) -> None:
        """Replace all positions with a layout result as one history entry."""
        self.diagram.apply_snapshot(snapshot)
        self.history.push(self.diagram.snapshot(), "Auto layout")
        self.fit(container_w, container_h)
        trace(f"Layout applied (history {self.history.index})", "LAYOUT")

    # ----------------------------
    # Viewport
    # ----------------------------

    def fit(self, container_w: float, container_h: float) -> None:
        """Center the whole diagram in a container of the given size."""
        zoom = self.settings.canvas.zoom
        fitted = self.viewport.fit_to_content(
            self.diagram.bounds(), container_w, container_h,
            padding=zoom.fit_padding, max_scale=zoom.fit_max_scale,
        )
        self.viewport.assign(fitted)

    # ----------------------------
    # Export
    # ----------------------------

    def export_worker(self, directory) -> Optional[ExportWorker]:
        """Worker that writes the current diagram image into *directory*.

        The worker gets its own copy of the diagram, so it can run on another
        thread while entities keep moving. None when there is nothing to export.
        """
        if len(self.diagram) == 0:
            return None
        exp = self.settings.export
        return ExportWorker(
            self.diagram.copy(), directory,
            margin=exp.margin, scale=exp.scale, prefix=exp.file_prefix,
            ext=exp.format, edge_style=self.settings.canvas.edge_style,
        )
