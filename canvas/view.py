"""
canvas/view.py

QGraphicsView for one diagram session: shows the scene through the
session's viewport and forwards pointer input to the interaction
controller.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, QSize, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QPainter, QTransform
from PyQt6.QtWidgets import QFrame, QGraphicsView, QSizePolicy

from canvas.items import EntityItem, paint_grid
from canvas.minimap import MiniMap
from canvas.scene import DiagramScene
from debug_trace import trace
from interaction import InteractionState
from session import DiagramSession
from styles import DEFAULT_STYLE, canvas_colors

MINIMAP_MARGIN = 16


class DiagramView(QGraphicsView):
    """
    Pan/zoom canvas for one DiagramSession.

    Interaction:
    - Left-drag on an entity moves it; on empty canvas pans the view
    - Mouse wheel zooms (scale is clamped to the configured bounds)
    - Leaving the widget ends any gesture in progress

    The session's Viewport is the only camera state. ``refresh()`` copies
    its scale into the view transform and its pan into the view's scene
    rect; QGraphicsView folds translation into its scroll offset, so a
    translated transform alone would not move the content.

    Signals:
        view_changed(): Emitted after anything that changes what is shown
    """

    view_changed = pyqtSignal()

    def __init__(self, session: DiagramSession, theme: str = DEFAULT_STYLE, parent=None):
        super().__init__(parent)
        self.session = session
        self.colors = canvas_colors(theme)
        self.diagram_scene = DiagramScene(self.colors, session.settings.canvas.edge_style, self)
        self.setScene(self.diagram_scene)

        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        # The dot grid is drawn in screen space and moves with every pan
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setInteractive(False)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(320, 240)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.viewport().setCursor(Qt.CursorShape.OpenHandCursor)

        session.controller.set_on_changed(self.refresh)
        session.controller.set_hit_test(self.entity_id_at)

        # Overview overlay, kept in the bottom-right corner by resizeEvent
        self.minimap = MiniMap(self.diagram_scene, session,
                               lambda: (self.viewport().width(), self.viewport().height()),
                               theme, self)
        self.minimap.setVisible(session.settings.canvas.show_minimap)

        self.refresh()

    def refresh(self):
        """Bring items and camera up to date after any model or viewport change."""
        session = self.session
        if self.diagram_scene.diagram is not session.diagram:
            self.diagram_scene.set_diagram(session.diagram)
        self.diagram_scene.sync(session.controller.dragging_id)
        self._apply_viewport()
        self.viewport().update()
        self.minimap.refresh()
        self.view_changed.emit()

    def _apply_viewport(self):
        vp = self.session.viewport
        self.setTransform(QTransform(vp.scale, 0, 0, vp.scale, 0, 0))
        # A top-left aligned scene rect smaller than the viewport is pinned to
        # the viewport origin, which puts world (0, 0) at the pan offset
        self.setSceneRect(QRectF(-vp.pan_x / vp.scale, -vp.pan_y / vp.scale, 1, 1))

    def entity_id_at(self, sx: float, sy: float) -> Optional[str]:
        """Id of the top-most entity under a viewport point, or None."""
        item = self.itemAt(QPointF(sx, sy).toPoint())
        if isinstance(item, EntityItem):
            return item.entity.id
        return None

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.minimap.move(self.width() - self.minimap.width() - MINIMAP_MARGIN,
                          self.height() - self.minimap.height() - MINIMAP_MARGIN)
        self.minimap.refresh()

    # ----------------------------
    # Painting
    # ----------------------------

    def drawBackground(self, painter, rect):
        trace("DiagramView.drawBackground", "PAINT")
        painter.fillRect(rect, QColor(self.colors["background"]))
        spacing, off_x, off_y = self.session.viewport.grid(self.session.settings.canvas.grid_spacing)
        painter.save()
        painter.resetTransform()
        paint_grid(painter, self.viewport().width(), self.viewport().height(),
                   spacing, off_x, off_y, QColor(self.colors["grid"]))
        painter.restore()

    # ----------------------------
    # Pointer input
    # ----------------------------

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        if self.session.controller.pointer_down(pos.x(), pos.y()):
            self.viewport().setCursor(Qt.CursorShape.ClosedHandCursor)
        event.accept()

    def mouseMoveEvent(self, event):
        pos = event.position()
        self.session.controller.pointer_move(pos.x(), pos.y())
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        self._end_gesture()
        event.accept()

    def leaveEvent(self, event):
        if self.session.controller.state != InteractionState.IDLE:
            self.session.controller.pointer_leave()
            self.viewport().setCursor(Qt.CursorShape.OpenHandCursor)
        super().leaveEvent(event)

    def wheelEvent(self, event):
        """Zoom with mouse wheel."""
        # Qt reports positive angleDelta when scrolling away from the user
        self.session.controller.wheel(-event.angleDelta().y())
        event.accept()

    def _end_gesture(self):
        self.session.controller.pointer_up()
        self.viewport().setCursor(Qt.CursorShape.OpenHandCursor)

    # ----------------------------
    # Zoom commands
    # ----------------------------

    def zoom_in(self):
        """Zoom in by the configured button step."""
        self.session.viewport.zoom_in()
        self.refresh()

    def zoom_out(self):
        """Zoom out by the configured button step."""
        self.session.viewport.zoom_out()
        self.refresh()

    def zoom_reset(self):
        """Reset zoom to 100% (1:1 scale) without moving the content origin."""
        self.session.viewport.set_scale(1.0)
        self.refresh()

    def zoom_fit(self):
        """Zoom to fit the entire diagram in the view."""
        self.session.fit(self.viewport().width(), self.viewport().height())
        self.refresh()

    def sizeHint(self):
        return QSize(1200, 800)
