"""
canvas/minimap.py

Fixed-scale overview of the diagram: a second view on the canvas scene,
drawn in a corner of the main view.
"""

from __future__ import annotations

from typing import Tuple

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QPainter, QPen, QTransform
from PyQt6.QtWidgets import QFrame, QGraphicsOpacityEffect, QGraphicsScene, QGraphicsView

from session import DiagramSession
from styles import DEFAULT_STYLE, canvas_colors

# World window shown by the minimap; world (0, 0) sits at (WORLD_OFFSET, WORLD_OFFSET)
WORLD_SIZE = 2000.0
WORLD_OFFSET = 500.0

MINIMAP_WIDTH = 128
MINIMAP_HEIGHT = 96
MINIMAP_OPACITY = 0.5
VIEW_RECT_PEN = 10.0


def minimap_transform(widget_w: float, widget_h: float) -> Tuple[float, float, float]:
    """Map the fixed world window into a widget, preserving aspect ratio.

    Returns:
        ``(scale, offset_x, offset_y)`` so that a world point maps to
        ``((wx + WORLD_OFFSET) * scale + offset_x, (wy + WORLD_OFFSET) * scale + offset_y)``.
    """
    if widget_w <= 0 or widget_h <= 0:
        return 0.0, 0.0, 0.0
    scale = min(widget_w / WORLD_SIZE, widget_h / WORLD_SIZE)
    offset_x = (widget_w - WORLD_SIZE * scale) / 2
    offset_y = (widget_h - WORLD_SIZE * scale) / 2
    return scale, offset_x, offset_y


class MiniMap(QGraphicsView):
    """
    Overview of every entity box plus the region the main view shows.

    Shares the main view's scene. The scene rect is pinned to the fixed world
    window and centered, so the placement matches ``minimap_transform``. The
    widget never takes mouse input; the main view calls ``refresh()`` after
    it pans or zooms.
    """

    def __init__(self, scene: QGraphicsScene, session: DiagramSession, view_size,
                 theme: str = DEFAULT_STYLE, parent=None):
        """
        Args:
            scene: The DiagramScene shown by the main view
            session: Session whose viewport is outlined
            view_size: Callable returning the main view's (width, height)
            theme: Palette name from styles.CANVAS_COLORS
            parent: Usually the DiagramView
        """
        super().__init__(scene, parent)
        self.session = session
        self._view_size = view_size
        self.colors = canvas_colors(theme)

        self.setFixedSize(MINIMAP_WIDTH, MINIMAP_HEIGHT)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setInteractive(False)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setSceneRect(QRectF(-WORLD_OFFSET, -WORLD_OFFSET, WORLD_SIZE, WORLD_SIZE))

        effect = QGraphicsOpacityEffect(self)
        effect.setOpacity(MINIMAP_OPACITY)
        self.setGraphicsEffect(effect)

        self._fit_world()

    def _fit_world(self):
        scale, _, _ = minimap_transform(self.viewport().width(), self.viewport().height())
        if scale > 0:
            self.setTransform(QTransform.fromScale(scale, scale))

    def refresh(self):
        self.viewport().update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._fit_world()

    def drawBackground(self, painter, rect):
        # Rounded panel in widget pixels, under the scene content
        painter.save()
        painter.resetTransform()
        painter.setPen(QPen(QColor(self.colors["minimap_border"]), 1))
        painter.setBrush(QBrush(QColor(self.colors["minimap_bg"])))
        vp = self.viewport()
        painter.drawRoundedRect(QRectF(0.5, 0.5, vp.width() - 1, vp.height() - 1), 4, 4)
        painter.restore()

    def drawForeground(self, painter, rect):
        view_w, view_h = self._view_size()
        visible = self.session.viewport.visible_world_rect(view_w, view_h)
        painter.setPen(QPen(QColor(self.colors["minimap_view"]), VIEW_RECT_PEN))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(QRectF(visible.x, visible.y, visible.width, visible.height))
