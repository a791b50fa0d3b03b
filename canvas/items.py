"""
canvas/items.py

Graphics items for diagram content: entity boxes and relationship
connectors with arrowheads, plus the screen-space dot grid painter.

Items mirror the model; positions always come from the Entity, never from
Qt-side moves.
"""

from __future__ import annotations

from typing import Dict

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetrics,
    QPainter,
    QPainterPath,
    QPainterPathStroker,
    QPen,
    QPolygonF,
)
from PyQt6.QtWidgets import QGraphicsPathItem, QGraphicsRectItem, QStyleOptionGraphicsItem

from geometry import HEADER_HEIGHT, ROW_HEIGHT, arrow_head, edge_curve, edge_line
from models import Entity

ENTITY_ID_KEY = 0

EDGE_Z = 0
ENTITY_Z = 1
DRAGGED_Z = 2

# Below this level of detail (the minimap) items paint as plain blocks
OVERVIEW_DETAIL = 0.1

CORNER_RADIUS = 6.0
FIELD_INSET = 12.0
KEY_MARKER_RADIUS = 3.0
GRID_DOT_RADIUS = 1.0
GRID_OPACITY = 0.15
EDGE_WIDTH = 2.0
EDGE_HIT_WIDTH = 6.0


def _title_font() -> QFont:
    font = QFont("monospace", 9)
    font.setStyleHint(QFont.StyleHint.Monospace)
    font.setBold(True)
    return font


def _field_font(bold: bool) -> QFont:
    font = QFont("monospace", 8)
    font.setStyleHint(QFont.StyleHint.Monospace)
    font.setBold(bold)
    return font


def _detail(option: QStyleOptionGraphicsItem, painter: QPainter) -> float:
    return option.levelOfDetailFromTransform(painter.worldTransform())


def paint_grid(painter: QPainter, width: float, height: float, spacing: float,
               offset_x: float, offset_y: float, color: QColor) -> None:
    """Draw the decorative dot grid in screen space."""
    if spacing < 4:
        # Too dense to read; skip rather than flood the painter
        return
    painter.save()
    painter.setOpacity(GRID_OPACITY)
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QBrush(color))
    y = offset_y
    while y < height:
        x = offset_x
        while x < width:
            painter.drawEllipse(QPointF(x, y), GRID_DOT_RADIUS, GRID_DOT_RADIUS)
            x += spacing
        y += spacing
    painter.restore()


class EntityItem(QGraphicsRectItem):
    """
    Entity box: header with the uppercased label, then one row per field.

    Key fields are bold and carry an amber dot on the right. The item sits
    at the entity's top-left corner; ``sync()`` copies a new position over.
    """

    def __init__(self, entity: Entity, colors: Dict[str, str]):
        super().__init__(QRectF(0, 0, entity.width, entity.height))
        self.entity = entity
        self.colors = colors
        self.highlighted = False
        self.setData(ENTITY_ID_KEY, entity.id)
        self.setZValue(ENTITY_Z)
        self.sync()

    def sync(self):
        self.setPos(QPointF(self.entity.x, self.entity.y))

    def set_highlighted(self, highlighted: bool):
        """Outline and raise the entity while it is dragged."""
        if highlighted == self.highlighted:
            return
        self.highlighted = highlighted
        self.setZValue(DRAGGED_Z if highlighted else ENTITY_Z)
        self.update()

    def boundingRect(self) -> QRectF:
        # Room for the highlight outline
        return self.rect().adjusted(-2, -2, 2, 2)

    def paint(self, painter: QPainter, option, widget=None):
        rect = self.rect()
        c = self.colors

        if _detail(option, painter) < OVERVIEW_DETAIL:
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(QColor(c["minimap_node"])))
            painter.drawRect(rect)
            return

        border = QColor(c["highlight"]) if self.highlighted else QColor(c["node_border"])
        painter.setPen(QPen(border, 2 if self.highlighted else 1))
        painter.setBrush(QBrush(QColor(c["node_fill"])))
        painter.drawRoundedRect(rect, CORNER_RADIUS, CORNER_RADIUS)

        # Header: rounded top corners, square bottom edge
        w = rect.width()
        header = QPainterPath()
        header.addRoundedRect(QRectF(0, 0, w, HEADER_HEIGHT), CORNER_RADIUS, CORNER_RADIUS)
        header.addRect(QRectF(0, HEADER_HEIGHT - CORNER_RADIUS, w, CORNER_RADIUS))
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(QColor(c["header_fill"])))
        painter.drawPath(header.simplified())
        painter.setPen(QPen(QColor(c["header_border"]), 1))
        painter.drawLine(QPointF(0, HEADER_HEIGHT), QPointF(w, HEADER_HEIGHT))

        title_font = _title_font()
        painter.setFont(title_font)
        painter.setPen(QColor(c["title"]))
        title_rect = QRectF(8, 0, w - 16, HEADER_HEIGHT)
        title = QFontMetrics(title_font).elidedText(self.entity.label.upper(), Qt.TextElideMode.ElideRight,
                                                   int(title_rect.width()))
        painter.drawText(title_rect, Qt.AlignmentFlag.AlignCenter, title)

        for i, fld in enumerate(self.entity.fields):
            row_top = HEADER_HEIGHT + i * ROW_HEIGHT
            font = _field_font(fld.is_key)
            painter.setFont(font)
            painter.setPen(QColor(c["key_field"] if fld.is_key else c["field"]))
            text_rect = QRectF(FIELD_INSET, row_top, w - FIELD_INSET * 2 - 10, ROW_HEIGHT)
            name = QFontMetrics(font).elidedText(fld.name, Qt.TextElideMode.ElideRight,
                                                 int(text_rect.width()))
            painter.drawText(text_rect, Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft, name)
            if fld.is_key:
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(QBrush(QColor(c["key_marker"])))
                painter.drawEllipse(QPointF(w - 20, row_top + ROW_HEIGHT / 2),
                                    KEY_MARKER_RADIUS, KEY_MARKER_RADIUS)


class RelationshipItem(QGraphicsPathItem):
    """
    Connector from ``source`` to ``target`` with a filled arrowhead at the
    target. Lives in scene coordinates; ``update_path()`` re-anchors it after
    either entity moves.
    """

    def __init__(self, source: Entity, target: Entity, colors: Dict[str, str],
                 edge_style: str = "curve"):
        super().__init__()
        self.source = source
        self.target = target
        self.colors = colors
        self.edge_style = edge_style
        self._head = QPolygonF()
        self.setZValue(EDGE_Z)
        self.setPen(QPen(QColor(colors["edge"]), EDGE_WIDTH))
        self.update_path()

    @property
    def head(self) -> QPolygonF:
        return QPolygonF(self._head)

    def update_path(self):
        if self.edge_style == "straight":
            start, end = edge_line(self.source, self.target)
            path = QPainterPath(QPointF(start.x, start.y))
            path.lineTo(QPointF(end.x, end.y))
            head = arrow_head(end, start)
        else:
            curve = edge_curve(self.source, self.target)
            path = QPainterPath(QPointF(curve.start.x, curve.start.y))
            path.cubicTo(QPointF(curve.c1.x, curve.c1.y),
                         QPointF(curve.c2.x, curve.c2.y),
                         QPointF(curve.end.x, curve.end.y))
            head = arrow_head(curve.end, curve.c2)
        self.prepareGeometryChange()
        self._head = QPolygonF([QPointF(p.x, p.y) for p in head]) if head is not None else QPolygonF()
        self.setPath(path)

    def boundingRect(self) -> QRectF:
        return super().boundingRect().united(self._head.boundingRect())

    def shape(self) -> QPainterPath:
        # Only the stroke is solid; the area under a curve is not part of the edge
        stroker = QPainterPathStroker()
        stroker.setWidth(EDGE_HIT_WIDTH)
        return stroker.createStroke(self.path())

    def paint(self, painter: QPainter, option, widget=None):
        if _detail(option, painter) < OVERVIEW_DETAIL:
            return
        color = QColor(self.colors["edge"])
        painter.setPen(QPen(color, EDGE_WIDTH))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(self.path())
        if not self._head.isEmpty():
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(color))
            painter.drawPolygon(self._head)
