"""
canvas/scene.py

QGraphicsScene holding one item per entity and per drawable relationship.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from PyQt6.QtWidgets import QGraphicsScene

from canvas.items import EntityItem, RelationshipItem
from debug_trace import trace
from models import Diagram


class DiagramScene(QGraphicsScene):
    """
    Scene mirroring a Diagram.

    Relationship items stack beneath entity items; entities keep the
    diagram's order so the last one is on top, matching hit-testing. Items
    are rebuilt on ``set_diagram`` and re-positioned on ``sync``.
    """

    def __init__(self, colors: Dict[str, str], edge_style: str = "curve", parent=None):
        super().__init__(parent)
        self.colors = colors
        self.edge_style = edge_style
        self.diagram: Optional[Diagram] = None
        self.entity_items: Dict[str, EntityItem] = {}
        self.relationship_items: List[RelationshipItem] = []

    def set_diagram(self, diagram: Diagram) -> None:
        """Replace all items with ones for *diagram*."""
        self.clear()
        self.diagram = diagram
        self.entity_items = {}
        self.relationship_items = []

        # Self-loops and dangling endpoints are already filtered out
        for _rel, source, target in diagram.resolved_relationships():
            item = RelationshipItem(source, target, self.colors, self.edge_style)
            self.addItem(item)
            self.relationship_items.append(item)

        for entity in diagram:
            item = EntityItem(entity, self.colors)
            self.addItem(item)
            self.entity_items[entity.id] = item

        trace(f"Scene rebuilt: {len(self.entity_items)} entities, "
              f"{len(self.relationship_items)} connectors", "SCENE")

    def sync(self, dragging_id: Optional[str] = None) -> None:
        """Copy entity positions onto the items and re-anchor every connector."""
        for entity_id, item in self.entity_items.items():
            item.sync()
            item.set_highlighted(entity_id == dragging_id)
        for item in self.relationship_items:
            item.update_path()
