"""
canvas package

Graphics scene, items and views for the diagram canvas.
"""

from canvas.items import EntityItem, RelationshipItem, paint_grid
from canvas.minimap import MiniMap, minimap_transform
from canvas.scene import DiagramScene
from canvas.view import DiagramView

__all__ = [
    "EntityItem",
    "RelationshipItem",
    "paint_grid",
    "MiniMap",
    "minimap_transform",
    "DiagramScene",
    "DiagramView",
]
