"""
models.py

Data models for the ERD viewer: entities, relationships and the diagram
that owns them, plus loading of the external input format.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from geometry import NODE_WIDTH, Bounds, Point, bounds_of, compute_height

# Entity id -> (x, y) world position of the top-left corner
Snapshot = Dict[str, Tuple[float, float]]

# Grid placement for entities that arrive without a position
GRID_COLUMNS = 3
GRID_SPACING = 250.0
GRID_OFFSET = 100.0

# Prefix the schema layer uses to flag key fields in plain string lists
KEY_PREFIX = "#"


class DiagramFormatError(ValueError):
    """Raised when diagram input does not match the expected structure."""


# ----------------------------
# Entity / relationship model
# ----------------------------

@dataclass
class Field:
    """One row of an entity box."""
    name: str
    is_key: bool = False

    @classmethod
    def from_value(cls, value: Any) -> "Field":
        """Build a field from a ``{name, isKey}`` dict or a plain string.

        A plain string starting with ``#`` is a key field.
        """
        if isinstance(value, str):
            if value.startswith(KEY_PREFIX):
                return cls(value[len(KEY_PREFIX):], True)
            return cls(value, False)
        if isinstance(value, dict) and "name" in value:
            is_key = value.get("isKey", value.get("is_key", False))
            if not isinstance(is_key, bool):
                raise DiagramFormatError(f"Field {value['name']!r}: isKey must be true or false, got {is_key!r}")
            return cls(str(value["name"]), is_key)
        raise DiagramFormatError(f"Invalid field descriptor: {value!r}")


@dataclass
class Entity:
    """A labeled box with an ordered field list.

    Only the position is mutable state; width and height are always derived
    from the field count.
    """
    id: str
    label: str
    fields: List[Field] = field(default_factory=list)
    x: float = 0.0
    y: float = 0.0

    @property
    def width(self) -> float:
        return NODE_WIDTH

    @property
    def height(self) -> float:
        return compute_height(len(self.fields))

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def rect(self) -> Bounds:
        return Bounds(self.x, self.y, self.width, self.height)

    def move_by(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy


@dataclass
class Relationship:
    """Directed connector; the arrowhead is drawn at ``target``."""
    source: str
    target: str
    label: str = ""

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


# ----------------------------
# Diagram
# ----------------------------

class Diagram:
    """Entities in paint order plus the relationships between them."""

    def __init__(self, entities: Optional[List[Entity]] = None,
                 relationships: Optional[List[Relationship]] = None):
        self.entities: Dict[str, Entity] = {}
        for ent in entities or []:
            if ent.id in self.entities:
                raise DiagramFormatError(f"Duplicate entity id: {ent.id!r}")
            self.entities[ent.id] = ent
        self.relationships: List[Relationship] = list(relationships or [])

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities.values())

    def get(self, entity_id: str) -> Optional[Entity]:
        return self.entities.get(entity_id)

    def resolved_relationships(self) -> Iterator[Tuple[Relationship, Entity, Entity]]:
        """Yield relationships whose endpoints both exist.

        Relationships pointing at unknown ids come from heuristic schema
        matching and are skipped, as are self-loops.
        """
        for rel in self.relationships:
            if rel.is_self_loop:
                continue
            source = self.entities.get(rel.source)
            target = self.entities.get(rel.target)
            if source is None or target is None:
                continue
            yield rel, source, target

    def copy(self) -> "Diagram":
        """Independent copy of every entity, position included, and relationship."""
        return Diagram(
            [Entity(ent.id, ent.label, [Field(f.name, f.is_key) for f in ent.fields], ent.x, ent.y)
             for ent in self.entities.values()],
            [Relationship(rel.source, rel.target, rel.label) for rel in self.relationships],
        )

    def snapshot(self) -> Snapshot:
        """Capture every entity position."""
        return {ent.id: (ent.x, ent.y) for ent in self.entities.values()}

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Restore positions; unknown ids are ignored."""
        for entity_id, (x, y) in snapshot.items():
            ent = self.entities.get(entity_id)
            if ent is not None:
                ent.x = float(x)
                ent.y = float(y)

    def bounds(self) -> Optional[Bounds]:
        """Bounding box of all entity boxes, or None for an empty diagram."""
        return bounds_of(ent.rect for ent in self.entities.values())

    def entity_at(self, wx: float, wy: float) -> Optional[Entity]:
        """Top-most entity containing the world point."""
        for ent in reversed(list(self.entities.values())):
            if ent.rect.contains(wx, wy):
                return ent
        return None

    # ----------------------------
    # Input format
    # ----------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Diagram":
        """Build a diagram from the schema layer's output.

        Accepts ``entities``/``relationships`` or ``nodes``/``edges``.
        Entities without a position get a three-column grid slot.

        Raises:
            DiagramFormatError: If the payload is malformed.
        """
        if not isinstance(data, dict):
            raise DiagramFormatError("Diagram data must be a JSON object")

        raw_entities = data.get("entities", data.get("nodes", []))
        raw_relationships = data.get("relationships", data.get("edges", []))
        if not isinstance(raw_entities, list) or not isinstance(raw_relationships, list):
            raise DiagramFormatError("'entities' and 'relationships' must be lists")

        entities = [_entity_from_record(rec, idx) for idx, rec in enumerate(raw_entities)]
        relationships = [_relationship_from_record(rec) for rec in raw_relationships]
        return cls(entities, relationships)


def grid_position(index: int) -> Tuple[float, float]:
    """Default slot for the entity at *index*: three columns, fixed spacing."""
    column = index % GRID_COLUMNS
    row = index // GRID_COLUMNS
    return column * GRID_SPACING + GRID_OFFSET, row * GRID_SPACING + GRID_OFFSET


def _entity_from_record(rec: Any, index: int) -> Entity:
    if not isinstance(rec, dict) or not rec.get("id"):
        raise DiagramFormatError(f"Entity #{index} has no id")
    entity_id = str(rec["id"])
    raw_fields = rec.get("fields", [])
    if not isinstance(raw_fields, list):
        raise DiagramFormatError(f"Entity {entity_id!r}: 'fields' must be a list")

    gx, gy = grid_position(index)
    x = rec.get("x")
    y = rec.get("y")
    try:
        x = gx if x is None else float(x)
        y = gy if y is None else float(y)
    except (TypeError, ValueError) as e:
        raise DiagramFormatError(f"Entity {entity_id!r}: invalid position") from e

    return Entity(
        id=entity_id,
        label=str(rec.get("label") or entity_id),
        fields=[Field.from_value(v) for v in raw_fields],
        x=x,
        y=y,
    )


def _relationship_from_record(rec: Any) -> Relationship:
    if not isinstance(rec, dict):
        raise DiagramFormatError(f"Invalid relationship: {rec!r}")
    source = rec.get("from", rec.get("source"))
    target = rec.get("to", rec.get("target"))
    if source is None or target is None:
        raise DiagramFormatError(f"Relationship needs 'from' and 'to': {rec!r}")
    return Relationship(str(source), str(target), str(rec.get("label", "")))


def load_diagram(path) -> Diagram:
    """Read a diagram JSON file.

    Raises:
        DiagramFormatError: If the file is not valid diagram JSON.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DiagramFormatError(f"Invalid JSON: {e}") from e
    return Diagram.from_dict(data)
