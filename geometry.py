"""
geometry.py

Pure geometry for entity boxes and relationship connectors.

Every function here works on plain floats and tuples so the same numbers
drive the on-screen painter and the exported SVG document.
"""

from __future__ import annotations

import math
from typing import Iterable, List, NamedTuple, Optional, Tuple

# Entity box metrics (world units)
NODE_WIDTH = 180.0
HEADER_HEIGHT = 32.0
ROW_HEIGHT = 26.0
NODE_PADDING = 4.0

# Minimum control-point offset for curved connectors
MIN_CURVATURE = 60.0

# Default arrowhead length
ARROW_SIZE = 10.0


class Point(NamedTuple):
    x: float
    y: float


class Bounds(NamedTuple):
    """Axis-aligned rectangle in world coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def expanded(self, margin: float) -> "Bounds":
        """Return a copy grown by *margin* on every side."""
        return Bounds(self.x - margin, self.y - margin,
                      self.width + 2 * margin, self.height + 2 * margin)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.right and self.y <= py <= self.bottom


class EdgeCurve(NamedTuple):
    """Cubic Bezier connector between two entity boxes."""
    start: Point
    c1: Point
    c2: Point
    end: Point

    def to_svg_path(self) -> str:
        """Format as SVG path data (``M x y C ...``)."""
        return (
            f"M {fmt_number(self.start.x)} {fmt_number(self.start.y)} "
            f"C {fmt_number(self.c1.x)} {fmt_number(self.c1.y)}, "
            f"{fmt_number(self.c2.x)} {fmt_number(self.c2.y)}, "
            f"{fmt_number(self.end.x)} {fmt_number(self.end.y)}"
        )


def fmt_number(value: float) -> str:
    """Compact number formatting for SVG attributes."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def compute_height(field_count: int) -> float:
    """Height of an entity box holding *field_count* field rows.

    Args:
        field_count: Number of fields; negative values count as zero.

    Returns:
        ``HEADER_HEIGHT + field_count * ROW_HEIGHT + NODE_PADDING``.
    """
    return HEADER_HEIGHT + max(0, field_count) * ROW_HEIGHT + NODE_PADDING


def rect_center(box) -> Point:
    """Center of anything with ``x``, ``y``, ``width`` and ``height``."""
    return Point(box.x + box.width / 2, box.y + box.height / 2)


def rect_intersection(center: Tuple[float, float], toward: Tuple[float, float],
                      width: float, height: float) -> Point:
    """Point where a ray from *center* toward *toward* leaves the rectangle.

    The rectangle is centered at *center* with the given size. For each axis
    the ray parameter ``t`` at the wall in the direction of travel is
    computed; the smaller positive ``t`` wins since that wall is hit first.

    Args:
        center: Rectangle center and ray origin.
        toward: Any point on the ray.
        width: Rectangle width.
        height: Rectangle height.

    Returns:
        The exit point, or *center* itself when the ray has no direction.
    """
    cx, cy = center
    dx = toward[0] - cx
    dy = toward[1] - cy
    if dx == 0 and dy == 0:
        return Point(cx, cy)

    t = math.inf
    if dx != 0:
        tx = (width / 2 if dx > 0 else -width / 2) / dx
        if tx > 0:
            t = min(t, tx)
    if dy != 0:
        ty = (height / 2 if dy > 0 else -height / 2) / dy
        if ty > 0:
            t = min(t, ty)

    if math.isinf(t):
        return Point(cx, cy)
    return Point(cx + t * dx, cy + t * dy)


def edge_curve(source, target, min_curvature: float = MIN_CURVATURE) -> EdgeCurve:
    """Cubic connector from *source* to *target* boxes.

    The dominant axis is the one with the larger center-to-center distance.
    Both ends anchor at the midpoint of the side facing the other box and the
    control points push out along the dominant axis by half the center
    distance, never less than *min_curvature*, so aligned boxes still bow.
    """
    sx, sy = rect_center(source)
    tx, ty = rect_center(target)

    if abs(tx - sx) > abs(ty - sy):
        forward = tx > sx
        start = Point(source.x + (source.width if forward else 0.0), sy)
        end = Point(target.x + (0.0 if forward else target.width), ty)
        curvature = max(abs(tx - sx) * 0.5, min_curvature)
        sign = 1.0 if forward else -1.0
        c1 = Point(start.x + sign * curvature, start.y)
        c2 = Point(end.x - sign * curvature, end.y)
    else:
        forward = ty > sy
        start = Point(sx, source.y + (source.height if forward else 0.0))
        end = Point(tx, target.y + (0.0 if forward else target.height))
        curvature = max(abs(ty - sy) * 0.5, min_curvature)
        sign = 1.0 if forward else -1.0
        c1 = Point(start.x, start.y + sign * curvature)
        c2 = Point(end.x, end.y - sign * curvature)

    return EdgeCurve(start, c1, c2, end)


def edge_line(source, target) -> Tuple[Point, Point]:
    """Straight connector clipped to both box outlines."""
    sc = rect_center(source)
    tc = rect_center(target)
    start = rect_intersection(sc, tc, source.width, source.height)
    end = rect_intersection(tc, sc, target.width, target.height)
    return start, end


def arrow_head(tip: Tuple[float, float], from_point: Tuple[float, float],
               size: float = ARROW_SIZE) -> Optional[List[Point]]:
    """Triangle for an arrowhead ending at *tip*, pointing away from *from_point*.

    Returns:
        ``[tip, left, right]`` or None when the direction is undefined.
    """
    dx = tip[0] - from_point[0]
    dy = tip[1] - from_point[1]
    length = math.hypot(dx, dy)
    if length < 1e-6:
        return None

    ux, uy = dx / length, dy / length
    px, py = -uy, ux
    left = Point(tip[0] - ux * size + px * size * 0.35, tip[1] - uy * size + py * size * 0.35)
    right = Point(tip[0] - ux * size - px * size * 0.35, tip[1] - uy * size - py * size * 0.35)
    return [Point(tip[0], tip[1]), left, right]


def bounds_of(boxes: Iterable) -> Optional[Bounds]:
    """Union of box rectangles, or None when there are none."""
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for b in boxes:
        min_x = min(min_x, b.x)
        min_y = min(min_y, b.y)
        max_x = max(max_x, b.x + b.width)
        max_y = max(max_y, b.y + b.height)
    if math.isinf(min_x):
        return None
    return Bounds(min_x, min_y, max_x - min_x, max_y - min_y)
