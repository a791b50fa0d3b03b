"""
tests/test_geometry.py

Entity box metrics, connector anchoring and arrowheads.
"""

from __future__ import annotations

import math

import pytest

from geometry import (
    HEADER_HEIGHT,
    MIN_CURVATURE,
    NODE_PADDING,
    ROW_HEIGHT,
    Bounds,
    Point,
    arrow_head,
    bounds_of,
    compute_height,
    edge_curve,
    edge_line,
    fmt_number,
    rect_intersection,
)


def _box(x, y, w=180.0, h=100.0):
    return Bounds(x, y, w, h)


# ─────────────────────────────────────────────────────────
# Box metrics
# ─────────────────────────────────────────────────────────


class TestComputeHeight:
    def test_no_fields(self):
        assert compute_height(0) == HEADER_HEIGHT + NODE_PADDING

    def test_three_fields(self):
        assert compute_height(3) == 32 + 3 * 26 + 4

    def test_monotonic(self):
        heights = [compute_height(n) for n in range(20)]
        assert heights == sorted(heights)

    def test_negative_counts_as_zero(self):
        assert compute_height(-2) == compute_height(0)


class TestFormatting:
    def test_integer_value(self):
        assert fmt_number(100.0) == "100"

    def test_fraction_trimmed(self):
        assert fmt_number(12.50) == "12.5"

    def test_negative_zero(self):
        assert fmt_number(-0.001) == "0"


# ─────────────────────────────────────────────────────────
# Rectangle intersection
# ─────────────────────────────────────────────────────────


class TestRectIntersection:
    def test_horizontal_ray_hits_right_wall(self):
        p = rect_intersection((0, 0), (100, 0), 40, 20)
        assert p == Point(20, 0)

    def test_vertical_ray_hits_bottom_wall(self):
        p = rect_intersection((0, 0), (0, 100), 40, 20)
        assert p == Point(0, 10)

    def test_diagonal_ray_hits_nearer_wall(self):
        # Wide box: the ray leaves through the top/bottom first
        p = rect_intersection((0, 0), (100, 100), 100, 20)
        assert p.y == pytest.approx(10)
        assert p.x == pytest.approx(10)

    def test_zero_direction_returns_center(self):
        assert rect_intersection((5, 7), (5, 7), 40, 20) == Point(5, 7)


# ─────────────────────────────────────────────────────────
# Connectors
# ─────────────────────────────────────────────────────────


class TestEdgeCurve:
    def test_horizontal_anchors_on_facing_sides(self):
        source = _box(0, 0)
        target = _box(400, 0)
        curve = edge_curve(source, target)
        assert curve.start == Point(180, 50)
        assert curve.end == Point(400, 50)

    def test_horizontal_curvature_is_half_center_distance(self):
        curve = edge_curve(_box(0, 0), _box(400, 0))
        assert curve.c1 == Point(180 + 200, 50)
        assert curve.c2 == Point(400 - 200, 50)

    def test_reverse_direction(self):
        curve = edge_curve(_box(400, 0), _box(0, 0))
        assert curve.start == Point(400, 50)
        assert curve.end == Point(180, 50)
        assert curve.c1.x < curve.start.x

    def test_vertical_anchors_on_facing_sides(self):
        curve = edge_curve(_box(0, 0), _box(0, 300))
        assert curve.start == Point(90, 100)
        assert curve.end == Point(90, 300)
        assert curve.c1 == Point(90, 100 + 150)

    def test_minimum_curvature_for_close_boxes(self):
        curve = edge_curve(_box(0, 0), _box(0, 20))
        assert curve.c1.y - curve.start.y == MIN_CURVATURE

    def test_tie_uses_vertical_axis(self):
        curve = edge_curve(_box(0, 0), _box(300, 300))
        assert curve.start.x == 90
        assert curve.start.y == 100

    def test_svg_path(self):
        curve = edge_curve(_box(0, 0), _box(400, 0))
        assert curve.to_svg_path() == "M 180 50 C 380 50, 200 50, 400 50"

    def test_identical_boxes_do_not_fail(self):
        curve = edge_curve(_box(0, 0), _box(0, 0))
        assert all(math.isfinite(v) for p in curve for v in p)


class TestEdgeLine:
    def test_clipped_to_outlines(self):
        start, end = edge_line(_box(0, 0), _box(400, 0))
        assert start == Point(180, 50)
        assert end == Point(400, 50)


class TestArrowHead:
    def test_points_along_direction(self):
        head = arrow_head((100, 0), (0, 0), size=10)
        tip, left, right = head
        assert tip == Point(100, 0)
        assert left.x == pytest.approx(90)
        assert right.x == pytest.approx(90)
        assert left.y == pytest.approx(-right.y)

    def test_degenerate_direction(self):
        assert arrow_head((5, 5), (5, 5)) is None


class TestBoundsOf:
    def test_empty(self):
        assert bounds_of([]) is None

    def test_union(self):
        b = bounds_of([_box(0, 0, 10, 10), _box(50, -20, 10, 10)])
        assert b == Bounds(0, -20, 60, 30)

    def test_expanded(self):
        assert Bounds(0, 0, 10, 10).expanded(5) == Bounds(-5, -5, 20, 20)
