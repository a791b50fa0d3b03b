"""
tests/test_export.py

SVG serialization, rasterization and the PNG export entry points.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import date

import pytest

from export import (
    ExportError,
    build_svg,
    export_bounds,
    export_filename,
    export_png,
    rasterize_svg,
    save_image,
)
from geometry import NODE_WIDTH, compute_height
from models import Diagram, Entity, Field, Relationship

_NS = "{http://www.w3.org/2000/svg}"


def _two_entities() -> Diagram:
    return Diagram(
        [
            Entity("a", "alpha", [Field("id", True), Field("name"), Field("x")], x=0, y=0),
            Entity("b", "beta", [Field("id", True)], x=100, y=0),
        ],
        [Relationship("b", "a")],
    )


# ─────────────────────────────────────────────────────────
# Bounds and naming
# ─────────────────────────────────────────────────────────


class TestExportBounds:
    def test_margin_applied(self):
        b = export_bounds(_two_entities(), margin=50)
        assert (b.x, b.y) == (-50, -50)
        assert b.width == 100 + NODE_WIDTH + 100
        assert b.height == compute_height(3) + 100

    def test_single_entity(self):
        d = Diagram([Entity("t", "T", [Field("a"), Field("b"), Field("c")], x=10, y=20)])
        b = export_bounds(d, margin=50)
        assert b.width == NODE_WIDTH + 100
        assert b.height == compute_height(3) + 100

    def test_empty(self):
        assert export_bounds(Diagram()) is None


class TestExportFilename:
    def test_pattern(self):
        assert export_filename("erd_diagram", date(2024, 3, 9)) == "erd_diagram_2024-03-09.png"

    def test_extension(self):
        assert export_filename("x", date(2024, 1, 1), ".jpg") == "x_2024-01-01.jpg"


# ─────────────────────────────────────────────────────────
# SVG document
# ─────────────────────────────────────────────────────────


class TestBuildSvg:
    def test_empty_diagram(self):
        assert build_svg(Diagram()) is None

    def test_root_geometry(self):
        root = ET.fromstring(build_svg(_two_entities()))
        assert root.tag == f"{_NS}svg"
        assert root.get("width") == "380"
        assert root.get("viewBox") == f"-50 -50 380 {int(compute_height(3) + 100)}"

    def test_no_style_block(self):
        svg = build_svg(_two_entities())
        assert "<style" not in svg
        assert "marker" not in svg

    def test_edges_before_entities(self):
        root = ET.fromstring(build_svg(_two_entities()))
        groups = [g.get("id") for g in root.findall(f"{_NS}g")]
        assert groups == ["edges", "entities"]

    def test_edge_and_arrow(self):
        root = ET.fromstring(build_svg(_two_entities()))
        edges = root.find(f"{_NS}g[@id='edges']")
        assert len(edges.findall(f"{_NS}path")) == 1
        assert len(edges.findall(f"{_NS}polygon")) == 1

    def test_straight_edges(self):
        root = ET.fromstring(build_svg(_two_entities(), edge_style="straight"))
        edges = root.find(f"{_NS}g[@id='edges']")
        assert len(edges.findall(f"{_NS}line")) == 1
        assert not edges.findall(f"{_NS}path")

    def test_missing_endpoint_skipped(self):
        d = _two_entities()
        d.relationships.append(Relationship("a", "ghost"))
        root = ET.fromstring(build_svg(d))
        edges = root.find(f"{_NS}g[@id='edges']")
        assert len(edges.findall(f"{_NS}path")) == 1

    def test_entity_content(self):
        root = ET.fromstring(build_svg(_two_entities()))
        groups = root.find(f"{_NS}g[@id='entities']").findall(f"{_NS}g")
        assert groups[0].get("transform") == "translate(0, 0)"
        texts = [t.text for t in groups[0].findall(f"{_NS}text")]
        assert texts == ["ALPHA", "id", "name", "x"]
        # One key marker per key field
        assert len(groups[0].findall(f"{_NS}circle")) == 1
        key_text = groups[0].findall(f"{_NS}text")[1]
        assert key_text.get("font-weight") == "bold"

    def test_text_is_escaped(self):
        d = Diagram([Entity("a", "a<b&c", [Field("x>y")])])
        root = ET.fromstring(build_svg(d))
        texts = [t.text for t in root.iter(f"{_NS}text")]
        assert "A<B&C" in texts
        assert "x>y" in texts


# ─────────────────────────────────────────────────────────
# Rasterization
# ─────────────────────────────────────────────────────────


class TestRasterize:
    def test_supersampled_size(self, qapp):
        image = rasterize_svg(build_svg(_two_entities()), scale=2.0)
        assert image.width() == 760
        assert image.height() == int((compute_height(3) + 100) * 2)

    def test_invalid_svg_raises(self, qapp):
        with pytest.raises(ExportError):
            rasterize_svg("this is not svg")

    def test_save_image(self, qapp, tmp_path):
        path = save_image(build_svg(_two_entities()), tmp_path / "out" / "d.png", scale=1.0)
        assert path.exists()
        assert path.stat().st_size > 0


class TestExportPng:
    def test_writes_dated_file(self, qapp, tmp_path):
        out = export_png(_two_entities(), tmp_path, day=date(2025, 1, 2))
        assert out == tmp_path / "erd_diagram_2025-01-02.png"
        assert out.exists()

    def test_empty_diagram_writes_nothing(self, qapp, tmp_path):
        assert export_png(Diagram(), tmp_path) is None
        assert list(tmp_path.iterdir()) == []

    def test_same_day_overwrites(self, qapp, tmp_path):
        day = date(2025, 1, 2)
        first = export_png(_two_entities(), tmp_path, day=day)
        second = export_png(_two_entities(), tmp_path, day=day)
        assert first == second
        assert len(list(tmp_path.iterdir())) == 1
