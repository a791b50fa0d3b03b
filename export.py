"""
export.py

Export the diagram as a PNG image.

The diagram is first serialized to a self-contained SVG document (all
styling as presentation attributes, since Qt's ``QSvgRenderer`` ignores
``<style>`` blocks and does not support markers), then rasterized off-screen
with ``QSvgRenderer`` at a fixed supersampling factor, independent of the
on-screen zoom.
"""

from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from datetime import date
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QByteArray, QObject, QSize, Qt, pyqtSignal
from PyQt6.QtGui import QImage, QPainter
from PyQt6.QtSvg import QSvgRenderer

from debug_trace import trace
from geometry import HEADER_HEIGHT, ROW_HEIGHT, Bounds, fmt_number, arrow_head, edge_curve, edge_line
from models import Diagram

log = logging.getLogger(__name__)

_SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", _SVG_NS)

EXPORT_MARGIN = 50.0
EXPORT_SCALE = 2.0
EXPORT_PREFIX = "erd_diagram"

# Export palette (light, independent of the UI theme)
EXPORT_COLORS = {
    "background": "#f8fafc",
    "node_fill": "#ffffff",
    "node_border": "#cbd5e1",
    "header_fill": "#f1f5f9",
    "title": "#334155",
    "field": "#64748b",
    "key_field": "#0f172a",
    "key_marker": "#f59e0b",
    "edge": "#94a3b8",
}


class ExportError(RuntimeError):
    """Raised when the SVG document cannot be rasterized or saved."""


def export_bounds(diagram: Diagram, margin: float = EXPORT_MARGIN) -> Optional[Bounds]:
    """Bounding box of all entities grown by *margin*; None if there are none."""
    bounds = diagram.bounds()
    if bounds is None:
        return None
    return bounds.expanded(margin)


def export_filename(prefix: str = EXPORT_PREFIX, day: Optional[date] = None, ext: str = "png") -> str:
    """File name of the form ``<prefix>_<YYYY-MM-DD>.<ext>``."""
    day = day or date.today()
    return f"{prefix}_{day.isoformat()}.{ext.lstrip('.')}"


# ─────────────────────────────────────────────────────────
# SVG serialization
# ─────────────────────────────────────────────────────────


def _sub(parent: ET.Element, tag: str, **attrs) -> ET.Element:
    el = ET.SubElement(parent, f"{{{_SVG_NS}}}{tag}")
    for key, value in attrs.items():
        name = key.rstrip("_").replace("_", "-")
        el.set(name, value if isinstance(value, str) else fmt_number(value))
    return el


def _points(points) -> str:
    return " ".join(f"{fmt_number(p.x)},{fmt_number(p.y)}" for p in points)


def build_svg(diagram: Diagram, margin: float = EXPORT_MARGIN, edge_style: str = "curve") -> Optional[str]:
    """Serialize the diagram to a standalone SVG document.

    Args:
        diagram: Diagram at its current positions.
        margin: Space around the content in world units.
        edge_style: ``"curve"`` or ``"straight"`` connectors.

    Returns:
        SVG text, or None for an empty diagram.
    """
    bounds = export_bounds(diagram, margin)
    if bounds is None:
        return None

    c = EXPORT_COLORS
    root = ET.Element(f"{{{_SVG_NS}}}svg", {
        "width": fmt_number(bounds.width),
        "height": fmt_number(bounds.height),
        "viewBox": f"{fmt_number(bounds.x)} {fmt_number(bounds.y)} {fmt_number(bounds.width)} {fmt_number(bounds.height)}",
    })
    _sub(root, "rect", x=bounds.x, y=bounds.y, width=bounds.width, height=bounds.height,
         fill=c["background"])

    # Edges beneath entities
    edges = _sub(root, "g", id="edges")
    for _rel, source, target in diagram.resolved_relationships():
        if edge_style == "straight":
            start, end = edge_line(source, target)
            _sub(edges, "line", x1=start.x, y1=start.y, x2=end.x, y2=end.y,
                 stroke=c["edge"], stroke_width=2)
            head = arrow_head(end, start)
        else:
            curve = edge_curve(source, target)
            _sub(edges, "path", d=curve.to_svg_path(), fill="none",
                 stroke=c["edge"], stroke_width=2)
            head = arrow_head(curve.end, curve.c2)
        if head is not None:
            _sub(edges, "polygon", points=_points(head), fill=c["edge"])

    nodes = _sub(root, "g", id="entities")
    for ent in diagram:
        g = _sub(nodes, "g", transform=f"translate({fmt_number(ent.x)}, {fmt_number(ent.y)})")
        _sub(g, "rect", width=ent.width, height=ent.height, rx=6,
             fill=c["node_fill"], stroke=c["node_border"], stroke_width=1)
        _sub(g, "rect", width=ent.width, height=HEADER_HEIGHT, rx=6, fill=c["header_fill"])
        # Square off the header's lower corners
        _sub(g, "rect", y=HEADER_HEIGHT - 5, width=ent.width, height=5, fill=c["header_fill"])
        title = _sub(g, "text", x=ent.width / 2, y=20, text_anchor="middle",
                     font_family="sans-serif", font_size=12, font_weight="bold", fill=c["title"])
        title.text = ent.label.upper()

        for i, fld in enumerate(ent.fields):
            row_y = HEADER_HEIGHT + i * ROW_HEIGHT
            text = _sub(g, "text", x=12, y=row_y + 17, font_family="monospace", font_size=11,
                        fill=c["key_field"] if fld.is_key else c["field"])
            if fld.is_key:
                text.set("font-weight", "bold")
                _sub(g, "circle", cx=ent.width - 20, cy=row_y + 13, r=3, fill=c["key_marker"])
            text.text = fld.name

    return ET.tostring(root, encoding="unicode")


# ─────────────────────────────────────────────────────────
# Rasterization
# ─────────────────────────────────────────────────────────


def rasterize_svg(svg_text: str, scale: float = EXPORT_SCALE) -> QImage:
    """Render SVG text into a new image *scale* times its intrinsic size.

    Raises:
        ExportError: If the SVG cannot be decoded or has no size.
    """
    renderer = QSvgRenderer(QByteArray(svg_text.encode("utf-8")))
    if not renderer.isValid():
        raise ExportError("QSvgRenderer could not decode the diagram SVG")

    default_size = renderer.defaultSize()
    if default_size.isEmpty():
        raise ExportError("Diagram SVG has no intrinsic size")

    target_w = int(math.ceil(default_size.width() * scale))
    target_h = int(math.ceil(default_size.height() * scale))

    image = QImage(QSize(target_w, target_h), QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(Qt.GlobalColor.white)

    painter = QPainter(image)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
    painter.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
    renderer.render(painter)
    painter.end()
    return image


def save_image(svg_text: str, path, scale: float = EXPORT_SCALE) -> Path:
    """Rasterize *svg_text* and write it to *path*.

    Raises:
        ExportError: If decoding or writing fails.
    """
    path = Path(path)
    image = rasterize_svg(svg_text, scale)
    path.parent.mkdir(parents=True, exist_ok=True)
    fmt = path.suffix.lstrip(".").upper() or "PNG"
    if not image.save(str(path), fmt):
        raise ExportError(f"Failed to save exported image: {path}")
    return path


def export_png(diagram: Diagram, directory, margin: float = EXPORT_MARGIN,
               scale: float = EXPORT_SCALE, prefix: str = EXPORT_PREFIX, ext: str = "png",
               edge_style: str = "curve", day: Optional[date] = None) -> Optional[Path]:
    """Write the diagram image into *directory*.

    Export is best effort: an empty diagram or a decode/save failure yields
    None instead of an exception.

    Returns:
        Path of the written file, or None.
    """
    svg_text = build_svg(diagram, margin, edge_style)
    if svg_text is None:
        trace("Export skipped: empty diagram", "EXPORT")
        return None

    target = Path(directory) / export_filename(prefix, day, ext)
    try:
        save_image(svg_text, target, scale)
    except (ExportError, OSError) as e:
        log.warning("Diagram export did not complete: %s", e)
        trace(f"Export failed: {e}", "EXPORT")
        return None

    trace(f"Exported {target}", "EXPORT")
    return target


class ExportWorker(QObject):
    """
    Background worker that runs export_png() for a detached diagram copy.

    Signals:
        finished(str): Emitted with the written file path on success
        failed(str): Emitted with a short message when nothing was written
    """

    finished = pyqtSignal(str)
    failed = pyqtSignal(str)

    def __init__(self, diagram: Diagram, directory, margin: float = EXPORT_MARGIN,
                 scale: float = EXPORT_SCALE, prefix: str = EXPORT_PREFIX, ext: str = "png",
                 edge_style: str = "curve"):
        """
        Initialize the export worker.

        Args:
            diagram: Diagram to export; must not be mutated while the worker runs
            directory: Export directory
            margin: World-unit margin around the entities
            scale: Supersampling factor
            prefix: File name prefix
            ext: Image file extension
            edge_style: "curve" or "straight"
        """
        super().__init__()
        self.diagram = diagram
        self.directory = Path(directory)
        self.margin = margin
        self.scale = scale
        self.prefix = prefix
        self.ext = ext
        self.edge_style = edge_style

    def run(self):
        """Write the image; the cause of a failure is logged by export_png()."""
        written = export_png(self.diagram, self.directory, self.margin, self.scale,
                             self.prefix, self.ext, self.edge_style)
        if written is None:
            self.failed.emit(f"Could not write {export_filename(self.prefix, ext=self.ext)} "
                             f"to {self.directory}")
        else:
            self.finished.emit(str(written))
