"""
viewport.py

Pan/zoom camera between world coordinates (entity positions) and screen
pixels: ``screen = world * scale + pan``.
"""

from __future__ import annotations

from typing import Optional, Tuple

from geometry import Bounds

MIN_ZOOM = 0.2
MAX_ZOOM = 3.0
ZOOM_STEP = 0.2
FIT_MAX_SCALE = 1.2
FIT_PADDING = 100.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class Viewport:
    """Pan offset (screen pixels) and zoom scale.

    The scale is clamped to ``[min_zoom, max_zoom]`` after every mutation.
    """

    def __init__(self, pan_x: float = 0.0, pan_y: float = 0.0, scale: float = 1.0,
                 min_zoom: float = MIN_ZOOM, max_zoom: float = MAX_ZOOM,
                 zoom_step: float = ZOOM_STEP):
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.zoom_step = zoom_step
        self.pan_x = pan_x
        self.pan_y = pan_y
        self.scale = clamp(scale, min_zoom, max_zoom)

    @classmethod
    def from_settings(cls, zoom_settings) -> "Viewport":
        """Create a 1:1 viewport using ``CanvasZoomSettings`` bounds."""
        return cls(min_zoom=zoom_settings.min_scale, max_zoom=zoom_settings.max_scale,
                   zoom_step=zoom_settings.button_step)

    def __repr__(self) -> str:
        return f"Viewport(pan=({self.pan_x:.1f}, {self.pan_y:.1f}), scale={self.scale:.3f})"

    def copy(self) -> "Viewport":
        return Viewport(self.pan_x, self.pan_y, self.scale,
                        self.min_zoom, self.max_zoom, self.zoom_step)

    # ----------------------------
    # Mutation
    # ----------------------------

    def pan_by(self, dx: float, dy: float) -> None:
        """Shift by a screen-space delta."""
        self.pan_x += dx
        self.pan_y += dy

    def set_scale(self, scale: float) -> None:
        self.scale = clamp(scale, self.min_zoom, self.max_zoom)

    def zoom_by(self, delta: float) -> None:
        """Add *delta* to the scale, clamped to the zoom bounds. Pan is unchanged."""
        self.set_scale(self.scale + delta)

    def zoom_in(self) -> None:
        self.zoom_by(self.zoom_step)

    def zoom_out(self) -> None:
        self.zoom_by(-self.zoom_step)

    def reset(self) -> None:
        """Back to 1:1 with no pan."""
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.set_scale(1.0)

    def assign(self, other: "Viewport") -> None:
        """Take over pan and scale from *other*."""
        self.pan_x = other.pan_x
        self.pan_y = other.pan_y
        self.set_scale(other.scale)

    # ----------------------------
    # Coordinate transforms
    # ----------------------------

    def screen_delta_to_world(self, dx: float, dy: float) -> Tuple[float, float]:
        """Convert a pointer delta so dragged content tracks the cursor 1:1."""
        return dx / self.scale, dy / self.scale

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        return (sx - self.pan_x) / self.scale, (sy - self.pan_y) / self.scale

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        return wx * self.scale + self.pan_x, wy * self.scale + self.pan_y

    def visible_world_rect(self, container_w: float, container_h: float) -> Bounds:
        """World-space rectangle currently shown in a container of that size."""
        x, y = self.screen_to_world(0.0, 0.0)
        return Bounds(x, y, container_w / self.scale, container_h / self.scale)

    def grid(self, base_spacing: float) -> Tuple[float, float, float]:
        """Dot grid spacing and offset in screen pixels.

        Returns:
            ``(spacing, offset_x, offset_y)`` with offsets in ``[0, spacing)``.
        """
        spacing = base_spacing * self.scale
        if spacing <= 0:
            return 0.0, 0.0, 0.0
        return spacing, self.pan_x % spacing, self.pan_y % spacing

    # ----------------------------
    # Fitting
    # ----------------------------

    def fit_to_content(self, bounds: Optional[Bounds], container_w: float, container_h: float,
                       padding: float = FIT_PADDING,
                       max_scale: float = FIT_MAX_SCALE) -> "Viewport":
        """Viewport that shows *bounds* centered in the container.

        The content is padded on every side, and the fit scale is capped at
        *max_scale* so small diagrams are not blown up.

        Returns:
            A new Viewport; a copy of this one when there is nothing to fit.
        """
        if bounds is None or container_w <= 0 or container_h <= 0:
            return self.copy()

        content_w = bounds.width + padding * 2
        content_h = bounds.height + padding * 2
        if content_w <= 0 or content_h <= 0:
            return self.copy()

        scale = min(container_w / content_w, container_h / content_h, max_scale)
        scale = clamp(scale, self.min_zoom, self.max_zoom)

        center_x = bounds.x + bounds.width / 2
        center_y = bounds.y + bounds.height / 2
        pan_x = container_w / 2 - center_x * scale
        pan_y = container_h / 2 - center_y * scale
        return Viewport(pan_x, pan_y, scale, self.min_zoom, self.max_zoom, self.zoom_step)
