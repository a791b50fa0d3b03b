"""
layout package

Force-directed auto-layout for entity positions.
"""

from layout.simulator import iter_layout, layout_step, run_layout
from layout.worker import LayoutRunner

__all__ = ["iter_layout", "layout_step", "run_layout", "LayoutRunner"]
