"""
tests/test_layout.py

Force-directed layout simulation and the timer-driven runner.
"""

from __future__ import annotations

import math

import pytest
from PyQt6.QtCore import QEventLoop, QTimer

from layout import LayoutRunner, iter_layout, layout_step, run_layout
from models import Relationship
from settings import LayoutSettings


def _dist(snap, a, b):
    ax, ay = snap[a]
    bx, by = snap[b]
    return math.hypot(ax - bx, ay - by)


# ─────────────────────────────────────────────────────────
# Simulation
# ─────────────────────────────────────────────────────────


class TestLayoutStep:
    def test_does_not_mutate_input(self):
        snap = {"a": (0.0, 0.0), "b": (100.0, 0.0)}
        layout_step(snap, [])
        assert snap == {"a": (0.0, 0.0), "b": (100.0, 0.0)}

    def test_repulsion_pushes_apart(self):
        params = LayoutSettings(gravity=0.0)
        snap = {"a": (0.0, 0.0), "b": (100.0, 0.0)}
        out = layout_step(snap, [], params)
        # 500000 / 100^2 * 0.1 = 5 per entity
        assert out["a"] == pytest.approx((-5.0, 0.0))
        assert out["b"] == pytest.approx((105.0, 0.0))

    def test_spring_pulls_toward_length(self):
        params = LayoutSettings(repulsion=0.0, gravity=0.0)
        snap = {"a": (0.0, 0.0), "b": (450.0, 0.0)}
        out = layout_step(snap, [Relationship("a", "b")], params)
        # (450 - 250) * 0.05 = 10 toward each other
        assert out["a"] == pytest.approx((10.0, 0.0))
        assert out["b"] == pytest.approx((440.0, 0.0))

    def test_gravity_toward_center(self):
        params = LayoutSettings(gravity=0.5, center_x=100.0, center_y=0.0)
        out = layout_step({"a": (0.0, 0.0)}, [], params)
        assert out["a"] == pytest.approx((50.0, 0.0))

    def test_displacements_use_iteration_start_positions(self):
        params = LayoutSettings(gravity=0.0)
        snap = {"a": (0.0, 0.0), "b": (100.0, 0.0), "c": (200.0, 0.0)}
        out = layout_step(snap, [], params)
        # Symmetric input must stay symmetric around b
        assert out["b"][0] == pytest.approx(100.0)
        assert out["a"][0] - 0.0 == pytest.approx(-(out["c"][0] - 200.0))

    def test_coincident_entities_separate(self):
        params = LayoutSettings(gravity=0.0)
        out = layout_step({"a": (10.0, 10.0), "b": (10.0, 10.0)}, [], params)
        assert out["a"] != out["b"]
        assert all(math.isfinite(v) for p in out.values() for v in p)

    def test_self_loop_and_unknown_ids_skipped(self):
        params = LayoutSettings(repulsion=0.0, gravity=0.0)
        snap = {"a": (0.0, 0.0)}
        rels = [Relationship("a", "a"), Relationship("a", "ghost")]
        assert layout_step(snap, rels, params) == snap

    def test_sizes_use_centers(self):
        params = LayoutSettings(repulsion=0.0, gravity=1.0, center_x=100.0, center_y=100.0)
        out = layout_step({"a": (0.0, 0.0)}, [], params, sizes={"a": (200.0, 200.0)})
        # Center already at (100, 100): no pull
        assert out["a"] == pytest.approx((0.0, 0.0))


class TestRunLayout:
    def test_exact_iteration_count(self):
        params = LayoutSettings(iterations=7)
        steps = list(iter_layout({"a": (0.0, 0.0), "b": (50.0, 0.0)}, [], params))
        assert len(steps) == 7

    def test_no_edges_stays_finite(self):
        snap = {f"n{i}": (float(i * 10), float(i * 5)) for i in range(6)}
        out = run_layout(snap, [])
        assert set(out) == set(snap)
        assert all(math.isfinite(v) for p in out.values() for v in p)

    def test_deterministic(self):
        snap = {"a": (0.0, 0.0), "b": (30.0, 10.0), "c": (60.0, 90.0)}
        rels = [Relationship("a", "b"), Relationship("b", "c")]
        assert run_layout(snap, rels) == run_layout(snap, rels)

    def test_chain_moves_toward_spring_length(self):
        snap = {"A": (0.0, 0.0), "B": (1000.0, 0.0), "C": (2000.0, 0.0)}
        rels = [Relationship("A", "B"), Relationship("B", "C")]
        out = run_layout(snap, rels)
        for a, b in (("A", "B"), ("B", "C")):
            assert abs(_dist(out, a, b) - 250) < abs(_dist(snap, a, b) - 250)

    def test_single_edge_converges_toward_spring_length(self):
        snap = {"A": (100.0, 100.0), "B": (850.0, 100.0), "C": (100.0, 600.0)}
        out = run_layout(snap, [Relationship("A", "B")])
        after = _dist(out, "A", "B")
        assert math.isfinite(after) and after > 0
        assert abs(after - 250) < abs(_dist(snap, "A", "B") - 250)

    def test_zero_iterations_returns_input(self):
        snap = {"a": (1.0, 2.0)}
        assert run_layout(snap, [], LayoutSettings(iterations=0)) == snap

    def test_empty(self):
        assert run_layout({}, []) == {}


# ─────────────────────────────────────────────────────────
# Runner
# ─────────────────────────────────────────────────────────


class TestLayoutRunner:
    def test_emits_final_snapshot(self, qapp):
        params = LayoutSettings(iterations=25, steps_per_tick=10)
        snap = {"a": (0.0, 0.0), "b": (300.0, 0.0)}
        rels = [Relationship("a", "b")]
        runner = LayoutRunner(snap, rels, params)

        results = []
        progress = []
        runner.finished.connect(results.append)
        runner.progress.connect(lambda done, total: progress.append((done, total)))
        loop = QEventLoop()
        runner.finished.connect(lambda _snap: loop.quit())
        QTimer.singleShot(5000, loop.quit)
        runner.start()
        loop.exec()

        assert len(results) == 1
        assert results[0] == run_layout(snap, rels, params)
        assert progress[-1] == (25, 25)
        assert not runner.is_running
