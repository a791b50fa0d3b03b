"""
tests/test_interaction.py

Pointer gesture state machine: pan, drag, wheel zoom and history commits.
"""

from __future__ import annotations

import pytest

from history import HistoryManager
from interaction import InteractionController, InteractionState
from models import Diagram, Entity, Field
from viewport import Viewport


@pytest.fixture()
def ctl(qapp):
    diagram = Diagram([Entity("a", "A", [Field("id", True)], x=100, y=100)])
    history = HistoryManager(diagram=diagram)
    history.push(diagram.snapshot())
    return InteractionController(diagram, Viewport(), history)


class TestPan:
    def test_empty_canvas_pans(self, ctl):
        assert ctl.pointer_down(10, 10)
        assert ctl.state == InteractionState.PANNING
        ctl.pointer_move(30, 15)
        ctl.pointer_move(40, 25)
        assert (ctl.viewport.pan_x, ctl.viewport.pan_y) == (30, 15)
        assert not ctl.pointer_up()
        assert ctl.state == InteractionState.IDLE
        assert len(ctl.history) == 1

    def test_move_without_press_ignored(self, ctl):
        assert not ctl.pointer_move(50, 50)
        assert (ctl.viewport.pan_x, ctl.viewport.pan_y) == (0, 0)


class TestDrag:
    def test_drag_at_scale_two_moves_half_distance(self, ctl):
        ctl.viewport.set_scale(2.0)
        # Entity at (100, 100) is at screen (200, 200)
        assert ctl.pointer_down(210, 210)
        assert ctl.state == InteractionState.DRAGGING
        assert ctl.dragging_id == "a"
        ctl.pointer_move(260, 210)
        ent = ctl.diagram.get("a")
        assert (ent.x, ent.y) == (125, 100)

    def test_release_commits_one_entry(self, ctl):
        ctl.pointer_down(110, 110)
        ctl.pointer_move(120, 110)
        ctl.pointer_move(130, 120)
        assert ctl.pointer_up()
        assert len(ctl.history) == 2
        assert ctl.history.current() == {"a": (120.0, 110.0)}

    def test_click_without_move_records_nothing(self, ctl):
        ctl.pointer_down(110, 110)
        assert not ctl.pointer_up()
        assert len(ctl.history) == 1

    def test_leave_ends_drag(self, ctl):
        ctl.pointer_down(110, 110)
        ctl.pointer_move(150, 110)
        assert ctl.pointer_leave()
        assert ctl.state == InteractionState.IDLE
        assert ctl.dragging_id is None
        # Further moves do nothing
        ctl.pointer_move(300, 300)
        assert ctl.diagram.get("a").x == 140

    def test_second_press_ignored_while_active(self, ctl):
        ctl.pointer_down(110, 110)
        assert not ctl.pointer_down(0, 0)
        assert ctl.state == InteractionState.DRAGGING


class TestWheel:
    def test_positive_delta_zooms_out(self, ctl):
        ctl.wheel(100)
        assert ctl.viewport.scale == pytest.approx(0.9)

    def test_clamped(self, ctl):
        ctl.wheel(-100000)
        assert ctl.viewport.scale == ctl.viewport.max_zoom

    def test_wheel_during_drag(self, ctl):
        ctl.pointer_down(110, 110)
        ctl.wheel(-500)
        assert ctl.state == InteractionState.DRAGGING
        assert ctl.viewport.scale == pytest.approx(1.5)


class TestLock:
    def test_locked_ignores_press(self, ctl):
        ctl.set_locked(True)
        assert not ctl.pointer_down(110, 110)

    def test_lock_cancels_without_history(self, ctl):
        ctl.pointer_down(110, 110)
        ctl.pointer_move(150, 110)
        ctl.set_locked(True)
        assert ctl.state == InteractionState.IDLE
        assert len(ctl.history) == 1

    def test_lock_puts_dragged_entity_back(self, ctl):
        ctl.pointer_down(110, 110)
        ctl.pointer_move(160, 130)
        assert ctl.diagram.snapshot() == {"a": (150.0, 120.0)}
        ctl.set_locked(True)
        assert ctl.diagram.snapshot() == {"a": (100.0, 100.0)}
        assert ctl.diagram.snapshot() == ctl.history.current()

    def test_lock_while_panning_keeps_pan(self, ctl):
        ctl.pointer_down(10, 10)
        ctl.pointer_move(30, 10)
        ctl.set_locked(True)
        assert ctl.viewport.pan_x == 20
        assert ctl.diagram.snapshot() == {"a": (100.0, 100.0)}

    def test_reset_unlocks(self, ctl):
        ctl.set_locked(True)
        ctl.reset()
        assert not ctl.locked


class TestChangeCallback:
    def test_notified_on_moves(self, ctl):
        calls = []
        ctl.set_on_changed(lambda: calls.append(1))
        ctl.pointer_down(10, 10)
        ctl.pointer_move(20, 20)
        ctl.pointer_up()
        assert len(calls) == 3


class TestHitTest:
    def test_custom_lookup_selects_entity(self, ctl):
        ctl.set_hit_test(lambda sx, sy: "a")
        assert ctl.pointer_down(0, 0)
        assert ctl.state == InteractionState.DRAGGING
        assert ctl.dragging_id == "a"

    def test_custom_lookup_miss_pans(self, ctl):
        ctl.set_hit_test(lambda sx, sy: None)
        assert ctl.pointer_down(110, 110)
        assert ctl.state == InteractionState.PANNING

    def test_unknown_id_pans(self, ctl):
        ctl.set_hit_test(lambda sx, sy: "ghost")
        ctl.pointer_down(110, 110)
        assert ctl.state == InteractionState.PANNING
