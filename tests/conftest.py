"""
tests/conftest.py

Shared fixtures. Qt runs on the offscreen platform so the widget and export
tests work without a display.
"""

from __future__ import annotations

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

# Ensure project root is on sys.path so imports work
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models import Diagram, Entity, Field, Relationship


@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture()
def sample_diagram() -> Diagram:
    """Three entities: users -> orders -> items."""
    return Diagram(
        [
            Entity("users", "Users", [Field("id", True), Field("email")], x=100, y=100),
            Entity("orders", "Orders", [Field("id", True), Field("user_id"), Field("total")], x=400, y=100),
            Entity("items", "Items", [Field("id", True)], x=400, y=400),
        ],
        [
            Relationship("orders", "users"),
            Relationship("items", "orders"),
        ],
    )
