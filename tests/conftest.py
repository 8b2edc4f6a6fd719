"""Pytest configuration.

The core modules (scales, transform, spatial index, zoom, tooltip, curves,
loader) are Qt-free and tested directly. Widget tests need a QApplication; Qt
runs on the offscreen platform so no display server is required.
"""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    """Session-wide QApplication (skips when PySide6/pyqtgraph are missing)."""
    QtWidgets = pytest.importorskip("PySide6.QtWidgets")
    pytest.importorskip("pyqtgraph")
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def three_points():
    """Three points spanning two decades on both axes."""
    from cryptoscatterqt.models import DataPoint

    return [
        DataPoint(name="A", x=1.0, y=10.0, z=5.0, time=1),
        DataPoint(name="B", x=10.0, y=100.0, z=-3.0, time=2),
        DataPoint(name="C", x=100.0, y=1000.0, z=0.0, time=3),
    ]
