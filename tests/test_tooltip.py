"""Tests for tooltip formatting, placement and hover resolution."""

import pytest

from cryptoscatterqt.models import DataPoint, Margin, PlotConfig, TooltipConfig
from cryptoscatterqt.scales import build_scales
from cryptoscatterqt.spatial_index import SpatialIndex
from cryptoscatterqt.tooltip import (
    TooltipEngine,
    format_change,
    format_number,
    place_tooltip,
    tooltip_html,
)
from cryptoscatterqt.transform import Transform

PLOT = PlotConfig(400, 300, Margin(10, 10, 10, 10))


class TestFormatting:
    """Tests for format_number / format_change."""

    def test_trailing_zeros_trimmed(self):
        assert format_number(100.0) == "100"
        assert format_number(1234.5) == "1234.5"
        assert format_number(1.23456) == "1.2346"

    def test_tiny_values_keep_significant_digits(self):
        assert format_number(0.00005) == "0.00005"
        assert format_number(1e-9) == "1e-09"

    def test_change(self):
        assert format_change(0.00005) == "+0.00005%"
        assert format_change(-3.4567) == "-3.4567%"
        assert format_change(2.0) == "+2%"
        assert format_change(0.0) == "+0%"
        assert format_change(-0.00001) == "-0.00001%"

    def test_html(self):
        point = DataPoint("X:<BTC>USD", 1500.0, 42000.5, -1.25)
        body = tooltip_html(point)
        assert "X:&lt;BTC&gt;USD" in body
        assert "volume&nbsp;: 1500" in body
        assert "close&nbsp;: 42000.5" in body
        assert "value change&nbsp;: -1.25%" in body

    def test_html_custom_names(self):
        config = TooltipConfig(x_name="vol", y_name="px", z_name="chg")
        body = tooltip_html(DataPoint("A", 1.0, 2.0, 3.0), config)
        assert "vol&nbsp;: 1" in body
        assert "chg&nbsp;: +3%" in body


class TestPlacement:
    """Tests for place_tooltip edge flipping."""

    def test_default_right_and_above(self):
        assert place_tooltip(100.0, 150.0, 400.0, 300.0) == (200.0, 100.0)

    def test_flips_left_near_right_edge(self):
        assert place_tooltip(380.0, 150.0, 400.0, 300.0) == (130.0, 100.0)

    def test_boundary_ratio_does_not_flip(self):
        """The flip only happens strictly past the ratio."""
        left, _ = place_tooltip(340.0, 150.0, 400.0, 300.0)
        assert left == 440.0

    def test_below_near_top(self):
        assert place_tooltip(100.0, 10.0, 400.0, 300.0) == (200.0, 40.0)

    def test_above_near_bottom(self):
        assert place_tooltip(100.0, 290.0, 400.0, 300.0) == (200.0, 170.0)


class TestTooltipEngine:
    """Tests for TooltipEngine.update."""

    def make_engine(self, transform=Transform.identity()):
        points = [DataPoint("A", 1.0, 1.0, 0.0), DataPoint("B", 2.0, 2.0, 1.5)]
        index = SpatialIndex([0.0, 200.0], [0.0, 150.0])
        return TooltipEngine(index, points, PLOT, lambda: transform)

    def test_near_point_shows(self):
        state = self.make_engine().update(215.0, 160.0)
        assert state.visible
        assert state.index == 1
        assert state.distance == pytest.approx(5.0)
        assert "+1.5%" in state.html

    def test_threshold_is_exclusive(self):
        """A point exactly at the threshold distance is not shown."""
        engine = self.make_engine()
        assert not engine.update(240.0, 160.0).visible
        assert engine.update(239.5, 160.0).visible

    def test_far_pointer_hides(self):
        engine = self.make_engine()
        engine.update(215.0, 160.0)
        state = engine.update(110.0, 60.0)
        assert not state.visible
        assert state.index is None
        assert engine.state is state

    def test_distance_in_screen_pixels_when_zoomed(self):
        """Under zoom the threshold applies to on-screen distance."""
        engine = self.make_engine(Transform(2.0, -200.0, -150.0))
        state = engine.update(225.0, 160.0)
        assert state.visible
        assert state.distance == pytest.approx(15.0)
        assert not engine.update(250.0, 160.0).visible

    def test_hide(self):
        engine = self.make_engine()
        engine.update(215.0, 160.0)
        assert not engine.hide().visible

    def test_reference_dataset(self, three_points):
        scales = build_scales(three_points, PLOT)
        index = SpatialIndex(*scales.project(three_points))
        engine = TooltipEngine(index, three_points, PLOT, Transform.identity)
        state = engine.update(212.0, 158.0)
        assert state.index == 1
        assert "<b>B</b>" in state.html
        assert "-3%" in state.html

    def test_size_mismatch(self, three_points):
        with pytest.raises(ValueError):
            TooltipEngine(SpatialIndex([0.0], [0.0]), three_points, PLOT, Transform.identity)
