"""Tests for the scale utilities in scales.py.

Tests LogScale projection/inversion, rejection of non-positive values,
domain extents, the symmetric-log color scale and build_scales
on the three-point reference dataset.
"""

import numpy as np
import pytest

from cryptoscatterqt.errors import ValidationError
from cryptoscatterqt.models import DataPoint, Margin, PlotConfig
from cryptoscatterqt.scales import (
    LogScale,
    SymlogColorScale,
    build_scales,
    color_domain,
    log_extent,
)


class TestLogScale:
    """Tests for LogScale."""

    def test_geometric_midpoint_maps_to_range_midpoint(self):
        """10 is halfway between 1 and 100 on a log axis."""
        scale = LogScale((1.0, 100.0), (0.0, 400.0))
        assert scale(1.0) == pytest.approx(0.0)
        assert scale(10.0) == pytest.approx(200.0)
        assert scale(100.0) == pytest.approx(400.0)

    def test_inverted_range(self):
        """Y scales map the low end of the domain to the bottom of the plot."""
        scale = LogScale((10.0, 1000.0), (300.0, 0.0))
        assert scale(10.0) == pytest.approx(300.0)
        assert scale(100.0) == pytest.approx(150.0)
        assert scale(1000.0) == pytest.approx(0.0)

    def test_array_input(self):
        """Arrays are mapped element-wise."""
        scale = LogScale((1.0, 100.0), (0.0, 400.0))
        out = scale(np.array([1.0, 10.0, 100.0]))
        np.testing.assert_allclose(out, [0.0, 200.0, 400.0])

    def test_invert_round_trip(self):
        """invert() undoes the projection."""
        scale = LogScale((0.5, 2e6), (0.0, 800.0))
        for value in (0.5, 3.7, 1234.5, 2e6):
            assert scale.invert(scale(value)) == pytest.approx(value)

    @pytest.mark.parametrize("domain", [(0.0, 10.0), (-1.0, 10.0), (1.0, float("nan"))])
    def test_invalid_domain(self, domain):
        """Non-positive or non-finite domain bounds are rejected."""
        with pytest.raises(ValidationError):
            LogScale(domain, (0.0, 100.0))

    def test_empty_domain(self):
        """A zero-width domain is rejected."""
        with pytest.raises(ValidationError):
            LogScale((5.0, 5.0), (0.0, 100.0))

    @pytest.mark.parametrize("value", [0.0, -2.0, float("inf")])
    def test_invalid_input(self, value):
        """Projecting a value the log cannot handle fails instead of yielding NaN."""
        scale = LogScale((1.0, 100.0), (0.0, 400.0))
        with pytest.raises(ValidationError):
            scale(value)

    def test_validation_error_is_value_error(self):
        """Callers catching ValueError also catch ValidationError."""
        with pytest.raises(ValueError):
            LogScale((0.0, 1.0), (0.0, 1.0))

    def test_projection_is_finite_for_wide_ranges(self):
        """Any positive value inside the domain projects to a finite pixel."""
        rng = np.random.default_rng(0)
        values = 10 ** rng.uniform(-8, 12, 2000)
        scale = LogScale(log_extent(values), (0.0, 1000.0))
        assert np.all(np.isfinite(scale(values)))


class TestExtents:
    """Tests for log_extent and color_domain."""

    def test_log_extent(self):
        assert log_extent([5.0, 2.0, 80.0]) == (2.0, 80.0)

    def test_single_value_widened(self):
        """A single distinct value gets one decade on each side."""
        assert log_extent([5.0, 5.0]) == pytest.approx((0.5, 50.0))

    def test_empty_uses_default(self):
        assert log_extent([]) == (1.0, 10.0)

    def test_log_extent_rejects_zero(self):
        with pytest.raises(ValidationError):
            log_extent([1.0, 0.0])

    def test_color_domain(self):
        """Zero is always the neutral midpoint."""
        assert color_domain([5.0, -3.0, 0.0]) == (-3.0, 0.0, 5.0)
        assert color_domain([2.0, 4.0]) == (0.0, 0.0, 4.0)
        assert color_domain([0.0, 0.0]) == (-1.0, 0.0, 1.0)
        assert color_domain([]) == (-1.0, 0.0, 1.0)


class TestSymlogColorScale:
    """Tests for SymlogColorScale."""

    def setup_method(self):
        self.scale = SymlogColorScale((-3.0, 0.0, 5.0))

    def test_stops(self):
        assert self.scale(-3.0) == (0xC6, 0x06, 0x06)
        assert self.scale(0.0) == (255, 255, 255)
        assert self.scale(5.0) == (0x00, 0xB9, 0x09)

    def test_clamped(self):
        """Out-of-domain values saturate at the end colors."""
        assert self.scale(500.0) == self.scale(5.0)
        assert self.scale(-500.0) == self.scale(-3.0)

    def test_small_values_not_collapsed(self):
        """Values near zero are visibly tinted instead of mapping to white."""
        r, g, b = self.scale(0.1)
        assert (r, g, b) != (255, 255, 255)
        assert g > r

        r, g, b = self.scale(-0.1)
        assert r > g

    def test_rgb_array(self):
        colors = self.scale.rgb_array([-3.0, 0.0, 5.0])
        assert colors.shape == (3, 3)
        assert colors.dtype == np.uint8

    def test_invalid_domain(self):
        with pytest.raises(ValidationError):
            SymlogColorScale((1.0, 0.0, -1.0))


class TestBuildScales:
    """Tests for build_scales."""

    def test_reference_dataset(self, three_points):
        """x=10 lands on the horizontal midpoint of a 400px plot."""
        config = PlotConfig(400, 300, Margin(10, 10, 10, 10))
        scales = build_scales(three_points, config)

        assert scales.x.domain == (1.0, 100.0)
        assert scales.y.domain == (10.0, 1000.0)
        assert scales.x(10.0) == pytest.approx(200.0)
        assert scales.y(100.0) == pytest.approx(150.0)
        assert scales.color.domain == (-3.0, 0.0, 5.0)

    def test_project(self, three_points):
        config = PlotConfig(400, 300)
        xs, ys = build_scales(three_points, config).project(three_points)
        np.testing.assert_allclose(xs, [0.0, 200.0, 400.0])
        np.testing.assert_allclose(ys, [300.0, 150.0, 0.0])

    def test_empty_dataset_frame(self):
        """An empty dataset still yields usable scales for the axes."""
        scales = build_scales([], PlotConfig(400, 300))
        assert scales.x.domain == (1.0, 10.0)
        xs, ys = scales.project([])
        assert len(xs) == 0 and len(ys) == 0

    def test_single_point(self):
        point = DataPoint("only", 20.0, 3.0, 1.0)
        scales = build_scales([point], PlotConfig(400, 300))
        assert scales.x(20.0) == pytest.approx(200.0)
        assert scales.y(3.0) == pytest.approx(150.0)
