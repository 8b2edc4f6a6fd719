"""Tests for the cardinal spline geometry of the connecting path."""

import numpy as np
import pytest

from cryptoscatterqt.curves import cardinal_segments, flatten, path_length


class TestCardinalSegments:
    """Tests for cardinal_segments."""

    def test_too_few_points(self):
        assert cardinal_segments([], []).shape == (0, 4, 2)
        assert cardinal_segments([1.0], [1.0]).shape == (0, 4, 2)

    def test_passes_through_points(self):
        xs = [0.0, 10.0, 25.0, 30.0, 50.0]
        ys = [5.0, 0.0, 20.0, 15.0, 40.0]
        segments = cardinal_segments(xs, ys)
        pts = np.column_stack([xs, ys])
        assert segments.shape == (4, 4, 2)
        np.testing.assert_allclose(segments[:, 0], pts[:-1])
        np.testing.assert_allclose(segments[:, 3], pts[1:])

    def test_two_points_is_straight(self):
        segments = cardinal_segments([0.0, 3.0], [0.0, 4.0])
        np.testing.assert_allclose(segments[0, 1], [0.0, 0.0])
        np.testing.assert_allclose(segments[0, 2], [3.0, 4.0])

    def test_interior_control_points(self):
        segments = cardinal_segments([0.0, 1.0, 2.0], [0.0, 1.0, 0.0], tension=0.75)
        k = 0.25 / 6.0
        np.testing.assert_allclose(segments[0, 2], [1.0 - 2.0 * k, 1.0])
        np.testing.assert_allclose(segments[1, 1], [1.0 + 2.0 * k, 1.0])

    def test_full_tension_is_polyline(self):
        segments = cardinal_segments([0.0, 3.0, 3.0], [0.0, 4.0, 10.0], tension=1.0)
        assert path_length(segments) == pytest.approx(11.0)


class TestFlatten:
    """Tests for flatten and path_length."""

    def test_sample_count(self):
        segments = cardinal_segments([0.0, 1.0, 2.0, 3.0], [0.0, 1.0, 0.0, 1.0])
        assert flatten(segments, steps=16).shape == (3 * 16 + 1, 2)

    def test_empty(self):
        assert flatten(np.empty((0, 4, 2))).shape == (0, 2)
        assert path_length(np.empty((0, 4, 2))) == 0.0

    def test_straight_length(self):
        assert path_length(cardinal_segments([0.0, 3.0], [0.0, 4.0])) == pytest.approx(5.0)
