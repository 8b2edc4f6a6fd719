"""Cardinal spline geometry for the connecting path.

Segments are cubic Bezier curves ``(start, control1, control2, end)``; the
end tangents use the neighbouring point itself, so the curve starts and ends
exactly at the first and last points with no overshoot.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def cardinal_segments(
    xs: Sequence[float], ys: Sequence[float], tension: float = 0.75
) -> np.ndarray:
    """Return the Bezier segments of a cardinal spline through the points.

    Args:
        xs: X coordinates in drawing order.
        ys: Y coordinates in drawing order.
        tension: 0 gives a Catmull-Rom-like curve, 1 gives straight lines.

    Returns:
        Array of shape (n - 1, 4, 2); empty (0, 4, 2) for fewer than 2 points.
    """
    pts = np.column_stack([np.asarray(xs, dtype=float), np.asarray(ys, dtype=float)])
    n = len(pts)
    if n < 2:
        return np.empty((0, 4, 2))

    k = (1.0 - tension) / 6.0
    prev = np.vstack([pts[1:2], pts[:-2]])  # P[i-1], or P[1] for the first segment
    nxt = np.vstack([pts[2:], pts[-2:-1]])  # P[i+2], or P[n-2] for the last segment
    start = pts[:-1]
    end = pts[1:]

    segments = np.empty((n - 1, 4, 2))
    segments[:, 0] = start
    segments[:, 1] = start + k * (end - prev)
    segments[:, 2] = end + k * (start - nxt)
    segments[:, 3] = end
    return segments


def flatten(segments: np.ndarray, steps: int = 16) -> np.ndarray:
    """Sample Bezier segments into a polyline of shape (m, 2)."""
    if len(segments) == 0:
        return np.empty((0, 2))
    t = np.linspace(0.0, 1.0, steps + 1)[:, None]
    mt = 1.0 - t
    b0, b1, b2, b3 = mt ** 3, 3 * mt ** 2 * t, 3 * mt * t ** 2, t ** 3
    parts = [
        b0 * s[0] + b1 * s[1] + b2 * s[2] + b3 * s[3]
        for s in segments
    ]
    # drop the duplicated joint between consecutive segments
    return np.vstack([parts[0]] + [p[1:] for p in parts[1:]])


def path_length(segments: np.ndarray, steps: int = 16) -> float:
    """Approximate the arc length of the spline."""
    line = flatten(segments, steps)
    if len(line) < 2:
        return 0.0
    return float(np.sum(np.hypot(*np.diff(line, axis=0).T)))
