"""Scale utilities mapping data values to pixel and color space.

The x/y scales are logarithmic; the color scale is a clamped symmetric-log
scale over a three-stop gradient. Scales are immutable: zooming produces new
scales through ``Transform.rescale_x/rescale_y`` rather than altering these.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .errors import ValidationError
from .models import DataPoint, PlotConfig

Number = Union[float, int]
ArrayLike = Union[Number, Sequence[Number], np.ndarray]
RGB = Tuple[int, int, int]

DEFAULT_DOMAIN: Tuple[float, float] = (1.0, 10.0)


def _check_log_values(values: np.ndarray, what: str) -> None:
    if not np.all(np.isfinite(values)) or np.any(values <= 0):
        raise ValidationError(
            f"Logarithmic scale {what} must be finite and > 0, got {values.tolist()!r}"
        )


class LogScale:
    """Logarithmic scale for strictly positive values."""

    def __init__(
        self, domain: Tuple[float, float], range: Tuple[float, float]
    ) -> None:
        """Initialize the scale.

        Args:
            domain: Input domain (d0, d1), both > 0 and distinct.
            range: Output range (r0, r1) in pixels.

        Raises:
            ValidationError: If the domain is not strictly positive or is empty.
        """
        d = np.asarray(domain, dtype=float)
        _check_log_values(d, "domain")
        if d[0] == d[1]:
            raise ValidationError(f"Logarithmic scale domain is empty: {domain!r}")
        self.domain = (float(d[0]), float(d[1]))
        self.range = (float(range[0]), float(range[1]))
        self._log0 = math.log(self.domain[0])
        self._log_span = math.log(self.domain[1]) - self._log0

    def __call__(self, value: ArrayLike):
        """Map domain value(s) to range; arrays are mapped element-wise."""
        v = np.asarray(value, dtype=float)
        _check_log_values(np.atleast_1d(v), "input")
        t = (np.log(v) - self._log0) / self._log_span
        out = self.range[0] + t * (self.range[1] - self.range[0])
        if out.ndim == 0:
            return float(out)
        return out

    def invert(self, value: ArrayLike):
        """Map range value(s) back to the domain."""
        r = np.asarray(value, dtype=float)
        t = (r - self.range[0]) / (self.range[1] - self.range[0])
        out = np.exp(self._log0 + t * self._log_span)
        if out.ndim == 0:
            return float(out)
        return out

    def with_domain(self, domain: Tuple[float, float]) -> "LogScale":
        """Return a copy of this scale over a different domain."""
        return LogScale(domain, self.range)

    def __repr__(self) -> str:
        return f"LogScale(domain={self.domain!r}, range={self.range!r})"


def _hex_to_rgb(color: str) -> RGB:
    c = color.lstrip("#")
    if len(c) == 3:
        c = "".join(ch * 2 for ch in c)
    if len(c) != 6:
        raise ValueError(f"Expected a #RRGGBB color, got {color!r}")
    return (int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16))


class SymlogColorScale:
    """Clamped symmetric-log color scale over a three-stop gradient.

    Values are transformed with ``sign(v) * log1p(|v| / constant)`` so that
    small changes around zero stay distinguishable while large swings
    saturate at the end colors.
    """

    def __init__(
        self,
        domain: Tuple[float, float, float],
        colors: Tuple[str, str, str] = ("#c60606", "#ffffff", "#00b909"),
        constant: float = 0.1,
    ) -> None:
        if len(domain) != 3 or len(colors) != 3:
            raise ValueError("SymlogColorScale needs exactly three stops")
        lo, mid, hi = (float(v) for v in domain)
        if not (lo <= mid <= hi) or lo == hi:
            raise ValidationError(f"Color domain must be increasing, got {domain!r}")
        self.domain = (lo, mid, hi)
        self.constant = float(constant)
        self._stops = np.array([self._transform(v) for v in self.domain])
        self._rgb = np.array([_hex_to_rgb(c) for c in colors], dtype=float)

    def _transform(self, v):
        return np.sign(v) * np.log1p(np.abs(v) / self.constant)

    def rgb_array(self, values: ArrayLike) -> np.ndarray:
        """Map values to an (N, 3) uint8 array of RGB colors."""
        v = np.atleast_1d(np.asarray(values, dtype=float))
        t = np.clip(self._transform(v), self._stops[0], self._stops[2])
        out = np.empty((v.size, 3), dtype=float)
        for channel in range(3):
            out[:, channel] = np.interp(t, self._stops, self._rgb[:, channel])
        return np.rint(out).astype(np.uint8)

    def __call__(self, value: Number) -> RGB:
        r, g, b = self.rgb_array(value)[0]
        return (int(r), int(g), int(b))


@dataclass(frozen=True)
class ScaleSet:
    """The three base scales of one plot."""

    x: LogScale
    y: LogScale
    color: SymlogColorScale

    def project(self, points: Sequence[DataPoint]) -> Tuple[np.ndarray, np.ndarray]:
        """Project points to unzoomed plot-area pixel coordinates."""
        if not points:
            return np.empty(0), np.empty(0)
        xs = np.fromiter((p.x for p in points), dtype=float, count=len(points))
        ys = np.fromiter((p.y for p in points), dtype=float, count=len(points))
        return np.atleast_1d(self.x(xs)), np.atleast_1d(self.y(ys))


def log_extent(values: Sequence[float]) -> Tuple[float, float]:
    """Domain for a log axis; a single value is widened one decade each side."""
    if len(values) == 0:
        return DEFAULT_DOMAIN
    arr = np.asarray(values, dtype=float)
    _check_log_values(arr, "domain")
    lo, hi = float(arr.min()), float(arr.max())
    if lo == hi:
        return (lo / 10.0, hi * 10.0)
    return (lo, hi)


def color_domain(values: Sequence[float]) -> Tuple[float, float, float]:
    """Three-stop domain with zero as the neutral midpoint."""
    if len(values) == 0:
        return (-1.0, 0.0, 1.0)
    lo = min(float(min(values)), 0.0)
    hi = max(float(max(values)), 0.0)
    if lo == hi:
        return (-1.0, 0.0, 1.0)
    return (lo, 0.0, hi)


def build_scales(
    points: Sequence[DataPoint],
    config: PlotConfig,
    colors: Tuple[str, str, str] = ("#c60606", "#ffffff", "#00b909"),
) -> ScaleSet:
    """Build the base x/y/color scales for a dataset.

    Args:
        points: Validated dataset (may be empty for an axes-only frame).
        config: Plot geometry; the y range is inverted (screen y grows down).
        colors: Negative, neutral and positive gradient stops.

    Returns:
        ScaleSet over the dataset extents.
    """
    x_scale = LogScale(log_extent([p.x for p in points]), (0.0, config.width))
    y_scale = LogScale(log_extent([p.y for p in points]), (config.height, 0.0))
    color = SymlogColorScale(color_domain([p.z for p in points]), colors)
    return ScaleSet(x_scale, y_scale, color)
