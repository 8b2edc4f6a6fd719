"""Data models for the scatter plot and its configuration.

Provides frozen dataclasses for the plotted observations, plot geometry and
the tunable constants of the interactive layers (zoom, tooltip, rendering).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

PointKey = Tuple[str, int]  # (name, time) - stable identity of a point


@dataclass(frozen=True)
class DataPoint:
    """One market-aggregate observation.

    Attributes:
        name: Label shown in the tooltip (ticker or date string).
        x: Horizontal value, must be > 0 for the log scale.
        y: Vertical value, must be > 0 for the log scale.
        z: Signed percentage change, drives the marker color.
        time: Originating timestamp in epoch milliseconds.
    """

    name: str
    x: float
    y: float
    z: float
    time: int = 0

    @property
    def key(self) -> PointKey:
        """Stable identity used to join successive renders."""
        return (self.name, self.time)


@dataclass(frozen=True)
class FetchError:
    """Error result returned by the data loader instead of a point list."""

    message: str
    error: bool = True


@dataclass(frozen=True)
class Margin:
    """Pixel insets between the outer surface bound and the plotting area."""

    top: float = 20.0
    right: float = 30.0
    bottom: float = 50.0
    left: float = 70.0


@dataclass(frozen=True)
class PlotConfig:
    """Geometry of one plot instance."""

    width: float
    height: float
    margin: Margin = Margin()

    @property
    def outer_width(self) -> float:
        return self.width + self.margin.left + self.margin.right

    @property
    def outer_height(self) -> float:
        return self.height + self.margin.top + self.margin.bottom


@dataclass(frozen=True)
class ZoomConfig:
    """Limits and sensitivity of the zoom/pan gestures."""

    min_scale: float = 0.5
    max_scale: float = 40.0
    wheel_sensitivity: float = 0.002  # exponent (base 2) per wheel angle unit
    click_distance: float = 3.0  # max pointer travel (px) still counted as a click


@dataclass(frozen=True)
class TooltipConfig:
    """Tooltip hit threshold, edge-flip ratios and offsets."""

    threshold: float = 30.0  # px, a point is shown when strictly closer
    flip_x_ratio: float = 0.85
    flip_top_ratio: float = 0.10
    flip_bottom_ratio: float = 0.90
    offset_right: float = 100.0
    offset_left: float = -250.0
    offset_middle: float = -50.0
    offset_below: float = 30.0
    offset_above: float = -120.0
    precision: int = 4
    fallback_precision: int = 6
    x_name: str = "volume"
    y_name: str = "close"
    z_name: str = "value change"


@dataclass(frozen=True)
class RenderConfig:
    """Visual constants of the render surface."""

    point_radius: float = 2.0
    hover_radius: float = 5.0
    fade_in_ms: int = 250
    path_tension: float = 0.75
    path_draw_ms: int = 2000
    path_color: Tuple[int, int, int, int] = (170, 170, 170, 85)  # '#aaa5'
    path_width: float = 3.0
    background_color: str = "w"
    foreground_color: str = "k"
    color_stops: Tuple[str, str, str] = field(
        default=("#c60606", "#ffffff", "#00b909")
    )
