"""Tooltip resolution, content formatting and placement.

The engine maps a pointer position back into the unzoomed space the spatial
index was built in, picks the nearest point and decides whether it is close
enough (in screen pixels) to show.
"""

from __future__ import annotations

import html
import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .models import DataPoint, PlotConfig, TooltipConfig
from .spatial_index import SpatialIndex
from .transform import Transform


def _trim(text: str) -> str:
    """Drop trailing zeros after the decimal point, and a dangling point."""
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-", "-0"):
        return "0"
    return text


def format_number(value: float, precision: int = 4, fallback_precision: int = 6) -> str:
    """Format a value with ``precision`` decimals, trailing zeros trimmed.

    Values smaller in magnitude than one unit of the last decimal would lose
    their significant digits, so they use ``fallback_precision`` decimals
    instead (and scientific notation if even that rounds to zero).
    """
    if value != 0 and abs(value) < 10.0 ** -precision:
        text = _trim(f"{value:.{fallback_precision}f}")
        if text == "0":
            text = f"{value:.{fallback_precision}g}"
        return text
    return _trim(f"{value:.{precision}f}")


def format_change(value: float, precision: int = 4, fallback_precision: int = 6) -> str:
    """Format a signed percentage, e.g. ``+2%`` or ``-3.4567%``."""
    text = format_number(value, precision, fallback_precision)
    sign = "+" if value >= 0 and not text.startswith("-") else ""
    return f"{sign}{text}%"


def tooltip_html(point: DataPoint, config: TooltipConfig = TooltipConfig()) -> str:
    """Rich-text body of the tooltip for one point."""
    p, fp = config.precision, config.fallback_precision
    return (
        f'<p class="title"><b>{html.escape(point.name)}</b></p>'
        '<ul class="value-list">'
        f"<li>{html.escape(config.x_name)}&nbsp;: {format_number(point.x, p, fp)}</li>"
        f"<li>{html.escape(config.y_name)}&nbsp;: {format_number(point.y, p, fp)}</li>"
        f"<li>{html.escape(config.z_name)}&nbsp;: {format_change(point.z, p, fp)}</li>"
        "</ul>"
    )


def place_tooltip(
    mx: float, my: float, width: float, height: float, config: TooltipConfig = TooltipConfig()
) -> Tuple[float, float]:
    """Tooltip top-left corner for a pointer at plot-area position ``(mx, my)``.

    The tooltip sits to the right of the pointer and flips to the left near the
    right edge; vertically it flips below near the top edge and above near the
    bottom edge.
    """
    x_ratio = mx / width if width else 0.0
    y_ratio = my / height if height else 0.0

    left = mx + (config.offset_left if x_ratio > config.flip_x_ratio else config.offset_right)
    if y_ratio > config.flip_bottom_ratio:
        top = my + config.offset_above
    elif y_ratio < config.flip_top_ratio:
        top = my + config.offset_below
    else:
        top = my + config.offset_middle
    return (left, top)


@dataclass(frozen=True)
class TooltipState:
    """What the overlay should show after a pointer move."""

    visible: bool
    index: Optional[int] = None
    left: float = 0.0
    top: float = 0.0
    html: str = ""
    distance: float = math.inf


HIDDEN = TooltipState(visible=False)


class TooltipEngine:
    """Resolves the hovered point for pointer positions over the plot."""

    def __init__(
        self,
        index: SpatialIndex,
        points: Sequence[DataPoint],
        plot: PlotConfig,
        transform_source: Callable[[], Transform],
        config: TooltipConfig = TooltipConfig(),
    ) -> None:
        """Initialize the engine.

        Args:
            index: Spatial index built over the unzoomed projections of ``points``.
            points: The dataset, in index construction order.
            plot: Plot geometry (margins are subtracted from pointer positions).
            transform_source: Returns the current zoom transform; the engine
                only reads it.
            config: Threshold, placement and formatting constants.
        """
        if len(index) != len(points):
            raise ValueError("Spatial index and dataset sizes differ")
        self._index = index
        self._points = points
        self._plot = plot
        self._transform_source = transform_source
        self._config = config
        self._state = HIDDEN

    @property
    def state(self) -> TooltipState:
        return self._state

    def update(self, pointer_x: float, pointer_y: float) -> TooltipState:
        """Resolve the tooltip for a pointer position in surface coordinates."""
        mx = pointer_x - self._plot.margin.left
        my = pointer_y - self._plot.margin.top

        transform = self._transform_source()
        ux, uy = transform.invert((mx, my))
        i = self._index.nearest(ux, uy)
        px, py = self._index.position(i)
        distance = math.hypot(ux - px, uy - py) * transform.k

        if distance < self._config.threshold:
            left, top = place_tooltip(mx, my, self._plot.width, self._plot.height, self._config)
            self._state = TooltipState(
                visible=True,
                index=i,
                left=left,
                top=top,
                html=tooltip_html(self._points[i], self._config),
                distance=distance,
            )
        else:
            self._state = HIDDEN
        return self._state

    def hide(self) -> TooltipState:
        self._state = HIDDEN
        return self._state
