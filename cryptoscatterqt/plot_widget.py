"""Interactive log-log scatter plot widget.

This module provides a PySide6/pyqtgraph widget that draws named market
observations on logarithmic x/y axes, colors them by signed percentage change
and lets the user explore them with zoom, pan and a nearest-point tooltip.

Key features:
  - Log-log scatter with a symmetric-log red/white/green color scale
  - Optional cardinal-spline path through the points, with a draw-in effect
  - Wheel zoom and drag pan, clamped to the plot extent
  - Nearest-point tooltip through a KD-tree built once per dataset
  - Point click notifications for the hosting application

Typical usage:

    plot = ScatterPlotWidget(width=800, height=500, margin=Margin(20, 30, 50, 70))
    layout.addWidget(plot)

    plot.add_point_click_handler(lambda point: print(point.name))
    message = plot.render_points(points)  # None on success
    plot.render_path(points)

    plot.reset_zoom()

Google-style docstrings + PEP8.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Optional, Tuple

import pyqtgraph as pg
from PySide6 import QtGui, QtWidgets
from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from .dataset import Dataset, RawData, prepare_dataset
from .errors import EmptyDataError, ValidationError
from .models import (
    DataPoint,
    Margin,
    PlotConfig,
    RenderConfig,
    TooltipConfig,
    ZoomConfig,
)
from .render_surface import RenderSurface
from .scales import LogScale, ScaleSet, build_scales
from .spatial_index import SpatialIndex
from .tooltip import TooltipEngine, TooltipState
from .transform import Transform
from .zoom import ZoomPanController, ZoomState

logger = logging.getLogger(__name__)

PointClickHandler = Callable[[DataPoint], Any]

_TOOLTIP_STYLE = (
    "QLabel { background-color: rgba(255, 255, 255, 235); color: #222; "
    "border: 1px solid #bbb; border-radius: 4px; padding: 6px; font-size: 9pt; }"
)


class _HitCatcher(QtWidgets.QGraphicsRectItem):
    """Invisible rect over the plotting area that receives all pointer events.

    Positions are forwarded in plot-area coordinates (item-local).
    """

    def __init__(self, owner: "ScatterPlotWidget", width: float, height: float, parent) -> None:
        super().__init__(0, 0, width, height, parent)
        self._owner = owner
        self.setPen(QtGui.QPen(Qt.NoPen))
        self.setBrush(QtGui.QBrush(Qt.NoBrush))
        self.setAcceptHoverEvents(True)
        self.setAcceptedMouseButtons(Qt.LeftButton)
        self.setZValue(100)

    def hoverMoveEvent(self, ev):
        pos = ev.pos()
        self._owner._on_pointer_move(pos.x(), pos.y())

    def hoverLeaveEvent(self, ev):
        self._owner._on_pointer_leave()

    def mousePressEvent(self, ev):
        if ev.button() != Qt.LeftButton:
            ev.ignore()
            return
        pos = ev.pos()
        self._owner._on_press(pos.x(), pos.y())
        ev.accept()

    def mouseMoveEvent(self, ev):
        pos = ev.pos()
        self._owner._on_drag(pos.x(), pos.y())
        ev.accept()

    def mouseReleaseEvent(self, ev):
        pos = ev.pos()
        self._owner._on_release(pos.x(), pos.y())
        ev.accept()

    def wheelEvent(self, ev):
        pos = ev.pos()
        self._owner._on_wheel(pos.x(), pos.y(), ev.delta())
        ev.accept()


class ScatterPlotWidget(QWidget):
    """Zoomable log-log scatter plot with tooltip and point clicks.

    Attributes:
        pointClicked: Emitted with the clicked DataPoint.
        transformChanged: Emitted with the new Transform after zoom/pan.
        statusMessage: Emitted with a user-facing message when a render call
            could not draw data (empty dataset, fetch error, invalid values).
    """

    pointClicked = Signal(object)
    transformChanged = Signal(object)
    statusMessage = Signal(str)

    def __init__(
        self,
        width: float = 800,
        height: float = 500,
        margin: Optional[Margin] = None,
        parent: Optional[QWidget] = None,
        *,
        x_label: str = "",
        y_label: str = "",
        zoom_config: Optional[ZoomConfig] = None,
        tooltip_config: Optional[TooltipConfig] = None,
        render_config: Optional[RenderConfig] = None,
    ) -> None:
        """Initialize the plot widget.

        Args:
            width: Width of the plotting area in pixels.
            height: Height of the plotting area in pixels.
            margin: Insets around the plotting area for the axes.
            parent: Parent widget (the mount point in the host UI).
            x_label: Bottom axis label.
            y_label: Left axis label.
            zoom_config: Zoom limits and sensitivity.
            tooltip_config: Tooltip threshold, placement and formatting.
            render_config: Marker/path visual constants.
        """
        super().__init__(parent)

        self._plot = PlotConfig(float(width), float(height), margin or Margin())
        self._tooltip_config = tooltip_config or TooltipConfig()
        self._render_config = render_config or RenderConfig()

        # Data state, replaced wholesale on every dataset change
        self._points: Dataset = ()
        self._scales: ScaleSet = build_scales((), self._plot, self._render_config.color_stops)
        self._index: Optional[SpatialIndex] = None
        self._tooltip_engine: Optional[TooltipEngine] = None
        self._click_handler: Optional[PointClickHandler] = None

        # The controller is the only writer of the transform
        self._controller = ZoomPanController(self._plot.width, self._plot.height, zoom_config)
        self._controller.add_listener(self._on_transform)

        self._build_ui(x_label, y_label)
        self._surface.update_axes(self._scales.x, self._scales.y)

    def _build_ui(self, x_label: str, y_label: str) -> None:
        """Build the user interface."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.view = pg.GraphicsView(background=self._render_config.background_color)
        self.view.setFixedSize(
            int(math.ceil(self._plot.outer_width)), int(math.ceil(self._plot.outer_height))
        )
        layout.addWidget(self.view)

        self._surface = RenderSurface(
            self.view, self._plot, self._render_config, x_label=x_label, y_label=y_label
        )
        self._hit_catcher = _HitCatcher(
            self, self._plot.width, self._plot.height, self._surface.frame
        )

        self._tooltip = QLabel(self.view)
        self._tooltip.setTextFormat(Qt.RichText)
        self._tooltip.setStyleSheet(_TOOLTIP_STYLE)
        self._tooltip.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self._tooltip.hide()

    # --- Host API ---

    @property
    def plot_config(self) -> PlotConfig:
        return self._plot

    @property
    def transform(self) -> Transform:
        """Current zoom/pan transform (read-only; use reset_zoom to change)."""
        return self._controller.transform

    @property
    def controller(self) -> ZoomPanController:
        return self._controller

    @property
    def surface(self) -> RenderSurface:
        return self._surface

    @property
    def points(self) -> Dataset:
        return self._points

    @property
    def scales(self) -> ScaleSet:
        return self._scales

    @property
    def tooltip_state(self) -> TooltipState:
        if self._tooltip_engine is None:
            return TooltipState(visible=False)
        return self._tooltip_engine.state

    def current_scales(self) -> Tuple[LogScale, LogScale]:
        """Base x/y scales with the current transform applied."""
        t = self._controller.transform
        return t.rescale_x(self._scales.x), t.rescale_y(self._scales.y)

    def render_points(self, data: RawData) -> Optional[str]:
        """Plot a dataset as markers.

        Args:
            data: Loader output: a sequence of DataPoint (or dicts with
                name/x/y/z/time), or a FetchError.

        Returns:
            None when points were drawn, otherwise the message explaining
            why only the empty frame is shown (also emitted as statusMessage).
        """
        try:
            points = prepare_dataset(data)
        except EmptyDataError as e:
            return self._show_empty(str(e))
        except ValidationError as e:
            logger.warning("Refusing to plot invalid data: %s", e)
            return self._show_empty(str(e))

        if points and points == self._points:
            # same data: redraw in place, keeping scales and the current zoom
            self._hide_tooltip()
            x_scale, y_scale = self.current_scales()
            self._surface.render_points(points, x_scale, y_scale, self._scales.color)
            return None

        self._apply_dataset(points)
        return None

    def render_path(self, data: RawData) -> Optional[str]:
        """Draw the connecting path through a dataset, in dataset order.

        The dataset is plotted first if it is not the one currently shown, so
        the path and the markers always share the same scales.
        """
        try:
            points = prepare_dataset(data)
        except EmptyDataError as e:
            self._surface.clear_path()
            return self._show_message(str(e))
        except ValidationError as e:
            logger.warning("Refusing to draw path through invalid data: %s", e)
            self._surface.clear_path()
            return self._show_message(str(e))

        if points != self._points:
            self._apply_dataset(points)
        x_scale, y_scale = self.current_scales()
        self._surface.render_path(points, x_scale, y_scale)
        return None

    def add_point_click_handler(self, handler: Optional[PointClickHandler]) -> None:
        """Register the handler called with the clicked DataPoint.

        Only one handler is kept; registering again replaces it. Pass None to
        remove it.
        """
        self._click_handler = handler

    def reset_zoom(self) -> None:
        """Return to the unzoomed view."""
        self._controller.reset()

    def clear(self) -> None:
        """Remove all points and the path; axes stay on the default domain."""
        self._set_empty_state()

    # --- Dataset lifecycle ---

    def _apply_dataset(self, points: Dataset) -> None:
        self._points = points
        self._scales = build_scales(points, self._plot, self._render_config.color_stops)
        base_x, base_y = self._scales.project(points)
        self._index = SpatialIndex(base_x, base_y)
        self._tooltip_engine = TooltipEngine(
            self._index,
            points,
            self._plot,
            lambda: self._controller.transform,
            self._tooltip_config,
        )
        self._hide_tooltip()
        if self._surface.path_points != points:
            self._surface.clear_path()
        self._surface.render_points(points, self._scales.x, self._scales.y, self._scales.color)
        self._surface.update_axes(self._scales.x, self._scales.y)
        self._controller.reset()
        logger.info("Plotted %d points", len(points))

    def _set_empty_state(self) -> None:
        self._points = ()
        self._scales = build_scales((), self._plot, self._render_config.color_stops)
        self._index = None
        self._tooltip_engine = None
        self._hide_tooltip()
        self._surface.clear()
        self._surface.update_axes(self._scales.x, self._scales.y)
        self._controller.reset()

    def _show_empty(self, message: str) -> str:
        self._set_empty_state()
        return self._show_message(message)

    def _show_message(self, message: str) -> str:
        logger.info("Plot shows no data: %s", message)
        self.statusMessage.emit(message)
        return message

    # --- Zoom/pan ---

    def _on_transform(self, transform: Transform) -> None:
        x_scale, y_scale = self.current_scales()
        self._surface.update_axes(x_scale, y_scale)
        self._surface.reproject(x_scale, y_scale)
        self.transformChanged.emit(transform)

    # --- Hit-catcher callbacks (plot-area coordinates) ---

    def _on_pointer_move(self, mx: float, my: float) -> None:
        if self._tooltip_engine is None:
            self._hide_tooltip()
            return
        state = self._tooltip_engine.update(mx + self._plot.margin.left, my + self._plot.margin.top)
        if state.visible:
            self._surface.set_hover(state.index)
            self._tooltip.setText(state.html)
            self._tooltip.adjustSize()
            self._tooltip.move(
                int(round(self._plot.margin.left + state.left)),
                int(round(self._plot.margin.top + state.top)),
            )
            self._tooltip.show()
            self._tooltip.raise_()
        else:
            self._hide_tooltip()

    def _on_pointer_leave(self) -> None:
        self._hide_tooltip()

    def _hide_tooltip(self) -> None:
        if self._tooltip_engine is not None:
            self._tooltip_engine.hide()
        self._surface.set_hover(None)
        self._tooltip.hide()

    def _on_press(self, mx: float, my: float) -> None:
        if self._controller.state is ZoomState.ACTIVE:
            # a release was lost (e.g. the grab moved to another window)
            self._controller.end_drag()
        self._controller.begin_drag(mx, my)

    def _on_drag(self, mx: float, my: float) -> None:
        if self._controller.state is not ZoomState.ACTIVE:
            return
        self._controller.drag_to(mx, my)
        self._on_pointer_move(mx, my)

    def _on_release(self, mx: float, my: float) -> None:
        if self._controller.state is not ZoomState.ACTIVE:
            return
        if self._controller.end_drag():
            index = self._marker_at(mx, my)
            if index is not None:
                self._dispatch_point_click(index)

    def _on_wheel(self, mx: float, my: float, delta: float) -> None:
        self._controller.wheel(mx, my, delta)
        self._on_pointer_move(mx, my)

    def _marker_at(self, mx: float, my: float) -> Optional[int]:
        """Index of the marker drawn under a plot-area position, if any."""
        if self._index is None:
            return None
        t = self._controller.transform
        ux, uy = t.invert((mx, my))
        i = self._index.nearest(ux, uy)
        px, py = self._index.position(i)
        radius = (
            self._render_config.hover_radius
            if self._surface.hovered_index == i
            else self._render_config.point_radius
        )
        if math.hypot(ux - px, uy - py) * t.k <= radius:
            return i
        return None

    def _dispatch_point_click(self, index: int) -> None:
        point = self._points[index]
        logger.debug("Point clicked: %s", point.name)
        self.pointClicked.emit(point)
        if self._click_handler is not None:
            self._click_handler(point)
