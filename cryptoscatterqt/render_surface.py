"""Retained-mode drawing surface for the scatter plot.

The surface owns the pyqtgraph/Qt graphics items of one plot: a frame offset
by the plot margins, bottom and left log axes, a clipped layer holding the
markers, the hover marker and the connecting path. Every ``render_*`` call
replaces what was drawn before, so calling it twice with the same data does
not duplicate anything.

Layout (scene coordinates are view pixels):

    root (outer_width x outer_height)
      frame  @ (margin.left, margin.top)
        bottom axis, left axis
        layer (clips to width x height)
          path, markers, hover marker
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pyqtgraph as pg
from PySide6 import QtCore, QtGui, QtWidgets

from .curves import cardinal_segments, path_length
from .dataset import join_keys
from .models import DataPoint, PlotConfig, PointKey, RenderConfig
from .scales import LogScale, SymlogColorScale

logger = logging.getLogger(__name__)


def _no_pen() -> QtGui.QPen:
    return QtGui.QPen(QtCore.Qt.NoPen)


class RenderSurface:
    """Axes, markers and path of one plot inside a ``pg.GraphicsView``."""

    def __init__(
        self,
        view: pg.GraphicsView,
        plot: PlotConfig,
        config: Optional[RenderConfig] = None,
        x_label: str = "",
        y_label: str = "",
    ) -> None:
        self._plot = plot
        self._config = config or RenderConfig()
        margin = plot.margin

        self.root = QtWidgets.QGraphicsRectItem(0, 0, plot.outer_width, plot.outer_height)
        self.root.setPen(_no_pen())
        view.addItem(self.root)

        self.frame = QtWidgets.QGraphicsRectItem(0, 0, plot.width, plot.height, self.root)
        self.frame.setPen(_no_pen())
        self.frame.setPos(margin.left, margin.top)

        # Axes are not linked to any ViewBox; their range is driven by update_axes().
        self.bottom_axis = pg.AxisItem("bottom")
        self.bottom_axis.setParentItem(self.frame)
        self.bottom_axis.setLogMode(True)
        self.bottom_axis.setHeight(margin.bottom)
        self.bottom_axis.setGeometry(QtCore.QRectF(0, plot.height, plot.width, margin.bottom))
        self.left_axis = pg.AxisItem("left")
        self.left_axis.setParentItem(self.frame)
        self.left_axis.setLogMode(True)
        self.left_axis.setWidth(margin.left)
        self.left_axis.setGeometry(QtCore.QRectF(-margin.left, 0, margin.left, plot.height))
        for axis in (self.bottom_axis, self.left_axis):
            axis.setPen(pg.mkPen(self._config.foreground_color))
            axis.setTextPen(pg.mkPen(self._config.foreground_color))
        if x_label:
            self.bottom_axis.setLabel(x_label)
        if y_label:
            self.left_axis.setLabel(y_label)

        self.layer = QtWidgets.QGraphicsRectItem(0, 0, plot.width, plot.height, self.frame)
        self.layer.setPen(_no_pen())
        self.layer.setFlag(QtWidgets.QGraphicsItem.ItemClipsChildrenToShape, True)

        self._path_item = QtWidgets.QGraphicsPathItem(self.layer)
        self._path_item.setZValue(-1)
        self._path_item.setVisible(False)

        self._scatter = pg.ScatterPlotItem(pxMode=True)
        self._scatter.setParentItem(self.layer)
        self._hover_item = pg.ScatterPlotItem(pxMode=True)
        self._hover_item.setParentItem(self.layer)
        self._hover_item.setZValue(10)

        # Drawn state
        self._points: Tuple[DataPoint, ...] = ()
        self._keys: List[PointKey] = []
        self._colors = np.empty((0, 3), dtype=np.uint8)
        self._brushes: List[QtGui.QBrush] = []
        self._entering: Tuple[int, ...] = ()
        self._screen_x = np.empty(0)
        self._screen_y = np.empty(0)
        self._hover_index: Optional[int] = None
        self._fade_opacity = 1.0

        self._path_points: Tuple[DataPoint, ...] = ()
        self._path_length = 0.0
        self._path_remaining = 0.0  # fraction of the path still hidden by the draw-in

        self._fade_anim: Optional[QtCore.QVariantAnimation] = None
        self._draw_anim: Optional[QtCore.QVariantAnimation] = None

    # --- Public API ---

    @property
    def marker_count(self) -> int:
        return len(self._points)

    @property
    def has_path(self) -> bool:
        return self._path_item.isVisible()

    @property
    def path_points(self) -> Tuple[DataPoint, ...]:
        return self._path_points

    @property
    def hovered_index(self) -> Optional[int]:
        return self._hover_index

    def marker_positions(self) -> Tuple[np.ndarray, np.ndarray]:
        """Current on-screen (plot-area) marker positions."""
        return self._screen_x.copy(), self._screen_y.copy()

    def path_geometry(self) -> Tuple[float, float]:
        """Return ``(screen length, dash offset)`` of the connecting path in px."""
        return self._path_length, self._path_remaining * self._path_length

    def render_points(
        self,
        points: Sequence[DataPoint],
        x_scale: LogScale,
        y_scale: LogScale,
        color: SymlogColorScale,
    ) -> None:
        """Draw one marker per point; markers with new keys fade in."""
        self._stop(self._fade_anim)
        join = join_keys(self._keys, points)
        self._points = tuple(points)
        self._keys = [p.key for p in self._points]
        self._colors = color.rgb_array([p.z for p in self._points]) if self._points else (
            np.empty((0, 3), dtype=np.uint8)
        )
        self._brushes = [pg.mkBrush(int(r), int(g), int(b), 255) for r, g, b in self._colors]
        self._entering = join.entering
        self._hover_index = None
        self._hover_item.clear()
        logger.debug(
            "render_points: %d markers (%d entering, %d exiting)",
            len(self._points),
            len(join.entering),
            len(join.exiting),
        )

        self._project_markers(x_scale, y_scale)
        if self._entering:
            self._set_entering_alpha(0.0)
            self._fade_anim = self._animate(self._config.fade_in_ms, self._set_entering_alpha)
        else:
            self._set_entering_alpha(1.0)

    def render_path(
        self, points: Sequence[DataPoint], x_scale: LogScale, y_scale: LogScale
    ) -> None:
        """Draw the connecting spline through ``points`` with a draw-in animation."""
        self._stop(self._draw_anim)
        self._path_points = tuple(points)
        pen = pg.mkPen(QtGui.QColor(*self._config.path_color), width=self._config.path_width)
        pen.setCapStyle(QtCore.Qt.FlatCap)
        self._path_item.setPen(pen)
        self._path_item.setBrush(QtGui.QBrush(QtCore.Qt.NoBrush))
        self._path_item.setVisible(bool(self._path_points))
        self._path_remaining = 1.0
        self._project_path(x_scale, y_scale)
        if self._path_points:
            self._draw_anim = self._animate(self._config.path_draw_ms, self._set_path_progress)

    def update_axes(self, x_scale: LogScale, y_scale: LogScale) -> None:
        """Show the (possibly rescaled) domains on the axes."""
        self.bottom_axis.setRange(*np.log10(x_scale.domain))
        # a vertical AxisItem puts the first range value at the bottom
        self.left_axis.setRange(*np.log10(y_scale.domain))

    def reproject(self, x_scale: LogScale, y_scale: LogScale) -> None:
        """Move markers, hover marker and path to the positions given by the scales."""
        self._project_markers(x_scale, y_scale)
        self._project_path(x_scale, y_scale)

    def set_hover(self, index: Optional[int]) -> None:
        """Enlarge and raise one marker, or restore all markers (``None``)."""
        if index == self._hover_index:
            return
        self._hover_index = index
        self._draw_hover()

    def clear(self) -> None:
        """Remove markers and path; axes stay."""
        self._stop(self._fade_anim)
        self._stop(self._draw_anim)
        self._points = ()
        self._keys = []
        self._colors = np.empty((0, 3), dtype=np.uint8)
        self._brushes = []
        self._entering = ()
        self._screen_x = np.empty(0)
        self._screen_y = np.empty(0)
        self._hover_index = None
        self._fade_opacity = 1.0
        self._scatter.clear()
        self._hover_item.clear()
        self.clear_path()

    def clear_path(self) -> None:
        """Remove the connecting path."""
        self._stop(self._draw_anim)
        self._path_points = ()
        self._path_length = 0.0
        self._path_remaining = 0.0
        self._path_item.setPath(QtGui.QPainterPath())
        self._path_item.setVisible(False)

    # --- Internal ---

    def _project_markers(self, x_scale: LogScale, y_scale: LogScale) -> None:
        if not self._points:
            self._screen_x = np.empty(0)
            self._screen_y = np.empty(0)
            self._scatter.clear()
            return
        xs = np.fromiter((p.x for p in self._points), dtype=float, count=len(self._points))
        ys = np.fromiter((p.y for p in self._points), dtype=float, count=len(self._points))
        self._screen_x = np.atleast_1d(x_scale(xs))
        self._screen_y = np.atleast_1d(y_scale(ys))
        self._scatter.setData(
            x=self._screen_x,
            y=self._screen_y,
            size=2 * self._config.point_radius,
            pen=pg.mkPen(None),
            brush=self._brushes,
            data=np.arange(len(self._points)),
        )
        if self._entering and self._fade_opacity < 1.0:
            self._set_entering_alpha(self._fade_opacity)
        self._draw_hover()

    def _draw_hover(self) -> None:
        i = self._hover_index
        if i is None or i >= len(self._points):
            self._hover_item.clear()
            return
        r, g, b = (int(c) for c in self._colors[i])
        self._hover_item.setData(
            x=[self._screen_x[i]],
            y=[self._screen_y[i]],
            size=2 * self._config.hover_radius,
            pen=pg.mkPen(self._config.foreground_color, width=0.5),
            brush=pg.mkBrush(r, g, b, 255),
        )

    def _project_path(self, x_scale: LogScale, y_scale: LogScale) -> None:
        if not self._path_points:
            self._path_length = 0.0
            return
        xs = np.atleast_1d(x_scale([p.x for p in self._path_points]))
        ys = np.atleast_1d(y_scale([p.y for p in self._path_points]))
        segments = cardinal_segments(xs, ys, self._config.path_tension)

        path = QtGui.QPainterPath(QtCore.QPointF(float(xs[0]), float(ys[0])))
        for _, c1, c2, end in segments:
            path.cubicTo(
                QtCore.QPointF(*c1), QtCore.QPointF(*c2), QtCore.QPointF(*end)
            )
        self._path_item.setPath(path)
        # the dash must cover the whole stroke, so pad by one pen width
        self._path_length = path_length(segments, steps=32) + self._config.path_width
        self._apply_dash()

    def _apply_dash(self) -> None:
        width = self._config.path_width
        pen = self._path_item.pen()
        dash = max(self._path_length / width, 1e-3)
        pen.setDashPattern([dash, dash])
        pen.setDashOffset(self._path_remaining * dash)
        self._path_item.setPen(pen)

    def _set_path_progress(self, progress: float) -> None:
        self._path_remaining = 1.0 - float(progress)
        self._apply_dash()

    def _set_entering_alpha(self, opacity: float) -> None:
        self._fade_opacity = float(opacity)
        if not self._points:
            return
        alpha = int(round(255 * float(opacity)))
        brushes = list(self._brushes)
        for i in self._entering:
            r, g, b = self._colors[i]
            brushes[i] = pg.mkBrush(int(r), int(g), int(b), alpha)
        self._scatter.setBrush(brushes)

    def _animate(self, duration_ms: int, on_value) -> QtCore.QVariantAnimation:
        anim = QtCore.QVariantAnimation()
        anim.setStartValue(0.0)
        anim.setEndValue(1.0)
        anim.setDuration(max(int(duration_ms), 0))
        anim.setEasingCurve(QtCore.QEasingCurve.InOutCubic)
        anim.valueChanged.connect(on_value)
        anim.finished.connect(lambda: on_value(1.0))
        anim.start()
        return anim

    @staticmethod
    def _stop(anim: Optional[QtCore.QVariantAnimation]) -> None:
        if anim is not None and anim.state() == QtCore.QAbstractAnimation.Running:
            anim.stop()
