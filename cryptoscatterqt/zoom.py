"""Zoom/pan gesture state machine.

The controller is the only writer of the plot's :class:`Transform`. Gestures
arrive in plot-area pixel coordinates (margins already removed):

    IDLE --begin_drag--> ACTIVE --drag_to*--> ACTIVE --end_drag--> IDLE
    IDLE --wheel (start, tick, end)--> IDLE

Every tick computes a fresh transform from the previous one and the gesture
delta, clamps the scale to ``[min_scale, max_scale]``, constrains the
translation to the plot extent and notifies listeners.
"""

from __future__ import annotations

import enum
import logging
import math
from typing import Callable, List, Optional, Tuple

from .errors import InteractionError
from .models import ZoomConfig
from .transform import Transform, constrain

logger = logging.getLogger(__name__)

TransformListener = Callable[[Transform], None]


class ZoomState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


class ZoomPanController:
    """Composes pan/zoom transforms from pointer and wheel gestures."""

    def __init__(
        self, width: float, height: float, config: Optional[ZoomConfig] = None
    ) -> None:
        self._config = config or ZoomConfig()
        if not 0 < self._config.min_scale <= self._config.max_scale:
            raise ValueError(
                f"Invalid scale extent [{self._config.min_scale}, {self._config.max_scale}]"
            )
        self._extent = ((0.0, 0.0), (float(width), float(height)))
        self._transform = Transform.identity()
        self._state = ZoomState.IDLE
        self._listeners: List[TransformListener] = []

        # Drag bookkeeping
        self._last_pos: Optional[Tuple[float, float]] = None
        self._start_pos: Optional[Tuple[float, float]] = None
        self._moved = False

    @property
    def transform(self) -> Transform:
        return self._transform

    @property
    def state(self) -> ZoomState:
        return self._state

    @property
    def config(self) -> ZoomConfig:
        return self._config

    def add_listener(self, listener: TransformListener) -> None:
        self._listeners.append(listener)

    # --- Gestures ---

    def begin_drag(self, x: float, y: float) -> None:
        """Start a pointer drag at ``(x, y)``."""
        if self._state is not ZoomState.IDLE:
            raise InteractionError("begin_drag called while a gesture is active")
        self._state = ZoomState.ACTIVE
        self._start_pos = (x, y)
        self._last_pos = (x, y)
        self._moved = False

    def drag_to(self, x: float, y: float) -> None:
        """Pan by the pointer movement since the previous drag event."""
        if self._state is not ZoomState.ACTIVE or self._last_pos is None:
            raise InteractionError("drag_to called without begin_drag")
        dx = x - self._last_pos[0]
        dy = y - self._last_pos[1]
        self._last_pos = (x, y)
        sx, sy = self._start_pos
        if not self._moved and math.hypot(x - sx, y - sy) > self._config.click_distance:
            self._moved = True
        if self._moved:
            self._commit(self._transform.pan_by(dx, dy))

    def end_drag(self) -> bool:
        """Finish the drag.

        Returns:
            True if the pointer never travelled past ``click_distance`` (the
            gesture was a click rather than a pan).
        """
        if self._state is not ZoomState.ACTIVE:
            raise InteractionError("end_drag called without begin_drag")
        was_click = not self._moved
        self._state = ZoomState.IDLE
        self._last_pos = None
        self._start_pos = None
        self._moved = False
        return was_click

    def wheel(self, x: float, y: float, delta: float) -> None:
        """Zoom around ``(x, y)``; positive ``delta`` zooms in."""
        previous = self._state
        self._state = ZoomState.ACTIVE
        try:
            k = self._transform.k * math.pow(2.0, delta * self._config.wheel_sensitivity)
            self._commit(self._transform.scale_to_around(self._clamp_k(k), (x, y)))
        finally:
            self._state = previous

    def reset(self) -> None:
        """Return to the identity transform."""
        self._commit(Transform.identity())

    # --- Internal ---

    def _clamp_k(self, k: float) -> float:
        return min(max(k, self._config.min_scale), self._config.max_scale)

    def _commit(self, transform: Transform) -> None:
        transform = constrain(transform, self._extent, self._extent)
        if transform == self._transform:
            return
        self._transform = transform
        logger.debug(
            "Zoom transform -> k=%.4f x=%.2f y=%.2f", transform.k, transform.x, transform.y
        )
        for listener in list(self._listeners):
            listener(transform)
