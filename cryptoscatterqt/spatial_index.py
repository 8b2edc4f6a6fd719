"""Nearest-point lookup over projected (unzoomed) plot coordinates."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
from scipy.spatial import cKDTree

from .errors import InteractionError

# Relative slack used to collect every candidate at the minimum distance.
_TIE_EPS = 1e-9


class SpatialIndex:
    """KD-tree over screen-projected points.

    The index is built in the unzoomed plot-area space; callers map pointer
    positions into that space with ``Transform.invert`` before querying.
    Equidistant candidates resolve to the lowest construction index.
    """

    def __init__(
        self,
        xs: Union[Sequence[float], np.ndarray],
        ys: Union[Sequence[float], np.ndarray],
    ) -> None:
        xs = np.asarray(xs, dtype=float)
        ys = np.asarray(ys, dtype=float)
        if xs.shape != ys.shape or xs.ndim != 1:
            raise ValueError("xs and ys must be 1-D arrays of the same length")
        self._points = np.column_stack([xs, ys]) if xs.size else np.empty((0, 2))
        self._tree = cKDTree(self._points) if xs.size else None

    def __len__(self) -> int:
        return int(self._points.shape[0])

    def position(self, index: int) -> tuple:
        """Return the indexed (x, y) position of a point."""
        x, y = self._points[index]
        return (float(x), float(y))

    def nearest(self, px: float, py: float) -> int:
        """Return the index of the point closest to ``(px, py)``.

        Raises:
            InteractionError: If the index holds no points.
        """
        if self._tree is None:
            raise InteractionError("SpatialIndex queried before any points were indexed")

        distance, index = self._tree.query((px, py))
        index = int(index)
        radius = distance * (1.0 + _TIE_EPS) + _TIE_EPS
        candidates = self._tree.query_ball_point((px, py), radius)
        if len(candidates) <= 1:
            return index

        cand = np.asarray(sorted(candidates), dtype=int)
        d = np.hypot(self._points[cand, 0] - px, self._points[cand, 1] - py)
        # argmin returns the first minimum, i.e. the lowest index among ties
        return int(cand[int(np.argmin(d))])
