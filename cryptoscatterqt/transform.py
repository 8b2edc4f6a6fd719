"""Pan/zoom transform: uniform scale ``k`` followed by a translation ``(x, y)``.

A screen point ``p`` relates to an unzoomed plot-area point ``u`` by
``p = u * k + t``. Transforms are immutable; every gesture produces a new one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .scales import LogScale

Point = Tuple[float, float]
Extent = Tuple[Point, Point]  # ((x0, y0), (x1, y1))


@dataclass(frozen=True)
class Transform:
    """Affine zoom state (uniform scale + 2D translate)."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def identity(cls) -> "Transform":
        return cls(1.0, 0.0, 0.0)

    def apply(self, point: Point) -> Point:
        return (point[0] * self.k + self.x, point[1] * self.k + self.y)

    def apply_x(self, x):
        return x * self.k + self.x

    def apply_y(self, y):
        return y * self.k + self.y

    def invert(self, point: Point) -> Point:
        """Map a screen point back to unzoomed plot-area coordinates."""
        return ((point[0] - self.x) / self.k, (point[1] - self.y) / self.k)

    def invert_x(self, x):
        return (x - self.x) / self.k

    def invert_y(self, y):
        return (y - self.y) / self.k

    def translate_by(self, dx: float, dy: float) -> "Transform":
        """Translate in unzoomed units (the delta is multiplied by ``k``)."""
        return Transform(self.k, self.x + self.k * dx, self.y + self.k * dy)

    def pan_by(self, dx: float, dy: float) -> "Transform":
        """Translate by a screen-space delta."""
        return Transform(self.k, self.x + dx, self.y + dy)

    def scale_to_around(self, k: float, anchor: Point) -> "Transform":
        """Return a transform with scale ``k`` keeping ``anchor`` (screen) fixed."""
        ux, uy = self.invert(anchor)
        return Transform(k, anchor[0] - ux * k, anchor[1] - uy * k)

    def rescale_x(self, scale: LogScale) -> LogScale:
        """Return the scale whose output equals ``apply_x(scale(v))``."""
        r0, r1 = scale.range
        return scale.with_domain(
            (scale.invert(self.invert_x(r0)), scale.invert(self.invert_x(r1)))
        )

    def rescale_y(self, scale: LogScale) -> LogScale:
        """Return the scale whose output equals ``apply_y(scale(v))``."""
        r0, r1 = scale.range
        return scale.with_domain(
            (scale.invert(self.invert_y(r0)), scale.invert(self.invert_y(r1)))
        )


def constrain(transform: Transform, extent: Extent, translate_extent: Extent) -> Transform:
    """Keep the translate extent covering the viewport extent.

    When the content is larger than the viewport it cannot be panned past its
    own edges; when smaller (``k < 1``) it is centered.
    """
    (ex0, ey0), (ex1, ey1) = extent
    (tx0, ty0), (tx1, ty1) = translate_extent
    dx0 = transform.invert_x(ex0) - tx0
    dx1 = transform.invert_x(ex1) - tx1
    dy0 = transform.invert_y(ey0) - ty0
    dy1 = transform.invert_y(ey1) - ty1

    if dx1 > dx0:
        tx = (dx0 + dx1) / 2.0
    else:
        tx = min(0.0, dx0) or max(0.0, dx1)
    if dy1 > dy0:
        ty = (dy0 + dy1) / 2.0
    else:
        ty = min(0.0, dy0) or max(0.0, dy1)
    return transform.translate_by(tx, ty)
