"""Dataset validation and keyed joins between successive renders."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Sequence, Tuple, Union

from .errors import EmptyDataError, ValidationError
from .models import DataPoint, FetchError, PointKey

logger = logging.getLogger(__name__)

Dataset = Tuple[DataPoint, ...]
RawData = Union[Sequence[Any], FetchError, Mapping[str, Any], None]


def _coerce_point(row: Any, position: int) -> DataPoint:
    """Build a DataPoint from a DataPoint, a mapping or an attribute object."""
    if isinstance(row, DataPoint):
        return row

    def get(name: str, default: Any = None) -> Any:
        if isinstance(row, Mapping):
            return row.get(name, default)
        return getattr(row, name, default)

    name = get("name")
    if name is None:
        raise ValidationError(f"Row {position} has no 'name'")
    try:
        return DataPoint(
            name=str(name),
            x=float(get("x")),
            y=float(get("y")),
            z=float(get("z", 0.0)),
            time=int(get("time", 0) or 0),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Row {position} ({name!r}) is malformed: {e}") from e


def prepare_dataset(data: RawData) -> Dataset:
    """Validate raw loader output and return an immutable dataset.

    Args:
        data: Sequence of DataPoint / dict / attribute objects, or the
            loader's ``FetchError`` result (also accepted as a mapping with
            ``error`` set).

    Returns:
        Tuple of DataPoint in input order.

    Raises:
        EmptyDataError: If the data is empty or is a fetch error.
        ValidationError: If any row is malformed or has non-positive x/y.
    """
    if data is None:
        raise EmptyDataError("No data to show")
    if isinstance(data, FetchError):
        raise EmptyDataError(data.message)
    if isinstance(data, Mapping):
        if data.get("error"):
            raise EmptyDataError(str(data.get("message", "No data to show")))
        raise ValidationError("Expected a sequence of points, got a mapping")

    points: List[DataPoint] = []
    for i, row in enumerate(data):
        point = _coerce_point(row, i)
        for axis in ("x", "y"):
            value = getattr(point, axis)
            if not math.isfinite(value) or value <= 0:
                raise ValidationError(
                    f"Point {point.name!r} has {axis}={value!r}; "
                    f"log scales require finite values > 0"
                )
        if not math.isfinite(point.z):
            raise ValidationError(f"Point {point.name!r} has non-finite z={point.z!r}")
        points.append(point)

    if not points:
        raise EmptyDataError("No data to show")

    logger.debug("Prepared dataset with %d points", len(points))
    return tuple(points)


def filter_plottable(points: Iterable[DataPoint]) -> Dataset:
    """Drop points that a log-log plot cannot show instead of rejecting them."""
    kept = tuple(
        p
        for p in points
        if math.isfinite(p.x) and math.isfinite(p.y) and p.x > 0 and p.y > 0
        and math.isfinite(p.z)
    )
    return kept


@dataclass(frozen=True)
class JoinResult:
    """Outcome of matching a new dataset against the currently drawn keys.

    Attributes:
        entering: Indices (into the new dataset) whose keys were not drawn.
        updating: Indices (into the new dataset) whose keys were already drawn.
        exiting: Keys that were drawn but are absent from the new dataset.
    """

    entering: Tuple[int, ...]
    updating: Tuple[int, ...]
    exiting: Tuple[PointKey, ...]


def join_keys(previous: Iterable[PointKey], dataset: Sequence[DataPoint]) -> JoinResult:
    """Match a dataset against previously drawn keys."""
    prev = list(previous)
    prev_set = set(prev)
    entering: List[int] = []
    updating: List[int] = []
    seen = set()
    for i, point in enumerate(dataset):
        key = point.key
        if key in prev_set and key not in seen:
            updating.append(i)
        else:
            entering.append(i)
        seen.add(key)
    exiting = tuple(k for k in prev if k not in seen)
    return JoinResult(tuple(entering), tuple(updating), exiting)
