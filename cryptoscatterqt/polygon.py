"""Polygon.io REST client for daily crypto aggregates.

Request problems never raise: invalid dates and HTTP/network failures are
logged and returned as a :class:`FetchError`, which the plot treats as
"no data to show".
"""

from __future__ import annotations

import calendar
import datetime as dt
import logging
import re
from typing import Any, Iterable, List, Mapping, Optional, Union

import requests

from .dataset import filter_plottable
from .models import DataPoint, FetchError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.polygon.io/"
GROUPED_DAILY_PATH = "v2/aggs/grouped/locale/global/market/crypto/{date}"
TICKER_RANGE_PATH = "v2/aggs/ticker/{ticker}/range/1/day/{start}/{end}"
MAX_HISTORY_DAYS = 730

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

FetchResult = Union[List[DataPoint], FetchError]


def iso_date(
    today: Optional[dt.date] = None, years: int = 0, months: int = 0, days: int = 0
) -> str:
    """Return ``today`` shifted by the given offsets, formatted ``YYYY-MM-DD``.

    Month arithmetic clamps the day to the length of the target month
    (e.g. March 31 minus one month is February 28/29).
    """
    today = today or dt.date.today()
    month_index = today.month - 1 + months
    year = today.year + years + month_index // 12
    month = month_index % 12 + 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    shifted = dt.date(year, month, day) + dt.timedelta(days=days)
    return shifted.isoformat()


def validate_date(
    date: str, today: Optional[dt.date] = None, max_history_days: int = MAX_HISTORY_DAYS
) -> Optional[str]:
    """Return an error message for an unusable date, or None if it is fine."""
    if not isinstance(date, str) or not _ISO_DATE.match(date):
        return "The chosen date is not valid"
    try:
        day = dt.date.fromisoformat(date)
    except ValueError:
        return "The chosen date is not valid"
    today = today or dt.date.today()
    if day > today:
        return "The chosen date is in the future"
    if (today - day).days > max_history_days:
        return "The chosen date is too old"
    return None


def bar_to_point(bar: Mapping[str, Any], name: Optional[str] = None) -> Optional[DataPoint]:
    """Map one aggregate bar to a DataPoint (volume vs close, colored by change).

    Returns None when the bar lacks a required field.
    """
    try:
        open_, close = float(bar["o"]), float(bar["c"])
        volume = float(bar["v"])
        timestamp = int(bar["t"])
        label = name if name is not None else str(bar["T"])
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Skipping malformed bar %r: %s", bar, e)
        return None
    change = (close - open_) / open_ * 100.0 if open_ else 0.0
    return DataPoint(name=label, x=volume, y=close, z=change, time=timestamp)


def bars_to_points(bars: Iterable[Mapping[str, Any]], by_date: bool = False) -> List[DataPoint]:
    """Convert raw bars, naming points by ticker or by bar date."""
    points = []
    for bar in bars:
        name = None
        if by_date:
            try:
                name = dt.datetime.fromtimestamp(
                    int(bar["t"]) / 1000.0, tz=dt.timezone.utc
                ).date().isoformat()
            except (KeyError, TypeError, ValueError):
                continue
        point = bar_to_point(bar, name)
        if point is not None:
            points.append(point)
    kept = list(filter_plottable(points))
    if len(kept) != len(points):
        logger.debug("Dropped %d bars with non-positive volume/close", len(points) - len(kept))
    return kept


class PolygonClient:
    """Minimal client for the Polygon.io aggregates endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        max_history_days: int = MAX_HISTORY_DAYS,
    ) -> None:
        self._base_url = base_url.rstrip("/") + "/"
        self._timeout = timeout
        self._max_history_days = max_history_days
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    @property
    def max_history_days(self) -> int:
        return self._max_history_days

    def grouped_daily(self, date: str, today: Optional[dt.date] = None) -> FetchResult:
        """Daily OHLCV of every crypto ticker for one day, one point per ticker."""
        error = validate_date(date, today, self._max_history_days)
        if error:
            logger.warning("grouped_daily(%r) rejected: %s", date, error)
            return FetchError(error)
        payload = self._get(GROUPED_DAILY_PATH.format(date=date))
        if isinstance(payload, FetchError):
            return payload
        points = bars_to_points(payload.get("results") or [])
        logger.info("grouped_daily(%s): %d points", date, len(points))
        return points

    def ticker_range(
        self, ticker: str, start: str, end: str, today: Optional[dt.date] = None
    ) -> FetchResult:
        """Daily bars of one ticker between two dates, one point per day."""
        for date in (start, end):
            error = validate_date(date, today, self._max_history_days)
            if error:
                logger.warning("ticker_range(%r, %r) rejected: %s", ticker, date, error)
                return FetchError(error)
        if start > end:
            return FetchError("The start date is after the end date")
        path = TICKER_RANGE_PATH.format(ticker=ticker, start=start, end=end)
        payload = self._get(path, params={"adjusted": "true", "sort": "asc"})
        if isinstance(payload, FetchError):
            return payload
        points = bars_to_points(payload.get("results") or [], by_date=True)
        logger.info("ticker_range(%s, %s..%s): %d points", ticker, start, end, len(points))
        return points

    def _get(self, path: str, params: Optional[Mapping[str, str]] = None):
        url = self._base_url + path
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error("Polygon request failed for %s: %s", path, e)
            return FetchError(f"Request failed: {e}")
        except ValueError as e:
            logger.error("Polygon returned invalid JSON for %s: %s", path, e)
            return FetchError("The server returned an invalid response")
        if not isinstance(payload, Mapping):
            return FetchError("The server returned an invalid response")
        return payload
