"""Tests for the Polygon.io loader.

The HTTP session is a MagicMock, so no network access is needed.
"""

import datetime as dt
from unittest.mock import MagicMock

import pytest
import requests

from cryptoscatterqt.models import DataPoint, FetchError
from cryptoscatterqt.polygon import (
    PolygonClient,
    bar_to_point,
    bars_to_points,
    iso_date,
    validate_date,
)

TODAY = dt.date(2024, 1, 3)
JAN_2_MS = 1704153600000  # 2024-01-02T00:00:00Z


def make_session(payload=None, exc=None):
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.json.return_value = payload
    session.get.return_value = response
    if exc is not None:
        session.get.side_effect = exc
    return session


class TestDates:
    """Tests for iso_date and validate_date."""

    def test_iso_date_offsets(self):
        assert iso_date(dt.date(2024, 1, 1), days=-1) == "2023-12-31"
        assert iso_date(dt.date(2024, 3, 31), months=-1) == "2024-02-29"
        assert iso_date(dt.date(2024, 2, 29), years=-1) == "2023-02-28"
        assert iso_date(dt.date(2024, 11, 15), months=3) == "2025-02-15"

    def test_valid(self):
        assert validate_date("2024-01-02", TODAY) is None

    @pytest.mark.parametrize("date", ["20240102", "2024-13-01", "2023-02-30", "", None])
    def test_not_valid(self, date):
        assert validate_date(date, TODAY) == "The chosen date is not valid"

    def test_future(self):
        assert validate_date("2024-01-04", TODAY) == "The chosen date is in the future"

    def test_too_old(self):
        assert validate_date("2020-01-01", TODAY) == "The chosen date is too old"
        assert validate_date("2023-12-01", TODAY, max_history_days=10) == (
            "The chosen date is too old"
        )


class TestBars:
    """Tests for bar conversion."""

    def test_bar_to_point(self):
        bar = {"T": "X:BTCUSD", "v": 100.0, "o": 40000.0, "c": 42000.0, "t": JAN_2_MS}
        assert bar_to_point(bar) == DataPoint("X:BTCUSD", 100.0, 42000.0, 5.0, JAN_2_MS)

    def test_missing_field(self):
        assert bar_to_point({"T": "X:BTCUSD", "v": 1.0}) is None

    def test_named_by_date(self):
        bars = [{"v": 10.0, "o": 1.0, "c": 1.0, "t": JAN_2_MS}]
        assert bars_to_points(bars, by_date=True)[0].name == "2024-01-02"

    def test_unplottable_bars_dropped(self):
        bars = [
            {"T": "A", "v": 0.0, "o": 1.0, "c": 1.0, "t": 1},
            {"T": "B", "v": 5.0, "o": 1.0, "c": 2.0, "t": 1},
        ]
        points = bars_to_points(bars)
        assert [p.name for p in points] == ["B"]
        assert points[0].z == pytest.approx(100.0)


class TestPolygonClient:
    """Tests for PolygonClient."""

    def test_headers(self):
        session = make_session()
        PolygonClient("secret", session=session)
        assert session.headers["Authorization"] == "Bearer secret"
        assert session.headers["Accept"] == "application/json"

    def test_grouped_daily(self):
        session = make_session(
            {
                "results": [
                    {"T": "X:BTCUSD", "v": 100.0, "o": 40000, "c": 42000, "t": JAN_2_MS},
                    {"T": "X:DEADUSD", "v": 0, "o": 1, "c": 1, "t": JAN_2_MS},
                    {"T": "X:HALFUSD"},
                ]
            }
        )
        client = PolygonClient("k", base_url="https://example.test", session=session)
        points = client.grouped_daily("2024-01-02", today=TODAY)

        assert points == [DataPoint("X:BTCUSD", 100.0, 42000.0, 5.0, JAN_2_MS)]
        url = session.get.call_args[0][0]
        assert url == "https://example.test/v2/aggs/grouped/locale/global/market/crypto/2024-01-02"
        assert session.get.call_args[1]["timeout"] == 10.0

    def test_no_results(self):
        client = PolygonClient("k", session=make_session({"resultsCount": 0}))
        assert client.grouped_daily("2024-01-02", today=TODAY) == []

    def test_invalid_date_skips_request(self):
        session = make_session()
        result = PolygonClient("k", session=session).grouped_daily("2024-01-09", today=TODAY)
        assert result == FetchError("The chosen date is in the future")
        session.get.assert_not_called()

    def test_http_error(self):
        session = make_session({})
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("403")
        result = PolygonClient("k", session=session).grouped_daily("2024-01-02", today=TODAY)
        assert isinstance(result, FetchError)
        assert "403" in result.message

    def test_connection_error(self):
        session = make_session(exc=requests.ConnectionError("offline"))
        result = PolygonClient("k", session=session).grouped_daily("2024-01-02", today=TODAY)
        assert isinstance(result, FetchError)

    def test_invalid_json(self):
        session = make_session()
        session.get.return_value.json.side_effect = ValueError("no json")
        result = PolygonClient("k", session=session).grouped_daily("2024-01-02", today=TODAY)
        assert result == FetchError("The server returned an invalid response")

    def test_non_mapping_payload(self):
        session = make_session(["not", "a", "mapping"])
        result = PolygonClient("k", session=session).grouped_daily("2024-01-02", today=TODAY)
        assert isinstance(result, FetchError)

    def test_ticker_range(self):
        session = make_session(
            {"results": [{"v": 10.0, "o": 2.0, "c": 1.0, "t": JAN_2_MS}]}
        )
        client = PolygonClient("k", session=session)
        points = client.ticker_range("X:BTCUSD", "2023-12-20", "2024-01-02", today=TODAY)

        assert points == [DataPoint("2024-01-02", 10.0, 1.0, -50.0, JAN_2_MS)]
        url = session.get.call_args[0][0]
        assert url.endswith("v2/aggs/ticker/X:BTCUSD/range/1/day/2023-12-20/2024-01-02")
        assert session.get.call_args[1]["params"] == {"adjusted": "true", "sort": "asc"}

    def test_ticker_range_reversed(self):
        session = make_session()
        result = PolygonClient("k", session=session).ticker_range(
            "X:BTCUSD", "2024-01-02", "2023-12-20", today=TODAY
        )
        assert isinstance(result, FetchError)
        session.get.assert_not_called()
