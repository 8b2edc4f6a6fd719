"""Dashboard window hosting the market scatter plot and per-ticker history plots.

Fetches run on the global QThreadPool; results come back through Qt signals
tagged with a generation number so that a slow, superseded request never
overwrites a newer one.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
from PySide6 import QtCore, QtWidgets
from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal
from PySide6.QtWidgets import (
    QDateEdit,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from .models import DataPoint, FetchError, Margin, TooltipConfig
from .plot_widget import ScatterPlotWidget
from .polygon import MAX_HISTORY_DAYS, FetchResult, PolygonClient, iso_date
from .settings import Settings

logger = logging.getLogger(__name__)

HISTORY_DAYS = 30


def make_demo_points(n: int = 400, seed: int = 7) -> List[DataPoint]:
    """Synthetic grouped-daily data: log-normal volumes and prices."""
    rng = np.random.default_rng(seed)
    volumes = 10 ** rng.uniform(1, 9, n)
    closes = 10 ** (rng.normal(0, 2, n))
    changes = rng.normal(0, 6, n)
    base_time = _epoch_ms(dt.date(2024, 1, 2))
    return [
        DataPoint(
            name=f"X:DEMO{i:03d}USD",
            x=float(volumes[i]),
            y=float(closes[i]),
            z=float(changes[i]),
            time=base_time,
        )
        for i in range(n)
    ]


def make_demo_history(
    point: DataPoint, days: int = HISTORY_DAYS, seed: int = 11
) -> List[DataPoint]:
    """Synthetic daily history ending at ``point`` (random walk in log space)."""
    rng = np.random.default_rng(seed + sum(map(ord, point.name)))
    log_close = np.log(point.y) + np.cumsum(rng.normal(0, 0.04, days))[::-1]
    log_volume = np.log(point.x) + rng.normal(0, 0.3, days)
    if point.time:
        end = dt.datetime.fromtimestamp(point.time / 1000.0, tz=dt.timezone.utc).date()
    else:
        end = dt.date.today()
    history = []
    for i in range(days):
        day = end - dt.timedelta(days=days - 1 - i)
        history.append(
            DataPoint(
                name=day.isoformat(),
                x=float(np.exp(log_volume[i])),
                y=float(np.exp(log_close[i])),
                z=float(rng.normal(0, 4)),
                time=_epoch_ms(day),
            )
        )
    return history


def _epoch_ms(day: dt.date) -> int:
    midnight = dt.datetime(day.year, day.month, day.day, tzinfo=dt.timezone.utc)
    return int(midnight.timestamp() * 1000)


def history_start(
    end: str, today: Optional[dt.date] = None, max_history_days: int = MAX_HISTORY_DAYS
) -> str:
    """First day of the history window ending at ``end``.

    Never earlier than the oldest date the aggregates endpoint serves.
    """
    start = iso_date(dt.date.fromisoformat(end), days=-(HISTORY_DAYS - 1))
    oldest = iso_date(today, days=-max_history_days)
    return max(start, oldest)


class WorkerSignals(QObject):
    """Signals for the fetch worker to report back to the GUI thread."""

    finished = Signal(str, int, object)  # slot, generation, list[DataPoint] | FetchError


class FetchWorker(QRunnable):
    """Runs one loader call on the thread pool."""

    def __init__(self, slot: str, generation: int, fetch: Callable[[], FetchResult]) -> None:
        super().__init__()
        self.slot = slot
        self.generation = generation
        self._fetch = fetch
        self.signals = WorkerSignals()

    def run(self) -> None:
        try:
            result = self._fetch()
        except Exception as e:  # any loader failure becomes a FetchError
            logger.exception("Fetch worker failed")
            result = FetchError(f"Unexpected error: {e}")
        self.signals.finished.emit(self.slot, self.generation, result)


class DashboardWindow(QMainWindow):
    """Main window: date picker, market scatter tab and ticker history tabs."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[PolygonClient] = None,
        demo: bool = False,
        initial_date: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Crypto market scatter")
        self._settings = settings
        self._demo = demo or (client is None and not settings.has_api_key)
        self._client = client
        if self._client is None and not self._demo:
            self._client = PolygonClient(
                settings.api_key, base_url=settings.base_url, timeout=settings.timeout
            )

        self._thread_pool = QThreadPool.globalInstance()
        self._generations: Dict[str, int] = {}  # latest request per slot
        self._handlers: Dict[str, Callable[[FetchResult], None]] = {}
        self._workers: Dict[Tuple[str, int], FetchWorker] = {}
        self._ticker_tabs: Dict[str, ScatterPlotWidget] = {}

        self._setup_ui(initial_date)

    def _setup_ui(self, initial_date: Optional[str]) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)

        bar = QHBoxLayout()
        bar.addWidget(QLabel("Date:"))
        self.date_edit = QDateEdit()
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDisplayFormat("yyyy-MM-dd")
        self.date_edit.setMaximumDate(QtCore.QDate.currentDate())
        start = QtCore.QDate.fromString(initial_date or iso_date(days=-1), "yyyy-MM-dd")
        self.date_edit.setDate(start)
        bar.addWidget(self.date_edit)

        self.load_btn = QPushButton("Load")
        self.load_btn.clicked.connect(self.load_market)
        bar.addWidget(self.load_btn)

        self.reset_btn = QPushButton("Reset zoom")
        self.reset_btn.clicked.connect(self._on_reset_zoom)
        bar.addWidget(self.reset_btn)

        self.status_label = QLabel("Demo data" if self._demo else "")
        bar.addWidget(self.status_label, 1)
        layout.addLayout(bar)

        self.tabs = QTabWidget()
        self.tabs.setTabsClosable(True)
        self.tabs.tabCloseRequested.connect(self._on_tab_close)
        layout.addWidget(self.tabs, 1)

        self.market_plot = self._make_plot()
        self.market_plot.add_point_click_handler(self.open_ticker)
        self.tabs.addTab(self.market_plot, "Market")
        self.tabs.tabBar().setTabButton(0, QtWidgets.QTabBar.RightSide, None)

        self.setCentralWidget(central)

    def _make_plot(self) -> ScatterPlotWidget:
        plot = ScatterPlotWidget(
            width=900,
            height=520,
            margin=Margin(top=20, right=30, bottom=50, left=70),
            x_label="Volume",
            y_label="Close",
            tooltip_config=TooltipConfig(x_name="volume", y_name="close"),
        )
        plot.statusMessage.connect(self.status_label.setText)
        return plot

    # --- Loading ---

    def selected_date(self) -> str:
        return self.date_edit.date().toString("yyyy-MM-dd")

    def load_market(self) -> None:
        """Fetch the grouped daily aggregates of the selected date."""
        date = self.selected_date()
        self.status_label.setText(f"Loading {date}...")
        if self._demo:
            self._start("market", make_demo_points, self._on_market_loaded)
        else:
            client = self._client
            self._start("market", lambda: client.grouped_daily(date), self._on_market_loaded)

    def open_ticker(self, point: DataPoint) -> None:
        """Open (or focus) the history tab of a clicked ticker."""
        ticker = point.name
        plot = self._ticker_tabs.get(ticker)
        if plot is None:
            plot = self._make_plot()
            self._ticker_tabs[ticker] = plot
            self.tabs.addTab(plot, ticker)
        self.tabs.setCurrentWidget(plot)

        end = self.selected_date()
        if self._demo:
            fetch = lambda: make_demo_history(point)  # noqa: E731
        else:
            client = self._client
            start = history_start(end, max_history_days=client.max_history_days)
            fetch = lambda: client.ticker_range(ticker, start, end)  # noqa: E731
        self._start(
            f"ticker:{ticker}", fetch, lambda result: self._on_history_loaded(ticker, result)
        )

    def _start(
        self,
        slot: str,
        fetch: Callable[[], FetchResult],
        on_done: Callable[[FetchResult], None],
    ) -> None:
        generation = self._generations.get(slot, 0) + 1
        self._generations[slot] = generation
        self._handlers[slot] = on_done
        worker = FetchWorker(slot, generation, fetch)
        worker.signals.finished.connect(self._on_worker_finished)
        self._workers[(slot, generation)] = worker
        self._thread_pool.start(worker)

    def _on_worker_finished(self, slot: str, generation: int, result: FetchResult) -> None:
        self._workers.pop((slot, generation), None)
        if generation != self._generations.get(slot):
            logger.debug("Dropping stale %s result (generation %d)", slot, generation)
            return
        self._handlers[slot](result)

    def _on_market_loaded(self, result: FetchResult) -> None:
        message = self.market_plot.render_points(result)
        if message is None:
            self.status_label.setText(f"{len(self.market_plot.points)} tickers")

    def _on_history_loaded(self, ticker: str, result: FetchResult) -> None:
        plot = self._ticker_tabs.get(ticker)
        if plot is None:
            return
        message = plot.render_points(result)
        if message is None:
            plot.render_path(result)
            self.status_label.setText(f"{ticker}: {len(plot.points)} days")

    # --- UI callbacks ---

    def _on_reset_zoom(self) -> None:
        widget = self.tabs.currentWidget()
        if isinstance(widget, ScatterPlotWidget):
            widget.reset_zoom()

    def _on_tab_close(self, index: int) -> None:
        widget = self.tabs.widget(index)
        if widget is self.market_plot:
            return
        for ticker, plot in list(self._ticker_tabs.items()):
            if plot is widget:
                del self._ticker_tabs[ticker]
        self.tabs.removeTab(index)
        widget.deleteLater()
