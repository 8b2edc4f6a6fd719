#!/usr/bin/env python3
"""Polygon.io dashboard.

Opens the full dashboard: pick a date, load the grouped daily aggregates of
every crypto ticker and click a point to open its 30-day history in a new tab.

Set POLYGON_API_KEY to use live data; without it synthetic data is shown.
"""

import logging
import sys

from PySide6 import QtWidgets

from cryptoscatterqt import load_settings
from cryptoscatterqt.dashboard import DashboardWindow


def main():
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    app = QtWidgets.QApplication(sys.argv)

    window = DashboardWindow(settings)
    window.resize(1000, 680)
    window.show()
    window.load_market()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
