"""Command-line entry point: ``python -m cryptoscatterqt``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from PySide6 import QtWidgets

from .dashboard import DashboardWindow
from .polygon import validate_date
from .settings import load_settings


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cryptoscatterqt",
        description="Interactive log-log scatter of daily crypto market aggregates.",
    )
    parser.add_argument("--date", help="Day to load (YYYY-MM-DD), defaults to yesterday")
    parser.add_argument(
        "--demo", action="store_true", help="Use synthetic data instead of Polygon.io"
    )
    parser.add_argument("--log-level", help="Logging level (overrides CRYPTOSCATTER_LOG_LEVEL)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    error = validate_date(args.date) if args.date else None
    if error:
        logging.getLogger(__name__).error("%s: %s", error, args.date)
        return 2

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv[:1])
    window = DashboardWindow(settings, demo=args.demo, initial_date=args.date)
    window.show()
    window.load_market()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
