#!/usr/bin/env python3
"""Ticker history with a connecting path.

Plots 30 days of synthetic history for one ticker and draws the smoothed
path through the days in date order. Use the mouse wheel to zoom, drag to pan
and the button to reset the view.
"""

import logging
import sys

from PySide6 import QtWidgets
from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

from cryptoscatterqt import DataPoint, ScatterPlotWidget
from cryptoscatterqt.dashboard import make_demo_history


def main():
    logging.basicConfig(level=logging.DEBUG)
    app = QtWidgets.QApplication(sys.argv)

    window = QWidget()
    window.setWindowTitle("Ticker history")
    layout = QVBoxLayout(window)

    plot = ScatterPlotWidget(width=700, height=450, x_label="Volume", y_label="Close")
    status = QLabel()
    plot.statusMessage.connect(status.setText)
    plot.transformChanged.connect(lambda t: status.setText(f"zoom x{t.k:.2f}"))

    reset = QPushButton("Reset zoom")
    reset.clicked.connect(plot.reset_zoom)

    layout.addWidget(plot)
    layout.addWidget(status)
    layout.addWidget(reset)

    last_day = DataPoint("X:BTCUSD", 25_000.0, 42_000.0, 1.0, time=1704153600000)
    history = make_demo_history(last_day)
    plot.render_points(history)
    plot.render_path(history)

    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
