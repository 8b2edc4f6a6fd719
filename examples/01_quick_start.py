#!/usr/bin/env python3
"""Quick Start Example

This example shows the most basic usage of cryptoscatterqt:
- Creating a scatter plot widget
- Plotting a handful of named points on log-log axes
- Reacting to point clicks
- Displaying the plot
"""

import sys

from PySide6 import QtWidgets

from cryptoscatterqt import DataPoint, ScatterPlotWidget

def main():
    """Run the quick start example."""
    app = QtWidgets.QApplication(sys.argv)

    # Create the plot widget (plotting area size in pixels)
    plot = ScatterPlotWidget(width=700, height=450, x_label="Volume", y_label="Close")

    # x and y must be > 0 (log axes); z is the % change that drives the color
    points = [
        DataPoint("X:BTCUSD", 25_000.0, 42_000.0, 2.4),
        DataPoint("X:ETHUSD", 310_000.0, 2_250.0, -1.1),
        DataPoint("X:DOGEUSD", 9.2e8, 0.09, 0.00005),
        DataPoint("X:SOLUSD", 2.1e6, 98.0, -7.5),
    ]
    plot.render_points(points)
    plot.add_point_click_handler(lambda point: print("clicked", point.name))

    # Show the plot
    plot.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
