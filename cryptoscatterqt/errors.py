"""Exception types raised by the plotting core.

Data-shape problems (``ValidationError``, ``EmptyDataError``) are recovered at
the widget boundary and turned into a status message. ``InteractionError``
signals a lifecycle-ordering bug and is allowed to propagate.
"""

from __future__ import annotations


class CryptoScatterError(Exception):
    """Base class for all errors raised by cryptoscatterqt."""


class ValidationError(CryptoScatterError, ValueError):
    """Raised when input values cannot be plotted (e.g. non-positive log values)."""


class EmptyDataError(CryptoScatterError):
    """Raised when there is nothing to draw (empty dataset or failed fetch)."""


class InteractionError(CryptoScatterError, RuntimeError):
    """Raised when an interactive component is used out of order."""
