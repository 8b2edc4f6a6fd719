"""Environment-driven configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .polygon import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Runtime settings of the dashboard.

    Attributes:
        api_key: Polygon.io API key; empty means no live data (demo mode).
        base_url: Polygon.io REST base URL.
        timeout: HTTP timeout in seconds.
        log_level: Root logging level name.
    """

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from environment variables.

    - POLYGON_API_KEY: API key (optional)
    - POLYGON_BASE_URL: override of the REST base URL
    - CRYPTOSCATTER_TIMEOUT: HTTP timeout in seconds
    - CRYPTOSCATTER_LOG_LEVEL: logging level name
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    timeout = defaults.timeout
    raw_timeout = env.get("CRYPTOSCATTER_TIMEOUT", "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
            if timeout <= 0:
                raise ValueError("must be > 0")
        except ValueError as e:
            logger.warning("Ignoring CRYPTOSCATTER_TIMEOUT=%r (%s)", raw_timeout, e)
            timeout = defaults.timeout

    log_level = env.get("CRYPTOSCATTER_LOG_LEVEL", "").strip().upper() or defaults.log_level
    if not isinstance(logging.getLevelName(log_level), int):
        logger.warning("Ignoring unknown CRYPTOSCATTER_LOG_LEVEL=%r", log_level)
        log_level = defaults.log_level

    return Settings(
        api_key=env.get("POLYGON_API_KEY", "").strip(),
        base_url=env.get("POLYGON_BASE_URL", "").strip() or defaults.base_url,
        timeout=timeout,
        log_level=log_level,
    )
