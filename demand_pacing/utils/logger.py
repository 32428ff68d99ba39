"""Process logging for the engine and its HTTP surface."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from demand_pacing.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stdout handler once; later calls are no-ops."""

    global _configured
    if _configured:
        return

    resolved_level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


def summary_line(event: str, **fields: Any) -> str:
    """``summary_line("Pace computed", rows=3)`` -> ``"Pace computed | rows=3"``."""
    parts = [event]
    for key, value in fields.items():
        if isinstance(value, float):
            value = f"{value:.2f}"
        parts.append(f"{key}={value}")
    return " | ".join(parts)
