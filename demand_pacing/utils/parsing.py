"""Boundary conversion for loosely typed numeric and date fields.

Upstream records arrive with decimals and counts serialized as text and with
dates as ISO strings, ``date``, ``datetime`` or pandas timestamps. Every
conversion happens here, once, and every failure becomes ``None``.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import numpy as np
import pandas as pd


def parse_float(value: Any) -> Optional[float]:
    """Return a finite float or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal, np.number)):
        number = float(value)
    else:
        number = float(pd.to_numeric(str(value).strip(), errors="coerce"))
    if not math.isfinite(number):
        return None
    return number


def parse_int(value: Any) -> Optional[int]:
    """Return an integer (fraction truncated) or ``None``."""
    number = parse_float(value)
    if number is None:
        return None
    return int(number)


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Return a UTC timestamp or ``None``. Naive values are read as UTC."""
    if value is None:
        return None
    try:
        stamp = pd.to_datetime(value, errors="coerce", utc=True)
    except (TypeError, ValueError):
        return None
    if pd.isna(stamp):
        return None
    return stamp


def parse_day(value: Any) -> Optional[date]:
    """Truncate any date-like value to its UTC calendar day."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    stamp = parse_timestamp(value)
    if stamp is None:
        return None
    return stamp.date()


def slugify_city(city: str | None) -> str:
    """``"Las Vegas"`` -> ``"las-vegas"``."""
    if not city:
        return ""
    return "-".join(city.strip().lower().split())
