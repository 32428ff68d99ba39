"""Full-month occupancy and ADR benchmarks from daily property metrics."""

from __future__ import annotations

import calendar
import math
from typing import Any, Mapping, Optional, Sequence

import pandas as pd

from demand_pacing.domain.constraints import PacingThresholds
from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import Benchmarks
from demand_pacing.utils.logger import get_logger


logger = get_logger(__name__)

SOURCE_DEFAULT = "default"
SOURCE_MONTH_AVERAGE = "full-month-avg"


def days_in_month(year: int, month_index: int) -> int:
    """Days in a 0-based month."""
    if not 0 <= month_index <= 11:
        raise InvalidInput("month_index must be between 0 and 11")
    return calendar.monthrange(year, month_index + 1)[1]


def default_benchmarks(thresholds: Optional[PacingThresholds] = None) -> Benchmarks:
    limits = thresholds or PacingThresholds()
    return Benchmarks(
        benchmark_occ=limits.default_benchmark_occupancy,
        benchmark_adr=limits.default_benchmark_adr,
        source=SOURCE_DEFAULT,
    )


def resolve_benchmarks(
    daily_metrics: Sequence[Mapping[str, Any]],
    year: int,
    month_index: int,
    thresholds: Optional[PacingThresholds] = None,
) -> Benchmarks:
    """Occupancy is sold/capacity over the month; ADR is the mean daily gross ADR."""

    days_in_month(year, month_index)
    fallback = default_benchmarks(thresholds)

    frame = pd.DataFrame(
        list(daily_metrics),
        columns=["stay_date", "rooms_sold", "capacity_count", "gross_adr"],
    )
    frame["stay_date"] = pd.to_datetime(frame["stay_date"], errors="coerce")
    for column in ("rooms_sold", "capacity_count", "gross_adr"):
        frame[column] = pd.to_numeric(frame[column], errors="coerce")

    in_month = frame[
        (frame["stay_date"].dt.year == year)
        & (frame["stay_date"].dt.month == month_index + 1)
    ]
    capacity = float(in_month["capacity_count"].sum())
    if in_month.empty or capacity <= 0:
        logger.warning(
            "No daily metrics for benchmark month; using defaults | year=%s | month_index=%s",
            year,
            month_index,
        )
        return fallback

    occupancy = float(in_month["rooms_sold"].sum()) / capacity * 100.0
    adr = float(in_month["gross_adr"].mean())
    if math.isnan(adr) or adr <= 0:
        adr = fallback.benchmark_adr
    return Benchmarks(benchmark_occ=occupancy, benchmark_adr=adr, source=SOURCE_MONTH_AVERAGE)
