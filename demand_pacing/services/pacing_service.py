"""Budget pacing status for a single property-month."""

from __future__ import annotations

import math
from datetime import date
from typing import Optional

from demand_pacing.domain.constraints import PacingThresholds, validate_pacing_thresholds
from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import (
    Benchmarks,
    MonthPosition,
    PacingEvaluation,
    PacingInput,
    PacingResult,
    RequiredAdr,
    StatusTier,
)
from demand_pacing.utils.logger import get_logger


logger = get_logger(__name__)

NO_TARGET = "No Target"
TARGET_MET = "Target Met"
OFF_TARGET = "Off Target"
LOADING = "Loading..."
AT_RISK = "At Risk"
SLIGHTLY_BEHIND = "Slightly Behind"
ON_TARGET = "On Target"

# ratio reported when the benchmark ADR is zero but revenue is still required
ZERO_BENCHMARK_RATIO = 999.0


def classify_month(year: int, month_index: int, today: date) -> MonthPosition:
    """Place a 0-based month relative to ``today``'s month."""
    if not 0 <= month_index <= 11:
        raise InvalidInput("month_index must be between 0 and 11")
    target = (year, month_index)
    current = (today.year, today.month - 1)
    if target < current:
        return MonthPosition.PAST
    if target == current:
        return MonthPosition.CURRENT
    return MonthPosition.FUTURE


def require_finite(**values: Optional[float]) -> None:
    """Raise ``InvalidInput`` for NaN or infinite figures; ``None`` is allowed."""
    for name, value in values.items():
        if value is not None and not math.isfinite(value):
            raise InvalidInput(f"{name} must be a finite number")


def resolve_effective_benchmarks(
    benchmarks: Benchmarks,
    thresholds: PacingThresholds,
) -> tuple[float, float]:
    """Zero or missing benchmark values fall back to the configured defaults."""
    occupancy = benchmarks.benchmark_occ or thresholds.default_benchmark_occupancy
    adr = benchmarks.benchmark_adr or thresholds.default_benchmark_adr
    return float(occupancy), float(adr)


def compute_rooms_left_to_sell(
    position: MonthPosition,
    benchmark_occ_pct: float,
    capacity_count: float,
    total_sold_room_nights: float,
    physical_unsold_remaining: Optional[float],
) -> float:
    occupancy = benchmark_occ_pct / 100.0
    if position is MonthPosition.CURRENT:
        if physical_unsold_remaining is None:
            return 0.0
        return physical_unsold_remaining * occupancy
    if position is MonthPosition.FUTURE:
        return max(0.0, (capacity_count - total_sold_room_nights) * occupancy)
    return 0.0


def compute_required_adr(remaining_target: float, rooms_left_to_sell: float) -> RequiredAdr:
    if rooms_left_to_sell > 0 and remaining_target > 0:
        return RequiredAdr.of(remaining_target / rooms_left_to_sell)
    if remaining_target > 0:
        return RequiredAdr.impossible()
    return RequiredAdr.of(0.0)


def compute_adr_ratio(required_adr: RequiredAdr, benchmark_adr: float) -> Optional[float]:
    """Required-to-benchmark ADR ratio; ``None`` when the target is unachievable."""
    if required_adr.unachievable:
        return None
    value = required_adr.value or 0.0
    if benchmark_adr > 0:
        return value / benchmark_adr
    return ZERO_BENCHMARK_RATIO if value > 0 else 1.0


def tier_for_ratio(
    adr_ratio: Optional[float],
    thresholds: PacingThresholds,
) -> PacingResult:
    if adr_ratio is None or adr_ratio > thresholds.adr_ratio_yellow_max:
        return PacingResult(StatusTier.RED, AT_RISK)
    if adr_ratio > thresholds.adr_ratio_green_max:
        return PacingResult(StatusTier.YELLOW, SLIGHTLY_BEHIND)
    return PacingResult(StatusTier.GREEN, ON_TARGET)


def evaluate_pacing(
    pacing: PacingInput,
    today: Optional[date] = None,
    thresholds: Optional[PacingThresholds] = None,
) -> PacingEvaluation:
    """Run the branch sequence and keep the intermediate figures.

    Branch order: no target, target met, past month, benchmarks loading,
    then the required-ADR comparison for current and future months.
    """

    limits = thresholds or PacingThresholds()
    validate_pacing_thresholds(limits)
    require_finite(
        target_rev=pacing.target_rev,
        actual_rev=pacing.actual_rev,
        capacity_count=pacing.capacity_count,
        total_sold_room_nights=pacing.total_sold_room_nights,
        physical_unsold_remaining=pacing.physical_unsold_remaining,
    )
    if pacing.benchmarks is not None:
        require_finite(
            benchmark_occ=pacing.benchmarks.benchmark_occ,
            benchmark_adr=pacing.benchmarks.benchmark_adr,
        )
    position = classify_month(pacing.year, pacing.month_index, today or date.today())
    remaining_target = pacing.target_rev - pacing.actual_rev

    if pacing.target_rev <= 0:
        return PacingEvaluation(
            result=PacingResult(StatusTier.GREEN, NO_TARGET),
            month_position=position,
            remaining_target=remaining_target,
        )

    if remaining_target <= 0 and pacing.actual_rev > 0:
        return PacingEvaluation(
            result=PacingResult(StatusTier.GREEN, TARGET_MET),
            month_position=position,
            remaining_target=remaining_target,
        )

    if position is MonthPosition.PAST:
        if pacing.actual_rev < pacing.target_rev * limits.past_month_red_ratio:
            result = PacingResult(StatusTier.RED, OFF_TARGET)
        elif pacing.actual_rev < pacing.target_rev * limits.past_month_green_ratio:
            result = PacingResult(StatusTier.YELLOW, OFF_TARGET)
        else:
            result = PacingResult(StatusTier.GREEN, TARGET_MET)
        return PacingEvaluation(
            result=result,
            month_position=position,
            remaining_target=remaining_target,
        )

    if pacing.benchmarks is None:
        return PacingEvaluation(
            result=PacingResult(StatusTier.LOADING, LOADING),
            month_position=position,
            remaining_target=remaining_target,
        )

    benchmark_occ, benchmark_adr = resolve_effective_benchmarks(pacing.benchmarks, limits)
    rooms_left = compute_rooms_left_to_sell(
        position=position,
        benchmark_occ_pct=benchmark_occ,
        capacity_count=pacing.capacity_count,
        total_sold_room_nights=pacing.total_sold_room_nights,
        physical_unsold_remaining=pacing.physical_unsold_remaining,
    )
    required_adr = compute_required_adr(remaining_target, rooms_left)
    adr_ratio = compute_adr_ratio(required_adr, benchmark_adr)

    if required_adr.value == 0.0 and remaining_target <= 0:
        result = PacingResult(StatusTier.GREEN, TARGET_MET)
    else:
        result = tier_for_ratio(adr_ratio, limits)

    if required_adr.unachievable:
        logger.warning(
            "Unachievable pacing target | year=%s | month_index=%s | remaining_target=%.2f",
            pacing.year,
            pacing.month_index,
            remaining_target,
        )

    return PacingEvaluation(
        result=result,
        month_position=position,
        remaining_target=remaining_target,
        rooms_left_to_sell=rooms_left,
        required_adr=required_adr,
        adr_ratio=adr_ratio,
    )


def calculate_pacing_status(
    pacing: PacingInput,
    today: Optional[date] = None,
    thresholds: Optional[PacingThresholds] = None,
) -> PacingResult:
    return evaluate_pacing(pacing, today=today, thresholds=thresholds).result
