"""Portfolio-level pacing quadrants and forward occupancy risk."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional, Sequence

from demand_pacing.domain.constraints import PacingThresholds
from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import (
    Benchmarks,
    PacingEvaluation,
    PacingInput,
    PortfolioPropertyRow,
    Quadrant,
    QuadrantResult,
    RequiredAdr,
    StatusTier,
)
from demand_pacing.services.benchmark_service import default_benchmarks
from demand_pacing.services.pacing_service import (
    ZERO_BENCHMARK_RATIO,
    evaluate_pacing,
    require_finite,
    resolve_effective_benchmarks,
)
from demand_pacing.utils.config import Settings, get_settings
from demand_pacing.utils.logger import get_logger, summary_line


logger = get_logger(__name__)

UNACHIEVABLE_DIFFICULTY_PERCENT = ZERO_BENCHMARK_RATIO * 100.0


@dataclass(frozen=True)
class OccupancyRisk:
    hotel_id: int
    average_occupancy: float
    risk_level: str

    def to_dict(self) -> dict[str, float | int | str]:
        return {
            "hotel_id": self.hotel_id,
            "average_occupancy": self.average_occupancy,
            "risk_level": self.risk_level,
        }


def classify_quadrant(
    forward_occupancy: float,
    current_month_status: StatusTier,
    low_occupancy_pct: float = 60.0,
) -> Quadrant:
    low_fill = forward_occupancy < low_occupancy_pct
    rate_red = current_month_status is StatusTier.RED
    if low_fill and rate_red:
        return Quadrant.CRITICAL_RISK
    if rate_red:
        return Quadrant.RATE_STRATEGY_RISK
    if low_fill:
        return Quadrant.FILL_RISK
    return Quadrant.ON_PACE


def pacing_difficulty_percent(required_adr: RequiredAdr, benchmark_adr: float) -> float:
    """Required ADR as a percentage of benchmark ADR, for charting."""
    if required_adr.unachievable:
        return UNACHIEVABLE_DIFFICULTY_PERCENT
    value = required_adr.value or 0.0
    if benchmark_adr > 0:
        return value / benchmark_adr * 100.0
    return UNACHIEVABLE_DIFFICULTY_PERCENT if value > 0 else 100.0


def _next_month(today: date) -> tuple[int, int]:
    if today.month == 12:
        return today.year + 1, 0
    return today.year, today.month


def _reported_adr(evaluation: PacingEvaluation) -> Optional[float]:
    return evaluation.required_adr.value


def evaluate_property(
    row: PortfolioPropertyRow,
    benchmarks: Optional[Benchmarks],
    today: date,
    thresholds: Optional[PacingThresholds] = None,
    low_occupancy_pct: float = 60.0,
) -> QuadrantResult:
    require_finite(forward_occupancy=row.forward_occupancy)
    limits = thresholds or PacingThresholds()
    resolved = benchmarks or default_benchmarks(limits)
    _, benchmark_adr = resolve_effective_benchmarks(resolved, limits)

    current = evaluate_pacing(
        PacingInput(
            target_rev=row.current_month_target_revenue,
            actual_rev=row.current_month_otb_revenue,
            capacity_count=row.current_month_capacity,
            total_sold_room_nights=row.current_month_otb_rooms,
            year=today.year,
            month_index=today.month - 1,
            physical_unsold_remaining=row.current_month_physical_unsold,
            benchmarks=resolved,
        ),
        today=today,
        thresholds=limits,
    )
    next_year, next_month_index = _next_month(today)
    upcoming = evaluate_pacing(
        PacingInput(
            target_rev=row.next_month_target_revenue,
            actual_rev=row.next_month_otb_revenue,
            capacity_count=row.next_month_capacity,
            total_sold_room_nights=row.next_month_otb_rooms,
            year=next_year,
            month_index=next_month_index,
            benchmarks=resolved,
        ),
        today=today,
        thresholds=limits,
    )

    current_status = current.result.status_tier
    return QuadrantResult(
        hotel_id=row.hotel_id,
        hotel_name=row.hotel_name,
        quadrant=classify_quadrant(row.forward_occupancy, current_status, low_occupancy_pct),
        forward_occupancy=row.forward_occupancy,
        pacing_difficulty_percent=pacing_difficulty_percent(current.required_adr, benchmark_adr),
        current_month_status=current_status,
        current_month_status_text=current.result.status_text,
        current_month_shortfall=row.current_month_target_revenue - row.current_month_otb_revenue,
        current_month_required_adr=_reported_adr(current),
        current_month_unachievable=current.required_adr.unachievable,
        next_month_status=upcoming.result.status_tier,
        next_month_status_text=upcoming.result.status_text,
        next_month_shortfall=row.next_month_target_revenue - row.next_month_otb_revenue,
        next_month_required_adr=_reported_adr(upcoming),
        next_month_unachievable=upcoming.required_adr.unachievable,
    )


def evaluate_portfolio(
    rows: Sequence[PortfolioPropertyRow],
    benchmarks_by_hotel: Mapping[int, Benchmarks],
    today: date,
    thresholds: Optional[PacingThresholds] = None,
    low_occupancy_pct: float = 60.0,
) -> list[QuadrantResult]:
    """Classify every property independently; results follow input order."""
    return [
        evaluate_property(
            row,
            benchmarks_by_hotel.get(row.hotel_id),
            today=today,
            thresholds=thresholds,
            low_occupancy_pct=low_occupancy_pct,
        )
        for row in rows
    ]


def occupancy_risk_level(
    average_occupancy: float,
    critical_pct: float = 45.0,
    moderate_pct: float = 60.0,
) -> str:
    if average_occupancy < critical_pct:
        return "critical"
    if average_occupancy < moderate_pct:
        return "moderate"
    return "low"


class PortfolioPacingService:
    """Applies per-property pacing classification across a portfolio."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._thresholds = PacingThresholds.from_settings(self._settings)

    @property
    def thresholds(self) -> PacingThresholds:
        return self._thresholds

    def pacing_overview(
        self,
        rows: Sequence[PortfolioPropertyRow],
        benchmarks_by_hotel: Mapping[int, Benchmarks],
        today: Optional[date] = None,
    ) -> list[QuadrantResult]:
        as_of = today or date.today()
        results = evaluate_portfolio(
            rows,
            benchmarks_by_hotel,
            today=as_of,
            thresholds=self._thresholds,
            low_occupancy_pct=self._settings.portfolio_low_occupancy_pct,
        )
        at_risk = sum(1 for item in results if item.quadrant is not Quadrant.ON_PACE)
        logger.info(
            summary_line(
                "Portfolio pacing overview computed",
                properties=len(results),
                at_risk=at_risk,
            )
        )
        return results

    def occupancy_risk(
        self,
        daily_occupancy_by_hotel: Mapping[int, Sequence[float]],
    ) -> list[OccupancyRisk]:
        """Average of the first forward days per hotel, banded into a risk level."""
        window = self._settings.occupancy_risk_window_days
        risks: list[OccupancyRisk] = []
        for hotel_id, occupancies in daily_occupancy_by_hotel.items():
            leading = list(occupancies)[:window]
            if not all(math.isfinite(value) for value in leading):
                raise InvalidInput(f"daily occupancy for hotel {hotel_id} must be finite")
            average = sum(leading) / len(leading) if leading else 0.0
            level = (
                occupancy_risk_level(
                    average,
                    critical_pct=self._settings.occupancy_risk_critical_pct,
                    moderate_pct=self._settings.occupancy_risk_moderate_pct,
                )
                if leading
                else "low"
            )
            risks.append(OccupancyRisk(hotel_id=hotel_id, average_occupancy=average, risk_level=level))
        return risks
