from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import (
    Benchmarks,
    PortfolioPropertyRow,
    Quadrant,
    RequiredAdr,
    StatusTier,
)
from demand_pacing.services.portfolio_service import (
    UNACHIEVABLE_DIFFICULTY_PERCENT,
    PortfolioPacingService,
    classify_quadrant,
    evaluate_portfolio,
    evaluate_property,
    occupancy_risk_level,
    pacing_difficulty_percent,
)
from demand_pacing.utils.config import get_settings


TODAY = date(2025, 6, 15)
BENCHMARKS = Benchmarks(benchmark_occ=50.0, benchmark_adr=100.0)


def _row(**overrides) -> PortfolioPropertyRow:
    defaults = {
        "hotel_id": 1,
        "hotel_name": "Harbour View",
        "forward_occupancy": 50.0,
        "current_month_target_revenue": 10000.0,
        "current_month_otb_revenue": 4000.0,
        "current_month_physical_unsold": 100.0,
        "current_month_capacity": 900.0,
        "current_month_otb_rooms": 600.0,
        "next_month_target_revenue": 0.0,
        "next_month_otb_revenue": 0.0,
        "next_month_capacity": 900.0,
        "next_month_otb_rooms": 100.0,
    }
    defaults.update(overrides)
    return PortfolioPropertyRow(**defaults)


@pytest.mark.parametrize(
    ("forward_occupancy", "status", "quadrant"),
    [
        (50.0, StatusTier.RED, Quadrant.CRITICAL_RISK),
        (70.0, StatusTier.RED, Quadrant.RATE_STRATEGY_RISK),
        (40.0, StatusTier.YELLOW, Quadrant.FILL_RISK),
        (80.0, StatusTier.GREEN, Quadrant.ON_PACE),
        (60.0, StatusTier.YELLOW, Quadrant.ON_PACE),
    ],
)
def test_quadrant_truth_table(forward_occupancy, status, quadrant) -> None:
    assert classify_quadrant(forward_occupancy, status) is quadrant


def test_difficulty_percent_guards() -> None:
    assert pacing_difficulty_percent(RequiredAdr.of(120.0), 100.0) == pytest.approx(120.0)
    assert pacing_difficulty_percent(RequiredAdr.of(50.0), 0.0) == UNACHIEVABLE_DIFFICULTY_PERCENT
    assert pacing_difficulty_percent(RequiredAdr.of(0.0), 0.0) == 100.0
    assert pacing_difficulty_percent(RequiredAdr.impossible(), 100.0) == UNACHIEVABLE_DIFFICULTY_PERCENT


def test_red_current_month_with_low_fill_is_critical() -> None:
    result = evaluate_property(_row(), BENCHMARKS, today=TODAY)
    assert result.current_month_status is StatusTier.RED
    assert result.current_month_required_adr == pytest.approx(120.0)
    assert result.pacing_difficulty_percent == pytest.approx(120.0)
    assert result.current_month_shortfall == pytest.approx(6000.0)
    assert result.quadrant is Quadrant.CRITICAL_RISK
    assert result.next_month_status is StatusTier.GREEN
    assert result.next_month_status_text == "No Target"


def test_next_month_status_does_not_feed_quadrant() -> None:
    result = evaluate_property(
        _row(
            forward_occupancy=80.0,
            current_month_target_revenue=4000.0,
            next_month_target_revenue=90000.0,
            next_month_otb_revenue=1000.0,
        ),
        BENCHMARKS,
        today=TODAY,
    )
    assert result.current_month_status is StatusTier.GREEN
    assert result.next_month_status is StatusTier.RED
    assert result.quadrant is Quadrant.ON_PACE


def test_sold_out_current_month_is_unachievable() -> None:
    result = evaluate_property(_row(current_month_physical_unsold=0.0), BENCHMARKS, today=TODAY)
    assert result.current_month_unachievable
    assert result.current_month_required_adr is None
    assert result.pacing_difficulty_percent == UNACHIEVABLE_DIFFICULTY_PERCENT
    assert result.current_month_status is StatusTier.RED


def test_missing_benchmarks_use_defaults() -> None:
    result = evaluate_property(_row(), None, today=TODAY)
    # 100 unsold at 75% -> 75 rooms; 6000 / 75 = 80 against 120
    assert result.current_month_required_adr == pytest.approx(80.0)
    assert result.current_month_status is StatusTier.GREEN
    assert result.quadrant is Quadrant.FILL_RISK


def test_december_rolls_next_month_into_new_year() -> None:
    result = evaluate_property(
        _row(next_month_target_revenue=1000.0, next_month_otb_revenue=0.0),
        BENCHMARKS,
        today=date(2025, 12, 10),
    )
    # (900 - 100) * 50% = 400 rooms; 1000 / 400 = 2.5 against 100
    assert result.next_month_required_adr == pytest.approx(2.5)
    assert result.next_month_status is StatusTier.GREEN


def test_service_overview_preserves_input_order() -> None:
    service = PortfolioPacingService()
    rows = [_row(hotel_id=3), _row(hotel_id=1, forward_occupancy=90.0), _row(hotel_id=2)]
    results = service.pacing_overview(rows, {1: BENCHMARKS, 3: BENCHMARKS}, today=TODAY)
    assert [item.hotel_id for item in results] == [3, 1, 2]
    assert results[1].quadrant is Quadrant.RATE_STRATEGY_RISK
    assert results[2].quadrant is Quadrant.FILL_RISK


def test_evaluate_portfolio_matches_per_property_evaluation() -> None:
    rows = [_row(hotel_id=5), _row(hotel_id=6, current_month_otb_revenue=10000.0)]
    results = evaluate_portfolio(rows, {5: BENCHMARKS}, today=TODAY)
    assert results[0] == evaluate_property(rows[0], BENCHMARKS, today=TODAY)
    assert results[1].current_month_status_text == "Target Met"


def test_low_occupancy_threshold_comes_from_settings() -> None:
    settings = replace(get_settings(), portfolio_low_occupancy_pct=40.0)
    service = PortfolioPacingService(settings=settings)
    result = service.pacing_overview([_row()], {1: BENCHMARKS}, today=TODAY)[0]
    assert result.quadrant is Quadrant.RATE_STRATEGY_RISK


def test_occupancy_risk_levels() -> None:
    assert occupancy_risk_level(44.9) == "critical"
    assert occupancy_risk_level(45.0) == "moderate"
    assert occupancy_risk_level(60.0) == "low"


def test_occupancy_risk_uses_leading_window() -> None:
    service = PortfolioPacingService()
    risks = service.occupancy_risk(
        {
            1: [40.0] * 30,
            2: [100.0] * 30 + [0.0] * 15,
            3: [],
        }
    )
    by_hotel = {risk.hotel_id: risk for risk in risks}
    assert by_hotel[1].risk_level == "critical"
    assert by_hotel[2].average_occupancy == pytest.approx(100.0)
    assert by_hotel[2].risk_level == "low"
    assert by_hotel[3].average_occupancy == 0.0
    assert by_hotel[3].risk_level == "low"


def test_infinite_target_raises_instead_of_reporting_infinity() -> None:
    with pytest.raises(InvalidInput):
        evaluate_property(_row(current_month_target_revenue=float("inf")), BENCHMARKS, today=TODAY)


def test_non_finite_forward_occupancy_raises() -> None:
    with pytest.raises(InvalidInput):
        evaluate_property(_row(forward_occupancy=float("nan")), BENCHMARKS, today=TODAY)


def test_occupancy_risk_rejects_nan_days() -> None:
    with pytest.raises(InvalidInput):
        PortfolioPacingService().occupancy_risk({1: [float("nan")]})
