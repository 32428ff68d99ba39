from __future__ import annotations

from datetime import date

import pytest

from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import AvailabilityObservation, ScoredObservation
from demand_pacing.services.pace_service import (
    build_pace_report,
    build_scrape_history,
    calculate_pace,
    select_latest_snapshots,
    select_past_snapshots,
)
from demand_pacing.services.scoring_service import score_observations


def _obs(
    day: str,
    total,
    price,
    scraped_at: str | None = None,
    hotel_count=None,
) -> AvailabilityObservation:
    observation = AvailabilityObservation.from_record(
        {
            "checkin_date": day,
            "total_results": total,
            "weighted_avg_price": price,
            "hotel_count": hotel_count,
            "scraped_at": scraped_at,
        }
    )
    assert observation is not None
    return observation


def _scored(day: str, total, price, mpss=None, demand=None) -> ScoredObservation:
    return ScoredObservation(observation=_obs(day, total, price), mpss=mpss, market_demand_score=demand)


def test_hotel_count_falls_back_to_total_results() -> None:
    assert _obs("2025-03-01", "42", 10).hotel_count == 42
    assert _obs("2025-03-01", "42", 10, hotel_count=7).hotel_count == 7


def test_pace_against_itself_is_zero() -> None:
    series = score_observations(
        [_obs("2025-03-01", 100, 120), _obs("2025-03-02", 150, 180)]
    )
    for record in calculate_pace(series, series):
        assert record.mpss_delta == 0.0
        assert record.market_demand_score_delta == 0.0
        assert record.total_results_delta == 0.0
        assert record.hotel_count_delta == 0.0
        assert record.total_results_percent_delta == 0.0
        assert record.wap_delta == 0.0


def test_missing_past_day_nulls_every_delta() -> None:
    latest = [_scored("2025-03-01", 100, 120, mpss=10.0, demand=40)]
    past = [_scored("2025-03-02", 90, 110, mpss=20.0, demand=30)]
    record = calculate_pace(latest, past)[0]
    assert record.checkin_date == date(2025, 3, 1)
    assert record.to_dict() == {
        "checkin_date": "2025-03-01",
        "mpss_delta": None,
        "market_demand_score_delta": None,
        "total_results_delta": None,
        "hotel_count_delta": None,
        "total_results_percent_delta": None,
        "wap_delta": None,
    }


def test_deltas_and_percent_change() -> None:
    latest = [_scored("2025-03-01", 110, "130.5", mpss=60.0, demand=55)]
    past = [_scored("2025-03-01", 100, "120.5", mpss=50.0, demand=45)]
    record = calculate_pace(latest, past)[0]
    assert record.mpss_delta == pytest.approx(10.0)
    assert record.market_demand_score_delta == pytest.approx(10.0)
    assert record.total_results_delta == pytest.approx(10.0)
    assert record.total_results_percent_delta == pytest.approx(10.0)
    assert record.wap_delta == pytest.approx(10.0)


def test_percent_change_is_null_for_zero_past_supply() -> None:
    latest = [_scored("2025-03-01", 25, 100)]
    past = [_scored("2025-03-01", 0, 100)]
    record = calculate_pace(latest, past)[0]
    assert record.total_results_delta == pytest.approx(25.0)
    assert record.total_results_percent_delta is None
    assert record.mpss_delta is None


def test_unparsable_side_gives_null_delta() -> None:
    latest = [_scored("2025-03-01", "n/a", "bad")]
    past = [_scored("2025-03-01", 10, 100)]
    record = calculate_pace(latest, past)[0]
    assert record.total_results_delta is None
    assert record.total_results_percent_delta is None
    assert record.wap_delta is None


def test_join_ignores_time_of_day() -> None:
    latest = [_scored("2025-03-01T22:45:00+00:00", 120, 100)]
    past = [_scored("2025-03-01", 100, 100)]
    record = calculate_pace(latest, past)[0]
    assert record.total_results_delta == pytest.approx(20.0)


def test_output_follows_latest_order() -> None:
    latest = [_scored("2025-03-03", 1, 1), _scored("2025-03-01", 1, 1)]
    days = [record.checkin_date for record in calculate_pace(latest, [])]
    assert days == [date(2025, 3, 3), date(2025, 3, 1)]


def test_select_latest_keeps_newest_scrape_within_horizon() -> None:
    today = date(2025, 3, 1)
    observations = [
        _obs("2025-03-02", 100, 100, scraped_at="2025-02-27T06:00:00Z"),
        _obs("2025-03-02", 120, 110, scraped_at="2025-02-28T06:00:00Z"),
        _obs("2025-02-28", 80, 90, scraped_at="2025-02-28T06:00:00Z"),
        _obs("2025-06-30", 80, 90, scraped_at="2025-02-28T06:00:00Z"),
    ]
    latest = select_latest_snapshots(observations, today, horizon_days=90)
    assert [item.checkin_date for item in latest] == [date(2025, 3, 2)]
    assert latest[0].total_results == 120


def test_select_past_uses_last_scrape_day_before_cutoff() -> None:
    today = date(2025, 3, 10)
    observations = [
        _obs("2025-03-12", 100, 100, scraped_at="2025-03-01T06:00:00Z"),
        _obs("2025-03-12", 105, 100, scraped_at="2025-03-02T06:00:00Z"),
        _obs("2025-03-12", 107, 100, scraped_at="2025-03-02T18:00:00Z"),
        _obs("2025-03-12", 110, 100, scraped_at="2025-03-05T06:00:00Z"),
    ]
    past = select_past_snapshots(observations, today, period_days=7)
    assert len(past) == 1
    assert past[0].total_results == 107


def test_select_past_without_old_scrapes_is_empty() -> None:
    observations = [_obs("2025-03-12", 100, 100, scraped_at="2025-03-09T06:00:00Z")]
    assert select_past_snapshots(observations, date(2025, 3, 10), period_days=7) == []


def test_negative_period_raises() -> None:
    with pytest.raises(InvalidInput):
        select_past_snapshots([], date(2025, 3, 10), period_days=-1)


def test_pace_report_compares_latest_with_past_scrape() -> None:
    today = date(2025, 3, 10)
    observations = [
        _obs("2025-03-12", 100, 100, scraped_at="2025-03-03T06:00:00Z"),
        _obs("2025-03-13", 200, 150, scraped_at="2025-03-03T06:00:00Z"),
        _obs("2025-03-12", 80, 120, scraped_at="2025-03-10T06:00:00Z"),
        _obs("2025-03-13", 200, 150, scraped_at="2025-03-10T06:00:00Z"),
        _obs("2025-03-14", 150, 130, scraped_at="2025-03-10T06:00:00Z"),
    ]
    report = build_pace_report(observations, today, period_days=7)
    assert [record.checkin_date for record in report] == [
        date(2025, 3, 12),
        date(2025, 3, 13),
        date(2025, 3, 14),
    ]
    assert report[0].total_results_delta == pytest.approx(-20.0)
    assert report[0].total_results_percent_delta == pytest.approx(-20.0)
    assert report[1].wap_delta == pytest.approx(0.0)
    assert report[2].total_results_delta is None


def test_scrape_history_is_oldest_first_and_limited() -> None:
    observations = [
        _obs("2025-03-12", 100 + offset, 100, scraped_at=f"2025-03-0{offset}T06:00:00Z")
        for offset in range(1, 6)
    ]
    history = build_scrape_history(observations, date(2025, 3, 12), limit=3)
    assert [item.observation.total_results for item in history] == [103, 104, 105]
    assert history[-1].mpss is not None


def test_scrape_history_rejects_non_positive_limit() -> None:
    with pytest.raises(InvalidInput):
        build_scrape_history([], date(2025, 3, 12), limit=0)
