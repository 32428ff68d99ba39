"""Snapshot selection and period-over-period pace deltas."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

from demand_pacing.domain.constraints import DemandBlendConfig
from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import (
    AvailabilityObservation,
    PaceRecord,
    ScoredObservation,
)
from demand_pacing.services.scoring_service import score_observations
from demand_pacing.utils.logger import get_logger, summary_line


logger = get_logger(__name__)


def _difference(latest: Optional[float], past: Optional[float]) -> Optional[float]:
    if latest is None or past is None:
        return None
    return float(latest) - float(past)


def _percent_change(latest: Optional[int], past: Optional[int]) -> Optional[float]:
    if latest is None or past is None or past == 0:
        return None
    return ((latest - past) / past) * 100.0


def calculate_pace(
    latest: Sequence[ScoredObservation],
    past: Sequence[ScoredObservation],
) -> list[PaceRecord]:
    """Join two scored series on checkin day and emit deltas in ``latest`` order."""

    past_by_day: dict[date, ScoredObservation] = {}
    for record in past:
        past_by_day[record.checkin_date] = record

    pace: list[PaceRecord] = []
    for current in latest:
        previous = past_by_day.get(current.checkin_date)
        if previous is None:
            pace.append(PaceRecord(checkin_date=current.checkin_date))
            continue

        now_obs = current.observation
        then_obs = previous.observation
        pace.append(
            PaceRecord(
                checkin_date=current.checkin_date,
                mpss_delta=_difference(current.mpss, previous.mpss),
                market_demand_score_delta=_difference(
                    current.market_demand_score,
                    previous.market_demand_score,
                ),
                total_results_delta=_difference(now_obs.total_results, then_obs.total_results),
                hotel_count_delta=_difference(now_obs.hotel_count, then_obs.hotel_count),
                total_results_percent_delta=_percent_change(
                    now_obs.total_results,
                    then_obs.total_results,
                ),
                wap_delta=_difference(now_obs.weighted_avg_price, then_obs.weighted_avg_price),
            )
        )
    return pace


def _latest_per_checkin(
    observations: Sequence[AvailabilityObservation],
) -> list[AvailabilityObservation]:
    chosen: dict[date, AvailabilityObservation] = {}
    for observation in observations:
        existing = chosen.get(observation.checkin_date)
        if existing is None or _scrape_key(observation) > _scrape_key(existing):
            chosen[observation.checkin_date] = observation
    return [chosen[day] for day in sorted(chosen)]


def _scrape_key(observation: AvailabilityObservation) -> float:
    if observation.scraped_at is None:
        return float("-inf")
    return observation.scraped_at.timestamp()


def _within_horizon(
    observations: Sequence[AvailabilityObservation],
    today: date,
    horizon_days: int,
) -> list[AvailabilityObservation]:
    last_day = today + timedelta(days=horizon_days)
    return [item for item in observations if today <= item.checkin_date <= last_day]


def select_latest_snapshots(
    observations: Sequence[AvailabilityObservation],
    today: date,
    horizon_days: int = 90,
) -> list[AvailabilityObservation]:
    """Most recent scrape for every checkin day in ``[today, today + horizon]``."""
    return _latest_per_checkin(_within_horizon(observations, today, horizon_days))


def select_past_snapshots(
    observations: Sequence[AvailabilityObservation],
    today: date,
    period_days: int,
    horizon_days: int = 90,
) -> list[AvailabilityObservation]:
    """Snapshot as it looked on the last scrape day at least ``period_days`` ago."""

    if period_days < 0:
        raise InvalidInput("period_days must be >= 0")

    cutoff = today - timedelta(days=period_days)
    scrape_days = [
        item.scrape_day
        for item in observations
        if item.scrape_day is not None and item.scrape_day <= cutoff
    ]
    if not scrape_days:
        return []

    past_scrape_day = max(scrape_days)
    same_day = [item for item in observations if item.scrape_day == past_scrape_day]
    return _latest_per_checkin(_within_horizon(same_day, today, horizon_days))


def build_forward_view(
    observations: Sequence[AvailabilityObservation],
    today: date,
    horizon_days: int = 90,
    config: Optional[DemandBlendConfig] = None,
) -> list[ScoredObservation]:
    latest = select_latest_snapshots(observations, today, horizon_days)
    return score_observations(latest, config=config)


def build_pace_report(
    observations: Sequence[AvailabilityObservation],
    today: date,
    period_days: int,
    horizon_days: int = 90,
    config: Optional[DemandBlendConfig] = None,
) -> list[PaceRecord]:
    """Latest vs. ``period_days``-ago snapshots, each scored on its own."""

    latest = score_observations(
        select_latest_snapshots(observations, today, horizon_days),
        config=config,
    )
    past = score_observations(
        select_past_snapshots(observations, today, period_days, horizon_days),
        config=config,
    )
    pace = calculate_pace(latest, past)
    logger.info(
        summary_line(
            "Pace computed",
            today=today.isoformat(),
            period_days=period_days,
            latest_rows=len(latest),
            past_rows=len(past),
        )
    )
    return pace


def build_scrape_history(
    observations: Sequence[AvailabilityObservation],
    checkin_date: date,
    limit: int = 30,
    config: Optional[DemandBlendConfig] = None,
) -> list[ScoredObservation]:
    """Latest ``limit`` scrapes for one checkin day, scored, oldest first."""

    if limit <= 0:
        raise InvalidInput("limit must be > 0")
    matching = [item for item in observations if item.checkin_date == checkin_date]
    newest_first = sorted(matching, key=_scrape_key, reverse=True)[:limit]
    scored = score_observations(newest_first, config=config)
    return list(reversed(scored))
