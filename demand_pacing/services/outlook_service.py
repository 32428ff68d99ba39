"""City-wide market outlook using a split-half rolling forecast."""

from __future__ import annotations

import math
from typing import Optional, Protocol, Sequence

import pandas as pd

from demand_pacing.domain.constraints import OutlookConfig, validate_outlook_config
from demand_pacing.domain.errors import EngineError, InvalidInput
from demand_pacing.domain.models import (
    AvailabilityObservation,
    OutlookResult,
    OutlookState,
    OutlookStatus,
)
from demand_pacing.utils.config import Settings, get_settings
from demand_pacing.utils.logger import get_logger, summary_line
from demand_pacing.utils.parsing import slugify_city


logger = get_logger(__name__)

DATA_POPULATING = "Data Populating"
DATA_ERROR = "Error"
MARKET_DEMAND = "market demand"
MARKET_PRICE = "market price"


class ObservationSource(Protocol):
    def fetch_city_observations(self, city_slug: str) -> list[AvailabilityObservation]:
        ...


def _no_data() -> OutlookResult:
    return OutlookResult(
        status=OutlookStatus.STABLE,
        metric=DATA_POPULATING,
        state=OutlookState.NO_DATA,
    )


def _percent_delta(past: float, recent: float) -> float:
    if past == 0:
        return 100.0 if recent > 0 else 0.0
    return ((recent - past) / past) * 100.0


def _format_metric(delta: float) -> str:
    shown = round(delta, 1) + 0.0
    prefix = "+" if shown > 0 else ""
    return f"{prefix}{shown:.1f}%"


def _build_frame(observations: Sequence[AvailabilityObservation]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                "scrape_day": item.scrape_day,
                "checkin_date": item.checkin_date,
                "total_results": item.total_results,
                "weighted_avg_price": item.weighted_avg_price,
            }
            for item in observations
            if item.scrape_day is not None
        ],
        columns=["scrape_day", "checkin_date", "total_results", "weighted_avg_price"],
    )
    frame["scrape_day"] = pd.to_datetime(frame["scrape_day"])
    frame["checkin_date"] = pd.to_datetime(frame["checkin_date"])
    frame["total_results"] = pd.to_numeric(frame["total_results"], errors="coerce")
    frame["weighted_avg_price"] = pd.to_numeric(frame["weighted_avg_price"], errors="coerce")
    return frame


def _half_average(
    daily: pd.DataFrame,
    start: pd.Timestamp,
    end: pd.Timestamp,
) -> tuple[float, float]:
    window = daily[(daily.index >= start) & (daily.index <= end)]
    return float(window["supply"].mean()), float(window["wap"].mean())


def classify_outlook(
    past_supply: float,
    recent_supply: float,
    past_wap: float,
    recent_wap: float,
    config: Optional[OutlookConfig] = None,
) -> tuple[OutlookStatus, str, str, dict[str, float]]:
    """Demand first, then price, else stable. Returns status, metric, name, deltas."""

    outlook = config or OutlookConfig()
    threshold = outlook.change_threshold_pct

    supply_delta = _percent_delta(past_supply, recent_supply)
    wap_delta = _percent_delta(past_wap, recent_wap)
    demand_delta = 0.0 - supply_delta

    if abs(demand_delta) > threshold:
        status = OutlookStatus.STRENGTHENING if demand_delta > 0 else OutlookStatus.SOFTENING
        metric = _format_metric(demand_delta)
        metric_name = MARKET_DEMAND
    elif abs(wap_delta) > threshold:
        status = OutlookStatus.STRENGTHENING if wap_delta > 0 else OutlookStatus.SOFTENING
        metric = _format_metric(wap_delta)
        metric_name = MARKET_PRICE
    else:
        status = OutlookStatus.STABLE
        metric = _format_metric(demand_delta)
        metric_name = MARKET_DEMAND

    deltas = {
        "market_demand_delta": demand_delta,
        "supply_delta": supply_delta,
        "wap_delta": wap_delta,
    }
    return status, metric, metric_name, deltas


def compute_outlook(
    observations: Sequence[AvailabilityObservation],
    config: Optional[OutlookConfig] = None,
) -> OutlookResult:
    """Compare the recent half of the scrape window with the half before it.

    Each scrape day contributes its own average over checkins in the next
    ``forward_days`` days; each half is the mean of those daily averages.
    """

    outlook = config or OutlookConfig()
    try:
        validate_outlook_config(outlook)
    except ValueError as exc:
        raise InvalidInput(f"Invalid outlook configuration: {exc}") from exc

    frame = _build_frame(observations)
    if frame.empty:
        return _no_data()

    start_day = frame["scrape_day"].min()
    end_day = frame["scrape_day"].max()
    total_window_days = min((end_day - start_day).days + 1, outlook.max_window_days)
    half_window_days = total_window_days // 2
    if half_window_days <= 0:
        return _no_data()

    recent_start = end_day - pd.Timedelta(days=half_window_days - 1)
    past_end = end_day - pd.Timedelta(days=half_window_days)
    past_start = end_day - pd.Timedelta(days=half_window_days * 2 - 1)

    horizon_end = frame["scrape_day"] + pd.Timedelta(days=outlook.forward_days - 1)
    in_horizon = (frame["checkin_date"] >= frame["scrape_day"]) & (
        frame["checkin_date"] <= horizon_end
    )
    forward = frame[in_horizon]

    daily = forward.groupby("scrape_day").agg(
        supply=("total_results", "mean"),
        wap=("weighted_avg_price", "mean"),
    )
    past_supply, past_wap = _half_average(daily, past_start, past_end)
    recent_supply, recent_wap = _half_average(daily, recent_start, end_day)

    if any(math.isnan(value) for value in (past_supply, past_wap, recent_supply, recent_wap)):
        return _no_data()

    status, metric, metric_name, deltas = classify_outlook(
        past_supply=past_supply,
        recent_supply=recent_supply,
        past_wap=past_wap,
        recent_wap=recent_wap,
        config=outlook,
    )
    debug = dict(deltas)
    debug.update(
        {
            "half_window_days": half_window_days,
            "past_supply": past_supply,
            "recent_supply": recent_supply,
            "past_wap": past_wap,
            "recent_wap": recent_wap,
        }
    )
    return OutlookResult(
        status=status,
        metric=metric,
        metric_name=metric_name,
        state=OutlookState.OK,
        debug=debug,
    )


class MarketOutlookService:
    """Fetches a city's scrapes and turns failures into a display-safe result."""

    def __init__(
        self,
        source: ObservationSource,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._source = source
        self._config = OutlookConfig.from_settings(self._settings)

    def get_market_outlook(self, city: str) -> OutlookResult:
        city_slug = slugify_city(city)
        try:
            observations = self._source.fetch_city_observations(city_slug)
            result = compute_outlook(observations, config=self._config)
        except EngineError:
            logger.exception("Market outlook failed | city=%s", city_slug)
            return OutlookResult(
                status=OutlookStatus.STABLE,
                metric=DATA_ERROR,
                state=OutlookState.ERROR,
            )
        logger.info(
            summary_line(
                "Market outlook computed",
                city=city_slug,
                state=result.state.value,
                status=result.status.value,
                metric=result.metric,
            )
        )
        return result
