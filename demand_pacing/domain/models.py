"""Domain models for market demand scoring and revenue pacing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional

import pandas as pd

from demand_pacing.utils.parsing import parse_day, parse_float, parse_int, parse_timestamp


class StatusTier(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    LOADING = "loading"


class MonthPosition(str, Enum):
    PAST = "past"
    CURRENT = "current"
    FUTURE = "future"


class OutlookStatus(str, Enum):
    STRENGTHENING = "strengthening"
    SOFTENING = "softening"
    STABLE = "stable"


class OutlookState(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"
    ERROR = "error"


class Quadrant(str, Enum):
    CRITICAL_RISK = "Critical Risk"
    RATE_STRATEGY_RISK = "Rate Strategy Risk"
    FILL_RISK = "Fill Risk"
    ON_PACE = "On Pace"


@dataclass(frozen=True)
class AvailabilityObservation:
    """One scraped availability/price reading for a checkin date."""

    checkin_date: date
    total_results: Optional[int]
    weighted_avg_price: Optional[float]
    hotel_count: Optional[int]
    scraped_at: Optional[pd.Timestamp] = None
    city_slug: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional["AvailabilityObservation"]:
        """Parse a raw record; returns ``None`` when the checkin date is unusable."""
        checkin_date = parse_day(record.get("checkin_date"))
        if checkin_date is None:
            return None
        total_results = parse_int(record.get("total_results"))
        hotel_count = parse_int(record.get("hotel_count"))
        if hotel_count is None:
            hotel_count = total_results
        return cls(
            checkin_date=checkin_date,
            total_results=total_results,
            weighted_avg_price=parse_float(record.get("weighted_avg_price")),
            hotel_count=hotel_count,
            scraped_at=parse_timestamp(record.get("scraped_at")),
            city_slug=str(record.get("city_slug") or ""),
        )

    @property
    def scrape_day(self) -> Optional[date]:
        return None if self.scraped_at is None else self.scraped_at.date()

    def to_dict(self) -> dict[str, Any]:
        return {
            "checkin_date": self.checkin_date.isoformat(),
            "total_results": self.total_results,
            "weighted_avg_price": self.weighted_avg_price,
            "hotel_count": self.hotel_count,
            "scraped_at": None if self.scraped_at is None else self.scraped_at.isoformat(),
        }


@dataclass(frozen=True)
class PricedObservation:
    observation: AvailabilityObservation
    mpss: Optional[float]


@dataclass(frozen=True)
class ScoredObservation:
    observation: AvailabilityObservation
    mpss: Optional[float]
    market_demand_score: Optional[int]

    @property
    def checkin_date(self) -> date:
        return self.observation.checkin_date

    def to_dict(self) -> dict[str, Any]:
        payload = self.observation.to_dict()
        payload["mpss"] = self.mpss
        payload["market_demand_score"] = self.market_demand_score
        return payload


@dataclass(frozen=True)
class PaceRecord:
    checkin_date: date
    mpss_delta: Optional[float] = None
    market_demand_score_delta: Optional[float] = None
    total_results_delta: Optional[float] = None
    hotel_count_delta: Optional[float] = None
    total_results_percent_delta: Optional[float] = None
    wap_delta: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "checkin_date": self.checkin_date.isoformat(),
            "mpss_delta": self.mpss_delta,
            "market_demand_score_delta": self.market_demand_score_delta,
            "total_results_delta": self.total_results_delta,
            "hotel_count_delta": self.hotel_count_delta,
            "total_results_percent_delta": self.total_results_percent_delta,
            "wap_delta": self.wap_delta,
        }


@dataclass(frozen=True)
class OutlookResult:
    """City trend signal; ``debug`` is diagnostic only."""

    status: OutlookStatus
    metric: str
    metric_name: str = "market demand"
    state: OutlookState = OutlookState.OK
    debug: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "metric": self.metric,
            "metric_name": self.metric_name,
            "state": self.state.value,
            "debug": dict(self.debug),
        }


@dataclass(frozen=True)
class Benchmarks:
    benchmark_occ: float
    benchmark_adr: float
    source: str = "provided"

    def to_dict(self) -> dict[str, Any]:
        return {
            "benchmark_occ": self.benchmark_occ,
            "benchmark_adr": self.benchmark_adr,
            "source": self.source,
        }


@dataclass(frozen=True)
class PacingInput:
    target_rev: float
    actual_rev: float
    capacity_count: float
    total_sold_room_nights: float
    year: int
    month_index: int
    physical_unsold_remaining: Optional[float] = None
    benchmarks: Optional[Benchmarks] = None


@dataclass(frozen=True)
class RequiredAdr:
    """Either a finite required rate or an explicit unachievable marker."""

    value: Optional[float]
    unachievable: bool = False

    @classmethod
    def of(cls, value: float) -> "RequiredAdr":
        return cls(value=value, unachievable=False)

    @classmethod
    def impossible(cls) -> "RequiredAdr":
        return cls(value=None, unachievable=True)


@dataclass(frozen=True)
class PacingResult:
    status_tier: StatusTier
    status_text: str

    def to_dict(self) -> dict[str, str]:
        return {
            "status_tier": self.status_tier.value,
            "status_text": self.status_text,
        }


@dataclass(frozen=True)
class PacingEvaluation:
    result: PacingResult
    month_position: MonthPosition
    remaining_target: float
    rooms_left_to_sell: float = 0.0
    required_adr: RequiredAdr = field(default_factory=lambda: RequiredAdr.of(0.0))
    adr_ratio: Optional[float] = None


@dataclass(frozen=True)
class PortfolioPropertyRow:
    hotel_id: int
    hotel_name: str
    forward_occupancy: float
    current_month_target_revenue: float
    current_month_otb_revenue: float
    current_month_physical_unsold: Optional[float]
    current_month_capacity: float
    current_month_otb_rooms: float
    next_month_target_revenue: float
    next_month_otb_revenue: float
    next_month_capacity: float
    next_month_otb_rooms: float


@dataclass(frozen=True)
class QuadrantResult:
    hotel_id: int
    hotel_name: str
    quadrant: Quadrant
    forward_occupancy: float
    pacing_difficulty_percent: float
    current_month_status: StatusTier
    current_month_status_text: str
    current_month_shortfall: float
    current_month_required_adr: Optional[float]
    current_month_unachievable: bool
    next_month_status: StatusTier
    next_month_status_text: str
    next_month_shortfall: float
    next_month_required_adr: Optional[float]
    next_month_unachievable: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "hotel_id": self.hotel_id,
            "hotel_name": self.hotel_name,
            "quadrant": self.quadrant.value,
            "forward_occupancy": self.forward_occupancy,
            "pacing_difficulty_percent": self.pacing_difficulty_percent,
            "current_month_status": self.current_month_status.value,
            "current_month_status_text": self.current_month_status_text,
            "current_month_shortfall": self.current_month_shortfall,
            "current_month_required_adr": self.current_month_required_adr,
            "current_month_unachievable": self.current_month_unachievable,
            "next_month_status": self.next_month_status.value,
            "next_month_status_text": self.next_month_status_text,
            "next_month_shortfall": self.next_month_shortfall,
            "next_month_required_adr": self.next_month_required_adr,
            "next_month_unachievable": self.next_month_unachievable,
        }
