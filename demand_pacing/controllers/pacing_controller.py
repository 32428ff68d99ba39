"""HTTP controller layer for budget pacing and portfolio risk."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from demand_pacing.controllers.dependencies import get_portfolio_service
from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import Benchmarks, PacingInput, PortfolioPropertyRow
from demand_pacing.services.benchmark_service import resolve_benchmarks
from demand_pacing.services.pacing_service import calculate_pacing_status
from demand_pacing.services.portfolio_service import PortfolioPacingService
from demand_pacing.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["pacing"])


class BenchmarksPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    benchmark_occ: float = Field(alias="benchmarkOcc", ge=0.0, le=100.0)
    benchmark_adr: float = Field(alias="benchmarkAdr", ge=0.0)

    def to_domain(self) -> Benchmarks:
        return Benchmarks(benchmark_occ=self.benchmark_occ, benchmark_adr=self.benchmark_adr)


class PacingStatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    target_rev: float = Field(default=0.0, alias="targetRev")
    actual_rev: float = Field(default=0.0, alias="actualRev")
    capacity_count: float = Field(default=0.0, alias="capacityCount", ge=0.0)
    total_sold_room_nights: float = Field(default=0.0, alias="totalSoldRoomNights", ge=0.0)
    physical_unsold_remaining: Optional[float] = Field(
        default=None,
        alias="physicalUnsoldRemaining",
        ge=0.0,
    )
    benchmarks: Optional[BenchmarksPayload] = None
    year: int = Field(ge=1900, le=9999)
    month_index: int = Field(alias="monthIndex", ge=0, le=11)
    as_of: Optional[date] = Field(default=None, alias="asOf")


class PacingStatusResponse(BaseModel):
    status_tier: str
    status_text: str


class DailyMetricPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    stay_date: date
    rooms_sold: float = Field(ge=0.0)
    capacity_count: float = Field(ge=0.0)
    gross_adr: Optional[float] = None


class PortfolioRowPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    hotel_id: int
    hotel_name: str = Field(min_length=1)
    forward_occupancy: float = Field(ge=0.0)
    current_month_target_revenue: float = 0.0
    current_month_otb_revenue: float = 0.0
    current_month_physical_unsold: Optional[float] = Field(default=None, ge=0.0)
    current_month_capacity: float = Field(default=0.0, ge=0.0)
    current_month_otb_rooms: float = Field(default=0.0, ge=0.0)
    next_month_target_revenue: float = 0.0
    next_month_otb_revenue: float = 0.0
    next_month_capacity: float = Field(default=0.0, ge=0.0)
    next_month_otb_rooms: float = Field(default=0.0, ge=0.0)

    def to_domain(self) -> PortfolioPropertyRow:
        return PortfolioPropertyRow(**self.model_dump())


class PortfolioOverviewRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    rows: list[PortfolioRowPayload]
    benchmarks: dict[int, BenchmarksPayload] = Field(default_factory=dict)
    daily_metrics: dict[int, list[DailyMetricPayload]] = Field(default_factory=dict)
    as_of: Optional[date] = None


class QuadrantRow(BaseModel):
    hotel_id: int
    hotel_name: str
    quadrant: str
    forward_occupancy: float
    pacing_difficulty_percent: float
    current_month_status: str
    current_month_status_text: str
    current_month_shortfall: float
    current_month_required_adr: Optional[float] = None
    current_month_unachievable: bool
    next_month_status: str
    next_month_status_text: str
    next_month_shortfall: float
    next_month_required_adr: Optional[float] = None
    next_month_unachievable: bool


class OccupancyRiskRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    daily_occupancy: dict[int, list[float]]


class OccupancyRiskRow(BaseModel):
    hotel_id: int
    average_occupancy: float
    risk_level: str


@router.post(
    "/pacing/status",
    response_model=PacingStatusResponse,
    status_code=status.HTTP_200_OK,
)
async def pacing_status(
    payload: PacingStatusRequest,
    portfolio_service: PortfolioPacingService = Depends(get_portfolio_service),
) -> PacingStatusResponse:
    try:
        result = calculate_pacing_status(
            PacingInput(
                target_rev=payload.target_rev,
                actual_rev=payload.actual_rev,
                capacity_count=payload.capacity_count,
                total_sold_room_nights=payload.total_sold_room_nights,
                year=payload.year,
                month_index=payload.month_index,
                physical_unsold_remaining=payload.physical_unsold_remaining,
                benchmarks=None if payload.benchmarks is None else payload.benchmarks.to_domain(),
            ),
            today=payload.as_of,
            thresholds=portfolio_service.thresholds,
        )
        return PacingStatusResponse(**result.to_dict())
    except InvalidInput as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected pacing status failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute pacing status",
        ) from exc


async def _gather_benchmarks(
    payload: PortfolioOverviewRequest,
    as_of: date,
    portfolio_service: PortfolioPacingService,
) -> dict[int, Benchmarks]:
    """Explicit benchmarks win; the rest are resolved from daily metrics concurrently."""

    resolved = {hotel_id: item.to_domain() for hotel_id, item in payload.benchmarks.items()}
    pending = [row.hotel_id for row in payload.rows if row.hotel_id not in resolved]
    lookups = [
        asyncio.to_thread(
            resolve_benchmarks,
            [metric.model_dump() for metric in payload.daily_metrics.get(hotel_id, [])],
            as_of.year,
            as_of.month - 1,
            portfolio_service.thresholds,
        )
        for hotel_id in pending
    ]
    for hotel_id, benchmarks in zip(pending, await asyncio.gather(*lookups)):
        resolved[hotel_id] = benchmarks
    return resolved


@router.post(
    "/portfolio/pacing-overview",
    response_model=list[QuadrantRow],
    status_code=status.HTTP_200_OK,
)
async def portfolio_pacing_overview(
    payload: PortfolioOverviewRequest,
    portfolio_service: PortfolioPacingService = Depends(get_portfolio_service),
) -> list[QuadrantRow]:
    as_of = payload.as_of or date.today()
    try:
        benchmarks = await _gather_benchmarks(payload, as_of, portfolio_service)
        results = portfolio_service.pacing_overview(
            [row.to_domain() for row in payload.rows],
            benchmarks,
            today=as_of,
        )
        return [QuadrantRow(**item.to_dict()) for item in results]
    except InvalidInput as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected portfolio pacing failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute portfolio pacing overview",
        ) from exc


@router.post(
    "/portfolio/occupancy-risk",
    response_model=list[OccupancyRiskRow],
    status_code=status.HTTP_200_OK,
)
async def portfolio_occupancy_risk(
    payload: OccupancyRiskRequest,
    portfolio_service: PortfolioPacingService = Depends(get_portfolio_service),
) -> list[OccupancyRiskRow]:
    try:
        risks = portfolio_service.occupancy_risk(payload.daily_occupancy)
    except InvalidInput as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return [OccupancyRiskRow(**risk.to_dict()) for risk in risks]
