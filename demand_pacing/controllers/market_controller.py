"""HTTP controller layer for market demand, pace and outlook reports."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from demand_pacing.controllers.dependencies import get_market_service
from demand_pacing.domain.errors import InvalidInput, UpstreamDataUnavailable
from demand_pacing.services.market_service import MarketIntelligenceService
from demand_pacing.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/market", tags=["market"])


class ScoredObservationRow(BaseModel):
    checkin_date: date
    total_results: Optional[int] = None
    weighted_avg_price: Optional[float] = None
    hotel_count: Optional[int] = None
    scraped_at: Optional[str] = None
    mpss: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    market_demand_score: Optional[int] = Field(default=None, ge=0, le=100)


class PaceRow(BaseModel):
    checkin_date: date
    mpss_delta: Optional[float] = None
    market_demand_score_delta: Optional[float] = None
    total_results_delta: Optional[float] = None
    hotel_count_delta: Optional[float] = None
    total_results_percent_delta: Optional[float] = None
    wap_delta: Optional[float] = None


class OutlookResponse(BaseModel):
    status: str
    metric: str
    metric_name: str
    state: str
    debug: dict[str, Any] = Field(default_factory=dict)


def _http_error(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, UpstreamDataUnavailable):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    logger.exception("Unexpected market %s failure", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to compute {action}",
    )


@router.get(
    "/{city}/forward-view",
    response_model=list[ScoredObservationRow],
    status_code=status.HTTP_200_OK,
)
async def forward_view(
    city: str,
    as_of: Optional[date] = None,
    market_service: MarketIntelligenceService = Depends(get_market_service),
) -> list[ScoredObservationRow]:
    try:
        rows = market_service.get_forward_view(city, today=as_of)
        return [ScoredObservationRow(**row) for row in rows]
    except Exception as exc:
        raise _http_error(exc, "forward view") from exc


@router.get("/{city}/pace", response_model=list[PaceRow], status_code=status.HTTP_200_OK)
async def pace(
    city: str,
    period: Optional[int] = Query(default=None, ge=0),
    as_of: Optional[date] = None,
    market_service: MarketIntelligenceService = Depends(get_market_service),
) -> list[PaceRow]:
    try:
        rows = market_service.get_pace(city, period_days=period, today=as_of)
        return [PaceRow(**row) for row in rows]
    except Exception as exc:
        raise _http_error(exc, "pace") from exc


@router.get(
    "/{city}/history",
    response_model=list[ScoredObservationRow],
    status_code=status.HTTP_200_OK,
)
async def scrape_history(
    city: str,
    checkin_date: date,
    limit: Optional[int] = Query(default=None, gt=0),
    market_service: MarketIntelligenceService = Depends(get_market_service),
) -> list[ScoredObservationRow]:
    try:
        rows = market_service.get_scrape_history(city, checkin_date, limit=limit)
        return [ScoredObservationRow(**row) for row in rows]
    except Exception as exc:
        raise _http_error(exc, "scrape history") from exc


@router.get("/{city}/outlook", response_model=OutlookResponse, status_code=status.HTTP_200_OK)
async def market_outlook(
    city: str,
    market_service: MarketIntelligenceService = Depends(get_market_service),
) -> OutlookResponse:
    result = market_service.get_market_outlook(city)
    return OutlookResponse(**result.to_dict())
