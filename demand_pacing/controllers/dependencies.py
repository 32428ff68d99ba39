"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from demand_pacing.services.market_service import MarketIntelligenceService
from demand_pacing.services.portfolio_service import PortfolioPacingService
from demand_pacing.utils.config import get_settings


def get_market_service(request: Request) -> MarketIntelligenceService:
    service = getattr(request.app.state, "market_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        if repository is not None:
            service = MarketIntelligenceService(repository=repository, settings=get_settings())
            request.app.state.market_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Market service is not initialized",
        )
    return service


def get_portfolio_service(request: Request) -> PortfolioPacingService:
    service = getattr(request.app.state, "portfolio_service", None)
    if service is None:
        service = PortfolioPacingService(settings=get_settings())
        request.app.state.portfolio_service = service
    return service
