"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the snapshot repository and engine services, registers routers,
and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from demand_pacing.controllers.market_controller import router as market_router
from demand_pacing.controllers.pacing_controller import router as pacing_router
from demand_pacing.repository.snapshot_repository import SnapshotRepository
from demand_pacing.services.market_service import MarketIntelligenceService
from demand_pacing.services.outlook_service import MarketOutlookService
from demand_pacing.services.portfolio_service import PortfolioPacingService
from demand_pacing.utils.config import get_settings
from demand_pacing.utils.logger import get_logger


logger = get_logger(__name__)


def create_app() -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are placed on app.state and resolved by the dependency
    providers in the controller layer.
    """
    settings = get_settings()

    # --- Repository (single SQLite connection factory) ---
    repository = SnapshotRepository(settings)

    # --- Services (pure engine calls behind thin orchestration) ---
    outlook_service = MarketOutlookService(source=repository, settings=settings)
    market_service = MarketIntelligenceService(
        repository=repository,
        outlook_service=outlook_service,
        settings=settings,
    )
    portfolio_service = PortfolioPacingService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(market_router)
    app.include_router(pacing_router)

    app.state.repository = repository
    app.state.market_service = market_service
    app.state.portfolio_service = portfolio_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Schema must exist before the demo city is seeded; seeding is skipped
    when the city already has snapshots.
    """
    repository: SnapshotRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    logger.info("Startup: seeding synthetic market snapshots")
    repository.seed_synthetic_data()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
