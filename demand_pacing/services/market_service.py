"""Market report orchestration over the snapshot repository."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from demand_pacing.domain.constraints import DemandBlendConfig, validate_blend_config
from demand_pacing.domain.errors import InvalidInput
from demand_pacing.domain.models import OutlookResult
from demand_pacing.repository.snapshot_repository import SnapshotRepository
from demand_pacing.services.outlook_service import MarketOutlookService
from demand_pacing.services.pace_service import (
    build_forward_view,
    build_pace_report,
    build_scrape_history,
)
from demand_pacing.utils.config import Settings, get_settings
from demand_pacing.utils.logger import get_logger, summary_line
from demand_pacing.utils.parsing import parse_day, slugify_city


logger = get_logger(__name__)


class MarketIntelligenceService:
    """Coordinates fetch -> select -> score -> compare for one city."""

    def __init__(
        self,
        repository: Optional[SnapshotRepository] = None,
        outlook_service: Optional[MarketOutlookService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or SnapshotRepository(self._settings)
        self._outlook_service = outlook_service or MarketOutlookService(
            source=self._repository,
            settings=self._settings,
        )
        self._blend = DemandBlendConfig.from_settings(self._settings)
        validate_blend_config(self._blend)

    def _city_slug(self, city: str) -> str:
        city_slug = slugify_city(city)
        if not city_slug:
            raise InvalidInput("city must be a non-empty name")
        return city_slug

    def get_forward_view(self, city: str, today: Optional[date] = None) -> list[dict[str, Any]]:
        city_slug = self._city_slug(city)
        observations = self._repository.fetch_city_observations(city_slug)
        scored = build_forward_view(
            observations,
            today=today or date.today(),
            horizon_days=self._settings.pace_horizon_days,
            config=self._blend,
        )
        return [item.to_dict() for item in scored]

    def get_pace(
        self,
        city: str,
        period_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        city_slug = self._city_slug(city)
        period = self._settings.pace_default_period_days if period_days is None else period_days
        observations = self._repository.fetch_city_observations(city_slug)
        pace = build_pace_report(
            observations,
            today=today or date.today(),
            period_days=period,
            horizon_days=self._settings.pace_horizon_days,
            config=self._blend,
        )
        return [record.to_dict() for record in pace]

    def get_scrape_history(
        self,
        city: str,
        checkin_date: Any,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        city_slug = self._city_slug(city)
        day = parse_day(checkin_date)
        if day is None:
            raise InvalidInput("checkin_date must be a valid date")
        observations = self._repository.fetch_city_observations(city_slug)
        history = build_scrape_history(
            observations,
            checkin_date=day,
            limit=limit or self._settings.history_default_limit,
            config=self._blend,
        )
        logger.info(
            summary_line(
                "Scrape history computed",
                city=city_slug,
                checkin_date=day.isoformat(),
                rows=len(history),
            )
        )
        return [item.to_dict() for item in history]

    def get_market_outlook(self, city: str) -> OutlookResult:
        return self._outlook_service.get_market_outlook(city)
