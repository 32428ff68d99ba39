"""Environment-backed application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path

    demand_weight_supply: float
    demand_weight_price: float

    past_month_red_ratio: float
    past_month_green_ratio: float
    adr_ratio_green_max: float
    adr_ratio_yellow_max: float

    outlook_change_threshold_pct: float
    outlook_max_window_days: int
    outlook_forward_days: int

    pace_horizon_days: int
    pace_default_period_days: int
    history_default_limit: int

    default_benchmark_occupancy: float
    default_benchmark_adr: float

    portfolio_low_occupancy_pct: float
    occupancy_risk_critical_pct: float
    occupancy_risk_moderate_pct: float
    occupancy_risk_window_days: int

    synthetic_city: str
    synthetic_seed_days: int
    synthetic_random_seed: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Resolve settings from the environment once per process."""

    return Settings(
        app_name=os.getenv("APP_NAME", "Demand & Pacing Intelligence"),
        app_version=os.getenv("APP_VERSION", "0.1.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_path=Path(os.getenv("DATABASE_PATH", "data/market_snapshots.db")),
        demand_weight_supply=_env_float("DEMAND_WEIGHT_SUPPLY", 0.5),
        demand_weight_price=_env_float("DEMAND_WEIGHT_PRICE", 0.5),
        past_month_red_ratio=_env_float("PAST_MONTH_RED_RATIO", 0.9),
        past_month_green_ratio=_env_float("PAST_MONTH_GREEN_RATIO", 1.0),
        adr_ratio_green_max=_env_float("ADR_RATIO_GREEN_MAX", 1.0),
        adr_ratio_yellow_max=_env_float("ADR_RATIO_YELLOW_MAX", 1.15),
        outlook_change_threshold_pct=_env_float("OUTLOOK_CHANGE_THRESHOLD_PCT", 1.0),
        outlook_max_window_days=_env_int("OUTLOOK_MAX_WINDOW_DAYS", 30),
        outlook_forward_days=_env_int("OUTLOOK_FORWARD_DAYS", 30),
        pace_horizon_days=_env_int("PACE_HORIZON_DAYS", 90),
        pace_default_period_days=_env_int("PACE_DEFAULT_PERIOD_DAYS", 7),
        history_default_limit=_env_int("HISTORY_DEFAULT_LIMIT", 30),
        default_benchmark_occupancy=_env_float("DEFAULT_BENCHMARK_OCCUPANCY", 75.0),
        default_benchmark_adr=_env_float("DEFAULT_BENCHMARK_ADR", 120.0),
        portfolio_low_occupancy_pct=_env_float("PORTFOLIO_LOW_OCCUPANCY_PCT", 60.0),
        occupancy_risk_critical_pct=_env_float("OCCUPANCY_RISK_CRITICAL_PCT", 45.0),
        occupancy_risk_moderate_pct=_env_float("OCCUPANCY_RISK_MODERATE_PCT", 60.0),
        occupancy_risk_window_days=_env_int("OCCUPANCY_RISK_WINDOW_DAYS", 30),
        synthetic_city=os.getenv("SYNTHETIC_CITY", "london"),
        synthetic_seed_days=_env_int("SYNTHETIC_SEED_DAYS", 45),
        synthetic_random_seed=_env_int("SYNTHETIC_RANDOM_SEED", 42),
    )
