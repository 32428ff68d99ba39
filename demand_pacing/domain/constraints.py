"""Read-only tuning values for the engine and their validation rules."""

from __future__ import annotations

import math
from dataclasses import dataclass

from demand_pacing.utils.config import Settings


@dataclass(frozen=True)
class DemandBlendConfig:
    weight_supply: float = 0.5
    weight_price: float = 0.5

    @classmethod
    def from_settings(cls, settings: Settings) -> "DemandBlendConfig":
        return cls(
            weight_supply=settings.demand_weight_supply,
            weight_price=settings.demand_weight_price,
        )


@dataclass(frozen=True)
class PacingThresholds:
    past_month_red_ratio: float = 0.9
    past_month_green_ratio: float = 1.0
    adr_ratio_green_max: float = 1.0
    adr_ratio_yellow_max: float = 1.15
    default_benchmark_occupancy: float = 75.0
    default_benchmark_adr: float = 120.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "PacingThresholds":
        return cls(
            past_month_red_ratio=settings.past_month_red_ratio,
            past_month_green_ratio=settings.past_month_green_ratio,
            adr_ratio_green_max=settings.adr_ratio_green_max,
            adr_ratio_yellow_max=settings.adr_ratio_yellow_max,
            default_benchmark_occupancy=settings.default_benchmark_occupancy,
            default_benchmark_adr=settings.default_benchmark_adr,
        )


@dataclass(frozen=True)
class OutlookConfig:
    change_threshold_pct: float = 1.0
    max_window_days: int = 30
    forward_days: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "OutlookConfig":
        return cls(
            change_threshold_pct=settings.outlook_change_threshold_pct,
            max_window_days=settings.outlook_max_window_days,
            forward_days=settings.outlook_forward_days,
        )


def validate_blend_config(config: DemandBlendConfig) -> None:
    if not 0.0 <= config.weight_supply <= 1.0:
        raise ValueError("weight_supply must be between 0 and 1")
    if not 0.0 <= config.weight_price <= 1.0:
        raise ValueError("weight_price must be between 0 and 1")
    if not math.isclose(config.weight_supply + config.weight_price, 1.0, abs_tol=1e-9):
        raise ValueError("weight_supply and weight_price must sum to 1.0")


def validate_pacing_thresholds(config: PacingThresholds) -> None:
    if not 0.0 < config.past_month_red_ratio <= config.past_month_green_ratio:
        raise ValueError("past_month_red_ratio must be in (0, past_month_green_ratio]")
    if not 0.0 < config.adr_ratio_green_max <= config.adr_ratio_yellow_max:
        raise ValueError("adr_ratio_green_max must be in (0, adr_ratio_yellow_max]")
    if config.default_benchmark_occupancy <= 0.0 or config.default_benchmark_occupancy > 100.0:
        raise ValueError("default_benchmark_occupancy must be in (0, 100]")
    if config.default_benchmark_adr <= 0.0:
        raise ValueError("default_benchmark_adr must be > 0")


def validate_outlook_config(config: OutlookConfig) -> None:
    if config.change_threshold_pct < 0.0:
        raise ValueError("change_threshold_pct must be >= 0")
    if config.max_window_days <= 0:
        raise ValueError("max_window_days must be > 0")
    if config.forward_days <= 0:
        raise ValueError("forward_days must be > 0")
