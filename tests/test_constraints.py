"""Tests for engine configuration validation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from demand_pacing.domain.constraints import (
    DemandBlendConfig,
    OutlookConfig,
    PacingThresholds,
    validate_blend_config,
    validate_outlook_config,
    validate_pacing_thresholds,
)
from demand_pacing.utils.config import get_settings


# --- Baseline pass ---

def test_default_configs_pass() -> None:
    validate_blend_config(DemandBlendConfig())
    validate_pacing_thresholds(PacingThresholds())
    validate_outlook_config(OutlookConfig())


def test_configs_built_from_settings_match_defaults() -> None:
    get_settings.cache_clear()
    settings = get_settings()
    assert DemandBlendConfig.from_settings(settings) == DemandBlendConfig()
    assert PacingThresholds.from_settings(settings) == PacingThresholds()
    assert OutlookConfig.from_settings(settings) == OutlookConfig()


def test_settings_override_flows_into_config() -> None:
    settings = replace(get_settings(), demand_weight_supply=0.6, demand_weight_price=0.4)
    config = DemandBlendConfig.from_settings(settings)
    assert config == DemandBlendConfig(weight_supply=0.6, weight_price=0.4)
    validate_blend_config(config)


# --- blend weights ---

def test_weights_not_summing_to_one_raise() -> None:
    with pytest.raises(ValueError):
        validate_blend_config(DemandBlendConfig(weight_supply=0.6, weight_price=0.6))


def test_negative_weight_raises() -> None:
    with pytest.raises(ValueError):
        validate_blend_config(DemandBlendConfig(weight_supply=-0.5, weight_price=1.5))


def test_single_factor_weighting_passes() -> None:
    validate_blend_config(DemandBlendConfig(weight_supply=1.0, weight_price=0.0))


# --- pacing thresholds ---

def test_red_ratio_above_green_ratio_raises() -> None:
    with pytest.raises(ValueError):
        validate_pacing_thresholds(PacingThresholds(past_month_red_ratio=1.1))


def test_green_ratio_above_yellow_ratio_raises() -> None:
    with pytest.raises(ValueError):
        validate_pacing_thresholds(PacingThresholds(adr_ratio_green_max=1.2))


def test_zero_default_adr_raises() -> None:
    with pytest.raises(ValueError):
        validate_pacing_thresholds(PacingThresholds(default_benchmark_adr=0.0))


def test_default_occupancy_over_hundred_raises() -> None:
    with pytest.raises(ValueError):
        validate_pacing_thresholds(PacingThresholds(default_benchmark_occupancy=101.0))


# --- outlook ---

def test_zero_window_raises() -> None:
    with pytest.raises(ValueError):
        validate_outlook_config(OutlookConfig(max_window_days=0))


def test_zero_forward_days_raises() -> None:
    with pytest.raises(ValueError):
        validate_outlook_config(OutlookConfig(forward_days=0))


def test_negative_threshold_raises() -> None:
    with pytest.raises(ValueError):
        validate_outlook_config(OutlookConfig(change_threshold_pct=-0.1))


def test_zero_threshold_passes() -> None:
    """Exact lower boundary must pass."""
    validate_outlook_config(OutlookConfig(change_threshold_pct=0.0))
