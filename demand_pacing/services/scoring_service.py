"""Per-observation market scoring: normalization, price index, demand blend."""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

import numpy as np

from demand_pacing.domain.constraints import DemandBlendConfig, validate_blend_config
from demand_pacing.domain.models import (
    AvailabilityObservation,
    PricedObservation,
    ScoredObservation,
)
from demand_pacing.utils.parsing import parse_float


MIDPOINT_SCORE = 50.0


def normalize_scores(values: Sequence[Any], invert: bool = False) -> list[Optional[float]]:
    """Rescale ``values`` to 0-100, position for position.

    Non-finite or unparsable entries map to ``None``. A constant series maps
    every valid entry to the midpoint, and an all-invalid series to ``None``.
    """

    parsed = [parse_float(value) for value in values]
    finite = np.array([value for value in parsed if value is not None], dtype=float)
    if finite.size == 0:
        return [None] * len(parsed)

    low = float(finite.min())
    high = float(finite.max())
    if high == low:
        return [None if value is None else MIDPOINT_SCORE for value in parsed]

    span = high - low
    scores: list[Optional[float]] = []
    for value in parsed:
        if value is None:
            scores.append(None)
            continue
        score = ((value - low) / span) * 100.0
        if invert:
            score = 100.0 - score
        scores.append(min(100.0, max(0.0, score)))
    return scores


def calculate_price_index(
    observations: Sequence[AvailabilityObservation],
) -> list[PricedObservation]:
    """Attach the MPSS price score derived from weighted average price."""

    if not observations:
        return []
    mpss_scores = normalize_scores(
        [observation.weighted_avg_price for observation in observations],
        invert=False,
    )
    return [
        PricedObservation(observation=observation, mpss=mpss)
        for observation, mpss in zip(observations, mpss_scores)
    ]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_market_demand(
    priced: Sequence[PricedObservation],
    config: Optional[DemandBlendConfig] = None,
) -> list[ScoredObservation]:
    """Blend supply scarcity with MPSS into an integer demand score.

    Low supply means high scarcity. Either factor missing leaves the score
    ``None``; there is no single-factor fallback.
    """

    blend = config or DemandBlendConfig()
    validate_blend_config(blend)
    if not priced:
        return []

    scarcity_scores = normalize_scores(
        [item.observation.total_results for item in priced],
        invert=True,
    )
    scored: list[ScoredObservation] = []
    for item, scarcity in zip(priced, scarcity_scores):
        demand_score: Optional[int] = None
        if scarcity is not None and item.mpss is not None:
            blended = scarcity * blend.weight_supply + item.mpss * blend.weight_price
            demand_score = _round_half_up(blended)
        scored.append(
            ScoredObservation(
                observation=item.observation,
                mpss=item.mpss,
                market_demand_score=demand_score,
            )
        )
    return scored


def score_observations(
    observations: Sequence[AvailabilityObservation],
    config: Optional[DemandBlendConfig] = None,
) -> list[ScoredObservation]:
    """Price index followed by demand blend, in that order."""
    return calculate_market_demand(calculate_price_index(observations), config=config)
