"""Composite quality score for an enriched opportunity.

The weights and band thresholds are empirically tuned; changing any of them
changes which opportunities are published.
"""

import math

from earnings_scout.data.volatility import calculate_volatility_score
from earnings_scout.models import Opportunity

BASE_SCORE = 10
HISTORICAL_DATA_BONUS = 5

WEIGHTS = {
    "volatility": 30,
    "timing": 25,
    "liquidity": 20,
    "technical": 15,
    "data_availability": 10,
}


def volatility_component(volatility_score: float) -> float:
    weight = WEIGHTS["volatility"]
    if volatility_score > 70:
        return weight
    if volatility_score > 50:
        return weight * 0.8
    if volatility_score > 30:
        return weight * 0.6
    if volatility_score > 10:
        return weight * 0.4
    return weight * 0.2


def timing_component(days_to_earnings: int) -> float:
    weight = WEIGHTS["timing"]
    if 14 <= days_to_earnings <= 21:
        return weight
    if 10 <= days_to_earnings <= 28:
        return weight * 0.7
    if 5 <= days_to_earnings <= 35:
        return weight * 0.4
    return weight * 0.2


def liquidity_component(options_volume: float) -> float:
    weight = WEIGHTS["liquidity"]
    if options_volume > 10000:
        return weight
    if options_volume > 5000:
        return weight * 0.7
    if options_volume > 1000:
        return weight * 0.4
    if options_volume > 0:
        return weight * 0.2
    return 0


def technical_component(rsi: float | None) -> float:
    """RSI extremes favour mean reversion; no RSI contributes nothing."""
    if rsi is None:
        return 0
    weight = WEIGHTS["technical"]
    if rsi > 70 or rsi < 30:
        return weight
    if rsi > 60 or rsi < 40:
        return weight * 0.5
    return weight * 0.2


def quality_components(opportunity: Opportunity) -> dict[str, float]:
    """Per-band contributions, for explaining a score."""
    vol = opportunity.volatility_data

    data_availability = 0.0
    if vol is not None:
        data_availability += WEIGHTS["data_availability"]
        if vol.historical_volatility and vol.historical_volatility > 0:
            data_availability += HISTORICAL_DATA_BONUS

    # The gateway's own score wins over the pipeline-derived one
    volatility_score = calculate_volatility_score(vol) or opportunity.volatility_score or 0

    return {
        "base": BASE_SCORE,
        "data_availability": data_availability,
        "volatility": volatility_component(volatility_score),
        "timing": timing_component(opportunity.days_to_earnings),
        "liquidity": liquidity_component(vol.options_volume if vol else 0),
        "technical": technical_component(vol.rsi if vol else None),
    }


def quality_score(opportunity: Opportunity) -> int:
    """
    Composite quality score, 0-100+ (no upper clamp).

    Args:
        opportunity: Opportunity with ``days_to_earnings`` set; volatility data may be absent

    Returns:
        Rounded sum of all band contributions
    """
    # Half-up rounding: 62.5 scores 63
    return math.floor(sum(quality_components(opportunity).values()) + 0.5)
