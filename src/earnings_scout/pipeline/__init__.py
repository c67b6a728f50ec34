"""Opportunity funnel: prescreen, enrichment, quality scoring, market context."""

from earnings_scout.pipeline.market_context import MarketContextProbe, classify_regime
from earnings_scout.pipeline.opportunities import (
    FINAL_TOP_N,
    LOOKAHEAD_DAYS,
    MIN_QUALITY_SCORE,
    OpportunityPipeline,
    filter_universe,
    filter_window,
)
from earnings_scout.pipeline.prescreen import PRESCREEN_TOP_K, days_to_earnings, prescreen, prescreen_score
from earnings_scout.pipeline.quality import quality_components, quality_score

__all__ = [
    "FINAL_TOP_N",
    "LOOKAHEAD_DAYS",
    "MIN_QUALITY_SCORE",
    "PRESCREEN_TOP_K",
    "MarketContextProbe",
    "OpportunityPipeline",
    "classify_regime",
    "days_to_earnings",
    "filter_universe",
    "filter_window",
    "prescreen",
    "prescreen_score",
    "quality_components",
    "quality_score",
]
