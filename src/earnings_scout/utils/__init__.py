"""Utility modules."""

from earnings_scout.utils.indicators import calculate_rsi, historical_volatility, latest_rsi
from earnings_scout.utils.provenance import build_error_response, build_meta
from earnings_scout.utils.sanitize import sanitize_model_text

__all__ = [
    "calculate_rsi",
    "historical_volatility",
    "latest_rsi",
    "build_error_response",
    "build_meta",
    "sanitize_model_text",
]
