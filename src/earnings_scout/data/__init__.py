"""Outbound collaborators: Finnhub, volatility data, text generation."""

from earnings_scout.data.cache import VolatilityCache
from earnings_scout.data.finnhub_client import FinnhubAPIError, FinnhubClient, is_retryable_error
from earnings_scout.data.gemini_client import GeminiTextGenerator, GenerationError, TextGenerator
from earnings_scout.data.retry import RetryPolicy, RetryResult, shutdown_executor
from earnings_scout.data.volatility import (
    VolatilityGateway,
    YFinanceVolatilityGateway,
    calculate_volatility_score,
    score_volatility,
)

__all__ = [
    # Cache
    "VolatilityCache",
    # Finnhub
    "FinnhubAPIError",
    "FinnhubClient",
    "is_retryable_error",
    # Text generation
    "GeminiTextGenerator",
    "GenerationError",
    "TextGenerator",
    # Retry
    "RetryPolicy",
    "RetryResult",
    "shutdown_executor",
    # Volatility
    "VolatilityGateway",
    "YFinanceVolatilityGateway",
    "calculate_volatility_score",
    "score_volatility",
]
