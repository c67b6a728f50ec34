"""Shared collaborators for the MCP tools."""

from earnings_scout.data.cache import VolatilityCache
from earnings_scout.data.finnhub_client import FinnhubClient
from earnings_scout.data.gemini_client import GeminiTextGenerator
from earnings_scout.data.volatility import YFinanceVolatilityGateway

_gateway: YFinanceVolatilityGateway | None = None


def finnhub_client() -> FinnhubClient:
    """
    Build a Finnhub client from the environment.

    Raises:
        ValueError: If FINNHUB_API_KEY is not set
    """
    return FinnhubClient()


def volatility_gateway() -> YFinanceVolatilityGateway:
    """Process-wide gateway so the snapshot cache is shared across calls."""
    global _gateway
    if _gateway is None:
        _gateway = YFinanceVolatilityGateway(cache=VolatilityCache())
    return _gateway


def text_generator() -> GeminiTextGenerator:
    """
    Build a Gemini generator from the environment.

    Raises:
        ValueError: If GEMINI_API_KEY is not set
    """
    return GeminiTextGenerator()
