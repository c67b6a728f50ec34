"""Market-wide volatility regime from a single benchmark quote."""

import logging
from datetime import datetime

import pytz

from earnings_scout.data.finnhub_client import FinnhubClient
from earnings_scout.models import (
    REGIME_ELEVATED,
    REGIME_HIGH,
    REGIME_LOW,
    REGIME_NORMAL,
    MarketContext,
)

logger = logging.getLogger(__name__)

BENCHMARK_SYMBOL = "VIX"


def classify_regime(level: float) -> str:
    """
    Classify a VIX-equivalent level.

    Checked in priority order, so 15-20 inclusive is ``normal``.
    """
    if level > 30:
        return REGIME_HIGH
    if level > 20:
        return REGIME_ELEVATED
    if level < 15:
        return REGIME_LOW
    return REGIME_NORMAL


class MarketContextProbe:
    """Fetches the benchmark quote; never raises."""

    def __init__(
        self,
        client: FinnhubClient,
        symbol: str = BENCHMARK_SYMBOL,
        tz: str = "America/New_York",
    ):
        self.client = client
        self.symbol = symbol
        self.tz = pytz.timezone(tz)

    async def probe(self) -> MarketContext:
        now = datetime.now(self.tz)
        try:
            quote = await self.client.get_quote(self.symbol)
        except Exception as e:
            logger.warning(f"Failed to fetch {self.symbol} quote: {e}")
            return MarketContext.unavailable(now)

        level = quote.get("c") if isinstance(quote, dict) else None
        # Finnhub answers unknown symbols with an all-zero quote
        if isinstance(level, bool) or not isinstance(level, (int, float)) or level <= 0:
            logger.warning(f"No usable {self.symbol} level in quote: {quote!r}")
            return MarketContext.unavailable(now)

        return MarketContext(
            vix=float(level),
            market_regime=classify_regime(float(level)),
            last_updated=now,
        )
