"""Earnings scout tools."""

from earnings_scout.tools.analyze import analyze_opportunities
from earnings_scout.tools.market import market_context
from earnings_scout.tools.scan import scan_opportunities

__all__ = [
    "analyze_opportunities",
    "market_context",
    "scan_opportunities",
]
