"""Earnings Scout MCP Server using FastMCP."""

import json
import logging
import os

from fastmcp import FastMCP

from earnings_scout import SCHEMA_VERSION, SERVER_VERSION
from earnings_scout.data.retry import shutdown_executor
from earnings_scout.prompts.templates import get_prompt
from earnings_scout.tools import analyze_opportunities, market_context, scan_opportunities

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="earnings-scout",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def scan_earnings_opportunities() -> str:
    """
    Scan the next 45 days of earnings for the best options setups.

    Filters the calendar to the stock universe, prescreens the top 8
    candidates, enriches them with volatility data and returns up to 5
    ranked by composite quality score.

    Returns:
        JSON with opportunities, per-band score breakdown and funnel counts
    """
    result = await scan_opportunities()
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_market_context() -> str:
    """
    Get the current market volatility regime from the VIX level.

    Returns:
        JSON with vix, market_regime (low-volatility, normal,
        elevated-volatility, high-volatility or unknown) and description
    """
    result = await market_context()
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def analyze_earnings_opportunities(include_raw: bool = False) -> str:
    """
    Scan earnings opportunities and get an AI assessment of each.

    Each analysis has a sentiment score (1-10), a recommendation
    (STRONGLY CONSIDER, NEUTRAL or STAY AWAY) and suggested strategies.
    Analyses failing validation are listed under "rejected" with issues.

    Args:
        include_raw: Include the raw model text (default: False)

    Returns:
        JSON with market context, analyses, rejected analyses and metadata
    """
    result = await analyze_opportunities(include_raw=include_raw)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def earnings_brief(max_ideas: str = "3") -> str:
    """Scan upcoming earnings and brief the best options setups."""
    result = get_prompt("earnings_brief", {"max_ideas": max_ideas})
    if result:
        return result["messages"][0]["content"]
    return "Brief me on upcoming earnings using analyze_earnings_opportunities."


@mcp.prompt
def earnings_deep_dive(symbol: str) -> str:
    """Assess one symbol's upcoming earnings setup."""
    result = get_prompt("earnings_deep_dive", {"symbol": symbol})
    if result:
        return result["messages"][0]["content"]
    return f"Assess the earnings setup for {symbol} using scan_earnings_opportunities."


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Earnings Scout MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    try:
        mcp.run()
    finally:
        shutdown_executor()


if __name__ == "__main__":
    main()
