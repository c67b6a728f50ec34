"""Market context tool."""

from time import perf_counter
from typing import Any

from earnings_scout.pipeline.market_context import MarketContextProbe
from earnings_scout.prompts.templates import describe_regime
from earnings_scout.tools.common import finnhub_client
from earnings_scout.utils.provenance import build_error_response, build_meta

TOOL_NAME = "get_market_context"


async def market_context() -> dict[str, Any]:
    """Current volatility regime. Degrades to ``unknown`` rather than failing."""
    start_time = perf_counter()

    try:
        probe = MarketContextProbe(finnhub_client())
    except ValueError as e:
        return build_error_response(error_type="configuration", message=str(e), tool=TOOL_NAME)

    context = await probe.probe()
    duration_ms = (perf_counter() - start_time) * 1000

    return {
        **context.to_dict(),
        "description": describe_regime(context) or None,
        "meta": build_meta(TOOL_NAME, duration_ms),
    }
