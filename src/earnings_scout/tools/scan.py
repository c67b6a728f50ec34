"""Earnings opportunity scan tool."""

from time import perf_counter
from typing import Any

import requests

from earnings_scout.data.finnhub_client import FinnhubAPIError
from earnings_scout.pipeline.opportunities import OpportunityPipeline
from earnings_scout.pipeline.quality import quality_components
from earnings_scout.tools.common import finnhub_client, volatility_gateway
from earnings_scout.utils.provenance import build_error_response, build_meta

TOOL_NAME = "scan_earnings_opportunities"


def upstream_error_response(error: Exception, tool: str) -> dict[str, Any]:
    """Error envelope for a failed calendar fetch."""
    if isinstance(error, FinnhubAPIError):
        return build_error_response(
            error_type="upstream_error",
            message=str(error),
            tool=tool,
            status_code=error.status_code,
        )
    return build_error_response(
        error_type="network_error",
        message=f"Failed to fetch earnings calendar: {error}",
        tool=tool,
    )


async def scan_opportunities() -> dict[str, Any]:
    """
    Run the opportunity funnel once.

    Returns:
        Dict with ranked opportunities (each with its score breakdown),
        funnel stage counts and metadata
    """
    start_time = perf_counter()

    try:
        pipeline = OpportunityPipeline(finnhub_client(), volatility_gateway())
    except ValueError as e:
        return build_error_response(error_type="configuration", message=str(e), tool=TOOL_NAME)

    try:
        opportunities, summary = await pipeline.run_with_summary()
    except (FinnhubAPIError, requests.RequestException, ValueError) as e:
        return upstream_error_response(e, TOOL_NAME)

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "opportunities": [
            {**opp.to_dict(), "score_breakdown": quality_components(opp)} for opp in opportunities
        ],
        "funnel": summary.funnel(),
        "data_provenance": {"calendar": summary.calendar_provenance},
        "meta": build_meta(TOOL_NAME, duration_ms),
    }
