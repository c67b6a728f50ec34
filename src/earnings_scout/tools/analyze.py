"""End-to-end tool: scan, probe market context, analyze and validate."""

from time import perf_counter
from typing import Any

import requests

from earnings_scout.analysis.engine import AnalysisEngine
from earnings_scout.data.finnhub_client import FinnhubAPIError
from earnings_scout.models import AnalysisRecord
from earnings_scout.pipeline.market_context import MarketContextProbe
from earnings_scout.pipeline.opportunities import OpportunityPipeline
from earnings_scout.tools.common import finnhub_client, text_generator, volatility_gateway
from earnings_scout.tools.scan import upstream_error_response
from earnings_scout.utils.provenance import build_error_response, build_meta
from earnings_scout.utils.sanitize import sanitize_model_text

TOOL_NAME = "analyze_earnings_opportunities"

_TEXT_FIELDS = ("reasoning", "volatility_assessment", "risk_factors", "position_sizing")


def _record_to_dict(record: AnalysisRecord, include_raw: bool) -> dict[str, Any]:
    data = record.to_dict()
    analysis = data["analysis"]
    for name in _TEXT_FIELDS:
        analysis[name] = sanitize_model_text(analysis[name], max_length=1000)
    if include_raw:
        analysis["raw_analysis"] = sanitize_model_text(analysis["raw_analysis"])
    else:
        analysis.pop("raw_analysis", None)
    return data


async def analyze_opportunities(include_raw: bool = False) -> dict[str, Any]:
    """
    Scan opportunities and attach a validated model assessment to each.

    Args:
        include_raw: Include the raw model text for each analysis

    Returns:
        Dict with market context, accepted analyses, rejected analyses with
        their validation issues, and metadata
    """
    start_time = perf_counter()

    try:
        client = finnhub_client()
        engine = AnalysisEngine(text_generator())
    except ValueError as e:
        return build_error_response(error_type="configuration", message=str(e), tool=TOOL_NAME)

    pipeline = OpportunityPipeline(client, volatility_gateway())
    try:
        opportunities, summary = await pipeline.run_with_summary()
    except (FinnhubAPIError, requests.RequestException, ValueError) as e:
        return upstream_error_response(e, TOOL_NAME)

    context = await MarketContextProbe(client).probe()
    records = await engine.analyze(opportunities, context)
    accepted, rejected = engine.validated(records)

    analyzed = {r.opportunity.symbol for r in records}
    dropped = [o.symbol for o in opportunities if o.symbol not in analyzed]

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "market_context": context.to_dict(),
        "analyses": [_record_to_dict(r, include_raw) for r in accepted],
        "rejected": [
            {**_record_to_dict(r, include_raw), "issues": list(result.issues)}
            for r, result in rejected
        ],
        "not_analyzed": dropped,
        "data_provenance": {"calendar": summary.calendar_provenance},
        "meta": build_meta(TOOL_NAME, duration_ms),
    }
