"""Prompt templates for earnings analysis.

Two deterministic renderings feed the text-generation service: one
opportunity per prompt, or a batch of opportunities whose replies are
delimited by ``=== SYMBOL ===`` marker lines. The named ``PROMPTS`` registry
backs the MCP prompts.
"""

from typing import Any

from earnings_scout.models import (
    REGIME_ELEVATED,
    REGIME_HIGH,
    REGIME_LOW,
    REGIME_NORMAL,
    MarketContext,
    Opportunity,
)

REGIME_DESCRIPTIONS = {
    REGIME_HIGH: "High volatility environment - Premium selling may be attractive, but manage risk carefully.",
    REGIME_ELEVATED: "Elevated volatility - Good environment for defined risk strategies.",
    REGIME_NORMAL: "Normal volatility environment - Focus on high-probability setups.",
    REGIME_LOW: "Low volatility environment - Premium buying may be more attractive than selling.",
}

RESPONSE_SECTIONS = """**SENTIMENT SCORE:** [number 1-10]
**RECOMMENDATION:** [STRONGLY CONSIDER or NEUTRAL or STAY AWAY]
**REASONING:** [2-3 sentences max explaining key factors]
**STRATEGIES:**
1. **[Strategy Name]** - POP: [%], Risk: $[amount], Entry: [timing]
2. **[Strategy Name]** - POP: [%], Risk: $[amount], Entry: [timing]
**KEY RISKS:** [1-2 bullets max]"""


def _fmt(value: float | None, digits: int = 1) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{digits}f}"


def batch_delimiter(symbol: str) -> str:
    return f"=== {symbol} ==="


def describe_regime(context: MarketContext | None) -> str:
    if context is None:
        return ""
    return REGIME_DESCRIPTIONS.get(context.market_regime, "")


def _context_line(context: MarketContext | None) -> str:
    regime = context.market_regime if context else "unknown"
    return f"VIX: {_fmt(context.vix if context else None)} ({regime})"


def _opportunity_lines(opp: Opportunity) -> list[str]:
    vol = opp.volatility_data
    move_pct = vol.expected_move_pct if vol else None
    price = f"${_fmt(vol.current_price, 2)}" if vol and vol.current_price is not None else "N/A"
    return [
        f"Earnings: {opp.date.isoformat()} ({opp.days_to_earnings}d)",
        f"Price: {price} | Expected Move: {_fmt(move_pct) + '%' if move_pct is not None else 'N/A'}",
        f"IV: {_fmt(vol.implied_volatility if vol else None)}% | "
        f"HV: {_fmt(vol.historical_volatility if vol else None)}% | "
        f"RSI: {_fmt(vol.rsi if vol else None)}",
        f"Quality: {opp.quality_score}/100",
    ]


def build_single_prompt(opportunity: Opportunity, context: MarketContext | None) -> str:
    """Prompt for one opportunity, asking for the five-section reply."""
    lines = _opportunity_lines(opportunity)
    regime_description = describe_regime(context)
    return f"""QUANTITATIVE ANALYST: Analyze this earnings opportunity. KEEP RESPONSE CONCISE.

STOCK: {opportunity.symbol} | {lines[0]}
{lines[1]}
{lines[2]}
{lines[3]} | {_context_line(context)}
{regime_description}

RESPOND IN EXACTLY THIS FORMAT (NO EXTRA TEXT):

{RESPONSE_SECTIONS}

BE CONCISE. NO FLUFF."""


def build_batch_prompt(opportunities: list[Opportunity], context: MarketContext | None) -> str:
    """
    Prompt covering several opportunities in one request.

    Each reply section must start with ``=== SYMBOL ===`` using the symbol
    verbatim, so the reply can be split back per opportunity.

    Raises:
        ValueError: If ``opportunities`` is empty
    """
    if not opportunities:
        raise ValueError("Batch prompt needs at least one opportunity")

    parts = [
        f"QUANTITATIVE ANALYST: Analyze these {len(opportunities)} earnings opportunities. "
        "KEEP RESPONSES CONCISE.",
        "",
        f"MARKET CONTEXT: {_context_line(context)}",
        describe_regime(context),
        "",
    ]
    for index, opp in enumerate(opportunities, start=1):
        parts.append(f"--- STOCK {index}: {opp.symbol} ---")
        parts.extend(_opportunity_lines(opp))
        parts.append("")

    parts.append(
        f"RESPOND WITH EXACTLY {len(opportunities)} ANALYSES IN THIS FORMAT (one per stock):"
    )
    parts.append("")
    parts.append(
        "\n\n".join(f"{batch_delimiter(opp.symbol)}\n{RESPONSE_SECTIONS}" for opp in opportunities)
    )
    parts.append("")
    parts.append("BE CONCISE. NO EXTRA TEXT.")
    return "\n".join(parts)


# Prompt definitions
PROMPTS = {
    "earnings_brief": {
        "description": "Scan upcoming earnings and brief the best options setups",
        "arguments": [{"name": "max_ideas", "required": False}],
    },
    "earnings_deep_dive": {
        "description": "Assess one symbol's upcoming earnings setup",
        "arguments": [{"name": "symbol", "required": True}],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    if name == "earnings_brief":
        max_ideas = arguments.get("max_ideas") or "3"
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Brief me on upcoming earnings trades.

Execute these tools in order:
1. get_market_context()
2. analyze_earnings_opportunities()

Then provide, for at most {max_ideas} ideas that passed validation:
1. **Setup**: symbol, earnings date, days out, quality score
2. **Verdict**: recommendation and sentiment score
3. **Strategy**: the single best strategy with POP, risk and entry
4. **Risks**: one line

Skip ideas listed under "rejected". Be direct. No hedging.""",
                }
            ]
        }

    if name == "earnings_deep_dive":
        symbol = arguments.get("symbol", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Assess the upcoming earnings setup for {symbol}.

Use these tools:
1. get_market_context()
2. scan_earnings_opportunities()

If {symbol} is among the opportunities, explain its quality score band by
band (volatility, timing, liquidity, technical). If it is not, say which
funnel stage most likely removed it.

{RESPONSE_SECTIONS}""",
                }
            ]
        }

    return None
