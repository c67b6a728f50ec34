"""Recover typed fields from free-form model output.

Each field has an ordered tuple of ``ExtractionRule``s. Rules are tried in
order and the first match wins; fields are extracted independently, so a
missing or malformed field never blocks the others. Parsing never raises.
"""

import logging
import re
from dataclasses import dataclass

from earnings_scout.models import NEUTRAL, RECOMMENDATIONS, Analysis, Strategy

logger = logging.getLogger(__name__)

_CANONICAL = "|".join(RECOMMENDATIONS)

# A bold ALL-CAPS heading such as **KEY RISKS:**; case-sensitive even inside
# case-insensitive rules
_NEXT_HEADING = r"(?-i:\*\*[A-Z][A-Z ]*:)"


@dataclass(frozen=True)
class ExtractionRule:
    """One way of locating a field; group 1 of ``pattern`` is the value."""

    name: str
    pattern: re.Pattern[str]

    def extract(self, text: str) -> str | None:
        match = self.pattern.search(text)
        if match is None:
            return None
        return match.group(1)


def extract_first(rules: tuple[ExtractionRule, ...], text: str) -> tuple[str, str] | None:
    """Return ``(rule name, value)`` for the first rule that matches, else None."""
    for rule in rules:
        value = rule.extract(text)
        if value is not None:
            return rule.name, value
    return None


def _rule(name: str, pattern: str) -> ExtractionRule:
    return ExtractionRule(name, re.compile(pattern, re.IGNORECASE | re.DOTALL))


def _section_rule(name: str, heading: str) -> ExtractionRule:
    return _rule(name, rf"\*\*{heading}:\*\*\s*(.*?)(?={_NEXT_HEADING}|\Z)")


SENTIMENT_RULES = (
    _rule("bold_heading", r"\*\*SENTIMENT SCORE:\*\*\s*(\d+)"),
    _rule("plain_heading", r"SENTIMENT SCORE:\s*(\d+)"),
    _rule("sentiment_colon", r"sentiment[^:]*:\s*(\d+)"),
    _rule("sentiment_then_digits", r"sentiment[^0-9]*(\d+)"),
)

RECOMMENDATION_RULES = (
    _rule("bold_heading", rf"\*\*RECOMMENDATION:\*\*\s*({_CANONICAL})"),
    _rule("plain_heading", rf"RECOMMENDATION:\s*({_CANONICAL})"),
    _rule("bare_phrase", rf"({_CANONICAL})"),
)

REASONING_RULES = (_section_rule("reasoning", "REASONING"),)

VOLATILITY_ASSESSMENT_RULES = (_section_rule("volatility_assessment", "VOLATILITY ASSESSMENT"),)

RISK_FACTOR_RULES = (
    _section_rule("risk_factors", "RISK FACTORS"),
    _section_rule("key_risks", "KEY RISKS"),
)

POSITION_SIZING_RULES = (_section_rule("position_sizing", "POSITION SIZING"),)

# "1. **Name** details" at the start of a line, up to the next numbered bold
# item, heading, blank line or end
STRATEGY_PATTERN = re.compile(
    rf"^[ \t]*\d+\.[ \t]*\*\*([^*\n]+)\*\*(.*?)"
    rf"(?=^[ \t]*\d+\.[ \t]*\*\*|{_NEXT_HEADING}|\n\s*\n|\Z)",
    re.IGNORECASE | re.DOTALL | re.MULTILINE,
)


def parse_sentiment(text: str) -> int | None:
    found = extract_first(SENTIMENT_RULES, text)
    if found is None:
        return None
    return int(found[1])


def parse_recommendation(text: str) -> str:
    found = extract_first(RECOMMENDATION_RULES, text)
    if found is None:
        return NEUTRAL
    # Collapse any run of whitespace the model put inside the phrase
    return " ".join(found[1].upper().split())


def parse_strategies(text: str) -> tuple[Strategy, ...]:
    strategies = []
    for match in STRATEGY_PATTERN.finditer(text):
        name = match.group(1).strip()
        if name:
            strategies.append(Strategy(name=name, details=match.group(2).strip()))
    return tuple(strategies)


def parse_section(rules: tuple[ExtractionRule, ...], text: str) -> str:
    found = extract_first(rules, text)
    return found[1].strip() if found else ""


def parse_analysis(text: str, symbol: str) -> Analysis:
    """
    Build an Analysis from one subject's reply text.

    Args:
        text: The reply (or one batch slice of it)
        symbol: Symbol the text describes

    Returns:
        Analysis; absent fields keep their defaults
    """
    text = text or ""
    analysis = Analysis(
        symbol=symbol,
        sentiment_score=parse_sentiment(text),
        recommendation=parse_recommendation(text),
        strategies=parse_strategies(text),
        reasoning=parse_section(REASONING_RULES, text),
        volatility_assessment=parse_section(VOLATILITY_ASSESSMENT_RULES, text),
        risk_factors=parse_section(RISK_FACTOR_RULES, text),
        position_sizing=parse_section(POSITION_SIZING_RULES, text),
        raw_analysis=text,
    )
    if analysis.sentiment_score is None:
        logger.debug(f"{symbol}: no sentiment score in reply")
    return analysis


def split_batch(text: str, symbols: list[str]) -> dict[str, str]:
    """
    Slice a batch reply into per-symbol sections.

    Each section runs from its ``=== SYMBOL ===`` marker (case-insensitive)
    to the next marker or the end of the text. Symbols without a marker are
    left out of the result.
    """
    sections: dict[str, str] = {}
    for symbol in symbols:
        pattern = re.compile(
            rf"===\s*{re.escape(symbol)}\s*===(.*?)(?====\s*[A-Z0-9.\-]+\s*===|\Z)",
            re.IGNORECASE | re.DOTALL,
        )
        match = pattern.search(text or "")
        if match is not None:
            sections[symbol] = match.group(1).strip()
    return sections
