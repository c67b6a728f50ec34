"""Tests for model-reply parsing."""

from earnings_scout.analysis.parser import (
    RECOMMENDATION_RULES,
    SENTIMENT_RULES,
    extract_first,
    parse_analysis,
    parse_recommendation,
    parse_sentiment,
    parse_strategies,
    split_batch,
)

SAMPLE = (
    "**SENTIMENT SCORE:** 8\n"
    "**RECOMMENDATION:** NEUTRAL\n"
    "1. **Iron Condor** - POP: 70%, Risk: $200, Entry: open"
)

FULL_REPLY = """**SENTIMENT SCORE:** 7
**RECOMMENDATION:** STRONGLY CONSIDER
**REASONING:** IV is rich relative to realised volatility. Guidance risk is modest.
**VOLATILITY ASSESSMENT:** Implied move of 6% exceeds the 4% historical average.
**STRATEGIES:**
1. **Iron Condor** - POP: 70%, Risk: $200, Entry: day before earnings
2. **Short Strangle** - POP: 65%, Risk: $500, Entry: open
**KEY RISKS:** Guidance cut could gap the stock through the short strikes.
**POSITION SIZING:** Risk no more than 2% of the account."""


class TestSpecimen:
    """Tests for a minimal well-formed reply."""

    def test_fields(self) -> None:
        """Test sentiment, recommendation and one strategy are recovered."""
        analysis = parse_analysis(SAMPLE, "AAPL")

        assert analysis.symbol == "AAPL"
        assert analysis.sentiment_score == 8
        assert analysis.recommendation == "NEUTRAL"
        assert [s.name for s in analysis.strategies] == ["Iron Condor"]
        assert analysis.strategies[0].details == "- POP: 70%, Risk: $200, Entry: open"
        assert analysis.raw_analysis == SAMPLE

    def test_full_reply(self) -> None:
        """Test every section of a complete reply."""
        analysis = parse_analysis(FULL_REPLY, "NVDA")

        assert analysis.sentiment_score == 7
        assert analysis.recommendation == "STRONGLY CONSIDER"
        assert analysis.reasoning.startswith("IV is rich")
        assert analysis.reasoning.endswith("modest.")
        assert analysis.volatility_assessment.startswith("Implied move of 6%")
        assert [s.name for s in analysis.strategies] == ["Iron Condor", "Short Strangle"]
        assert analysis.strategies[1].details == "- POP: 65%, Risk: $500, Entry: open"
        assert analysis.risk_factors.startswith("Guidance cut")
        assert analysis.position_sizing == "Risk no more than 2% of the account."


class TestSentimentRules:
    """Tests for the ordered sentiment extraction rules."""

    def test_bold_heading_wins(self) -> None:
        """Test the first rule is reported when it matches."""
        assert extract_first(SENTIMENT_RULES, "**SENTIMENT SCORE:** 8") == ("bold_heading", "8")

    def test_plain_heading(self) -> None:
        """Test an unbolded heading."""
        assert extract_first(SENTIMENT_RULES, "SENTIMENT SCORE: 9") == ("plain_heading", "9")

    def test_loose_colon(self) -> None:
        """Test a reworded label followed by a colon."""
        assert extract_first(SENTIMENT_RULES, "Sentiment rating: 6") == ("sentiment_colon", "6")

    def test_loosest(self) -> None:
        """Test sentiment followed by a number with no colon."""
        found = extract_first(SENTIMENT_RULES, "Overall sentiment is about 4 out of 10")
        assert found == ("sentiment_then_digits", "4")

    def test_absent(self) -> None:
        """Test no sentiment gives None."""
        assert parse_sentiment("No score here") is None


class TestRecommendationRules:
    """Tests for the ordered recommendation extraction rules."""

    def test_plain_heading_any_case(self) -> None:
        """Test case is normalised to the canonical form."""
        assert parse_recommendation("Recommendation: stay away") == "STAY AWAY"

    def test_bare_phrase(self) -> None:
        """Test a canonical phrase anywhere in the text."""
        assert extract_first(RECOMMENDATION_RULES, "I would strongly consider it") == (
            "bare_phrase",
            "strongly consider",
        )
        assert parse_recommendation("I would strongly consider it") == "STRONGLY CONSIDER"

    def test_default_neutral(self) -> None:
        """Test no recommendation falls back to NEUTRAL."""
        assert parse_recommendation("Buy it all") == "NEUTRAL"


class TestSections:
    """Tests for free-text sections and strategies."""

    def test_fields_independent(self) -> None:
        """Test a missing field does not block the others."""
        analysis = parse_analysis("**RECOMMENDATION:** STAY AWAY\n**KEY RISKS:** Everything", "F")

        assert analysis.sentiment_score is None
        assert analysis.recommendation == "STAY AWAY"
        assert analysis.strategies == ()
        assert analysis.risk_factors == "Everything"
        assert analysis.reasoning == ""

    def test_risk_factors_preferred_over_key_risks(self) -> None:
        """Test the RISK FACTORS heading wins when both are present."""
        text = "**KEY RISKS:** short list\n**RISK FACTORS:** long list"
        assert parse_analysis(text, "F").risk_factors == "long list"

    def test_strategies_stop_at_blank_line(self) -> None:
        """Test a strategy's details end at a blank line."""
        text = "1. **Long Straddle** buy both legs\n\nUnrelated trailing prose."
        strategies = parse_strategies(text)

        assert len(strategies) == 1
        assert strategies[0].details == "buy both legs"

    def test_strategy_ends_at_heading_on_next_line(self) -> None:
        """Test a heading after a strategy line is not read as another strategy."""
        text = "**STRATEGIES:**\n1. **Iron Condor** - POP: 70%, Max loss $500.\n**KEY RISKS:** Guidance cut."
        analysis = parse_analysis(text, "AAPL")

        assert [s.name for s in analysis.strategies] == ["Iron Condor"]
        assert analysis.strategies[0].details == "- POP: 70%, Max loss $500."
        assert analysis.risk_factors == "Guidance cut."

    def test_numbered_bold_mid_line_is_not_a_strategy(self) -> None:
        """Test only numbered items that start a line count as strategies."""
        text = "1. **Iron Condor** sell wings, roll at 2. **adjust** if tested"
        strategies = parse_strategies(text)

        assert [s.name for s in strategies] == ["Iron Condor"]

    def test_empty_text(self) -> None:
        """Test empty input parses to defaults."""
        analysis = parse_analysis("", "AAPL")

        assert analysis.sentiment_score is None
        assert analysis.recommendation == "NEUTRAL"
        assert analysis.strategies == ()


class TestSplitBatch:
    """Tests for slicing a batch reply per symbol."""

    def test_sections_split(self) -> None:
        """Test each section ends at the next marker."""
        reply = "=== AAPL ===\n" + SAMPLE + "\n\n=== NVDA ===\n" + FULL_REPLY

        sections = split_batch(reply, ["AAPL", "NVDA"])

        assert sections["AAPL"] == SAMPLE
        assert sections["NVDA"] == FULL_REPLY

    def test_missing_delimiter_keeps_others(self) -> None:
        """Test a symbol without a marker is simply absent."""
        reply = "=== AAPL ===\n" + SAMPLE + "\n\n=== NVDA ===\n" + FULL_REPLY

        sections = split_batch(reply, ["AAPL", "MSFT", "NVDA"])

        assert set(sections) == {"AAPL", "NVDA"}
        assert parse_analysis(sections["AAPL"], "AAPL").sentiment_score == 8
        assert parse_analysis(sections["NVDA"], "NVDA").sentiment_score == 7

    def test_case_insensitive_marker(self) -> None:
        """Test a mis-cased marker still matches."""
        sections = split_batch("===aapl===\n" + SAMPLE, ["AAPL"])
        assert sections["AAPL"] == SAMPLE

    def test_symbol_is_not_a_prefix_match(self) -> None:
        """Test a short symbol does not match a longer one's marker."""
        sections = split_batch("=== TSLA ===\n" + SAMPLE, ["T", "TSLA"])
        assert set(sections) == {"TSLA"}

    def test_dotted_symbol(self) -> None:
        """Test share-class symbols with a dot."""
        reply = "=== BRK.B ===\nfirst\n=== AAPL ===\nsecond"
        assert split_batch(reply, ["BRK.B", "AAPL"]) == {"BRK.B": "first", "AAPL": "second"}
