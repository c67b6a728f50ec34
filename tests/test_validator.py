"""Tests for analysis validation."""

import pytest

from earnings_scout.analysis.validator import validate_analysis
from earnings_scout.models import Analysis, Strategy

IRON_CONDOR = (Strategy(name="Iron Condor", details="POP: 70%"),)


class TestValidateAnalysis:
    """Tests for validate_analysis."""

    def test_valid(self) -> None:
        """Test a well-formed analysis passes."""
        analysis = Analysis(
            symbol="AAPL", sentiment_score=8, recommendation="STRONGLY CONSIDER", strategies=IRON_CONDOR
        )
        result = validate_analysis(analysis)

        assert result.is_valid is True
        assert result.issues == ()

    def test_low_conviction_strong_call_without_strategies(self) -> None:
        """Test exactly the strategy and consistency issues are reported."""
        analysis = Analysis(symbol="AAPL", sentiment_score=3, recommendation="STRONGLY CONSIDER", strategies=())
        result = validate_analysis(analysis)

        assert result.is_valid is False
        assert result.issues == (
            "No strategies provided",
            "Inconsistent sentiment and recommendation",
        )

    @pytest.mark.parametrize("score", [None, 0, 11])
    def test_invalid_sentiment(self, score: int | None) -> None:
        """Test missing or out-of-range sentiment."""
        analysis = Analysis(symbol="AAPL", sentiment_score=score, strategies=IRON_CONDOR)
        assert validate_analysis(analysis).issues == ("Invalid sentiment score",)

    def test_invalid_recommendation(self) -> None:
        """Test a non-canonical recommendation."""
        analysis = Analysis(symbol="AAPL", sentiment_score=6, recommendation="BUY", strategies=IRON_CONDOR)
        assert validate_analysis(analysis).issues == ("Invalid recommendation format",)

    def test_low_sentiment_neutral_is_consistent(self) -> None:
        """Test low sentiment only conflicts with STRONGLY CONSIDER."""
        analysis = Analysis(symbol="AAPL", sentiment_score=2, recommendation="STAY AWAY", strategies=IRON_CONDOR)
        assert validate_analysis(analysis).is_valid is True

    def test_boundary_sentiment(self) -> None:
        """Test sentiment 5 with a strong call is consistent; 1 and 10 are in range."""
        for score in (1, 10):
            analysis = Analysis(symbol="AAPL", sentiment_score=score, strategies=IRON_CONDOR)
            assert validate_analysis(analysis).is_valid is True

        analysis = Analysis(
            symbol="AAPL", sentiment_score=5, recommendation="STRONGLY CONSIDER", strategies=IRON_CONDOR
        )
        assert validate_analysis(analysis).is_valid is True

    def test_issues_accumulate(self) -> None:
        """Test every failing check is reported in order."""
        analysis = Analysis(symbol="AAPL", sentiment_score=None, recommendation="MAYBE")
        assert validate_analysis(analysis).issues == (
            "Invalid sentiment score",
            "Invalid recommendation format",
            "No strategies provided",
        )
