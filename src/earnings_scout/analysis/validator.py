"""Quality gate for parsed analyses."""

from earnings_scout.models import RECOMMENDATIONS, STRONGLY_CONSIDER, Analysis, ValidationResult

ISSUE_SENTIMENT = "Invalid sentiment score"
ISSUE_RECOMMENDATION = "Invalid recommendation format"
ISSUE_NO_STRATEGIES = "No strategies provided"
ISSUE_INCONSISTENT = "Inconsistent sentiment and recommendation"

# Below this sentiment a STRONGLY CONSIDER call contradicts itself
MIN_CONVICTION_SENTIMENT = 5


def validate_analysis(analysis: Analysis) -> ValidationResult:
    """
    Check an analysis against the publication rules.

    All checks run; issues accumulate in check order. Never raises.
    """
    issues = []
    score = analysis.sentiment_score

    if score is None or not 1 <= score <= 10:
        issues.append(ISSUE_SENTIMENT)

    if analysis.recommendation not in RECOMMENDATIONS:
        issues.append(ISSUE_RECOMMENDATION)

    if not analysis.strategies:
        issues.append(ISSUE_NO_STRATEGIES)

    if (
        score is not None
        and score < MIN_CONVICTION_SENTIMENT
        and analysis.recommendation == STRONGLY_CONSIDER
    ):
        issues.append(ISSUE_INCONSISTENT)

    return ValidationResult(is_valid=not issues, issues=tuple(issues))
