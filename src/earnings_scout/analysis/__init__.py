"""Generative analysis: prompting, reply parsing and validation."""

from earnings_scout.analysis.engine import AnalysisEngine
from earnings_scout.analysis.parser import ExtractionRule, extract_first, parse_analysis, split_batch
from earnings_scout.analysis.validator import validate_analysis

__all__ = [
    "AnalysisEngine",
    "ExtractionRule",
    "extract_first",
    "parse_analysis",
    "split_batch",
    "validate_analysis",
]
