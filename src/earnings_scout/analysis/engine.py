"""Generative assessment of ranked opportunities.

One batched request covers every opportunity; its reply is split per symbol.
If the batched request itself fails, each opportunity gets its own request.
Either way a failure for one symbol only drops that symbol.
"""

import logging
from datetime import datetime

import pytz

from earnings_scout.analysis.parser import parse_analysis, split_batch
from earnings_scout.analysis.validator import validate_analysis
from earnings_scout.data.gemini_client import TextGenerator
from earnings_scout.models import (
    AnalysisOutcome,
    AnalysisRecord,
    MarketContext,
    Opportunity,
    ValidationResult,
)
from earnings_scout.prompts.templates import build_batch_prompt, build_single_prompt

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """Turns opportunities into parsed analyses via a text generator."""

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def analyze(
        self,
        opportunities: list[Opportunity],
        context: MarketContext | None,
    ) -> list[AnalysisRecord]:
        """
        Analyze opportunities, batch first, per-subject on batch failure.

        Returns:
            Records for every symbol that produced an analysis, in input order
        """
        if not opportunities:
            return []

        logger.info(f"Generating AI analysis for {len(opportunities)} opportunities...")
        try:
            outcomes = await self.analyze_batch(opportunities, context)
            mode = "batch"
        except Exception as e:
            logger.warning(f"Batch analysis failed, falling back to individual analysis: {e}")
            outcomes = await self.analyze_individually(opportunities, context)
            mode = "fallback"

        records = self._records(opportunities, outcomes)
        logger.info(f"Successfully generated {len(records)} analyses ({mode} mode)")
        return records

    async def analyze_batch(
        self,
        opportunities: list[Opportunity],
        context: MarketContext | None,
    ) -> list[AnalysisOutcome]:
        """
        One request for all opportunities.

        Raises:
            Exception: Whatever the generator raises; the caller falls back
        """
        reply = await self.generator.generate(build_batch_prompt(opportunities, context))
        sections = split_batch(reply, [opp.symbol for opp in opportunities])

        outcomes = []
        for opp in opportunities:
            section = sections.get(opp.symbol)
            if section is None:
                logger.warning(f"Could not find analysis for {opp.symbol} in batch response")
                outcomes.append(AnalysisOutcome(opp.symbol, error="missing from batch reply"))
                continue
            outcomes.append(AnalysisOutcome(opp.symbol, analysis=parse_analysis(section, opp.symbol)))
        return outcomes

    async def analyze_one(self, opportunity: Opportunity, context: MarketContext | None) -> AnalysisOutcome:
        try:
            reply = await self.generator.generate(build_single_prompt(opportunity, context))
        except Exception as e:
            logger.warning(f"Error generating analysis for {opportunity.symbol}: {e}")
            return AnalysisOutcome(opportunity.symbol, error=str(e) or type(e).__name__)
        return AnalysisOutcome(opportunity.symbol, analysis=parse_analysis(reply, opportunity.symbol))

    async def analyze_individually(
        self,
        opportunities: list[Opportunity],
        context: MarketContext | None,
    ) -> list[AnalysisOutcome]:
        # Sequential: one outstanding request at a time
        outcomes = []
        for opp in opportunities:
            outcomes.append(await self.analyze_one(opp, context))
        return outcomes

    @staticmethod
    def _records(
        opportunities: list[Opportunity],
        outcomes: list[AnalysisOutcome],
    ) -> list[AnalysisRecord]:
        records = []
        for opp, outcome in zip(opportunities, outcomes):
            if outcome.ok:
                records.append(
                    AnalysisRecord(
                        opportunity=opp,
                        analysis=outcome.analysis,
                        timestamp=datetime.now(pytz.utc),
                    )
                )
        return records

    @staticmethod
    def validated(
        records: list[AnalysisRecord],
    ) -> tuple[list[AnalysisRecord], list[tuple[AnalysisRecord, ValidationResult]]]:
        """Split records into publishable ones and rejected ones with their issues."""
        accepted = []
        rejected = []
        for record in records:
            result = validate_analysis(record.analysis)
            if result.is_valid:
                accepted.append(record)
            else:
                logger.info(f"{record.analysis.symbol}: rejected ({', '.join(result.issues)})")
                rejected.append((record, result))
        return accepted, rejected
