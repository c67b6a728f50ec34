"""Earnings opportunity funnel.

fetch calendar -> universe filter -> time window -> prescreen (top 8)
-> volatility enrichment -> quality scoring -> final filter (top 5).

Stages run strictly in sequence and each one returns a new list. Only the
calendar fetch can fail the run; every later problem drops symbols instead.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

import pytz

from earnings_scout.data.finnhub_client import FinnhubClient
from earnings_scout.data.volatility import VolatilityGateway, calculate_volatility_score
from earnings_scout.models import CalendarEvent, Opportunity, ScanSummary, VolatilitySnapshot
from earnings_scout.pipeline.prescreen import PRESCREEN_TOP_K, days_to_earnings, prescreen
from earnings_scout.pipeline.quality import quality_score
from earnings_scout.universe import load_universe

logger = logging.getLogger(__name__)

LOOKAHEAD_DAYS = 45
MIN_DAYS_OUT = 1
FINAL_TOP_N = 5
MIN_QUALITY_SCORE = 5


def filter_universe(events: Iterable[CalendarEvent], universe: frozenset[str]) -> list[CalendarEvent]:
    return [e for e in events if e.symbol in universe]


def filter_window(
    events: Iterable[CalendarEvent],
    now: datetime,
    max_days: int = LOOKAHEAD_DAYS,
) -> list[CalendarEvent]:
    """Keep events 1 to ``max_days`` days out, inclusive."""
    return [e for e in events if MIN_DAYS_OUT <= days_to_earnings(e.date, now) <= max_days]


def attach_volatility(
    opportunities: Iterable[Opportunity],
    volatility: dict[str, VolatilitySnapshot | None],
) -> list[Opportunity]:
    """Attach snapshots by symbol; a None entry counts as absent."""
    lookup = {symbol: data for symbol, data in (volatility or {}).items() if data is not None}
    enriched = []
    for opp in opportunities:
        snapshot = lookup.get(opp.symbol)
        enriched.append(opp.enriched(snapshot, calculate_volatility_score(snapshot)))
    return enriched


def score_opportunities(opportunities: Iterable[Opportunity]) -> list[Opportunity]:
    return [opp.scored(quality_score(opp)) for opp in opportunities]


def select_final(
    opportunities: Iterable[Opportunity],
    limit: int = FINAL_TOP_N,
    min_score: int = MIN_QUALITY_SCORE,
) -> list[Opportunity]:
    """Drop unenriched or low-quality opportunities; best ``limit`` first."""
    qualified = [
        opp
        for opp in opportunities
        if opp.volatility_data is not None
        and opp.quality_score is not None
        and opp.quality_score > min_score
    ]
    qualified.sort(key=lambda opp: opp.quality_score, reverse=True)
    return qualified[:limit]


class OpportunityPipeline:
    """Runs the funnel once per call to ``run``."""

    def __init__(
        self,
        client: FinnhubClient,
        gateway: VolatilityGateway,
        universe: frozenset[str] | None = None,
        tz: str = "America/New_York",
        clock: Callable[[], datetime] | None = None,
    ):
        self.client = client
        self.gateway = gateway
        self.universe = universe if universe is not None else load_universe()
        self.tz = pytz.timezone(tz)
        self.clock = clock or (lambda: datetime.now(self.tz))

    async def run(self) -> list[Opportunity]:
        """
        Scan the calendar and return up to 5 ranked opportunities.

        Raises:
            FinnhubAPIError: If the calendar fetch fails after its retries
            requests.RequestException: If the calendar fetch fails at the network level
        """
        opportunities, _ = await self.run_with_summary()
        return opportunities

    async def run_with_summary(self) -> tuple[list[Opportunity], ScanSummary]:
        now = self.clock()
        today = now.date()
        to_date = today + timedelta(days=LOOKAHEAD_DAYS)

        logger.info(f"Scanning earnings from {today.isoformat()} to {to_date.isoformat()}...")
        events, provenance = await self.client.get_earnings_calendar_with_provenance(today, to_date)
        logger.info(f"Total earnings found: {len(events)}")

        in_universe = filter_universe(events, self.universe)
        logger.info(f"Earnings in universe: {len(in_universe)}")

        in_window = filter_window(in_universe, now)
        if not in_window:
            logger.info("No earnings found in time window.")
            return [], ScanSummary(
                calendar_events=len(events),
                in_universe=len(in_universe),
                calendar_provenance=provenance,
            )

        candidates = prescreen(in_window, now, top_k=PRESCREEN_TOP_K)
        logger.info(
            f"Pre-screened to top {len(candidates)} symbols: "
            + ", ".join(f"{c.symbol}({c.prescreen_score})" for c in candidates)
        )

        symbols = [c.symbol for c in candidates]
        try:
            volatility = await self.gateway.bulk_volatility(symbols)
        except Exception as e:
            logger.warning(f"Volatility enrichment failed for {symbols}: {e}")
            volatility = {}

        enriched = attach_volatility(candidates, volatility)
        missing = [o.symbol for o in enriched if o.volatility_data is None]
        if missing:
            logger.warning(f"No volatility data for: {', '.join(missing)}")

        final = select_final(score_opportunities(enriched))
        logger.info(f"Qualified opportunities after filtering: {len(final)}")

        summary = ScanSummary(
            calendar_events=len(events),
            in_universe=len(in_universe),
            in_window=len(in_window),
            prescreened=tuple(symbols),
            enriched=len(enriched) - len(missing),
            qualified=len(final),
            calendar_provenance=provenance,
        )
        return final, summary
