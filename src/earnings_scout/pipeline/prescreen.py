"""Cheap, no-network ranking used to bound expensive downstream calls."""

import math
from datetime import date, datetime, time

from earnings_scout.models import HOUR_AFTER_CLOSE, HOUR_BEFORE_OPEN, CalendarEvent, Opportunity

# Number of candidates that go on to volatility enrichment
PRESCREEN_TOP_K = 8


def days_to_earnings(event_date: date, now: datetime) -> int:
    """
    Whole days from ``now`` until the start of ``event_date``, rounded up.

    Any time on the day before the event counts as 1 day out; any time on
    the event day itself counts as 0.
    """
    event_start = datetime.combine(event_date, time.min)
    if now.tzinfo is not None:
        # pytz zones need localize for correct offsets
        localize = getattr(now.tzinfo, "localize", None)
        event_start = localize(event_start) if localize else event_start.replace(tzinfo=now.tzinfo)
    return math.ceil((event_start - now).total_seconds() / 86400)


def size_score(revenue_estimate: float | None) -> int:
    # Missing estimate is neutral, not penalised
    if revenue_estimate is None:
        return 5
    if revenue_estimate > 10_000_000_000:
        return 10
    if revenue_estimate > 1_000_000_000:
        return 7
    if revenue_estimate > 100_000_000:
        return 5
    return 3


def timing_score(days: int) -> int:
    if 7 <= days <= 21:
        return 8
    if 3 <= days <= 30:
        return 5
    return 2


def session_score(hour: str | None) -> int:
    if hour == HOUR_AFTER_CLOSE:
        return 2
    if hour == HOUR_BEFORE_OPEN:
        return 1
    return 0


def prescreen_score(event: CalendarEvent, days: int) -> int:
    """Deterministic prescreen score from revenue size, timing and session."""
    return size_score(event.revenue_estimate) + timing_score(days) + session_score(event.hour)


def prescreen(
    events: list[CalendarEvent],
    now: datetime,
    top_k: int = PRESCREEN_TOP_K,
) -> list[Opportunity]:
    """
    Score every event and keep the ``top_k`` best.

    Ties keep calendar order (the sort is stable).
    """
    candidates = []
    for event in events:
        days = days_to_earnings(event.date, now)
        candidates.append(
            Opportunity(
                event=event,
                days_to_earnings=days,
                prescreen_score=prescreen_score(event, days),
            )
        )
    candidates.sort(key=lambda opp: opp.prescreen_score, reverse=True)
    return candidates[:top_k]
