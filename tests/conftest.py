"""Pytest configuration and fixtures."""

import asyncio
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd
import pytest
import pytz

from earnings_scout.models import (
    CalendarEvent,
    MarketContext,
    Opportunity,
    VolatilitySnapshot,
)

EASTERN = pytz.timezone("America/New_York")


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Replays queued responses (or raises queued exceptions); the last one repeats."""

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, params: dict[str, Any] | None = None, timeout: float | None = None) -> Any:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


class FakeCalendarClient:
    """Calendar and quote source for pipeline and market-context tests."""

    def __init__(
        self,
        events: list[CalendarEvent] | None = None,
        error: Exception | None = None,
        quote: Any = None,
    ):
        self.events = events or []
        self.error = error
        self.quote = quote
        self.calendar_calls: list[tuple[date, date]] = []
        self.quote_calls: list[str] = []

    async def get_earnings_calendar(self, from_date: date, to_date: date) -> list[CalendarEvent]:
        self.calendar_calls.append((from_date, to_date))
        if self.error is not None:
            raise self.error
        return list(self.events)

    async def get_earnings_calendar_with_provenance(
        self, from_date: date, to_date: date
    ) -> tuple[list[CalendarEvent], dict[str, Any]]:
        events = await self.get_earnings_calendar(from_date, to_date)
        return events, {"source": "finnhub", "endpoint": "/calendar/earnings", "attempts": 1}

    async def get_quote(self, symbol: str, **kwargs: Any) -> Any:
        self.quote_calls.append(symbol)
        if isinstance(self.quote, Exception):
            raise self.quote
        return self.quote


class FakeGateway:
    """Volatility gateway returning canned snapshots."""

    def __init__(
        self,
        snapshots: dict[str, VolatilitySnapshot | None] | None = None,
        error: Exception | None = None,
    ):
        self.snapshots = snapshots or {}
        self.error = error
        self.requested: list[list[str]] = []

    async def bulk_volatility(self, symbols: list[str]) -> dict[str, VolatilitySnapshot | None]:
        self.requested.append(list(symbols))
        if self.error is not None:
            raise self.error
        return {s: self.snapshots.get(s) for s in symbols}


class FakeGenerator:
    """Text generator replaying queued replies; exceptions in the queue are raised."""

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if callable(reply) and not isinstance(reply, str):
            reply = reply(prompt)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def now() -> datetime:
    """Fixed scan time: Friday 2025-01-10 12:00 New York."""
    return EASTERN.localize(datetime(2025, 1, 10, 12, 0))


@pytest.fixture
def make_event(now: datetime) -> Callable[..., CalendarEvent]:
    """Factory for calendar events a given number of days after ``now``."""

    def _make(
        symbol: str,
        days_out: int = 14,
        revenue_estimate: float | None = 5_000_000_000,
        hour: str | None = "amc",
    ) -> CalendarEvent:
        return CalendarEvent(
            symbol=symbol,
            date=now.date() + timedelta(days=days_out),
            revenue_estimate=revenue_estimate,
            hour=hour,
        )

    return _make


@pytest.fixture
def rich_snapshot() -> VolatilitySnapshot:
    """Snapshot that maxes out every quality band."""
    return VolatilitySnapshot(
        current_price=100.0,
        implied_volatility=65.0,
        historical_volatility=40.0,
        expected_move=9.0,
        options_volume=20_000,
        volatility_score=80.0,
        rsi=75.0,
    )


@pytest.fixture
def make_opportunity(make_event: Callable[..., CalendarEvent]) -> Callable[..., Opportunity]:
    """Factory for scored opportunities, as the pipeline hands them to analysis."""

    def _make(
        symbol: str,
        days_out: int = 14,
        snapshot: VolatilitySnapshot | None = None,
        quality: int | None = 80,
    ) -> Opportunity:
        return Opportunity(
            event=make_event(symbol, days_out=days_out),
            days_to_earnings=days_out,
            prescreen_score=17,
            volatility_data=snapshot,
            volatility_score=snapshot.volatility_score if snapshot else None,
            quality_score=quality,
        )

    return _make


@pytest.fixture
def market_context(now: datetime) -> MarketContext:
    """Elevated-volatility market context."""
    return MarketContext(vix=22.5, market_regime="elevated-volatility", last_updated=now)


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record asyncio.sleep delays instead of waiting."""
    delays: list[float] = []

    async def _sleep(delay: float, *args: Any, **kwargs: Any) -> None:
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", _sleep)
    return delays


@pytest.fixture
def no_jitter(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make retry jitter zero so backoff delays are exact."""
    monkeypatch.setattr("earnings_scout.data.retry.random.uniform", lambda a, b: 0.0)


@pytest.fixture
def sample_price_series() -> pd.Series:
    """Sample price series for indicator testing."""
    return pd.Series(
        [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5,
         107.0, 108.0, 107.5, 109.0, 110.0, 109.5, 111.0, 112.0, 111.5, 113.0,
         114.0, 113.5, 115.0, 116.0, 115.5, 117.0, 118.0, 117.5, 119.0, 120.0]
    )


@pytest.fixture
def fake_session() -> type[FakeSession]:
    return FakeSession


@pytest.fixture
def fake_response() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture
def fake_calendar_client() -> type[FakeCalendarClient]:
    return FakeCalendarClient


@pytest.fixture
def fake_gateway() -> type[FakeGateway]:
    return FakeGateway


@pytest.fixture
def fake_generator() -> type[FakeGenerator]:
    return FakeGenerator
