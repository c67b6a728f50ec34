"""Volatility gateway: per-symbol volatility and technical snapshots.

The pipeline only depends on the ``VolatilityGateway`` protocol. The default
implementation derives snapshots from yfinance price history and the nearest
listed option chain.
"""

import asyncio
import logging
import os
from datetime import date
from typing import Protocol

import pandas as pd
import yfinance as yf
from requests.exceptions import HTTPError

from earnings_scout.data.cache import VolatilityCache
from earnings_scout.data.retry import RetryPolicy
from earnings_scout.models import VolatilitySnapshot
from earnings_scout.utils.indicators import historical_volatility, latest_rsi

logger = logging.getLogger(__name__)

_max_workers = int(os.environ.get("VOL_MAX_WORKERS", "4"))


class VolatilityGateway(Protocol):
    """Anything that can produce volatility snapshots for a batch of symbols."""

    async def bulk_volatility(self, symbols: list[str]) -> dict[str, VolatilitySnapshot | None]:
        """Return a snapshot per requested symbol, or None where unavailable."""
        ...


def score_volatility(
    implied_volatility: float | None,
    historical_volatility: float | None,
    expected_move_pct: float | None,
) -> float:
    """
    Score how interesting a symbol's volatility setup is (0-100).

    Sums three bands: volatility level (IV, or HV when IV is missing),
    IV premium over HV, and the option-implied move as a percent of price.
    """
    score = 0.0

    level = implied_volatility if implied_volatility else historical_volatility
    if level:
        if level >= 60:
            score += 40
        elif level >= 40:
            score += 30
        elif level >= 25:
            score += 20
        else:
            score += 10

    if implied_volatility and historical_volatility:
        ratio = implied_volatility / historical_volatility
        if ratio >= 1.5:
            score += 30
        elif ratio >= 1.2:
            score += 20
        elif ratio >= 1.0:
            score += 10

    if expected_move_pct:
        if expected_move_pct >= 8:
            score += 30
        elif expected_move_pct >= 5:
            score += 20
        elif expected_move_pct >= 3:
            score += 10

    return min(score, 100.0)


def calculate_volatility_score(snapshot: VolatilitySnapshot | None) -> float:
    """Volatility score for a snapshot; the gateway's own score wins when present."""
    if snapshot is None:
        return 0.0
    if snapshot.volatility_score is not None:
        return snapshot.volatility_score
    return score_volatility(
        snapshot.implied_volatility,
        snapshot.historical_volatility,
        snapshot.expected_move_pct,
    )


def is_retryable_yfinance_error(error: Exception) -> bool:
    """Check if a yfinance error is transient."""
    if isinstance(error, HTTPError) and error.response is not None:
        status_code = error.response.status_code
        return status_code == 429 or 500 <= status_code < 600

    error_str = str(error).lower()
    retryable_patterns = [
        "rate limit",
        "too many requests",
        "connection",
        "timeout",
        "temporary",
    ]
    return any(pattern in error_str for pattern in retryable_patterns)


def _atm_row(chain: pd.DataFrame, price: float) -> pd.Series | None:
    if chain is None or chain.empty or "strike" not in chain.columns:
        return None
    idx = (chain["strike"] - price).abs().idxmin()
    return chain.loc[idx]


def _positive(value: object) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(number) or number <= 0:
        return None
    return number


def build_snapshot(
    closes: pd.Series,
    calls: pd.DataFrame | None,
    puts: pd.DataFrame | None,
) -> VolatilitySnapshot:
    """
    Derive a snapshot from daily closes and one expiry's option chain.

    Raises:
        ValueError: If there is no price history
    """
    closes = closes.dropna()
    if closes.empty:
        raise ValueError("No price history")

    price = float(closes.iloc[-1])
    hv = historical_volatility(closes)
    rsi = latest_rsi(closes)

    options_volume = 0
    iv = None
    expected_move = None
    atm_call = _atm_row(calls, price) if calls is not None else None
    atm_put = _atm_row(puts, price) if puts is not None else None

    for chain in (calls, puts):
        if chain is not None and "volume" in chain.columns:
            options_volume += int(chain["volume"].fillna(0).sum())

    ivs = [
        v * 100
        for v in (
            _positive(row.get("impliedVolatility")) for row in (atm_call, atm_put) if row is not None
        )
        if v is not None
    ]
    if ivs:
        iv = round(sum(ivs) / len(ivs), 2)

    if atm_call is not None and atm_put is not None:
        call_price = _positive(atm_call.get("lastPrice"))
        put_price = _positive(atm_put.get("lastPrice"))
        if call_price and put_price:
            expected_move = round(call_price + put_price, 2)

    move_pct = expected_move / price * 100 if expected_move and price else None

    return VolatilitySnapshot(
        current_price=round(price, 2),
        implied_volatility=iv,
        historical_volatility=hv,
        expected_move=expected_move,
        options_volume=options_volume,
        volatility_score=score_volatility(iv, hv, move_pct),
        rsi=rsi,
    )


class YFinanceVolatilityGateway:
    """Volatility gateway backed by yfinance history and option chains."""

    def __init__(
        self,
        cache: VolatilityCache | None = None,
        policy: RetryPolicy | None = None,
        max_concurrency: int = _max_workers,
        history_period: str = "3mo",
    ):
        self.cache = cache
        self.policy = policy or RetryPolicy(
            retries=2, base_delay_ms=1000, is_retryable=is_retryable_yfinance_error
        )
        self.history_period = history_period
        self._semaphore = asyncio.Semaphore(max_concurrency)

    def _fetch_snapshot(self, symbol: str) -> VolatilitySnapshot:
        ticker = yf.Ticker(symbol)
        history = ticker.history(period=self.history_period, interval="1d", auto_adjust=True)
        if history is None or history.empty:
            raise ValueError(f"No data returned for {symbol}")

        calls = puts = None
        expirations = ticker.options
        if expirations:
            chain = ticker.option_chain(expirations[0])
            calls, puts = chain.calls, chain.puts

        return build_snapshot(history["Close"], calls, puts)

    async def _snapshot(self, symbol: str, as_of: date) -> VolatilitySnapshot | None:
        if self.cache is not None:
            cached = self.cache.get(symbol, as_of)
            if cached is not None:
                logger.debug(f"volatility({symbol}): cache hit")
                return cached

        async with self._semaphore:
            try:
                retry_result = await self.policy.run(
                    f"volatility({symbol})", lambda: self._fetch_snapshot(symbol)
                )
            except Exception as e:
                logger.warning(f"volatility({symbol}): unavailable ({e})")
                return None

        snapshot = retry_result.result
        if self.cache is not None:
            self.cache.store(symbol, as_of, snapshot)
        return snapshot

    async def bulk_volatility(self, symbols: list[str]) -> dict[str, VolatilitySnapshot | None]:
        as_of = date.today()
        unique = list(dict.fromkeys(s.upper().strip() for s in symbols))
        snapshots = await asyncio.gather(*(self._snapshot(s, as_of) for s in unique))
        return dict(zip(unique, snapshots))
