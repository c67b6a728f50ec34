"""Technical indicator calculations used by the volatility gateway."""

import math

import numpy as np
import pandas as pd

TRADING_DAYS = 252


def calculate_rsi(prices: pd.Series, period: int = 14) -> pd.Series:
    """
    Calculate Relative Strength Index.

    Uses Wilder's smoothing method (exponential moving average).

    Args:
        prices: Price series (typically close prices)
        period: RSI period (default: 14)

    Returns:
        RSI series (0-100 scale)
    """
    delta = prices.diff()

    gain = delta.where(delta > 0, 0.0)
    loss = (-delta).where(delta < 0, 0.0)

    avg_gain = gain.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
    avg_loss = loss.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()

    rs = avg_gain / avg_loss
    rsi = 100 - (100 / (1 + rs))

    # avg_loss == 0 means only gains
    return rsi.replace([np.inf, -np.inf], 100)


def latest_rsi(prices: pd.Series, period: int = 14) -> float | None:
    """Most recent RSI value, or None if there is not enough history."""
    rsi = calculate_rsi(prices, period).dropna()
    if rsi.empty:
        return None
    return round(float(rsi.iloc[-1]), 2)


def historical_volatility(prices: pd.Series, window: int = 20) -> float | None:
    """
    Annualised close-to-close volatility over the trailing window, in percent.

    Args:
        prices: Close price series, oldest first
        window: Number of daily log returns to use

    Returns:
        Volatility as a percentage (e.g., 32.5), or None if insufficient data
    """
    log_returns = np.log(prices / prices.shift(1)).dropna()
    if len(log_returns) < window:
        return None

    std = log_returns.iloc[-window:].std()
    if pd.isna(std):
        return None
    return round(float(std) * math.sqrt(TRADING_DAYS) * 100, 2)
