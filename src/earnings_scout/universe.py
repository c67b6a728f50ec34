"""Allowed stock universe.

The universe is supplied externally: either a file named by
``STOCK_UNIVERSE_FILE`` (one symbol per line, ``#`` comments allowed) or the
built-in list of large, liquid, optionable US names.
"""

import os
from pathlib import Path

DEFAULT_UNIVERSE: frozenset[str] = frozenset(
    {
        "AAPL", "ABBV", "ABNB", "ABT", "ADBE", "ADI", "ADP", "AMAT", "AMD", "AMGN",
        "AMZN", "ANET", "ASML", "AVGO", "AXP", "BA", "BAC", "BKNG", "BLK", "BMY",
        "C", "CAT", "CMCSA", "COST", "CRM", "CRWD", "CSCO", "CVS", "CVX", "DDOG",
        "DE", "DIS", "F", "FDX", "GE", "GILD", "GM", "GOOG", "GOOGL", "GS",
        "HD", "HON", "IBM", "INTC", "INTU", "ISRG", "JNJ", "JPM", "KO", "LIN",
        "LLY", "LMT", "LOW", "LRCX", "MA", "MCD", "MDT", "MELI", "META", "MMM",
        "MRK", "MRVL", "MS", "MSFT", "MU", "NFLX", "NKE", "NOW", "NVDA", "ORCL",
        "PANW", "PEP", "PFE", "PG", "PLTR", "PYPL", "QCOM", "REGN", "RTX", "SBUX",
        "SCHW", "SHOP", "SNOW", "SNPS", "T", "TGT", "TMO", "TSLA", "TXN", "UBER",
        "UNH", "UNP", "UPS", "V", "VZ", "WFC", "WMT", "XOM", "ZS",
    }
)


def load_universe(path: str | Path | None = None) -> frozenset[str]:
    """
    Load the allowed symbol set.

    Args:
        path: Symbol file; defaults to ``STOCK_UNIVERSE_FILE`` when set

    Returns:
        Uppercased symbols

    Raises:
        FileNotFoundError: If an explicit or configured file does not exist
    """
    if path is None:
        path = os.environ.get("STOCK_UNIVERSE_FILE") or None
    if path is None:
        return DEFAULT_UNIVERSE

    symbols = set()
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        symbol = line.split("#", 1)[0].strip().upper()
        if symbol:
            symbols.add(symbol)
    return frozenset(symbols)
