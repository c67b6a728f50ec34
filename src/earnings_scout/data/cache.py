"""Disk cache for per-symbol volatility snapshots."""

import os
from datetime import date, datetime, timezone
from typing import Any

import diskcache

from earnings_scout.models import VolatilitySnapshot


class VolatilityCache:
    """
    Caches one volatility snapshot per symbol per trading day.

    A cached ``None`` is not stored: unavailable symbols are retried on the
    next run rather than remembered as absent.
    """

    def __init__(self, cache_dir: str | None = None, ttl: int | None = None):
        if cache_dir is None:
            cache_dir = os.environ.get("CACHE_DIR", ".cache/volatility")
        self.cache: diskcache.Cache = diskcache.Cache(cache_dir)
        self._default_ttl = ttl if ttl is not None else int(os.environ.get("CACHE_TTL", "3600"))

    @staticmethod
    def key(symbol: str, as_of: date) -> str:
        """Canonical cache key."""
        return f"vol://{symbol.upper().strip()}/{as_of.isoformat()}"

    def store(self, symbol: str, as_of: date, snapshot: VolatilitySnapshot) -> str:
        key = self.key(symbol, as_of)
        entry: dict[str, Any] = {
            "snapshot": snapshot.to_dict(),
            "stored_at": datetime.now(timezone.utc).isoformat(),
        }
        self.cache.set(key, entry, expire=self._default_ttl)
        return key

    def get(self, symbol: str, as_of: date) -> VolatilitySnapshot | None:
        entry = self.cache.get(self.key(symbol, as_of))
        if not entry:
            return None
        return VolatilitySnapshot.from_dict(entry["snapshot"])

    def clear(self) -> None:
        """Clear all cached data."""
        self.cache.clear()
