"""Reusable retry policy with exponential backoff and additive jitter."""

import asyncio
import logging
import os
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

# Bounded pool for blocking outbound calls (requests, yfinance)
_max_workers = int(os.environ.get("VOL_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)

T = TypeVar("T")


def never_retry(error: Exception) -> bool:
    return False


@dataclass
class RetryAttempt:
    """Record of a single attempt for provenance tracking."""

    attempt: int
    ok: bool
    error: str | None = None
    backoff_s: float | None = None


@dataclass
class RetryResult:
    """Result of a retried operation with provenance tracking."""

    result: Any
    attempts: int
    total_backoff_seconds: float
    retry_trace: list[RetryAttempt] = field(default_factory=list)

    def to_provenance(self) -> dict[str, Any]:
        """Convert to a provenance dict."""
        prov: dict[str, Any] = {
            "attempts": self.attempts,
            "total_backoff_seconds": self.total_backoff_seconds,
        }
        if len(self.retry_trace) > 1:
            prov["retry_trace"] = [
                {
                    "attempt": t.attempt,
                    "ok": t.ok,
                    **({"error": t.error} if t.error else {}),
                    **({"backoff_s": t.backoff_s} if t.backoff_s else {}),
                }
                for t in self.retry_trace[-3:]
            ]
        return prov


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to retry an outbound call, and how long to wait between tries.

    Attempts run ``0..retries`` inclusive. The delay before retry ``n`` is
    ``base_delay_ms * 2**n`` plus uniform jitter in ``[0, jitter_ms]``.
    Errors for which ``is_retryable`` returns False propagate immediately.
    When the budget is spent the last error propagates unchanged.
    """

    retries: int = 3
    base_delay_ms: float = 400
    jitter_ms: float = 100
    is_retryable: Callable[[Exception], bool] = never_retry

    def backoff_ms(self, attempt: int) -> float:
        """Delay in milliseconds before the retry that follows ``attempt``."""
        return self.base_delay_ms * (2**attempt) + random.uniform(0, self.jitter_ms)

    def with_budget(self, retries: int | None = None, base_delay_ms: float | None = None) -> "RetryPolicy":
        """Copy of this policy with a different retry count or base delay."""
        return RetryPolicy(
            retries=self.retries if retries is None else retries,
            base_delay_ms=self.base_delay_ms if base_delay_ms is None else base_delay_ms,
            jitter_ms=self.jitter_ms,
            is_retryable=self.is_retryable,
        )

    async def run(self, operation_name: str, sync_func: Callable[[], T]) -> RetryResult:
        """
        Execute a blocking function in the worker pool, retrying per this policy.

        Args:
            operation_name: Name for logging (e.g., "finnhub(/quote)")
            sync_func: Synchronous function to execute

        Returns:
            RetryResult with result and provenance info

        Raises:
            Exception: The first non-retryable error, or the last error once
                retries are exhausted
        """
        total_backoff = 0.0
        retry_trace: list[RetryAttempt] = []
        loop = asyncio.get_running_loop()

        for attempt in range(self.retries + 1):
            try:
                result = await loop.run_in_executor(_executor, sync_func)
                retry_trace.append(RetryAttempt(attempt=attempt + 1, ok=True))
                return RetryResult(
                    result=result,
                    attempts=attempt + 1,
                    total_backoff_seconds=round(total_backoff, 2),
                    retry_trace=retry_trace,
                )
            except Exception as e:
                retry_trace.append(RetryAttempt(attempt=attempt + 1, ok=False, error=type(e).__name__))

                if not self.is_retryable(e):
                    raise

                if attempt >= self.retries:
                    logger.warning(
                        f"{operation_name}: Failed after {attempt + 1} attempts. Last error: {e}"
                    )
                    raise

                delay = self.backoff_ms(attempt) / 1000
                total_backoff += delay
                retry_trace[-1].backoff_s = round(delay, 2)
                logger.info(
                    f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                    f"Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)

        # Unreachable: the loop either returns or raises
        raise RuntimeError(f"{operation_name}: retry loop exited without a result")


def shutdown_executor() -> None:
    """Cleanup on server shutdown."""
    _executor.shutdown(wait=False, cancel_futures=True)
