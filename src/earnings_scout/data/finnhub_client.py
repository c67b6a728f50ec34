"""Async Finnhub REST client with exponential-backoff retry.

Free tier: 60 API calls/minute. 429 and 5xx responses are retried, as are
network-level failures; any other non-2xx status fails immediately.
"""

import asyncio
import logging
import os
from datetime import date
from typing import Any

import requests

from earnings_scout.data.retry import RetryPolicy, RetryResult
from earnings_scout.models import CalendarEvent

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.environ.get("FINNHUB_BASE_URL", "https://finnhub.io/api/v1")
_max_retries = int(os.environ.get("FINNHUB_MAX_RETRIES", "3"))
_base_delay_ms = float(os.environ.get("FINNHUB_BASE_DELAY_MS", "400"))
_request_delay_ms = float(os.environ.get("FINNHUB_REQUEST_DELAY_MS", "0"))
_timeout = float(os.environ.get("FINNHUB_TIMEOUT", "10"))


class FinnhubAPIError(Exception):
    """Raised for a non-2xx Finnhub response."""

    def __init__(self, status_code: int, status_text: str):
        super().__init__(f"Finnhub API error: {status_code} {status_text}")
        self.status_code = status_code
        self.status_text = status_text


def is_retryable_error(error: Exception) -> bool:
    """
    Check if a Finnhub failure is transient.

    Rate limits (429), server errors (5xx) and network-level failures are
    retryable. Any other HTTP status is not.
    """
    if isinstance(error, FinnhubAPIError):
        return error.status_code == 429 or 500 <= error.status_code < 600
    # Connection resets, DNS failures, timeouts, truncated/invalid JSON bodies
    return isinstance(error, (requests.RequestException, ValueError))


def default_policy() -> RetryPolicy:
    return RetryPolicy(
        retries=_max_retries,
        base_delay_ms=_base_delay_ms,
        is_retryable=is_retryable_error,
    )


class FinnhubClient:
    """Client for the Finnhub API with retry and caller-side rate shaping."""

    def __init__(
        self,
        api_key: str | None = None,
        delay_ms: float = _request_delay_ms,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
        policy: RetryPolicy | None = None,
        timeout: float = _timeout,
    ):
        self.api_key = api_key or os.getenv("FINNHUB_API_KEY", "")
        if not self.api_key:
            raise ValueError("Finnhub API key required (set FINNHUB_API_KEY env var)")

        self.base_url = base_url.rstrip("/")
        self.delay_ms = delay_ms
        self.session = session or requests.Session()
        self.policy = policy or default_policy()
        self.timeout = timeout

    def _get(self, endpoint: str, params: dict[str, Any]) -> Any:
        url = f"{self.base_url}{endpoint}"
        resp = self.session.get(url, params={**params, "token": self.api_key}, timeout=self.timeout)
        if not 200 <= resp.status_code < 300:
            raise FinnhubAPIError(resp.status_code, resp.reason or "")
        return resp.json()

    async def request_with_provenance(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        *,
        retries: int | None = None,
        base_delay_ms: float | None = None,
    ) -> RetryResult:
        """
        GET an endpoint and return the parsed body with retry provenance.

        Args:
            endpoint: API path (e.g., "/calendar/earnings")
            params: Query parameters; the token is added here
            retries: Override the policy's retry count
            base_delay_ms: Override the policy's base backoff delay

        Raises:
            FinnhubAPIError: Non-retryable status, or retryable status on the last attempt
            requests.RequestException: Network failure on the last attempt
        """
        params = dict(params or {})
        policy = self.policy.with_budget(retries=retries, base_delay_ms=base_delay_ms)

        logger.debug(f"finnhub request endpoint={endpoint} params={params}")
        result = await policy.run(f"finnhub({endpoint})", lambda: self._get(endpoint, params))

        if self.delay_ms > 0:
            await asyncio.sleep(self.delay_ms / 1000)

        return result

    async def request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        *,
        retries: int | None = None,
        base_delay_ms: float | None = None,
    ) -> Any:
        """GET an endpoint and return the parsed JSON body."""
        result = await self.request_with_provenance(
            endpoint, params, retries=retries, base_delay_ms=base_delay_ms
        )
        return result.result

    async def get_earnings_calendar(self, from_date: date, to_date: date) -> list[CalendarEvent]:
        """
        Fetch earnings events between two dates (inclusive).

        Entries without a symbol or a parseable date are skipped.
        """
        events, _ = await self.get_earnings_calendar_with_provenance(from_date, to_date)
        return events

    async def get_earnings_calendar_with_provenance(
        self, from_date: date, to_date: date
    ) -> tuple[list[CalendarEvent], dict[str, Any]]:
        """
        Same as get_earnings_calendar but also returns a provenance dict
        for the data_provenance field.

        Raises:
            ValueError: If the body is not a calendar object
        """
        endpoint = "/calendar/earnings"
        result = await self.request_with_provenance(
            endpoint,
            {"from": from_date.isoformat(), "to": to_date.isoformat()},
        )
        data = result.result if result.result is not None else {}
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected earnings calendar response: {type(data).__name__}")
        raw_events = data.get("earningsCalendar") or []
        if not isinstance(raw_events, list):
            raise ValueError(f"Unexpected earningsCalendar value: {type(raw_events).__name__}")

        events: list[CalendarEvent] = []
        for raw in raw_events:
            if not isinstance(raw, dict):
                logger.debug(f"Skipping calendar entry: {raw!r}")
                continue
            try:
                events.append(CalendarEvent.from_api(raw))
            except ValueError as e:
                logger.debug(f"Skipping calendar entry: {e}")

        provenance = {"source": "finnhub", "endpoint": endpoint, **result.to_provenance()}
        return events, provenance

    async def get_quote(self, symbol: str, **kwargs: Any) -> dict[str, Any]:
        return await self.request("/quote", {"symbol": symbol.upper().strip()}, **kwargs)

    async def get_company_profile(self, symbol: str) -> dict[str, Any]:
        return await self.request("/stock/profile2", {"symbol": symbol.upper().strip()})

    async def get_basic_financials(self, symbol: str) -> dict[str, Any]:
        return await self.request(
            "/stock/metric", {"symbol": symbol.upper().strip(), "metric": "all"}
        )
