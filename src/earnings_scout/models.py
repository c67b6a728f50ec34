"""Data models for calendar events, opportunities, market context and analyses."""

from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from typing import Any

# Earnings session codes as reported by the calendar feed
HOUR_AFTER_CLOSE = "amc"
HOUR_BEFORE_OPEN = "bmo"

# Market regimes
REGIME_LOW = "low-volatility"
REGIME_NORMAL = "normal"
REGIME_ELEVATED = "elevated-volatility"
REGIME_HIGH = "high-volatility"
REGIME_UNKNOWN = "unknown"

# Canonical recommendations, in the order the model is asked to choose from
STRONGLY_CONSIDER = "STRONGLY CONSIDER"
NEUTRAL = "NEUTRAL"
STAY_AWAY = "STAY AWAY"
RECOMMENDATIONS = (STRONGLY_CONSIDER, NEUTRAL, STAY_AWAY)


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_int(value: Any) -> int | None:
    number = _optional_float(value)
    return int(number) if number is not None else None


@dataclass(frozen=True)
class CalendarEvent:
    """One upstream earnings-calendar record. Immutable once fetched."""

    symbol: str
    date: date
    revenue_estimate: float | None = None
    hour: str | None = None
    eps_estimate: float | None = None
    quarter: int | None = None
    year: int | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "CalendarEvent":
        """
        Build an event from a Finnhub ``earningsCalendar`` entry.

        Raises:
            ValueError: If the entry has no symbol or no parseable date
        """
        symbol = str(raw.get("symbol") or "").upper().strip()
        if not symbol:
            raise ValueError("Calendar entry has no symbol")
        try:
            event_date = date.fromisoformat(str(raw.get("date"))[:10])
        except ValueError as e:
            raise ValueError(f"Calendar entry for {symbol} has invalid date: {raw.get('date')!r}") from e

        hour = raw.get("hour")
        hour = str(hour).lower().strip() if hour else None

        return cls(
            symbol=symbol,
            date=event_date,
            revenue_estimate=_optional_float(raw.get("revenueEstimate")),
            hour=hour or None,
            eps_estimate=_optional_float(raw.get("epsEstimate")),
            quarter=_optional_int(raw.get("quarter")),
            year=_optional_int(raw.get("year")),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


@dataclass(frozen=True)
class VolatilitySnapshot:
    """Per-symbol volatility and technical data returned by a volatility gateway."""

    current_price: float | None = None
    implied_volatility: float | None = None  # annualised, percent
    historical_volatility: float | None = None  # annualised, percent
    expected_move: float | None = None  # dollars
    options_volume: int = 0
    volatility_score: float | None = None
    rsi: float | None = None

    @property
    def expected_move_pct(self) -> float | None:
        """Expected move as a percentage of the current price."""
        if not self.expected_move or not self.current_price:
            return None
        return self.expected_move / self.current_price * 100

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VolatilitySnapshot":
        return cls(
            current_price=_optional_float(data.get("current_price")),
            implied_volatility=_optional_float(data.get("implied_volatility")),
            historical_volatility=_optional_float(data.get("historical_volatility")),
            expected_move=_optional_float(data.get("expected_move")),
            options_volume=_optional_int(data.get("options_volume")) or 0,
            volatility_score=_optional_float(data.get("volatility_score")),
            rsi=_optional_float(data.get("rsi")),
        )


@dataclass(frozen=True)
class Opportunity:
    """
    A calendar event plus the fields each pipeline stage derives for it.

    Stages never overwrite a field: ``enriched`` and ``scored`` only fill
    fields that are still unset and return a new instance.
    """

    event: CalendarEvent
    days_to_earnings: int
    prescreen_score: int
    volatility_data: VolatilitySnapshot | None = None
    volatility_score: float | None = None
    quality_score: int | None = None

    @property
    def symbol(self) -> str:
        return self.event.symbol

    @property
    def date(self) -> date:
        return self.event.date

    def enriched(
        self,
        volatility_data: VolatilitySnapshot | None,
        volatility_score: float,
    ) -> "Opportunity":
        if self.volatility_data is not None or self.volatility_score is not None:
            raise ValueError(f"{self.symbol}: volatility data already attached")
        return replace(self, volatility_data=volatility_data, volatility_score=volatility_score)

    def scored(self, quality_score: int) -> "Opportunity":
        if self.quality_score is not None:
            raise ValueError(f"{self.symbol}: quality score already computed")
        return replace(self, quality_score=quality_score)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.event.to_dict(),
            "days_to_earnings": self.days_to_earnings,
            "prescreen_score": self.prescreen_score,
            "volatility_data": self.volatility_data.to_dict() if self.volatility_data else None,
            "volatility_score": self.volatility_score,
            "quality_score": self.quality_score,
        }


@dataclass(frozen=True)
class MarketContext:
    """Market-wide volatility context for one pipeline run."""

    vix: float | None
    market_regime: str
    last_updated: datetime

    @classmethod
    def unavailable(cls, now: datetime) -> "MarketContext":
        return cls(vix=None, market_regime=REGIME_UNKNOWN, last_updated=now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "vix": self.vix,
            "market_regime": self.market_regime,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class Strategy:
    """A suggested options strategy."""

    name: str
    details: str = ""


@dataclass(frozen=True)
class Analysis:
    """Typed fields recovered from one subject's slice of model output."""

    symbol: str
    sentiment_score: int | None = None
    recommendation: str = NEUTRAL
    strategies: tuple[Strategy, ...] = ()
    reasoning: str = ""
    volatility_assessment: str = ""
    risk_factors: str = ""
    position_sizing: str = ""
    raw_analysis: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["strategies"] = [asdict(s) for s in self.strategies]
        return data


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of quality-gating an analysis."""

    is_valid: bool
    issues: tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalysisRecord:
    """An analysis paired with the opportunity it describes."""

    opportunity: Opportunity
    analysis: Analysis
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "opportunity": self.opportunity.to_dict(),
            "analysis": self.analysis.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class AnalysisOutcome:
    """Per-subject result: either an analysis or the reason there is none."""

    symbol: str
    analysis: Analysis | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.analysis is not None


@dataclass(frozen=True)
class ScanSummary:
    """Stage counts for one pipeline run, for logging and tool output."""

    calendar_events: int = 0
    in_universe: int = 0
    in_window: int = 0
    prescreened: tuple[str, ...] = ()
    enriched: int = 0
    qualified: int = 0
    calendar_provenance: dict[str, Any] = field(default_factory=dict, compare=False)

    def funnel(self) -> dict[str, Any]:
        """Stage counts only."""
        data = asdict(self)
        data.pop("calendar_provenance")
        return data
