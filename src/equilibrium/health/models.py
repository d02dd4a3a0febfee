"""
Wellness data models.

Plain dataclasses shared by the sleep resolver, scorer, detector, analyzer
and the stores.  Defaults for missing daily metrics are applied here, at
construction, so the algorithms never see ``None``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from enum import StrEnum
from typing import Any

from equilibrium.core.exceptions import ConfigurationError, DataProcessingError

# ── Defaults ─────────────────────────────────────────────────────────

DEFAULT_SLEEP_HOURS = 7.0
DEFAULT_MOOD_SCORE = 3.0
DEFAULT_SCREEN_TIME_MINUTES = 240.0
DEFAULT_ACTIVITY_MINUTES = 0.0

DEFAULT_SLEEP_START = time(22, 0)
DEFAULT_SLEEP_END = time(8, 0)


# ── Enumerations ─────────────────────────────────────────────────────


class SleepSource(StrEnum):
    """Where a night's sleep estimate came from."""

    SENSOR = "sensor"
    INACTIVITY = "inactivity"
    NONE = "none"


class AlertType(StrEnum):
    WELLNESS_DECLINE = "wellness_decline"
    PROLONGED_DECLINE = "prolonged_decline"


class AlertSeverity(StrEnum):
    MEDIUM = "medium"
    HIGH = "high"


class Trend(StrEnum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class PatternType(StrEnum):
    WEEKLY = "weekly"
    USAGE = "usage"


class InsightType(StrEnum):
    POSITIVE = "positive"
    CONCERN = "concern"
    WARNING = "warning"
    WELLNESS_LOW = "wellness_low"
    WELLNESS_IMPROVING = "wellness_improving"


# ── Sleep inputs / outputs ───────────────────────────────────────────


def parse_clock_time(value: str | time) -> time:
    """Parse an ``HH:MM`` string into a :class:`datetime.time`."""
    if isinstance(value, time):
        return value
    try:
        hour_str, minute_str = str(value).strip().split(":")
        return time(int(hour_str), int(minute_str))
    except ValueError as e:
        raise ConfigurationError(f"Invalid clock time {value!r}, expected HH:MM") from e


@dataclass(frozen=True)
class InteractionEvent:
    """A single device-interaction instant (unlock, app foregrounded, …)."""

    timestamp: datetime


@dataclass(frozen=True)
class SleepWindow:
    """Nightly clock-time bounds within which inactivity counts as sleep.

    ``end`` falls on the following calendar day whenever ``end <= start``.
    """

    start: time = DEFAULT_SLEEP_START
    end: time = DEFAULT_SLEEP_END

    @classmethod
    def parse(cls, start: str | time, end: str | time) -> "SleepWindow":
        return cls(start=parse_clock_time(start), end=parse_clock_time(end))

    @property
    def overnight(self) -> bool:
        return self.end <= self.start

    def bounds(self, night: date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
        """Return ``(window_start, window_end)`` for the window opening on *night*."""
        window_start = datetime.combine(night, self.start, tzinfo=tz)
        window_end = datetime.combine(night, self.end, tzinfo=tz)
        if self.overnight:
            window_end += timedelta(days=1)
        return window_start, window_end

    @property
    def duration_minutes(self) -> float:
        window_start, window_end = self.bounds(date(2000, 1, 1))
        return (window_end - window_start).total_seconds() / 60.0

    def __str__(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"


@dataclass
class SensorSleepSession:
    """A sleep session reported by a fitness / health sensor."""

    duration_minutes: float
    start_time: datetime | None = None
    end_time: datetime | None = None
    confidence: float | None = None


@dataclass(frozen=True)
class SleepEstimate:
    """Resolved sleep duration for one night, with a 0–1 confidence."""

    source: SleepSource
    minutes: int
    confidence: float

    @property
    def hours(self) -> float:
        return round(self.minutes / 60.0, 2)

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source.value, "minutes": self.minutes, "confidence": self.confidence}


# ── Daily metrics and history ────────────────────────────────────────


@dataclass
class DailyMetrics:
    """Scoring input for one calendar day.

    Any metric left as ``None`` is replaced by its documented default.
    ``has_sleep_data`` / ``has_usage_data`` remember whether the caller
    actually supplied sleep hours / screen time.
    """

    date: date
    sleep_hours: float | None = None
    mood_score: float | None = None
    screen_time_minutes: float | None = None
    activity_minutes: float | None = None
    has_sleep_data: bool = field(init=False, default=False)
    has_usage_data: bool = field(init=False, default=False)

    def __post_init__(self):
        self.has_sleep_data = self.sleep_hours is not None
        self.has_usage_data = self.screen_time_minutes is not None
        if self.sleep_hours is None:
            self.sleep_hours = DEFAULT_SLEEP_HOURS
        if self.mood_score is None:
            self.mood_score = DEFAULT_MOOD_SCORE
        if self.screen_time_minutes is None:
            self.screen_time_minutes = DEFAULT_SCREEN_TIME_MINUTES
        if self.activity_minutes is None:
            self.activity_minutes = DEFAULT_ACTIVITY_MINUTES


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass
class DailyWellnessRecord:
    """A scored day.  History holds at most one record per date."""

    date: date
    wellness_score: int
    sleep_hours: float = DEFAULT_SLEEP_HOURS
    mood_score: float = DEFAULT_MOOD_SCORE
    screen_time_minutes: float = DEFAULT_SCREEN_TIME_MINUTES
    activity_minutes: float = DEFAULT_ACTIVITY_MINUTES
    has_sleep_data: bool = False
    has_usage_data: bool = False
    recorded_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_metrics(
        cls, metrics: DailyMetrics, wellness_score: int, recorded_at: datetime | None = None
    ) -> "DailyWellnessRecord":
        return cls(
            date=metrics.date,
            wellness_score=wellness_score,
            sleep_hours=metrics.sleep_hours,
            mood_score=metrics.mood_score,
            screen_time_minutes=metrics.screen_time_minutes,
            activity_minutes=metrics.activity_minutes,
            has_sleep_data=metrics.has_sleep_data,
            has_usage_data=metrics.has_usage_data,
            recorded_at=recorded_at or datetime.now(),
        )

    @property
    def screen_time_hours(self) -> float:
        return self.screen_time_minutes / 60.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "wellness_score": self.wellness_score,
            "sleep_hours": self.sleep_hours,
            "mood_score": self.mood_score,
            "screen_time_minutes": self.screen_time_minutes,
            "activity_minutes": self.activity_minutes,
            "has_sleep_data": self.has_sleep_data,
            "has_usage_data": self.has_usage_data,
            "recorded_at": self.recorded_at.isoformat(timespec="seconds"),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyWellnessRecord":
        try:
            record_date = _parse_date(data["date"])
            score = int(data["wellness_score"])
        except (KeyError, TypeError, ValueError) as e:
            raise DataProcessingError(f"Malformed wellness record {data!r}: {e}") from e

        recorded_at = data.get("recorded_at")
        return cls(
            date=record_date,
            wellness_score=score,
            sleep_hours=float(data.get("sleep_hours", DEFAULT_SLEEP_HOURS)),
            mood_score=float(data.get("mood_score", DEFAULT_MOOD_SCORE)),
            screen_time_minutes=float(data.get("screen_time_minutes", DEFAULT_SCREEN_TIME_MINUTES)),
            activity_minutes=float(data.get("activity_minutes", DEFAULT_ACTIVITY_MINUTES)),
            has_sleep_data=bool(data.get("has_sleep_data", False)),
            has_usage_data=bool(data.get("has_usage_data", False)),
            recorded_at=datetime.fromisoformat(recorded_at) if recorded_at else datetime.now(),
        )


def sort_newest_first(records: list[DailyWellnessRecord]) -> list[DailyWellnessRecord]:
    return sorted(records, key=lambda r: r.date, reverse=True)


# ── Alerts ───────────────────────────────────────────────────────────


@dataclass
class WellnessAlert:
    """A decline signal raised by the anomaly detector.

    Only ``acknowledged`` ever changes after creation.
    """

    id: str
    type: AlertType
    severity: AlertSeverity
    baseline_score: int
    current_score: int
    percentage_change: int
    timestamp: datetime
    acknowledged: bool = False

    def payload(self) -> dict[str, Any]:
        """The ``data`` body forwarded to the backend."""
        return {
            "type": self.type.value,
            "baseline_score": self.baseline_score,
            "current_score": self.current_score,
            "percentage_change": self.percentage_change,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "baseline_score": self.baseline_score,
            "current_score": self.current_score,
            "percentage_change": self.percentage_change,
            "timestamp": self.timestamp.isoformat(),
            "acknowledged": self.acknowledged,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WellnessAlert":
        try:
            return cls(
                id=str(data["id"]),
                type=AlertType(data["type"]),
                severity=AlertSeverity(data["severity"]),
                baseline_score=int(data["baseline_score"]),
                current_score=int(data["current_score"]),
                percentage_change=int(data["percentage_change"]),
                timestamp=datetime.fromisoformat(data["timestamp"]),
                acknowledged=bool(data.get("acknowledged", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataProcessingError(f"Malformed alert {data!r}: {e}") from e


@dataclass(frozen=True)
class ConsentFlags:
    """User consent switches read by the core (never written)."""

    usage_tracking: bool = False


# ── Analytics outputs ────────────────────────────────────────────────


@dataclass
class Pattern:
    """A human-facing pattern descriptor (weekly rhythm, usage correlation)."""

    type: PatternType
    title: str
    message: str
    best_day: str | None = None
    worst_day: str | None = None
    correlation: str | None = None


@dataclass
class TrendSummary:
    wellness_trend: Trend = Trend.STABLE
    mood_trend: Trend = Trend.STABLE
    sleep_trend: Trend = Trend.STABLE
    trend_strength: int = 0
    patterns: list[Pattern] = field(default_factory=list)


@dataclass
class OverviewStats:
    avg_wellness_score: int = 0
    avg_mood_score: float = 0.0
    avg_sleep_hours: float = 0.0
    total_days_tracked: int = 0
    current_streak: int = 0


@dataclass
class Insight:
    type: InsightType
    title: str
    message: str


@dataclass
class DataCompleteness:
    """Percentages (0–100) of expected days that have data."""

    overall: int = 0
    wellness: int = 0
    usage: int = 0


@dataclass
class WellnessReport:
    """Everything the reports screen shows for a period."""

    trends: TrendSummary
    overview: OverviewStats
    insights: list[Insight] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    completeness: DataCompleteness = field(default_factory=DataCompleteness)
