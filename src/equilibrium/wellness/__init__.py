"""Wellness scoring, sleep resolution and decline detection.

The four functions below are the public entry points for callers that
already hold their data.  ``WellnessService`` wires the same components to
stores, sensors and the backend.
"""

from collections.abc import Sequence
from datetime import date

from equilibrium.health.models import (
    DailyMetrics,
    DailyWellnessRecord,
    InteractionEvent,
    SensorSleepSession,
    SleepEstimate,
    SleepWindow,
    TrendSummary,
    WellnessAlert,
)

from .alerts import AlertDispatcher
from .analytics import TrendAndPatternAnalyzer
from .anomaly import AnomalySettings, BaselineAnomalyDetector
from .scoring import CompositeScorer, sentiment_label
from .service import StaticConsent, SubmissionResult, WellnessService
from .sleep import SleepSignalResolver
from .store import (
    AlertStore,
    HistoryStore,
    InMemoryAlertStore,
    InMemoryHistoryStore,
    JsonFileAlertStore,
    JsonFileHistoryStore,
)


def resolve_sleep(
    night: date,
    window: SleepWindow,
    sensor_session: SensorSleepSession | None,
    events: Sequence[InteractionEvent],
) -> SleepEstimate:
    return SleepSignalResolver().resolve(night, window, sensor_session, events)


def score_day(metrics: DailyMetrics) -> int:
    return CompositeScorer().score(metrics)


def evaluate_anomalies(history: Sequence[DailyWellnessRecord]) -> list[WellnessAlert]:
    return BaselineAnomalyDetector().evaluate(history)


def analyze_trend(history: Sequence[DailyWellnessRecord]) -> TrendSummary:
    return TrendAndPatternAnalyzer().analyze(history)


__all__ = [
    "AlertDispatcher",
    "AlertStore",
    "AnomalySettings",
    "BaselineAnomalyDetector",
    "CompositeScorer",
    "HistoryStore",
    "InMemoryAlertStore",
    "InMemoryHistoryStore",
    "JsonFileAlertStore",
    "JsonFileHistoryStore",
    "SleepSignalResolver",
    "StaticConsent",
    "SubmissionResult",
    "TrendAndPatternAnalyzer",
    "WellnessService",
    "analyze_trend",
    "evaluate_anomalies",
    "resolve_sleep",
    "score_day",
    "sentiment_label",
]
