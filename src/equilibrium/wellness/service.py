"""
Wellness service — wires the algorithms to their collaborators.

One ``submit_metrics`` call is the whole pipeline:

    DailyMetrics → score → upsert by date → read history
        → evaluate anomalies → dispatch alerts → sync aggregate

There is no scheduler; the embedding application calls this whenever the
user (or an aggregation job) records a day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from equilibrium.core.config import Config
from equilibrium.core.events import Event, EventBus
from equilibrium.health.collector import EventSource, SensorProvider
from equilibrium.health.models import (
    AlertType,
    ConsentFlags,
    DailyMetrics,
    DailyWellnessRecord,
    Insight,
    SleepEstimate,
    SleepWindow,
    WellnessAlert,
    WellnessReport,
)
from equilibrium.integrations.backend import BackendClient

from . import analytics
from .alerts import AlertDispatcher
from .anomaly import AnomalySettings, BaselineAnomalyDetector
from .scoring import CompositeScorer, sentiment_label
from .sleep import SleepSignalResolver
from .store import AlertStore, HistoryStore, JsonFileAlertStore, JsonFileHistoryStore


@runtime_checkable
class ConsentProvider(Protocol):
    def get_consent_flags(self) -> ConsentFlags: ...


class StaticConsent:
    """Consent flags fixed at construction (config-driven or tests)."""

    def __init__(self, usage_tracking: bool = False):
        self._flags = ConsentFlags(usage_tracking=usage_tracking)

    def get_consent_flags(self) -> ConsentFlags:
        return self._flags


@dataclass
class SubmissionResult:
    wellness_score: int
    has_usage_data: bool
    alerts: list[WellnessAlert] = field(default_factory=list)


class WellnessService:
    """Scoring, anomaly detection and reporting for one user.

    Args:
        history_store: Where scored days live.
        alert_store: Local alert log.
        consent: Source of the user's consent flags.
        backend: Remote API for alert forwarding and aggregate sync.  None
            disables both.
        sensor_provider: Optional sleep sensor.
        event_source: Optional device-interaction source for inactivity
            inference.
        sleep_window: Initial sleep window; defaults to 22:00–08:00.
        anomaly_settings: Detector windows and threshold.
        retention_days: How many days of history the detector reads.
        events: Event bus for ``wellness.*`` notifications.
    """

    def __init__(
        self,
        history_store: HistoryStore,
        alert_store: AlertStore,
        consent: ConsentProvider | None = None,
        backend: BackendClient | None = None,
        sensor_provider: SensorProvider | None = None,
        event_source: EventSource | None = None,
        sleep_window: SleepWindow | None = None,
        anomaly_settings: AnomalySettings | None = None,
        retention_days: int = 90,
        events: EventBus | None = None,
    ):
        self.history_store = history_store
        self.alert_store = alert_store
        self.consent = consent or StaticConsent()
        self.backend = backend
        self.events = events or EventBus()
        self.retention_days = retention_days
        self._sleep_window = sleep_window or SleepWindow()

        self.resolver = SleepSignalResolver(sensor_provider=sensor_provider, event_source=event_source)
        self.scorer = CompositeScorer()
        self.detector = BaselineAnomalyDetector(settings=anomaly_settings)
        self.analyzer = analytics.TrendAndPatternAnalyzer()
        self.dispatcher = AlertDispatcher(alert_store, notifier=backend)

    @classmethod
    def from_config(
        cls,
        config: Config,
        event_source: EventSource | None = None,
        events: EventBus | None = None,
    ) -> WellnessService:
        """Build a service with JSON-file stores and settings from *config*."""
        settings = config.validated()
        config.ensure_directories()

        backend = None
        if settings.backend.enabled:
            backend = BackendClient(
                api_base=settings.backend.api_base,
                token=settings.backend.token,
                timeout=settings.backend.timeout,
            )

        sensor_provider = None
        if settings.sleep.sensor_provider:
            from equilibrium.health.registry import default_registry

            sensor_config = config.get("sleep.sensor_config", {}) or {}
            sensor_provider = default_registry().create(settings.sleep.sensor_provider, **sensor_config)

        return cls(
            history_store=JsonFileHistoryStore(
                str(settings.paths.history_file), retention_days=settings.history.retention_days
            ),
            alert_store=JsonFileAlertStore(str(settings.paths.alerts_file)),
            consent=StaticConsent(usage_tracking=settings.consent.usage_tracking),
            backend=backend,
            sensor_provider=sensor_provider,
            event_source=event_source,
            sleep_window=SleepWindow.parse(settings.sleep.window_start, settings.sleep.window_end),
            anomaly_settings=AnomalySettings(**settings.anomaly.model_dump()),
            retention_days=settings.history.retention_days,
            events=events,
        )

    # ── Sleep ────────────────────────────────────────────────────────

    @property
    def sleep_window(self) -> SleepWindow:
        return self._sleep_window

    def set_sleep_window(self, start: str, end: str) -> SleepWindow:
        """Replace the user's sleep window ("HH:MM" strings)."""
        self._sleep_window = SleepWindow.parse(start, end)
        logger.info(f"Sleep window set to {self._sleep_window}")
        return self._sleep_window

    def resolve_sleep(self, night: date) -> SleepEstimate:
        estimate = self.resolver.resolve_night(night, self._sleep_window)
        self.events.emit(Event.sleep_resolved(night, estimate))
        return estimate

    # ── Scoring pipeline ─────────────────────────────────────────────

    def submit_metrics(self, metrics: DailyMetrics) -> SubmissionResult:
        score = self.scorer.score(metrics)
        record = DailyWellnessRecord.from_metrics(metrics, score)
        self.history_store.upsert(record)
        self.events.emit(Event.scored(record))

        consent = self.consent.get_consent_flags()
        alerts = self.detector.evaluate(self.history_store.get_history(self.retention_days))
        for alert in alerts:
            self.dispatcher.dispatch(alert, consent)
            self.events.emit(Event.alert(alert))

        self.sync_aggregate(record, consent)
        return SubmissionResult(wellness_score=score, has_usage_data=record.has_usage_data, alerts=alerts)

    def sync_aggregate(self, record: DailyWellnessRecord, consent: ConsentFlags | None = None) -> bool:
        """Send the day's de-identified aggregate to the backend, if consented."""
        consent = consent or self.consent.get_consent_flags()
        if self.backend is None or not consent.usage_tracking:
            return False

        aggregate = self.aggregate_payload(record)
        try:
            self.backend.log_aggregate(aggregate)
        except Exception as e:
            logger.error(f"Failed to sync aggregate for {record.date}: {e}")
            return False
        self.events.emit(Event.aggregate_synced(aggregate))
        return True

    @staticmethod
    def aggregate_payload(record: DailyWellnessRecord) -> dict[str, Any]:
        return {
            "date": record.date.isoformat(),
            "avg_sleep_hours": record.sleep_hours if record.has_sleep_data else None,
            "night_screen_minutes": record.screen_time_minutes if record.has_usage_data else None,
            "sentiment_label": sentiment_label(record.mood_score),
            "wellness_score": record.wellness_score,
            "has_sleep_data": record.has_sleep_data,
            "has_usage_data": record.has_usage_data,
        }

    # ── Reads ────────────────────────────────────────────────────────

    def get_history(self, days: int = 30) -> list[DailyWellnessRecord]:
        return self.history_store.get_history(days)

    def get_alerts(
        self, alert_type: AlertType | None = None, unacknowledged_only: bool = False
    ) -> list[WellnessAlert]:
        return self.alert_store.list_alerts(alert_type=alert_type, unacknowledged_only=unacknowledged_only)

    def acknowledge_alert(self, alert_id: str) -> bool:
        acknowledged = self.alert_store.acknowledge(alert_id)
        if acknowledged:
            self.events.emit(Event.acknowledged(alert_id))
        else:
            logger.warning(f"No alert with id {alert_id}")
        return acknowledged

    def analyze(self, days: int = 30) -> WellnessReport:
        usage_enabled = self.consent.get_consent_flags().usage_tracking
        return analytics.build_report(self.get_history(days), usage_enabled, analyzer=self.analyzer)

    def get_insights(self, days: int = 7) -> list[Insight]:
        return analytics.insights(self.get_history(days))
