"""Tests for wellness.service — the end-to-end scoring pipeline."""

import os
from datetime import date, datetime, timedelta

import pytest

from equilibrium.core.config import Config
from equilibrium.core.events import (
    AGGREGATE_SYNCED,
    ALERT_ACKNOWLEDGED,
    SLEEP_RESOLVED,
    WELLNESS_ALERT,
    WELLNESS_SCORED,
    Event,
    EventBus,
)
from equilibrium.core.exceptions import APIError, ConfigurationError
from equilibrium.health.collector import InMemoryEventSource
from equilibrium.health.models import AlertType, DailyMetrics, DailyWellnessRecord, SleepSource
from equilibrium.integrations.backend import BackendClient
from equilibrium.wellness import InMemoryAlertStore, InMemoryHistoryStore, StaticConsent, WellnessService


class _FakeBackend:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.alerts = []
        self.aggregates = []

    def trigger_alert(self, alert_type, severity, data):
        self.alerts.append((alert_type, severity, data))

    def log_aggregate(self, aggregate):
        if self.fail:
            raise APIError("Backend API request failed: timed out")
        self.aggregates.append(aggregate)


def _service(usage_tracking=False, backend=None, events=None, **kwargs):
    return WellnessService(
        history_store=InMemoryHistoryStore(),
        alert_store=InMemoryAlertStore(),
        consent=StaticConsent(usage_tracking=usage_tracking),
        backend=backend,
        events=events,
        **kwargs,
    )


def _seed(service, scores, newest=date(2026, 3, 30)):
    """Put newest-first *scores* straight into the history store."""
    for i, score in enumerate(scores):
        service.history_store.upsert(DailyWellnessRecord(date=newest - timedelta(days=i), wellness_score=score))


BALANCED = dict(sleep_hours=8, mood_score=4, screen_time_minutes=150, activity_minutes=45)
ROUGH = dict(sleep_hours=5.5, mood_score=1, screen_time_minutes=500, activity_minutes=0)


class TestSubmitMetrics:
    def test_scores_and_stores(self):
        service = _service()
        result = service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **BALANCED))

        assert result.wellness_score == 85
        assert result.has_usage_data is True
        assert result.alerts == []
        assert service.get_history()[0].wellness_score == 85

    def test_resubmission_overwrites_day(self):
        service = _service()
        service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **BALANCED))
        service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **ROUGH))

        history = service.get_history()
        assert len(history) == 1
        assert history[0].wellness_score == 30

    def test_decline_raises_alert_and_stores_it(self):
        backend = _FakeBackend()
        service = _service(backend=backend)
        _seed(service, [60, 60] + [85] * 15)

        result = service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **ROUGH))

        assert [a.type for a in result.alerts] == [AlertType.WELLNESS_DECLINE]
        assert len(service.get_alerts()) == 1
        # Medium severity without consent stays local
        assert backend.alerts == []

    def test_prolonged_decline_forwarded_without_consent(self):
        backend = _FakeBackend()
        service = _service(backend=backend)
        _seed(service, [30] * 6 + [85] * 14)

        service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **ROUGH))

        assert [severity for _, severity, _ in backend.alerts] == ["high"]

    def test_events_emitted(self):
        bus = EventBus()
        seen: list[Event] = []
        bus.on_all(seen.append)
        service = _service(events=bus)
        _seed(service, [60, 60] + [85] * 15)

        service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **ROUGH))

        names = [e.name for e in seen]
        assert names == [WELLNESS_SCORED, WELLNESS_ALERT]
        assert seen[0].payload == {"date": "2026-03-31", "wellness_score": 30}
        assert seen[1].payload["type"] == "wellness_decline"


class TestAggregateSync:
    def test_requires_consent(self):
        backend = _FakeBackend()
        service = _service(backend=backend)
        service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **BALANCED))
        assert backend.aggregates == []

    def test_synced_with_consent(self):
        backend = _FakeBackend()
        bus = EventBus()
        synced: list[Event] = []
        bus.on(AGGREGATE_SYNCED, synced.append)
        service = _service(usage_tracking=True, backend=backend, events=bus)

        service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), mood_score=4, screen_time_minutes=150))

        assert backend.aggregates == [
            {
                "date": "2026-03-31",
                "avg_sleep_hours": None,
                "night_screen_minutes": 150,
                "sentiment_label": "positive",
                "wellness_score": 70,
                "has_sleep_data": False,
                "has_usage_data": True,
            }
        ]
        assert synced[0].payload == {"date": "2026-03-31"}

    def test_failure_does_not_break_submission(self):
        service = _service(usage_tracking=True, backend=_FakeBackend(fail=True))
        result = service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **BALANCED))
        assert result.wellness_score == 85

    def test_sync_returns_false_without_backend(self):
        service = _service(usage_tracking=True)
        assert service.sync_aggregate(DailyWellnessRecord(date=date(2026, 3, 31), wellness_score=70)) is False


class TestSleep:
    def test_default_window(self):
        assert str(_service().sleep_window) == "22:00-08:00"

    def test_set_sleep_window(self):
        service = _service()
        service.set_sleep_window("23:30", "06:30")
        assert str(service.sleep_window) == "23:30-06:30"

    def test_resolve_sleep_from_events(self):
        bus = EventBus()
        seen: list[Event] = []
        bus.on(SLEEP_RESOLVED, seen.append)
        source = InMemoryEventSource([datetime(2026, 3, 2, 1, 0)])
        service = _service(event_source=source, events=bus)
        service.set_sleep_window("23:00", "07:00")

        estimate = service.resolve_sleep(date(2026, 3, 1))

        assert estimate.source == SleepSource.INACTIVITY
        assert estimate.minutes == 420
        assert seen[0].payload["night"] == "2026-03-01"
        assert seen[0].payload["minutes"] == 420

    def test_resolve_sleep_without_sources(self):
        assert _service().resolve_sleep(date(2026, 3, 1)).source == SleepSource.NONE


class TestReads:
    def test_acknowledge_alert(self):
        bus = EventBus()
        acked: list[Event] = []
        bus.on(ALERT_ACKNOWLEDGED, acked.append)
        service = _service(events=bus)
        _seed(service, [60, 60] + [85] * 15)
        alert = service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **ROUGH)).alerts[0]

        assert service.acknowledge_alert(alert.id) is True
        assert service.get_alerts(unacknowledged_only=True) == []
        assert acked[0].payload == {"id": alert.id}
        assert service.acknowledge_alert("missing") is False

    def test_analyze(self):
        service = _service()
        _seed(service, [80] * 7 + [60] * 7)
        report = service.analyze()
        assert report.trends.wellness_trend == "improving"
        assert report.overview.total_days_tracked == 14
        assert report.completeness.usage == 0

    def test_get_insights_uses_last_week(self):
        service = _service()
        _seed(service, [90] * 7 + [20] * 20)
        assert [i.type for i in service.get_insights()] == ["positive"]


class TestFromConfig:
    def test_builds_json_backed_service(self, tmp_config_file, tmp_dir):
        config = Config(config_file=tmp_config_file, data_dir=tmp_dir)
        service = WellnessService.from_config(config)

        assert str(service.sleep_window) == "23:00-07:00"
        assert service.backend is None
        assert service.consent.get_consent_flags().usage_tracking is True

        service.submit_metrics(DailyMetrics(date=date(2026, 3, 31), **BALANCED))
        assert os.path.exists(os.path.join(tmp_dir, "daily_metrics.json"))

    def test_backend_enabled(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("EQUILIBRIUM_BACKEND__API_BASE", "https://api.example.com/v1/")
        monkeypatch.setenv("EQUILIBRIUM_BACKEND__TOKEN", "secret")
        service = WellnessService.from_config(Config(data_dir=tmp_dir))

        assert isinstance(service.backend, BackendClient)
        assert service.backend.api_base == "https://api.example.com/v1"

    def test_anomaly_settings_from_config(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("EQUILIBRIUM_ANOMALY__MIN_HISTORY", "21")
        service = WellnessService.from_config(Config(data_dir=tmp_dir))
        assert service.detector.settings.min_history == 21

    def test_sensor_provider_from_registry(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("sleep.sensor_provider", "apple_health_export")
        config.set("sleep.sensor_config", {"export_path": os.path.join(tmp_dir, "export.xml")})
        service = WellnessService.from_config(config)

        assert service.resolver.sensor_provider.name == "apple_health_export"
        # Missing export reads as no sensor data
        assert service.resolve_sleep(date(2026, 3, 1)).source == SleepSource.NONE

    def test_unknown_sensor_provider(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("sleep.sensor_provider", "oura")
        with pytest.raises(ConfigurationError, match="oura"):
            WellnessService.from_config(config)
