"""Tests for health.models — wellness data models."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from equilibrium.core.exceptions import ConfigurationError, DataProcessingError
from equilibrium.health.models import (
    AlertSeverity,
    AlertType,
    DailyMetrics,
    DailyWellnessRecord,
    SleepEstimate,
    SleepSource,
    SleepWindow,
    WellnessAlert,
    parse_clock_time,
    sort_newest_first,
)


class TestParseClockTime:
    def test_parses(self):
        assert parse_clock_time("06:45") == time(6, 45)

    def test_passes_through_time(self):
        assert parse_clock_time(time(22, 0)) == time(22, 0)

    @pytest.mark.parametrize("value", ["7pm", "25:00", "12"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ConfigurationError):
            parse_clock_time(value)


class TestSleepWindow:
    def test_default_is_overnight(self):
        window = SleepWindow()
        assert window.overnight is True
        assert window.duration_minutes == 600
        assert str(window) == "22:00-08:00"

    def test_bounds_roll_end_to_next_day(self):
        start, end = SleepWindow.parse("23:00", "07:00").bounds(date(2026, 3, 1))
        assert start == datetime(2026, 3, 1, 23, 0)
        assert end == datetime(2026, 3, 2, 7, 0)

    def test_same_day_window(self):
        window = SleepWindow.parse("13:00", "15:00")
        assert window.overnight is False
        start, end = window.bounds(date(2026, 3, 1))
        assert end - start == timedelta(hours=2)

    def test_equal_start_and_end_spans_a_day(self):
        assert SleepWindow.parse("22:00", "22:00").duration_minutes == 24 * 60

    def test_bounds_with_tz(self):
        tz = timezone(timedelta(hours=2))
        start, _ = SleepWindow().bounds(date(2026, 3, 1), tz=tz)
        assert start.tzinfo is tz


class TestSleepEstimate:
    def test_hours_and_dict(self):
        estimate = SleepEstimate(source=SleepSource.SENSOR, minutes=450, confidence=0.95)
        assert estimate.hours == 7.5
        assert estimate.to_dict() == {"source": "sensor", "minutes": 450, "confidence": 0.95}


class TestDailyMetrics:
    def test_defaults_applied(self):
        metrics = DailyMetrics(date=date(2026, 3, 1))
        assert metrics.sleep_hours == 7.0
        assert metrics.mood_score == 3.0
        assert metrics.screen_time_minutes == 240.0
        assert metrics.activity_minutes == 0.0
        assert metrics.has_sleep_data is False
        assert metrics.has_usage_data is False

    def test_flags_reflect_supplied_values(self):
        metrics = DailyMetrics(date=date(2026, 3, 1), sleep_hours=0.0, screen_time_minutes=0.0)
        assert metrics.has_sleep_data is True
        assert metrics.has_usage_data is True
        assert metrics.sleep_hours == 0.0


class TestDailyWellnessRecord:
    def test_from_metrics(self):
        metrics = DailyMetrics(date=date(2026, 3, 1), mood_score=4.0, screen_time_minutes=90)
        record = DailyWellnessRecord.from_metrics(metrics, 80)
        assert record.wellness_score == 80
        assert record.mood_score == 4.0
        assert record.has_usage_data is True
        assert record.has_sleep_data is False
        assert record.screen_time_hours == 1.5

    def test_dict_round_trip(self):
        record = DailyWellnessRecord(
            date=date(2026, 3, 1), wellness_score=72, recorded_at=datetime(2026, 3, 1, 21, 0, 0)
        )
        assert DailyWellnessRecord.from_dict(record.to_dict()) == record

    def test_from_dict_fills_defaults(self):
        record = DailyWellnessRecord.from_dict({"date": "2026-03-01T00:00:00", "wellness_score": "64"})
        assert record.date == date(2026, 3, 1)
        assert record.wellness_score == 64
        assert record.sleep_hours == 7.0

    def test_from_dict_rejects_malformed(self):
        with pytest.raises(DataProcessingError):
            DailyWellnessRecord.from_dict({"date": "2026-03-01"})
        with pytest.raises(DataProcessingError):
            DailyWellnessRecord.from_dict({"date": "not a date", "wellness_score": 50})

    def test_sort_newest_first(self):
        records = [DailyWellnessRecord(date=date(2026, 3, d), wellness_score=50) for d in (2, 5, 1)]
        assert [r.date.day for r in sort_newest_first(records)] == [5, 2, 1]


class TestWellnessAlert:
    def _alert(self):
        return WellnessAlert(
            id="a1",
            type=AlertType.WELLNESS_DECLINE,
            severity=AlertSeverity.MEDIUM,
            baseline_score=70,
            current_score=54,
            percentage_change=-23,
            timestamp=datetime(2026, 3, 1, 9, 0),
        )

    def test_payload(self):
        assert self._alert().payload() == {
            "type": "wellness_decline",
            "baseline_score": 70,
            "current_score": 54,
            "percentage_change": -23,
        }

    def test_dict_round_trip(self):
        alert = self._alert()
        alert.acknowledged = True
        assert WellnessAlert.from_dict(alert.to_dict()) == alert

    def test_from_dict_rejects_unknown_type(self):
        data = self._alert().to_dict()
        data["type"] = "meltdown"
        with pytest.raises(DataProcessingError):
            WellnessAlert.from_dict(data)
