"""
Baseline anomaly detection.

Compares short-term averages of the wellness score against a rolling
baseline taken from the days just before them:

    history (newest first):  [0 1 2][3 4 5 6 ... 16]
                              recent   baseline (14 days)
                             [0 ..... 6]
                                week

- recent average ≥20% below baseline → ``wellness_decline`` (medium)
- week average ≥20% below baseline   → ``prolonged_decline`` (high)

Both checks are independent and may fire together.  Re-running on an
unchanged history emits the same alerts again; callers that want one alert
per episode must deduplicate themselves.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from equilibrium.health.models import AlertSeverity, AlertType, DailyWellnessRecord, WellnessAlert

from .scoring import round_half_up


@dataclass
class AnomalySettings:
    """Window sizes and threshold for decline detection.

    Attributes:
        min_history: Fewest records needed before any evaluation.
        recent_days: Length of the short-term window.
        week_days: Length of the prolonged-decline window.
        baseline_offset: Most recent days excluded from the baseline.
        baseline_days: Length of the baseline window.
        decline_threshold_pct: Percentage change at or below which an alert fires.
    """

    min_history: int = 14
    recent_days: int = 3
    week_days: int = 7
    baseline_offset: int = 3
    baseline_days: int = 14
    decline_threshold_pct: float = -20.0


def _mean_score(records: Sequence[DailyWellnessRecord]) -> float:
    return sum(r.wellness_score for r in records) / len(records)


def percent_change(current: float, baseline: float) -> float:
    return (current - baseline) / baseline * 100.0


class BaselineAnomalyDetector:
    """Evaluate a newest-first score history for declines."""

    def __init__(
        self,
        settings: AnomalySettings | None = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self.settings = settings or AnomalySettings()
        self.clock = clock
        self.id_factory = id_factory

    def baseline(self, history: Sequence[DailyWellnessRecord]) -> float | None:
        """Mean score of the baseline window, or None if there is no history for it."""
        s = self.settings
        window = history[s.baseline_offset : s.baseline_offset + s.baseline_days]
        if not window:
            return None
        return _mean_score(window)

    def evaluate(self, history: Sequence[DailyWellnessRecord]) -> list[WellnessAlert]:
        s = self.settings
        if len(history) < s.min_history:
            return []

        baseline_avg = self.baseline(history)
        if not baseline_avg:
            logger.debug("Baseline average is zero; skipping anomaly evaluation")
            return []

        alerts: list[WellnessAlert] = []

        recent_avg = _mean_score(history[: s.recent_days])
        recent_change = percent_change(recent_avg, baseline_avg)
        if recent_change <= s.decline_threshold_pct:
            alerts.append(
                self._make_alert(
                    AlertType.WELLNESS_DECLINE, AlertSeverity.MEDIUM, baseline_avg, recent_avg, recent_change
                )
            )

        week_avg = _mean_score(history[: s.week_days])
        week_change = percent_change(week_avg, baseline_avg)
        if week_change <= s.decline_threshold_pct:
            alerts.append(
                self._make_alert(AlertType.PROLONGED_DECLINE, AlertSeverity.HIGH, baseline_avg, week_avg, week_change)
            )

        for alert in alerts:
            logger.info(
                f"{alert.type} detected: baseline {alert.baseline_score}, "
                f"current {alert.current_score} ({alert.percentage_change}%)"
            )
        return alerts

    def _make_alert(
        self,
        alert_type: AlertType,
        severity: AlertSeverity,
        baseline_avg: float,
        current_avg: float,
        change: float,
    ) -> WellnessAlert:
        return WellnessAlert(
            id=self.id_factory(),
            type=alert_type,
            severity=severity,
            baseline_score=round_half_up(baseline_avg),
            current_score=round_half_up(current_avg),
            percentage_change=round_half_up(change),
            timestamp=self.clock(),
        )
