"""
Alert dispatch.

Every alert is stored locally.  High-severity alerts are always forwarded
to the remote notifier; medium-severity ones only with usage-tracking
consent.  A failed forward is logged and never reaches the caller.
"""

from __future__ import annotations

from loguru import logger

from equilibrium.health.models import AlertSeverity, ConsentFlags, WellnessAlert
from equilibrium.integrations.backend import AlertNotifier

from .store import AlertStore


class AlertDispatcher:
    def __init__(self, alert_store: AlertStore, notifier: AlertNotifier | None = None):
        self.alert_store = alert_store
        self.notifier = notifier

    @staticmethod
    def should_forward(alert: WellnessAlert, consent: ConsentFlags) -> bool:
        if alert.severity == AlertSeverity.HIGH:
            return True
        return consent.usage_tracking

    def dispatch(self, alert: WellnessAlert, consent: ConsentFlags) -> None:
        self.alert_store.append(alert)

        if self.notifier is None or not self.should_forward(alert, consent):
            return

        try:
            self.notifier.trigger_alert(alert.type.value, alert.severity.value, alert.payload())
            logger.info(f"Forwarded {alert.severity} alert {alert.id} ({alert.type})")
        except Exception as e:
            logger.error(f"Failed to forward alert {alert.id} to backend: {e}")
