"""
Wellness data model and sleep-input collaborators.

Core module (no heavy deps).  Sensor providers are plugins discovered via
the ``equilibrium.sensor_providers`` entry-point group.
"""

from .collector import BaseSensorProvider, EventSource, InMemoryEventSource, SensorProvider
from .models import (
    AlertSeverity,
    AlertType,
    ConsentFlags,
    DailyMetrics,
    DailyWellnessRecord,
    InteractionEvent,
    SensorSleepSession,
    SleepEstimate,
    SleepSource,
    SleepWindow,
    Trend,
    TrendSummary,
    WellnessAlert,
)
from .registry import SensorProviderRegistry

__all__ = [
    "AlertSeverity",
    "AlertType",
    "BaseSensorProvider",
    "ConsentFlags",
    "DailyMetrics",
    "DailyWellnessRecord",
    "EventSource",
    "InMemoryEventSource",
    "InteractionEvent",
    "SensorProvider",
    "SensorProviderRegistry",
    "SensorSleepSession",
    "SleepEstimate",
    "SleepSource",
    "SleepWindow",
    "Trend",
    "TrendSummary",
    "WellnessAlert",
]
