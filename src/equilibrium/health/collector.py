"""
Collaborator protocols for sleep inputs.

A sleep sensor (Apple Health export, Health Connect, a wearable API, …)
implements ``SensorProvider``; a device-usage tracker implements
``EventSource``.  The resolver only ever talks to these interfaces.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any, Protocol, runtime_checkable

from .models import InteractionEvent, SensorSleepSession


@runtime_checkable
class SensorProvider(Protocol):
    """Protocol that every sleep-sensor source must satisfy."""

    name: str

    def read_most_recent_sleep_session(
        self, window_start: datetime, window_end: datetime
    ) -> SensorSleepSession | None:
        """Return the latest sleep session overlapping the window, or None."""
        ...

    def validate(self) -> bool:
        """Check that permissions / connectivity are working."""
        ...

    def get_config_schema(self) -> dict[str, Any]:
        """Describe required config keys so consumers know what to provide."""
        ...


@runtime_checkable
class EventSource(Protocol):
    """Protocol for device-interaction timestamp sources."""

    def get_interaction_events(self, day: date) -> list[InteractionEvent]:
        """Return interaction events that may fall in the sleep window opening on *day*."""
        ...


class BaseSensorProvider(ABC):
    """Optional ABC providing shared plumbing for sensor providers.

    Subclass this for read counters and default ``validate`` /
    ``get_config_schema``, or implement ``SensorProvider`` directly.
    """

    name: str = "base"

    def __init__(self, **config: Any):
        self.config = config
        self.stats: dict[str, int] = {"reads": 0, "sessions": 0, "errors": 0}

    @abstractmethod
    def read_most_recent_sleep_session(
        self, window_start: datetime, window_end: datetime
    ) -> SensorSleepSession | None:
        """Return the latest sleep session overlapping the window."""

    def validate(self) -> bool:
        return True

    def get_config_schema(self) -> dict[str, Any]:
        return {}


class InMemoryEventSource:
    """Event source backed by a plain list of timestamps.

    Returns the events from *day* and the following day, which covers any
    window that opens on *day* and closes after midnight.
    """

    def __init__(self, timestamps: Iterable[datetime] = ()):
        self._events = [InteractionEvent(timestamp=ts) for ts in timestamps]

    def record(self, timestamp: datetime) -> None:
        self._events.append(InteractionEvent(timestamp=timestamp))

    def get_interaction_events(self, day: date) -> list[InteractionEvent]:
        last_day = day + timedelta(days=1)
        return [e for e in self._events if day <= e.timestamp.date() <= last_day]
