"""
Sleep signal resolution.

Turns either a sensor-reported sleep session or a night's worth of
device-interaction timestamps into one ``SleepEstimate``.

Two methods, never blended for the same night:

- **sensor**: trusted as reported, confidence defaults to 0.95.
- **inactivity**: every gap of at least 30 minutes between interactions
  inside the sleep window counts as sleep minus a 30-minute settling
  period; confidence is the inactive fraction of the window, capped at 0.85.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from loguru import logger

from equilibrium.health.collector import EventSource, SensorProvider
from equilibrium.health.models import (
    InteractionEvent,
    SensorSleepSession,
    SleepEstimate,
    SleepSource,
    SleepWindow,
)

from .scoring import round_half_up

SENSOR_DEFAULT_CONFIDENCE = 0.95
INACTIVITY_MAX_CONFIDENCE = 0.85
SETTLING_MINUTES = 30.0


def _align(value: datetime, reference: datetime) -> datetime:
    """Match *value* to the naive/aware style of *reference*, keeping its wall-clock time."""
    if reference.tzinfo is None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    if reference.tzinfo is not None and value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value


def _gap_sleep_minutes(gap_minutes: float) -> float:
    """Sleep credited for one inactivity gap."""
    if gap_minutes >= SETTLING_MINUTES:
        return gap_minutes - SETTLING_MINUTES
    return 0.0


class SleepSignalResolver:
    """Resolve nightly sleep from a sensor provider or interaction events.

    Collaborators are optional.  ``resolve`` is a pure function over data
    the caller already has; ``resolve_night`` fetches that data from the
    injected collaborators first.
    """

    def __init__(
        self,
        sensor_provider: SensorProvider | None = None,
        event_source: EventSource | None = None,
    ):
        self.sensor_provider = sensor_provider
        self.event_source = event_source

    def resolve(
        self,
        night: date,
        window: SleepWindow,
        sensor_session: SensorSleepSession | None,
        events: Sequence[InteractionEvent],
    ) -> SleepEstimate:
        if sensor_session is not None and sensor_session.duration_minutes > 0:
            confidence = sensor_session.confidence
            return SleepEstimate(
                source=SleepSource.SENSOR,
                minutes=round_half_up(sensor_session.duration_minutes),
                confidence=SENSOR_DEFAULT_CONFIDENCE if confidence is None else confidence,
            )

        return self.infer_from_inactivity(night, window, events)

    def infer_from_inactivity(
        self, night: date, window: SleepWindow, events: Sequence[InteractionEvent]
    ) -> SleepEstimate:
        # No data is not the same as zero sleep: flag it with zero confidence.
        if not events:
            return SleepEstimate(source=SleepSource.INACTIVITY, minutes=0, confidence=0.0)

        window_start, window_end = window.bounds(night, tz=events[0].timestamp.tzinfo)
        window_minutes = (window_end - window_start).total_seconds() / 60.0

        # Mixed naive and aware stamps are read against the first event's clock
        stamps = (_align(e.timestamp, window_start) for e in events)
        in_window = sorted(ts for ts in stamps if window_start <= ts <= window_end)

        last_active = window_start
        sleep_minutes = 0.0
        for timestamp in in_window:
            sleep_minutes += _gap_sleep_minutes((timestamp - last_active).total_seconds() / 60.0)
            last_active = timestamp
        sleep_minutes += _gap_sleep_minutes((window_end - last_active).total_seconds() / 60.0)

        sleep_minutes = min(max(sleep_minutes, 0.0), window_minutes)
        confidence = min(INACTIVITY_MAX_CONFIDENCE, sleep_minutes / window_minutes) if window_minutes else 0.0

        return SleepEstimate(
            source=SleepSource.INACTIVITY,
            minutes=round_half_up(sleep_minutes),
            confidence=confidence,
        )

    def resolve_night(self, night: date, window: SleepWindow) -> SleepEstimate:
        """Fetch sensor / event data for *night* and resolve it.

        Each collaborator is read once.  ``None``, empty results and
        exceptions all count as "no data".
        """
        window_start, window_end = window.bounds(night)
        session = self._read_sensor(window_start, window_end)
        if session is not None and session.duration_minutes > 0:
            return self.resolve(night, window, session, [])

        if self.event_source is None:
            return SleepEstimate(source=SleepSource.NONE, minutes=0, confidence=0.0)

        return self.resolve(night, window, None, self._read_events(night))

    def _read_sensor(self, window_start: datetime, window_end: datetime) -> SensorSleepSession | None:
        if self.sensor_provider is None:
            return None
        try:
            return self.sensor_provider.read_most_recent_sleep_session(window_start, window_end)
        except Exception as e:
            logger.warning(f"Sleep sensor '{getattr(self.sensor_provider, 'name', '?')}' read failed: {e}")
            return None

    def _read_events(self, night: date) -> list[InteractionEvent]:
        if self.event_source is None:
            return []
        try:
            return list(self.event_source.get_interaction_events(night) or [])
        except Exception as e:
            logger.warning(f"Interaction events unavailable for {night}: {e}")
            return []
