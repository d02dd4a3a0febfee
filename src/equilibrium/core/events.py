"""Wellness notifications.

Lets the surrounding application react to scoring, sleep resolution and
alerting without the wellness core knowing about it.  Events are built
with the ``Event.*`` constructors so each name always carries the same
payload shape.

Usage::

    from equilibrium.core.events import WELLNESS_ALERT, Event, EventBus

    bus = EventBus()

    def show_banner(event: Event) -> None:
        print(f"Alert: {event.payload['type']}")

    bus.on(WELLNESS_ALERT, show_banner)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from time import time
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from equilibrium.health.models import DailyWellnessRecord, SleepEstimate, WellnessAlert

WELLNESS_SCORED = "wellness.scored"
WELLNESS_ALERT = "wellness.alert"
ALERT_ACKNOWLEDGED = "wellness.alert.acknowledged"
SLEEP_RESOLVED = "sleep.resolved"
AGGREGATE_SYNCED = "aggregate.synced"

DEFAULT_SOURCE = "wellness"


@dataclass(frozen=True)
class Event:
    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = DEFAULT_SOURCE

    @classmethod
    def scored(cls, record: DailyWellnessRecord) -> Event:
        return cls(WELLNESS_SCORED, {"date": record.date.isoformat(), "wellness_score": record.wellness_score})

    @classmethod
    def alert(cls, alert: WellnessAlert) -> Event:
        return cls(WELLNESS_ALERT, alert.to_dict())

    @classmethod
    def acknowledged(cls, alert_id: str) -> Event:
        return cls(ALERT_ACKNOWLEDGED, {"id": alert_id})

    @classmethod
    def sleep_resolved(cls, night: date, estimate: SleepEstimate) -> Event:
        return cls(SLEEP_RESOLVED, {"night": night.isoformat(), **estimate.to_dict()})

    @classmethod
    def aggregate_synced(cls, aggregate: dict[str, Any]) -> Event:
        return cls(AGGREGATE_SYNCED, {"date": aggregate["date"]})


Hook = Callable[[Event], None]


class EventBus:
    """Synchronous pub/sub: hooks run in registration order, named hooks first."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._wildcard_hooks: list[Hook] = []

    def on(self, event_name: str, hook: Hook) -> None:
        self._hooks[event_name].append(hook)

    def on_all(self, hook: Hook) -> None:
        self._wildcard_hooks.append(hook)

    def emit(self, event: Event) -> None:
        """Deliver *event*.  A failing hook is logged and the rest still run."""
        for hook in [*self._hooks.get(event.name, []), *self._wildcard_hooks]:
            try:
                hook(event)
            except Exception as exc:
                logger.warning(f"Event hook failed for {event.name}: {exc}")
