"""
History and alert stores.

``HistoryStore`` and ``AlertStore`` are the contracts the wellness core
depends on.  Two implementations of each ship here: an in-memory one and a
JSON-file one that persists after every write.  Encryption at rest is the
embedding application's job.
"""

from __future__ import annotations

import threading
from datetime import date
from dataclasses import replace
from typing import Protocol, runtime_checkable

from loguru import logger

from equilibrium.core.exceptions import DataProcessingError, StorageError
from equilibrium.core.utils.file_io import read_json_list, write_json_list
from equilibrium.health.models import AlertType, DailyWellnessRecord, WellnessAlert, sort_newest_first

DEFAULT_RETENTION_DAYS = 90


@runtime_checkable
class HistoryStore(Protocol):
    """Date-keyed store of scored days, read newest-first."""

    def get_history(self, limit_days: int | None = None) -> list[DailyWellnessRecord]: ...

    def upsert(self, record: DailyWellnessRecord) -> None: ...


@runtime_checkable
class AlertStore(Protocol):
    """Append-only alert log; only the acknowledged flag ever changes."""

    def append(self, alert: WellnessAlert) -> None: ...

    def list_alerts(
        self, alert_type: AlertType | None = None, unacknowledged_only: bool = False
    ) -> list[WellnessAlert]: ...

    def acknowledge(self, alert_id: str) -> bool: ...


def latest_per_date(records: list[DailyWellnessRecord]) -> list[DailyWellnessRecord]:
    """Collapse duplicate dates to the most recently recorded entry, newest-first."""
    by_date: dict[date, DailyWellnessRecord] = {}
    for record in records:
        current = by_date.get(record.date)
        if current is None or record.recorded_at >= current.recorded_at:
            by_date[record.date] = record
    return sort_newest_first(list(by_date.values()))


class InMemoryHistoryStore:
    """History kept in a newest-first list, one record per date.

    Upserts are last-write-wins.  Only the newest ``retention_days``
    records are kept.  A write that fails to persist leaves the store
    unchanged.
    """

    def __init__(self, retention_days: int = DEFAULT_RETENTION_DAYS):
        self.retention_days = retention_days
        self._lock = threading.Lock()
        self._records: list[DailyWellnessRecord] = []

    def get_history(self, limit_days: int | None = None) -> list[DailyWellnessRecord]:
        with self._lock:
            records = list(self._records)
        return records[:limit_days] if limit_days is not None else records

    def upsert(self, record: DailyWellnessRecord) -> None:
        with self._lock:
            kept = [r for r in self._records if r.date != record.date]
            kept.append(record)
            records = sort_newest_first(kept)[: self.retention_days]
            self._persist(records)
            self._records = records

    def _persist(self, records: list[DailyWellnessRecord]) -> None:
        """Hook for durable subclasses; called with the lock held, before the swap."""


class JsonFileHistoryStore(InMemoryHistoryStore):
    """History persisted as a JSON array of records."""

    def __init__(self, path: str, retention_days: int = DEFAULT_RETENTION_DAYS):
        super().__init__(retention_days=retention_days)
        self.path = path
        try:
            loaded = [DailyWellnessRecord.from_dict(d) for d in read_json_list(path)]
        except DataProcessingError as e:
            raise StorageError(f"Corrupt history file {path}: {e}") from e
        self._records = latest_per_date(loaded)[:retention_days]
        if len(self._records) != len(loaded):
            logger.info(f"Dropped {len(loaded) - len(self._records)} duplicate or expired records from {path}")
        logger.debug(f"Loaded {len(self._records)} wellness records from {path}")

    def _persist(self, records: list[DailyWellnessRecord]) -> None:
        write_json_list(self.path, [r.to_dict() for r in records])


class InMemoryAlertStore:
    """Alerts kept newest-first.  A write that fails to persist leaves the store unchanged."""

    def __init__(self):
        self._lock = threading.Lock()
        self._alerts: list[WellnessAlert] = []

    def append(self, alert: WellnessAlert) -> None:
        with self._lock:
            alerts = [alert, *self._alerts]
            self._persist(alerts)
            self._alerts = alerts

    def list_alerts(
        self, alert_type: AlertType | None = None, unacknowledged_only: bool = False
    ) -> list[WellnessAlert]:
        with self._lock:
            alerts = list(self._alerts)
        if alert_type is not None:
            alerts = [a for a in alerts if a.type == alert_type]
        if unacknowledged_only:
            alerts = [a for a in alerts if not a.acknowledged]
        return alerts

    def acknowledge(self, alert_id: str) -> bool:
        with self._lock:
            if not any(a.id == alert_id for a in self._alerts):
                return False
            alerts = [replace(a, acknowledged=True) if a.id == alert_id else a for a in self._alerts]
            self._persist(alerts)
            self._alerts = alerts
        return True

    def _persist(self, alerts: list[WellnessAlert]) -> None:
        """Hook for durable subclasses; called with the lock held, before the swap."""


class JsonFileAlertStore(InMemoryAlertStore):
    """Alerts persisted as a JSON array."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        try:
            loaded = [WellnessAlert.from_dict(d) for d in read_json_list(path)]
        except DataProcessingError as e:
            raise StorageError(f"Corrupt alerts file {path}: {e}") from e

        seen: set[str] = set()
        for alert in loaded:
            if alert.id not in seen:
                seen.add(alert.id)
                self._alerts.append(alert)

    def _persist(self, alerts: list[WellnessAlert]) -> None:
        write_json_list(self.path, [a.to_dict() for a in alerts])
