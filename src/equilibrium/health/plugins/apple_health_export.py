"""Apple Health export sensor provider (HealthKit-compatible import path).

Reads ``HKCategoryTypeIdentifierSleepAnalysis`` records from an Apple Health
``export.xml`` and reports the most recent sleep session inside a window.
Overlapping records from several devices (watch + phone) are merged so the
same minutes are never counted twice.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from xml.etree import ElementTree as ET

from loguru import logger

from equilibrium.health.collector import BaseSensorProvider
from equilibrium.health.models import SensorSleepSession

SLEEP_RECORD_TYPE = "HKCategoryTypeIdentifierSleepAnalysis"

# Asleep segments further apart than this belong to different sessions.
SESSION_GAP = timedelta(minutes=60)


class AppleHealthExportSensorProvider(BaseSensorProvider):
    """Read sleep sessions from an Apple Health export XML file."""

    name = "apple_health_export"

    def __init__(self, export_path: str, **config: Any):
        super().__init__(export_path=export_path, **config)
        self.export_path = Path(export_path).expanduser()

    def validate(self) -> bool:
        if not self.export_path.exists() or not self.export_path.is_file():
            return False
        try:
            ET.parse(self.export_path)
            return True
        except ET.ParseError:
            return False

    def get_config_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "export_path": {
                    "type": "string",
                    "description": "Path to Apple Health export.xml file",
                }
            },
            "required": ["export_path"],
        }

    def read_most_recent_sleep_session(
        self, window_start: datetime, window_end: datetime
    ) -> SensorSleepSession | None:
        self.stats["reads"] += 1
        if not self.validate():
            logger.warning(f"Apple Health export unavailable: {self.export_path}")
            self.stats["errors"] += 1
            return None

        intervals: list[tuple[datetime, datetime]] = []
        root = ET.parse(self.export_path).getroot()
        for rec in root.iter("Record"):
            if rec.attrib.get("type", "") != SLEEP_RECORD_TYPE:
                continue
            if not self._is_sleep_asleep(rec.attrib.get("value", "")):
                continue
            start = self._align(self._parse_health_datetime(rec.attrib.get("startDate", "")), window_start)
            end = self._align(self._parse_health_datetime(rec.attrib.get("endDate", "")), window_start)
            if start is None or end is None or end <= start:
                continue

            # Clip to the window
            start, end = max(start, window_start), min(end, window_end)
            if end > start:
                intervals.append((start, end))

        sessions = self._merge_sessions(intervals)
        if not sessions:
            return None

        self.stats["sessions"] += 1
        segments = sessions[-1]
        minutes = sum((end - start).total_seconds() for start, end in segments) / 60.0
        return SensorSleepSession(
            duration_minutes=round(minutes, 1),
            start_time=segments[0][0],
            end_time=segments[-1][1],
        )

    @staticmethod
    def _merge_sessions(
        intervals: list[tuple[datetime, datetime]],
    ) -> list[list[tuple[datetime, datetime]]]:
        """Union overlapping intervals, then group them into sessions by gap."""
        merged: list[tuple[datetime, datetime]] = []
        for start, end in sorted(intervals):
            if merged and start <= merged[-1][1]:
                merged[-1] = (merged[-1][0], max(merged[-1][1], end))
            else:
                merged.append((start, end))

        sessions: list[list[tuple[datetime, datetime]]] = []
        for segment in merged:
            if sessions and segment[0] - sessions[-1][-1][1] <= SESSION_GAP:
                sessions[-1].append(segment)
            else:
                sessions.append([segment])
        return sessions

    @staticmethod
    def _align(value: datetime | None, reference: datetime) -> datetime | None:
        """Make *value* comparable with *reference* (both naive or both aware)."""
        if value is None:
            return None
        if reference.tzinfo is None and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        if reference.tzinfo is not None and value.tzinfo is None:
            return value.replace(tzinfo=reference.tzinfo)
        return value

    @staticmethod
    def _parse_health_datetime(value: str) -> datetime | None:
        if not value:
            return None
        formats = [
            "%Y-%m-%d %H:%M:%S %z",
            "%Y-%m-%d %H:%M:%S",
            "%Y-%m-%dT%H:%M:%S%z",
            "%Y-%m-%dT%H:%M:%S",
        ]
        for fmt in formats:
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue
        return None

    @staticmethod
    def _is_sleep_asleep(value: str) -> bool:
        # Covers Asleep, AsleepCore, AsleepDeep, AsleepREM, AsleepUnspecified
        return "asleep" in (value or "").lower()
