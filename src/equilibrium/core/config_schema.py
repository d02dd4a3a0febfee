"""Pydantic models for config validation.

``Config.validated()`` turns the merged ``config_data`` dict into a typed
``EquilibriumConfig``.  Dict-based ``Config.get`` access keeps working for
callers that don't need validation.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class PathsConfig(BaseModel):
    """File-system paths used by the local stores."""

    data_dir: Path
    log_dir: Path | None = None
    history_file: Path | None = None
    alerts_file: Path | None = None

    @field_validator("data_dir", "log_dir", "history_file", "alerts_file", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser() if v else None
        if isinstance(v, Path):
            return v.expanduser()
        return v


class SleepConfig(BaseModel):
    """Default sleep window and optional sensor provider name."""

    window_start: str = "22:00"
    window_end: str = "08:00"
    sensor_provider: str = ""

    @field_validator("window_start", "window_end")
    @classmethod
    def _clock_time(cls, v: str) -> str:
        if not _CLOCK_RE.match(v.strip()):
            raise ValueError(f"expected HH:MM clock time, got {v!r}")
        return v.strip()


class AnomalyConfig(BaseModel):
    """Baseline comparison windows and decline threshold."""

    min_history: int = 14
    recent_days: int = 3
    week_days: int = 7
    baseline_offset: int = 3
    baseline_days: int = 14
    decline_threshold_pct: float = -20.0

    @model_validator(mode="after")
    def _positive_windows(self) -> AnomalyConfig:
        for name in ("min_history", "recent_days", "week_days", "baseline_days"):
            if getattr(self, name) < 1:
                raise ValueError(f"anomaly.{name} must be >= 1")
        if self.decline_threshold_pct >= 0:
            raise ValueError("anomaly.decline_threshold_pct must be negative")
        return self


class HistoryConfig(BaseModel):
    retention_days: int = 90


class ConsentConfig(BaseModel):
    usage_tracking: bool = False


class BackendConfig(BaseModel):
    """Remote backend used for alert forwarding and aggregate sync."""

    api_base: str = ""
    token: str = ""
    timeout: int = 15

    @property
    def enabled(self) -> bool:
        return bool(self.api_base)


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    file: str = ""
    to_file: bool = False


class EquilibriumConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.equilibrium"))
    sleep: SleepConfig = SleepConfig()
    anomaly: AnomalyConfig = AnomalyConfig()
    history: HistoryConfig = HistoryConfig()
    consent: ConsentConfig = ConsentConfig()
    backend: BackendConfig = BackendConfig()
    logging: LoggingConfig = LoggingConfig()
