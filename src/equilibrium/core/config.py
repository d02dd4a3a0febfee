"""
Hierarchical configuration management.

Loads configuration from multiple sources with this precedence (highest wins):
    1. Environment variables (EQUILIBRIUM_SECTION__KEY)
    2. Config file (YAML or JSON)
    3. Built-in defaults

Usage:
    config = Config(config_file="~/.equilibrium/config.yaml")

    config.get("sleep.window_start")     # "22:00"
    config.get("anomaly.min_history")    # 14
    config.validated().anomaly           # typed AnomalyConfig
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

import yaml

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .config_schema import EquilibriumConfig

_DEFAULT_ENV_PREFIX = "EQUILIBRIUM_"
_DEFAULT_DATA_DIR_NAME = ".equilibrium"


class Config:
    """
    Central configuration manager.

    Loads and merges configuration from defaults, a config file, and
    environment variables. Env vars use double-underscore to denote nesting:
    EQUILIBRIUM_SLEEP__WINDOW_START=23:00 -> config["sleep"]["window_start"] = "23:00"
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        data_dir: str | None = None,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: Path to YAML or JSON configuration file.
            env_prefix: Prefix for environment variable overrides.
            data_dir: Base directory for local stores and logs. Defaults to ~/.equilibrium.
            defaults: Additional default values to merge.
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.env_prefix = env_prefix or ""
        self._data_dir = data_dir or os.path.join("~", _DEFAULT_DATA_DIR_NAME)
        self._extra_defaults = defaults or {}
        self.config_data: dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        self.config_data = self._get_default_config()

        if self._extra_defaults:
            self._update_dict(self.config_data, self._extra_defaults)

        if self.config_file and os.path.exists(self.config_file):
            file_config = self._load_file(self.config_file)
            self._update_dict(self.config_data, file_config)

        # Env vars override everything
        self._load_from_env()

    def _get_default_config(self) -> dict[str, Any]:
        data_dir = os.path.expanduser(self._data_dir)
        return {
            "paths": {
                "data_dir": data_dir,
                "log_dir": os.path.join(data_dir, "logs"),
                "history_file": os.path.join(data_dir, "daily_metrics.json"),
                "alerts_file": os.path.join(data_dir, "wellness_alerts.json"),
            },
            "sleep": {
                "window_start": "22:00",
                "window_end": "08:00",
                "sensor_provider": "",
            },
            "anomaly": {
                "min_history": 14,
                "recent_days": 3,
                "week_days": 7,
                "baseline_offset": 3,
                "baseline_days": 14,
                "decline_threshold_pct": -20.0,
            },
            "history": {
                "retention_days": 90,
            },
            "consent": {
                "usage_tracking": False,
            },
            "backend": {
                "api_base": "",
                "token": "",
                "timeout": 15,
            },
            "logging": {
                "level": "WARNING",
                "file": "",
                "to_file": False,
            },
        }

    @staticmethod
    def _load_file(path: str) -> dict[str, Any]:
        """Load a YAML or JSON config file."""
        ext = os.path.splitext(path)[1].lower()
        try:
            with open(path) as f:
                if ext in (".yaml", ".yml"):
                    return yaml.safe_load(f) or {}
                elif ext == ".json":
                    return json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
        return {}

    def _update_dict(self, target: dict, source: dict) -> None:
        """Recursively merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _load_from_env(self) -> None:
        if not self.env_prefix:
            return
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.env_prefix):
                continue
            config_key = env_key[len(self.env_prefix) :].lower()
            key_parts = config_key.split("__")

            current = self.config_data
            for part in key_parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[key_parts[-1]] = env_value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dot-notation path.

        Args:
            key_path: e.g. "sleep.window_start", "anomaly.min_history"
            default: Returned when key is not found.
        """
        current = self.config_data
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        """Set a config value by dot-notation path, creating intermediate dicts."""
        parts = key_path.split(".")
        current = self.config_data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def get_data_dir(self) -> str:
        return os.path.expanduser(self.get("paths.data_dir", self._data_dir))

    def ensure_directories(self) -> None:
        """Create the data and log directories if they don't exist."""
        for key in ("data_dir", "log_dir"):
            path_value = self.get(f"paths.{key}")
            if isinstance(path_value, str) and path_value:
                os.makedirs(os.path.expanduser(path_value), exist_ok=True)

    def validated(self) -> EquilibriumConfig:
        """Return the config as a validated pydantic model.

        Environment overrides arrive as strings; pydantic coerces them
        (``"25"`` -> ``25``, ``"true"`` -> ``True``).
        """
        from pydantic import ValidationError

        from .config_schema import EquilibriumConfig

        try:
            return EquilibriumConfig.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
