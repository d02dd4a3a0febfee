"""Tests for health.registry — sensor provider discovery."""

from unittest.mock import MagicMock

import pytest

from equilibrium.core.exceptions import ConfigurationError
from equilibrium.health.collector import BaseSensorProvider
from equilibrium.health.plugins.apple_health_export import AppleHealthExportSensorProvider
from equilibrium.health.registry import SensorProviderRegistry, default_registry


class FakeSensor(BaseSensorProvider):
    name = "fake"

    def read_most_recent_sleep_session(self, window_start, window_end):
        return None


class TestRegistry:
    def test_manual_register(self):
        reg = SensorProviderRegistry()
        reg.register("fake", FakeSensor)
        assert "fake" in reg.list_names()

    def test_get(self):
        reg = SensorProviderRegistry()
        reg.register("fake", FakeSensor)
        assert reg.get("fake") is FakeSensor
        assert reg.get("nonexistent") is None

    def test_create_passes_config(self):
        reg = SensorProviderRegistry()
        reg.register("fake", FakeSensor)
        instance = reg.create("fake", device="ring")
        assert instance.name == "fake"
        assert instance.config == {"device": "ring"}

    def test_create_missing_raises(self):
        reg = SensorProviderRegistry()
        with pytest.raises(ConfigurationError, match="No sensor provider"):
            reg.create("missing")

    def test_discover_returns_dict(self):
        assert isinstance(SensorProviderRegistry().discover(), dict)

    def test_discover_accepts_provider_class(self, monkeypatch):
        ep = MagicMock()
        ep.name = "fake_ep"
        ep.load.return_value = FakeSensor
        monkeypatch.setattr("equilibrium.health.registry.entry_points", lambda group: [ep])

        result = SensorProviderRegistry().discover()
        assert result["fake_ep"] is FakeSensor

    def test_discover_skips_non_class(self, monkeypatch):
        ep = MagicMock()
        ep.name = "not_a_class"
        ep.load.return_value = lambda: None
        monkeypatch.setattr("equilibrium.health.registry.entry_points", lambda group: [ep])

        assert "not_a_class" not in SensorProviderRegistry().discover()

    def test_discover_skips_failed_load(self, monkeypatch):
        ep = MagicMock()
        ep.name = "broken"
        ep.load.side_effect = ImportError("missing dependency")
        monkeypatch.setattr("equilibrium.health.registry.entry_points", lambda group: [ep])

        assert "broken" not in SensorProviderRegistry().discover()


def test_default_registry_has_apple_health(monkeypatch):
    monkeypatch.setattr("equilibrium.health.registry.entry_points", lambda group: [])
    reg = default_registry()
    assert reg.get("apple_health_export") is AppleHealthExportSensorProvider
