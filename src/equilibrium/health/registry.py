"""
Sleep-sensor plugin registry.

Discovers sensor providers at runtime via ``importlib.metadata`` entry points
(group: ``equilibrium.sensor_providers``).  Third-party packages can register
providers in their own ``pyproject.toml``:

    [project.entry-points."equilibrium.sensor_providers"]
    my_ring = "my_package.sensor:MyRingProvider"
"""

from importlib.metadata import entry_points
from typing import Any

from loguru import logger

from equilibrium.core.exceptions import ConfigurationError

from .collector import SensorProvider

ENTRY_POINT_GROUP = "equilibrium.sensor_providers"


class SensorProviderRegistry:
    """Discover and manage sleep-sensor provider plugins."""

    def __init__(self):
        self._providers: dict[str, type] = {}

    def discover(self) -> dict[str, type]:
        """Scan entry points and return {name: provider_class}."""
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                cls = ep.load()
            except Exception as e:
                logger.warning(f"Failed to load sensor provider '{ep.name}': {e}")
                continue
            if not isinstance(cls, type):
                logger.warning(f"Sensor provider '{ep.name}' is not a class; skipping")
                continue
            self._providers[ep.name] = cls
            logger.debug(f"Discovered sensor provider: {ep.name}")

        return dict(self._providers)

    def register(self, name: str, provider_class: type) -> None:
        """Manually register a provider (useful for testing)."""
        self._providers[name] = provider_class

    def get(self, name: str) -> type | None:
        return self._providers.get(name)

    def list_names(self) -> list[str]:
        return list(self._providers.keys())

    def create(self, name: str, **config: Any) -> SensorProvider:
        """Instantiate a provider by name with the given config."""
        cls = self._providers.get(name)
        if cls is None:
            raise ConfigurationError(f"No sensor provider registered as '{name}'. Available: {self.list_names()}")
        return cls(**config)


def default_registry() -> SensorProviderRegistry:
    """Registry pre-loaded with the built-in providers plus discovered plugins."""
    from .plugins.apple_health_export import AppleHealthExportSensorProvider

    registry = SensorProviderRegistry()
    registry.register(AppleHealthExportSensorProvider.name, AppleHealthExportSensorProvider)
    registry.discover()
    return registry
