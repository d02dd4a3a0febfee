"""Remote service integrations."""

from .backend import AlertNotifier, BackendClient

__all__ = ["AlertNotifier", "BackendClient"]
