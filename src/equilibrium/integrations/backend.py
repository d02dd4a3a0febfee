"""Equilibrium backend REST client.

Thin wrapper around the two endpoints the wellness core writes to:
``POST /alerts/trigger`` and ``POST /aggregates``.  Bearer-token auth,
JSON bodies, no external dependencies beyond the standard library.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any, Protocol, runtime_checkable

from equilibrium.core.exceptions import APIError


@runtime_checkable
class AlertNotifier(Protocol):
    """Anything that can forward an alert to a remote notification service."""

    def trigger_alert(self, alert_type: str, severity: str, data: dict[str, Any]) -> Any: ...


class BackendClient:
    """Minimal client for the Equilibrium backend API."""

    def __init__(self, api_base: str, token: str = "", timeout: int = 15):
        if not api_base:
            raise ValueError("api_base is required")
        self.api_base = api_base.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        url = f"{self.api_base}/{path.lstrip('/')}"

        data = None
        headers: dict[str, str] = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if payload is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(payload, default=str).encode("utf-8")

        req = urllib.request.Request(url=url, data=data, method=method.upper(), headers=headers)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="ignore") if hasattr(e, "read") else ""
            raise APIError(f"Backend API {e.code}: {body or e.reason}") from e
        except urllib.error.URLError as e:
            raise APIError(f"Backend API request failed: {e}") from e

        if not raw:
            return {}
        try:
            return json.loads(raw.decode("utf-8", errors="ignore"))
        except json.JSONDecodeError:
            return {"raw": raw.decode("utf-8", errors="ignore")}

    def trigger_alert(self, alert_type: str, severity: str, data: dict[str, Any]) -> Any:
        return self._request("POST", "/alerts/trigger", {"type": alert_type, "severity": severity, "data": data})

    def log_aggregate(self, aggregate: dict[str, Any]) -> Any:
        return self._request("POST", "/aggregates", aggregate)
