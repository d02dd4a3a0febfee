"""Tests for equilibrium.integrations.backend."""

from __future__ import annotations

import io
import json
import urllib.error
from unittest.mock import patch

import pytest

from equilibrium.core.exceptions import APIError
from equilibrium.integrations.backend import AlertNotifier, BackendClient


class _DummyResp:
    def __init__(self, payload: object = None, raw: bytes | None = None):
        self._payload = raw if raw is not None else json.dumps(payload).encode("utf-8")

    def read(self):
        return self._payload

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_init_requires_api_base():
    with pytest.raises(ValueError):
        BackendClient(api_base="")


def test_is_alert_notifier():
    assert isinstance(BackendClient(api_base="https://api.example.com"), AlertNotifier)


@patch("equilibrium.integrations.backend.urllib.request.urlopen")
def test_trigger_alert(mock_urlopen):
    mock_urlopen.return_value = _DummyResp({"ok": True})

    client = BackendClient(api_base="https://api.example.com/", token="tok", timeout=5)
    result = client.trigger_alert("prolonged_decline", "high", {"baseline_score": 70})

    assert result == {"ok": True}
    req = mock_urlopen.call_args[0][0]
    assert req.get_method() == "POST"
    assert req.full_url == "https://api.example.com/alerts/trigger"
    assert req.get_header("Authorization") == "Bearer tok"
    assert req.get_header("Content-type") == "application/json"
    assert json.loads(req.data) == {
        "type": "prolonged_decline",
        "severity": "high",
        "data": {"baseline_score": 70},
    }
    assert mock_urlopen.call_args[1]["timeout"] == 5


@patch("equilibrium.integrations.backend.urllib.request.urlopen")
def test_log_aggregate(mock_urlopen):
    mock_urlopen.return_value = _DummyResp(raw=b"")

    client = BackendClient(api_base="https://api.example.com")
    assert client.log_aggregate({"date": "2026-03-31", "wellness_score": 70}) == {}

    req = mock_urlopen.call_args[0][0]
    assert req.full_url == "https://api.example.com/aggregates"
    assert req.get_header("Authorization") is None


@patch("equilibrium.integrations.backend.urllib.request.urlopen")
def test_non_json_body(mock_urlopen):
    mock_urlopen.return_value = _DummyResp(raw=b"accepted")
    client = BackendClient(api_base="https://api.example.com")
    assert client.log_aggregate({}) == {"raw": "accepted"}


@patch("equilibrium.integrations.backend.urllib.request.urlopen")
def test_http_error_raises_api_error(mock_urlopen):
    mock_urlopen.side_effect = urllib.error.HTTPError(
        url="https://api.example.com/alerts/trigger",
        code=401,
        msg="Unauthorized",
        hdrs=None,
        fp=io.BytesIO(b'{"error": "invalid token"}'),
    )

    client = BackendClient(api_base="https://api.example.com", token="bad")
    with pytest.raises(APIError, match="401"):
        client.trigger_alert("wellness_decline", "medium", {})


@patch("equilibrium.integrations.backend.urllib.request.urlopen")
def test_url_error_raises_api_error(mock_urlopen):
    mock_urlopen.side_effect = urllib.error.URLError("connection refused")

    client = BackendClient(api_base="https://api.example.com")
    with pytest.raises(APIError, match="request failed"):
        client.log_aggregate({})
