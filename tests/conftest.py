"""Shared test fixtures for equilibrium."""

import os
import tempfile
from datetime import date, timedelta

import pytest

from equilibrium.health.models import DailyWellnessRecord


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": os.path.join(tmp_dir, "data"),
        },
        "sleep": {
            "window_start": "23:00",
            "window_end": "07:00",
        },
        "consent": {
            "usage_tracking": True,
        },
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


def make_history(scores, newest=date(2026, 3, 31), **fields):
    """Newest-first records, one per consecutive day ending on *newest*."""
    return [
        DailyWellnessRecord(date=newest - timedelta(days=i), wellness_score=score, **fields)
        for i, score in enumerate(scores)
    ]


@pytest.fixture
def history_factory():
    return make_history
