"""Tests for equilibrium.core.exceptions."""

import pytest

from equilibrium.core.exceptions import (
    APIError,
    ConfigurationError,
    DataProcessingError,
    EquilibriumError,
    StorageError,
)


def test_hierarchy():
    """All exceptions should inherit from EquilibriumError."""
    for exc_cls in [ConfigurationError, APIError, StorageError, DataProcessingError]:
        assert issubclass(exc_cls, EquilibriumError)


def test_exception_message():
    err = ConfigurationError("Invalid clock time '7pm'")
    assert "7pm" in str(err)


def test_catch_base():
    with pytest.raises(EquilibriumError):
        raise StorageError("disk full")
