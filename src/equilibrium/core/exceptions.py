"""
Equilibrium exception hierarchy.

All equilibrium exceptions inherit from EquilibriumError, making it easy for
consumers to catch library-level errors while still distinguishing specific
failure modes.
"""


class EquilibriumError(Exception):
    """Base exception class for all equilibrium errors."""


class ConfigurationError(EquilibriumError):
    """Raised for configuration errors (missing keys, invalid values)."""


class APIError(EquilibriumError):
    """Raised for backend API communication errors."""


class StorageError(EquilibriumError):
    """Raised when a history or alert store cannot be read or written."""


class DataProcessingError(EquilibriumError):
    """Raised for malformed input records."""
