"""Equilibrium — personal wellness scoring and decline detection."""

__version__ = "0.1.0"
