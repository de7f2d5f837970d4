"""Civic lookups for ZIP codes backed by OpenStates."""

__version__ = "0.1.0"
