"""Ranked-slot account mapping engine."""

__version__ = "0.1.0"
