"""Brewing metrics for beer recipes."""

__version__ = "0.1.0"
