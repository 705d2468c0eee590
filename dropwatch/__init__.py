"""Concurrent quote fetch and distance-from-high report."""

__version__ = "0.1.0"
