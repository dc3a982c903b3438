"""Deterministic encryption service with Prometheus metrics."""

__version__ = "1.0.0"
