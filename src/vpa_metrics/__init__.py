# src/vpa_metrics/__init__.py
"""Prometheus instrumentation for the VPA Recommender control loop."""

__version__ = "0.1.0"
