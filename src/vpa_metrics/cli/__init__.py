# src/vpa_metrics/cli/__init__.py
"""
vpa_metrics CLI Package

This package exposes the top-level Typer `app` used by the console
entrypoint and the tests.
"""

from .main import app

__all__ = ["app"]
