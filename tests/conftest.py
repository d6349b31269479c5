# tests/conftest.py

from datetime import datetime, timezone

import pytest

from vpa_metrics.core.registry import MetricsRegistry
from vpa_metrics.models.vpa import Vpa


@pytest.fixture(autouse=True)
def disable_tracing_export(monkeypatch):
    """
    Autouse fixture that keeps tests from exporting spans. With no OTLP
    endpoint configured, initialize_telemetry leaves the no-op tracer in place.
    """
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    monkeypatch.setattr("vpa_metrics.core.config.config.OTEL_EXPORTER_OTLP_ENDPOINT", "")


@pytest.fixture
def metrics_registry():
    """A MetricsRegistry backed by its own CollectorRegistry, isolated per test."""
    return MetricsRegistry()


@pytest.fixture
def container_recommendation():
    """Builds a container recommendation in the VPA status format."""

    def _build(name="app", lower=("100m", "256Mi"), target=("200m", "512Mi"), upper=("400m", "1Gi")):
        return {
            "containerName": name,
            "lowerBound": {"cpu": lower[0], "memory": lower[1]},
            "target": {"cpu": target[0], "memory": target[1]},
            "upperBound": {"cpu": upper[0], "memory": upper[1]},
        }

    return _build


@pytest.fixture
def make_vpa(container_recommendation):
    """Factory fixture for Vpa objects."""

    def _make(name="my-vpa", namespace="default", mode=None, containers=(), selector=None, created=None):
        data = {
            "id": {"namespace": namespace, "vpa_name": name},
            "update_mode": mode,
            "pod_selector": selector or {"matchLabels": {"app": name}},
        }
        if containers:
            data["recommendation"] = {
                "containerRecommendations": [container_recommendation(name=c) for c in containers]
            }
        if created is not None:
            data["created"] = created
        return Vpa.model_validate(data)

    return _make


@pytest.fixture
def now():
    return datetime.now(timezone.utc)
