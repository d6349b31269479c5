# src/vpa_metrics/core/registry.py
"""
Owns the Prometheus metrics exported by the VPA Recommender.

A MetricsRegistry is constructed once at process start and handed to every
component that writes metrics, instead of registering module-level globals
into the default prometheus_client registry.
"""

import logging
from enum import Enum
from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, Histogram, generate_latest
from prometheus_client import start_http_server as _start_http_server

from .config import config
from .exceptions import MetricsRegistrationError

logger = logging.getLogger(__name__)


class RecommendationType(str, Enum):
    """Recommendation bands reported for every container."""

    LOWER_BOUND = "lower_bound"
    TARGET = "target"
    UPPER_BOUND = "upper_bound"


class ResourceName(str, Enum):
    CPU = "cpu"
    MEMORY = "memory"


# Label names, fixed at registration time.
VPA_RECOMMENDATION_LABELS = (
    "vpa_name",
    "namespace",
    "pod_selector",
    "container",
    "recommendation_type",
    "resource_name",
)
VPA_OBJECT_COUNT_LABELS = ("update_mode", "has_recommendation")
EXECUTION_STEP_LABELS = ("step",)

RECOMMENDATION_LATENCY_BUCKETS = (
    1.0,
    2.0,
    5.0,
    7.5,
    10.0,
    20.0,
    30.0,
    40.0,
    50.0,
    60.0,
    90.0,
    120.0,
    150.0,
    180.0,
    240.0,
    300.0,
    600.0,
    900.0,
    1800.0,
)

EXECUTION_LATENCY_BUCKETS = (0.01, 0.02, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0, 300.0)


def create_execution_time_metric(namespace: str, help_text: str, registry: CollectorRegistry) -> Histogram:
    """Creates the per-step execution latency histogram of a component's main loop."""
    return Histogram(
        "execution_latency_seconds",
        help_text,
        EXECUTION_STEP_LABELS,
        namespace=namespace,
        buckets=EXECUTION_LATENCY_BUCKETS,
        registry=registry,
    )


class MetricsRegistry:
    """
    The four metrics of the VPA Recommender, registered into one CollectorRegistry.

    :param registry: The prometheus_client registry to register into. A private
                     registry is created when omitted.
    :param namespace: Prefix of every metric name.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = config.METRICS_NAMESPACE):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.namespace = namespace

        try:
            self.vpa_recommendations = Gauge(
                "vpa_recommendation",
                "Recommendation from the VPA",
                VPA_RECOMMENDATION_LABELS,
                namespace=namespace,
                registry=self.registry,
            )
            self.vpa_object_count = Gauge(
                "vpa_objects_count",
                "Number of VPA objects present in the cluster.",
                VPA_OBJECT_COUNT_LABELS,
                namespace=namespace,
                registry=self.registry,
            )
            self.recommendation_latency = Histogram(
                "recommendation_latency_seconds",
                "Time elapsed from creating a valid VPA configuration to the first recommendation.",
                namespace=namespace,
                buckets=RECOMMENDATION_LATENCY_BUCKETS,
                registry=self.registry,
            )
            self.function_latency = create_execution_time_metric(
                namespace, "Time spent in various parts of VPA Recommender main loop.", self.registry
            )
        except ValueError as e:
            raise MetricsRegistrationError(f"Failed to register recommender metrics: {e}") from e

        logger.debug("Registered VPA Recommender metrics under namespace '%s'", namespace)

    def expose(self) -> bytes:
        """Renders the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    def start_http_server(self, address: str = config.METRICS_ADDRESS, port: int = config.METRICS_PORT):
        """Serves this registry on ``http://<address>:<port>/metrics`` from a daemon thread."""
        logger.info("Serving VPA Recommender metrics on %s:%s", address, port)
        return _start_http_server(port, addr=address, registry=self.registry)
