# src/vpa_metrics/metrics/recommender.py
"""
Metrics of the VPA Recommender: per-container recommendations, the census of
VPA objects, time to first recommendation and main-loop execution time.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, NamedTuple

from ..core.registry import MetricsRegistry, RecommendationType, ResourceName
from ..models.quantity import Quantity
from ..models.vpa import KNOWN_UPDATE_MODES, Vpa
from .execution import ExecutionTimer

logger = logging.getLogger(__name__)

# Above this many whole units the milli-unit view is not used.
_MILLI_VALUE_THRESHOLD = 10000000


def new_execution_timer(registry: MetricsRegistry) -> ExecutionTimer:
    """Provides a timer for one run of the Recommender's main loop."""
    return ExecutionTimer(registry.function_latency)


def observe_recommendation_latency(registry: MetricsRegistry, created: datetime) -> None:
    """Observes the time it took for the first recommendation to appear."""
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    registry.recommendation_latency.observe((datetime.now(timezone.utc) - created).total_seconds())


def to_float64(q: Quantity) -> float:
    v = q.value()
    if v > _MILLI_VALUE_THRESHOLD:
        return float(v)
    return float(q.milli_value()) * 0.001


def observe_vpa_recommendation(registry: MetricsRegistry, vpa: Vpa) -> None:
    """Sets the recommendation gauges of every container recommended for the VPA."""
    if vpa.recommendation is None:
        return

    gauge = registry.vpa_recommendations
    selector = vpa.pod_selector_string()
    for r in vpa.recommendation.container_recommendations:
        bands = (
            (RecommendationType.LOWER_BOUND, r.lower_bound),
            (RecommendationType.TARGET, r.target),
            (RecommendationType.UPPER_BOUND, r.upper_bound),
        )
        for band, resources in bands:
            for resource, quantity in ((ResourceName.CPU, resources.cpu), (ResourceName.MEMORY, resources.memory)):
                gauge.labels(
                    vpa.id.vpa_name,
                    vpa.id.namespace,
                    selector,
                    r.container_name,
                    band.value,
                    resource.value,
                ).set(to_float64(quantity))
        logger.debug(
            "Observed recommendation for %s/%s container %s", vpa.id.namespace, vpa.id.vpa_name, r.container_name
        )


class ObjectCounterKey(NamedTuple):
    mode: str
    has: bool


class ObjectCounter:
    """
    Splits VPA objects into buckets by update mode and recommendation presence.

    Every known mode is pre-seeded with zero counts so that a bucket that
    emptied since the previous cycle is reported as 0 instead of keeping its
    stale value. Create a new counter for each cycle.
    """

    def __init__(self):
        self._cnt: Dict[ObjectCounterKey, int] = {}
        for mode in KNOWN_UPDATE_MODES:
            self._cnt[ObjectCounterKey(mode, False)] = 0
            self._cnt[ObjectCounterKey(mode, True)] = 0

    def add(self, vpa: Vpa) -> None:
        """Updates the counter state to include the given VPA object."""
        mode = vpa.update_mode if vpa.update_mode is not None else ""
        if mode and mode not in KNOWN_UPDATE_MODES:
            logger.warning(
                "VPA %s/%s declares unknown update mode '%s'", vpa.id.namespace, vpa.id.vpa_name, mode
            )
        key = ObjectCounterKey(mode, vpa.has_recommendation())
        self._cnt[key] = self._cnt.get(key, 0) + 1

    def counts(self) -> Dict[ObjectCounterKey, int]:
        return dict(self._cnt)

    def observe(self, registry: MetricsRegistry) -> None:
        """Passes all the computed bucket values to the object count gauge."""
        for key, count in self._cnt.items():
            registry.vpa_object_count.labels(key.mode, "true" if key.has else "false").set(float(count))
        logger.debug("Observed VPA object counts: %s", self._cnt)
