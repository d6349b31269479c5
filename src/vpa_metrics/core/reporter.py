# src/vpa_metrics/core/reporter.py
"""
Drives one metrics reporting cycle of the recommender over the VPA objects
it currently tracks.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Set, Union

from ..metrics.recommender import (
    ObjectCounter,
    new_execution_timer,
    observe_recommendation_latency,
    observe_vpa_recommendation,
)
from ..models.vpa import Vpa, VpaID
from .exceptions import InvalidVpaObjectError
from .registry import MetricsRegistry
from .telemetry import tracer

logger = logging.getLogger(__name__)


class MetricsReporter:
    """
    Reports recommendations, object counts and latencies for each cycle.

    The reporter remembers which VPAs already had a recommendation so that
    time-to-first-recommendation is observed once per object.
    """

    def __init__(self, registry: MetricsRegistry):
        self.registry = registry
        self._recommended: Set[VpaID] = set()

    def report(self, vpas: Iterable[Vpa]) -> ObjectCounter:
        vpas = list(vpas)
        with tracer.start_as_current_span("report_cycle") as span:
            span.set_attribute("vpa.count", len(vpas))
            timer = new_execution_timer(self.registry)

            counter = ObjectCounter()
            for vpa in vpas:
                counter.add(vpa)
                if vpa.has_recommendation():
                    observe_vpa_recommendation(self.registry, vpa)
            timer.observe_step("observe_recommendations")

            current = {vpa.id for vpa in vpas if vpa.has_recommendation()}
            for vpa in vpas:
                if vpa.id in current and vpa.id not in self._recommended:
                    observe_recommendation_latency(self.registry, vpa.created)
            # VPAs that lost their recommendation or were deleted are forgotten.
            self._recommended = current
            timer.observe_step("observe_latency")

            counter.observe(self.registry)
            timer.observe_step("observe_object_counts")

            total = timer.observe_total()

        logger.info("Reported metrics for %d VPA objects in %.3fs", len(vpas), total)
        return counter


def load_vpas(path: Union[str, Path]) -> List[Vpa]:
    """
    Reads VPA manifests from a JSON file holding a list of objects, a
    ``{"items": [...]}`` list or a single manifest. An optional top-level
    ``podSelector`` on each manifest is used as its pod selector.

    Raises:
        InvalidVpaObjectError: If the file is not valid JSON or holds invalid manifests.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidVpaObjectError(f"File '{path}' is not valid UTF-8 JSON: {e}") from e

    if isinstance(data, dict):
        if "items" in data:
            items = data["items"]
        elif "metadata" in data:
            items = [data]
        else:
            raise InvalidVpaObjectError(f"File '{path}' holds neither a VPA manifest nor a list of them")
    else:
        items = data
    if not isinstance(items, list):
        raise InvalidVpaObjectError(f"File '{path}' must hold a list of VPA objects")

    vpas = []
    for item in items:
        selector = item.get("podSelector") if isinstance(item, dict) else None
        vpas.append(Vpa.from_custom_resource(item, pod_selector=selector))
    logger.debug("Loaded %d VPA objects from %s", len(vpas), path)
    return vpas
