# src/vpa_metrics/metrics/execution.py
"""Timing of the individual steps of a main-loop iteration."""

import logging
import time
from typing import Callable

from prometheus_client import Histogram

logger = logging.getLogger(__name__)

TOTAL_STEP = "total"


class ExecutionTimer:
    """
    Measures one iteration of a loop and records each step into a histogram
    labelled by ``step``.

    A timer is started on construction. ``observe_step`` records the time
    since the previous step (or since start), ``observe_total`` the time
    since start.
    """

    def __init__(self, histogram: Histogram, clock: Callable[[], float] = time.monotonic):
        self._histogram = histogram
        self._clock = clock
        self._start = clock()
        self._last = self._start

    def observe_step(self, step: str) -> float:
        now = self._clock()
        elapsed = now - self._last
        self._histogram.labels(step).observe(elapsed)
        self._last = now
        logger.debug("Step '%s' took %.3fs", step, elapsed)
        return elapsed

    def observe_total(self) -> float:
        elapsed = self._clock() - self._start
        self._histogram.labels(TOTAL_STEP).observe(elapsed)
        return elapsed

    def stop(self) -> float:
        return self.observe_total()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.observe_total()
        return False
