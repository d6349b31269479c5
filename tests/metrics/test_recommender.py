# tests/metrics/test_recommender.py

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from vpa_metrics.metrics.recommender import (
    ObjectCounter,
    ObjectCounterKey,
    observe_recommendation_latency,
    observe_vpa_recommendation,
    to_float64,
)
from vpa_metrics.models.quantity import Quantity
from vpa_metrics.models.vpa import KNOWN_UPDATE_MODES, UpdateMode

RECOMMENDATION = "vpa_recommender_vpa_recommendation"
OBJECT_COUNT = "vpa_recommender_vpa_objects_count"
LATENCY = "vpa_recommender_recommendation_latency_seconds"


def _quantity(value, milli_value):
    q = MagicMock()
    q.value.return_value = value
    q.milli_value.return_value = milli_value
    return q


def _count(registry, mode, has):
    return registry.registry.get_sample_value(
        OBJECT_COUNT, {"update_mode": mode, "has_recommendation": "true" if has else "false"}
    )


class TestToFloat64:
    def test_millicores_keep_precision(self):
        assert to_float64(Quantity("100m")) == pytest.approx(0.1)
        assert to_float64(Quantity("1500m")) == pytest.approx(1.5)
        assert to_float64(Quantity("0")) == 0.0

    def test_large_values_use_whole_units(self):
        assert to_float64(Quantity("256Mi")) == 268435456.0
        assert to_float64(Quantity("20000000")) == 20000000.0

    def test_threshold_is_exclusive(self):
        """A value of exactly 10,000,000 still goes through the milli-value path."""
        q = _quantity(10000000, 10000000500)
        assert to_float64(q) == pytest.approx(10000000.5)
        q.milli_value.assert_called_once()

        assert to_float64(Quantity("10000000")) == 10000000.0

    def test_above_threshold_uses_value(self):
        q = _quantity(10000001, 1)
        assert to_float64(q) == 10000001.0
        q.milli_value.assert_not_called()

    @pytest.mark.parametrize(
        "smaller, larger",
        [
            ("1m", "2m"),
            ("100m", "1"),
            ("999", "9999999"),
            ("1Gi", "2Gi"),
            ("20000000", "20000001"),
        ],
    )
    def test_monotonic_within_each_branch(self, smaller, larger):
        assert to_float64(Quantity(smaller)) <= to_float64(Quantity(larger))


class TestObserveVpaRecommendation:
    def test_two_containers_produce_twelve_writes(self, metrics_registry, make_vpa):
        vpa = make_vpa(name="shop", namespace="prod", mode=UpdateMode.AUTO, containers=["app", "sidecar"])
        gauge = MagicMock()
        metrics_registry.vpa_recommendations = gauge

        observe_vpa_recommendation(metrics_registry, vpa)

        assert gauge.labels.call_count == 12
        assert gauge.labels.return_value.set.call_count == 12
        gauge.labels.assert_any_call("shop", "prod", "app=shop", "app", "lower_bound", "cpu")
        gauge.labels.assert_any_call("shop", "prod", "app=shop", "sidecar", "upper_bound", "memory")

    def test_converted_values(self, metrics_registry, make_vpa):
        vpa = make_vpa(name="shop", namespace="prod", mode=UpdateMode.AUTO, containers=["app", "sidecar"])

        observe_vpa_recommendation(metrics_registry, vpa)

        expected = {
            ("lower_bound", "cpu"): 0.1,
            ("lower_bound", "memory"): 268435456.0,
            ("target", "cpu"): 0.2,
            ("target", "memory"): 536870912.0,
            ("upper_bound", "cpu"): 0.4,
            ("upper_bound", "memory"): 1073741824.0,
        }
        for container in ("app", "sidecar"):
            for (band, resource), value in expected.items():
                labels = {
                    "vpa_name": "shop",
                    "namespace": "prod",
                    "pod_selector": "app=shop",
                    "container": container,
                    "recommendation_type": band,
                    "resource_name": resource,
                }
                assert metrics_registry.registry.get_sample_value(RECOMMENDATION, labels) == pytest.approx(value)

        samples = [s for m in metrics_registry.vpa_recommendations.collect() for s in m.samples]
        assert len(samples) == 12

    def test_no_recommendation_writes_nothing(self, metrics_registry, make_vpa):
        gauge = MagicMock()
        metrics_registry.vpa_recommendations = gauge

        observe_vpa_recommendation(metrics_registry, make_vpa())

        gauge.labels.assert_not_called()

    def test_reobserving_is_idempotent(self, metrics_registry, make_vpa):
        vpa = make_vpa(name="shop", containers=["app"])
        labels = {
            "vpa_name": "shop",
            "namespace": "default",
            "pod_selector": "app=shop",
            "container": "app",
            "recommendation_type": "target",
            "resource_name": "cpu",
        }

        observe_vpa_recommendation(metrics_registry, vpa)
        first = metrics_registry.registry.get_sample_value(RECOMMENDATION, labels)
        observe_vpa_recommendation(metrics_registry, vpa)

        assert metrics_registry.registry.get_sample_value(RECOMMENDATION, labels) == first == pytest.approx(0.2)


class TestObjectCounter:
    def test_new_counter_is_pre_seeded(self):
        counts = ObjectCounter().counts()

        assert len(counts) == 2 * len(KNOWN_UPDATE_MODES)
        assert all(v == 0 for v in counts.values())
        assert ObjectCounterKey("", False) not in counts

    def test_empty_counter_flushes_zero_for_every_known_bucket(self, metrics_registry):
        ObjectCounter().observe(metrics_registry)

        for mode in KNOWN_UPDATE_MODES:
            for has in (True, False):
                assert _count(metrics_registry, mode, has) == 0.0

    def test_k_adds_to_same_bucket(self, metrics_registry, make_vpa):
        counter = ObjectCounter()
        for i in range(5):
            counter.add(make_vpa(name=f"vpa-{i}", mode="Auto", containers=["app"]))

        counter.observe(metrics_registry)

        assert _count(metrics_registry, "Auto", True) == 5.0
        assert _count(metrics_registry, "Auto", False) == 0.0
        assert _count(metrics_registry, "Off", True) == 0.0

    def test_unset_mode_is_its_own_bucket(self, metrics_registry, make_vpa):
        counter = ObjectCounter()
        counter.add(make_vpa(mode=None))

        counter.observe(metrics_registry)

        assert counter.counts()[ObjectCounterKey("", False)] == 1
        assert _count(metrics_registry, "", False) == 1.0
        assert _count(metrics_registry, "", True) is None
        assert _count(metrics_registry, "Auto", True) == 0.0
        assert _count(metrics_registry, "Off", False) == 0.0

    def test_unknown_mode_creates_bucket_on_demand(self, metrics_registry, make_vpa, caplog):
        counter = ObjectCounter()
        counter.add(make_vpa(mode="Experimental", containers=["app"]))

        counter.observe(metrics_registry)

        assert _count(metrics_registry, "Experimental", True) == 1.0
        assert "unknown update mode 'Experimental'" in caplog.text

    def test_observe_twice_is_idempotent(self, metrics_registry, make_vpa):
        counter = ObjectCounter()
        counter.add(make_vpa(name="a", mode="Initial", containers=["app"]))
        counter.add(make_vpa(name="b", mode="Initial"))

        counter.observe(metrics_registry)
        first = {k: _count(metrics_registry, k.mode, k.has) for k in counter.counts()}
        counter.observe(metrics_registry)
        second = {k: _count(metrics_registry, k.mode, k.has) for k in counter.counts()}

        assert first == second
        assert second[ObjectCounterKey("Initial", True)] == 1.0
        assert second[ObjectCounterKey("Initial", False)] == 1.0

    def test_fresh_counter_resets_stale_buckets(self, metrics_registry, make_vpa):
        counter = ObjectCounter()
        counter.add(make_vpa(mode="Recreate", containers=["app"]))
        counter.observe(metrics_registry)
        assert _count(metrics_registry, "Recreate", True) == 1.0

        ObjectCounter().observe(metrics_registry)

        assert _count(metrics_registry, "Recreate", True) == 0.0


class TestObserveRecommendationLatency:
    def test_records_seconds_since_creation(self, metrics_registry, now):
        observe_recommendation_latency(metrics_registry, now - timedelta(seconds=45))

        registry = metrics_registry.registry
        assert registry.get_sample_value(f"{LATENCY}_count") == 1.0
        assert 45.0 <= registry.get_sample_value(f"{LATENCY}_sum") < 50.0
        assert registry.get_sample_value(f"{LATENCY}_bucket", {"le": "40.0"}) == 0.0
        assert registry.get_sample_value(f"{LATENCY}_bucket", {"le": "60.0"}) == 1.0

    def test_naive_timestamps_are_treated_as_utc(self, metrics_registry, now):
        naive = (now - timedelta(seconds=3)).replace(tzinfo=None)

        observe_recommendation_latency(metrics_registry, naive)

        assert metrics_registry.registry.get_sample_value(f"{LATENCY}_bucket", {"le": "5.0"}) == 1.0

    def test_negative_durations_are_passed_through(self, metrics_registry, now):
        observe_recommendation_latency(metrics_registry, now + timedelta(seconds=120))

        assert metrics_registry.registry.get_sample_value(f"{LATENCY}_sum") < 0
        assert metrics_registry.registry.get_sample_value(f"{LATENCY}_bucket", {"le": "1.0"}) == 1.0
