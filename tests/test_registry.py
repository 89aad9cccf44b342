import threading

import pytest

from helpers import load_observations, make_observations
from metrics_relay.errors import DeclarationConflict, DecodeError, UnknownMetric
from metrics_relay.models import DEFAULT_BUCKETS, MetricKind, Observation
from metrics_relay.registry import MetricsRegistry, canonical_labels


def _family(registry, name):
    return next(family for family in registry.snapshot() if family.name == name)


def test_counter_sums_values(registry):
    load_observations(registry, ['foo_total{code="200"} 1.5', 'foo_total{code="200"} 2.25', 'foo_total{code="200"} 4'])
    (series,) = _family(registry, "foo_total").series
    assert series.state.value == 7.75


def test_gauge_keeps_last_value(registry):
    load_observations(registry, ["baz_size{} 1", "baz_size{} 9", "baz_size{} 4"])
    (series,) = _family(registry, "baz_size").series
    assert series.state.value == 4.0


def test_histogram_cumulative_counts(registry):
    for value in (0.123, 0.234, 0.501, 8.0):
        registry.observe(Observation(name="bar_seconds", value=value))
    (series,) = _family(registry, "bar_seconds").series
    counts = [cumulative for _, cumulative in series.state.buckets]
    assert counts == [0, 0, 0, 2, 3, 3, 3, 4]
    assert counts == sorted(counts)
    assert series.state.count == 4
    assert series.state.sum == pytest.approx(8.858)


def test_histogram_value_on_boundary_lands_in_that_bucket(registry):
    registry.observe(Observation(name="bar_seconds", value=0.5))
    registry.observe(Observation(name="bar_seconds", value=100))
    (series,) = _family(registry, "bar_seconds").series
    assert dict(series.state.buckets)[0.5] == 1
    assert dict(series.state.buckets)[10.0] == 1
    assert series.state.count == 2


def test_histogram_without_buckets_gets_defaults():
    registry = MetricsRegistry([Observation(name="req_seconds", type=MetricKind.HISTOGRAM)])
    registry.observe(Observation(name="req_seconds", value=0.3))
    (series,) = _family(registry, "req_seconds").series
    assert tuple(bound for bound, _ in series.state.buckets) == DEFAULT_BUCKETS


def test_label_order_does_not_matter(registry):
    registry.observe(Observation(name="foo_total", labels={"a": "1", "b": "2"}, value=1))
    registry.observe(Observation(name="foo_total", labels={"b": "2", "a": "1"}, value=2))
    (series,) = _family(registry, "foo_total").series
    assert series.labels == canonical_labels({"a": "1", "b": "2"})
    assert series.state.value == 3.0


def test_redeclaring_same_kind_refreshes_help_only(registry):
    load_observations(registry, ['foo_total{code="200"} 3'])
    registry.observe(Observation(name="foo_total", type=MetricKind.COUNTER, help="Foos, counted."))
    family = _family(registry, "foo_total")
    assert family.help == "Foos, counted."
    assert family.series[0].state.value == 3.0


def test_redeclaring_different_kind_conflicts(registry):
    load_observations(registry, ['foo_total{code="200"} 3'])
    before = registry.snapshot()
    with pytest.raises(DeclarationConflict):
        registry.observe(Observation(name="foo_total", type=MetricKind.GAUGE, help="changed"))
    assert registry.snapshot() == before


def test_rebucketing_without_series_is_accepted(registry):
    registry.observe(Observation(name="bar_seconds", type=MetricKind.HISTOGRAM, buckets=(1, 2)))
    registry.observe(Observation(name="bar_seconds", value=1.5))
    (series,) = _family(registry, "bar_seconds").series
    assert series.state.buckets == ((1.0, 0), (2.0, 1))


def test_rebucketing_with_series_conflicts(registry):
    registry.observe(Observation(name="bar_seconds", value=0.2))
    before = registry.snapshot()
    with pytest.raises(DeclarationConflict):
        registry.observe(Observation(name="bar_seconds", type=MetricKind.HISTOGRAM, buckets=(1, 2)))
    assert registry.snapshot() == before


def test_value_for_unknown_metric(registry):
    before = registry.snapshot()
    with pytest.raises(UnknownMetric):
        registry.observe(Observation(name="nope_total", value=1))
    assert "nope_total" not in registry
    assert registry.snapshot() == before


def test_declaration_does_not_create_series(registry):
    assert all(not family.series for family in registry.snapshot())
    assert len(registry) == 4


def test_concurrent_observers_do_not_lose_updates(registry):
    observations = make_observations(['foo_total{code="200"} 1'] * 500)

    def worker():
        for obs in observations:
            registry.observe(obs)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    (series,) = _family(registry, "foo_total").series
    assert series.state.value == 4000.0


def test_histogram_rejects_le_label(registry):
    before = registry.snapshot()
    with pytest.raises(DecodeError):
        registry.observe(Observation(name="bar_seconds", labels={"le": "x"}, value=0.2))
    assert registry.snapshot() == before


def test_le_label_is_allowed_outside_histograms(registry):
    registry.observe(Observation(name="foo_total", labels={"le": "x"}, value=1))
    (series,) = _family(registry, "foo_total").series
    assert series.labels == (("le", "x"),)
