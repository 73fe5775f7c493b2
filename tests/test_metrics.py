"""Tests for engine metrics collection."""

import pytest

from commandless.metrics import EngineMetrics, get_global_metrics


@pytest.fixture
def collector():
    return EngineMetrics()


def test_empty(collector):
    assert collector.get_route_distribution() == {}
    assert collector.get_p50_latency() == 0.0
    assert collector.get_p95_latency() == 0.0
    assert collector.get_average_score() == 0.0
    assert collector.get_summary() == "No metrics collected yet"


def test_record_decision(collector):
    collector.record_decision(route="execute", path="heuristic", score=0.8, latency_ms=2.0)
    collector.record_decision(route="clarify", path="ai", score=0.4, latency_ms=4.0, cost_usd=0.001)

    assert collector.counters["decisions_total"] == 2
    assert collector.counters["route_execute"] == 1
    assert collector.counters["path_ai"] == 1
    assert collector.get_route_distribution()["clarify"] == 0.5
    assert collector.get_average_score() == pytest.approx(0.6)
    assert collector.get_total_cost() == pytest.approx(0.001)


def test_unknown_route_only_counts_total(collector):
    collector.record_decision(route="other", path="elsewhere")
    assert collector.counters["decisions_total"] == 1
    assert "route_other" not in collector.counters


def test_latency_percentiles(collector):
    for ms in range(1, 101):
        collector.record_decision(route="execute", path="heuristic", latency_ms=float(ms))
    assert collector.get_p50_latency() == 50.5
    assert collector.get_p95_latency() == 96.0
    assert collector.get_p99_latency() == 100.0


def test_samples_are_bounded():
    collector = EngineMetrics(max_samples=5)
    for _ in range(10):
        collector.record_decision(route="execute", path="heuristic", latency_ms=1.0)
    assert len(collector.histograms["latency_ms"]) == 5
    assert len(collector.decisions) == 5
    assert collector.counters["decisions_total"] == 10


def test_summary_and_reset(collector):
    collector.record_decision(route="rejected", path="filter")
    collector.record_ai_unavailable()

    summary = collector.get_summary()
    assert "Commandless Metrics Summary" in summary
    assert "Total messages: 1" in summary
    assert "AI unavailable: 1" in summary

    collector.reset()
    assert collector.counters["decisions_total"] == 0
    assert collector.counters["ai_unavailable"] == 0
    assert collector.to_dict()["route_distribution"] == {}


def test_global_metrics_is_singleton():
    assert get_global_metrics() is get_global_metrics()
