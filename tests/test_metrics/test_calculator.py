"""Tests for the metrics calculator."""

import math

import pytest

from archsim.config import EngineConfig
from archsim.core.catalog import DEFAULT_CATALOG
from archsim.core.design import Connection, PlacedComponent, TrafficProfile
from archsim.core.faults import FaultEffects, FaultEvent, Severity, fault_by_id
from archsim.core.types import ComponentId, ConnectionId, FaultId, TypeId
from archsim.metrics.calculator import (
    bottleneck_capacity,
    compute_metrics,
    series_availability,
    total_cost,
)

TRAFFIC = TrafficProfile(rps=1000, read_ratio=0.8)


def place(component_id: str, type_id: str, **params: object) -> PlacedComponent:
    return PlacedComponent(id=ComponentId(component_id), type_id=TypeId(type_id), params=params)


def connect(from_id: str, to_id: str) -> Connection:
    return Connection(
        id=ConnectionId(f"{from_id}->{to_id}"),
        from_id=ComponentId(from_id),
        to_id=ComponentId(to_id),
    )


def make_fault(fault_id: str, **effects: float) -> FaultEvent:
    return FaultEvent(
        id=FaultId(fault_id),
        name=fault_id,
        description="",
        severity=Severity.MEDIUM,
        effects=FaultEffects(**effects),  # type: ignore[arg-type]
    )


class TestSingleGateway:
    """A lone API gateway at 1000 rps with default params (2 replicas)."""

    def test_metrics(self) -> None:
        metrics = compute_metrics(DEFAULT_CATALOG, [place("gw", "api-gateway")], [], TRAFFIC)

        assert metrics.latency.p50 == pytest.approx(4.8)
        assert metrics.latency.p95 == pytest.approx(9.0)
        assert metrics.latency.p99 == pytest.approx(12.0)
        assert metrics.availability == pytest.approx(0.9999)
        assert metrics.cost == pytest.approx(101.0)
        assert metrics.throughput == pytest.approx(1000.0)
        assert metrics.main_path == ("gw",)

    def test_replica_override(self) -> None:
        metrics = compute_metrics(
            DEFAULT_CATALOG, [place("gw", "api-gateway", replicas=4)], [], TRAFFIC
        )
        assert metrics.cost == pytest.approx(201.0)

    def test_latency_fault_doubles_percentiles(self) -> None:
        fault = make_fault("slow", latency_multiplier=2.0)
        metrics = compute_metrics(
            DEFAULT_CATALOG, [place("gw", "api-gateway")], [], TRAFFIC, [fault]
        )
        assert metrics.latency.p95 == pytest.approx(18.0)
        assert metrics.availability == pytest.approx(0.9999)
        assert metrics.cost == pytest.approx(101.0)


class TestDegenerateDesigns:
    def test_empty_design(self) -> None:
        metrics = compute_metrics(DEFAULT_CATALOG, [], [], TRAFFIC)

        assert metrics.latency.p50 == pytest.approx(800.0)
        assert metrics.latency.p95 == pytest.approx(1500.0)
        assert metrics.latency.p99 == pytest.approx(2000.0)
        assert metrics.availability == 0.0
        assert metrics.cost == 0.0
        assert metrics.throughput == 1000.0
        assert metrics.main_path == ()

    def test_faults_scale_degenerate_latency(self) -> None:
        fault = make_fault("slow", latency_multiplier=2.0)
        metrics = compute_metrics(DEFAULT_CATALOG, [], [], TRAFFIC, [fault])
        assert metrics.latency.p95 == pytest.approx(3000.0)

    def test_no_entry_point(self) -> None:
        """Without an edge component latency is degenerate but the rest is computed."""
        placed = [place("web", "web-app")]
        metrics = compute_metrics(DEFAULT_CATALOG, placed, [], TRAFFIC)

        assert metrics.latency.p95 == pytest.approx(1500.0)
        assert metrics.availability == pytest.approx(1 - 0.005**2)
        assert metrics.cost == pytest.approx(140.0)
        assert metrics.main_path == ()


class TestPathLatency:
    def test_hop_overhead(self) -> None:
        placed = [place("gw", "api-gateway"), place("web", "web-app")]
        metrics = compute_metrics(DEFAULT_CATALOG, placed, [connect("gw", "web")], TRAFFIC)

        # 6 + 17.5 + one 5ms hop
        assert metrics.latency.p50 == pytest.approx(28.5 * 0.8)
        assert metrics.main_path == ("gw", "web")

    def test_components_off_path_add_no_latency(self) -> None:
        placed = [place("gw", "api-gateway"), place("mon", "monitoring"), place("q", "queue")]
        metrics = compute_metrics(DEFAULT_CATALOG, placed, [], TRAFFIC)
        assert metrics.latency.p95 == pytest.approx(9.0)

    def test_unknown_type_on_path_counts_as_hop(self) -> None:
        placed = [place("gw", "api-gateway"), place("x", "flux-capacitor")]
        metrics = compute_metrics(DEFAULT_CATALOG, placed, [connect("gw", "x")], TRAFFIC)

        assert metrics.latency.p50 == pytest.approx(11.0 * 0.8)
        assert metrics.main_path == ("gw", "x")

    def test_duplicate_id_resolves_to_first_placement(self) -> None:
        """The entry point and its latency come from the same placed component."""
        placed = [place("x", "api-gateway"), place("x", "web-app")]
        metrics = compute_metrics(DEFAULT_CATALOG, placed, [], TRAFFIC)

        assert metrics.main_path == ("x",)
        assert metrics.latency.p95 == pytest.approx(9.0)

    def test_custom_hop_overhead(self) -> None:
        placed = [place("gw", "api-gateway"), place("web", "web-app")]
        config = EngineConfig(hop_overhead_ms=0.0)
        metrics = compute_metrics(
            DEFAULT_CATALOG, placed, [connect("gw", "web")], TRAFFIC, config=config
        )
        assert metrics.latency.p50 == pytest.approx(23.5 * 0.8)


class TestAggregates:
    def test_unknown_type_availability_and_cost(self) -> None:
        placed = [place("gw", "api-gateway"), place("x", "flux-capacitor")]

        assert series_availability(DEFAULT_CATALOG, placed, EngineConfig()) == pytest.approx(
            0.9999 * 0.5
        )
        assert total_cost(DEFAULT_CATALOG, placed, TRAFFIC) == pytest.approx(101.0)

    def test_bottleneck_is_smallest_replica_count(self) -> None:
        placed = [place("gw", "api-gateway"), place("q", "serverless")]
        assert bottleneck_capacity(DEFAULT_CATALOG, placed, EngineConfig()) == 1000.0
        assert bottleneck_capacity(DEFAULT_CATALOG, [], EngineConfig()) == math.inf

    def test_throughput_capped_by_bottleneck(self) -> None:
        traffic = TrafficProfile(rps=5000)
        metrics = compute_metrics(DEFAULT_CATALOG, [place("gw", "api-gateway")], [], traffic)
        assert metrics.throughput == pytest.approx(2000.0)


class TestFaults:
    def test_availability_reductions_compound(self) -> None:
        placed = [place("gw", "api-gateway")]
        faults = [
            make_fault("a", availability_reduction=0.3),
            make_fault("b", availability_reduction=0.5),
        ]
        metrics = compute_metrics(DEFAULT_CATALOG, placed, [], TRAFFIC, faults)
        assert metrics.availability == pytest.approx(0.9999 * 0.7 * 0.5)

    def test_library_event(self) -> None:
        fault = fault_by_id("cache-miss-storm")
        assert fault is not None
        metrics = compute_metrics(
            DEFAULT_CATALOG, [place("gw", "api-gateway")], [], TRAFFIC, [fault]
        )

        assert metrics.latency.p95 == pytest.approx(18.0)
        assert metrics.cost == pytest.approx(101.0 * 1.2)

    def test_full_reduction_zeroes_availability(self) -> None:
        fault = make_fault("gone", availability_reduction=1.0)
        metrics = compute_metrics(
            DEFAULT_CATALOG, [place("gw", "api-gateway")], [], TRAFFIC, [fault]
        )
        assert metrics.availability == 0.0

    def test_inputs_unchanged(self) -> None:
        placed = [place("gw", "api-gateway")]
        fault = make_fault("slow", latency_multiplier=3.0)
        first = compute_metrics(DEFAULT_CATALOG, placed, [], TRAFFIC, [fault])
        second = compute_metrics(DEFAULT_CATALOG, placed, [], TRAFFIC, [fault])
        assert first == second
        assert placed[0].params == {}
