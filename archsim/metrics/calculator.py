"""Latency, availability, cost and throughput of a placed design."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from archsim.config import EngineConfig
from archsim.core.catalog import replicas
from archsim.core.topology import dominant_path
from archsim.metrics.results import LatencyPercentiles, Metrics

if TYPE_CHECKING:
    from collections.abc import Sequence

    from archsim.core.catalog import Catalog
    from archsim.core.design import Connection, PlacedComponent, TrafficProfile
    from archsim.core.faults import FaultEvent
    from archsim.core.types import ComponentId

logger = logging.getLogger(__name__)


def dominant_path_latency(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    path: Sequence[ComponentId],
    traffic: TrafficProfile,
    config: EngineConfig,
) -> float:
    """Base latency accumulated along the dominant path.

    Degenerate designs (nothing placed, no entry point) get the fixed
    penalty latency. Unresolved component types add no latency of their own
    but still count as a hop.
    """
    if not placed or not path:
        return config.degenerate_latency_ms

    by_id: dict[ComponentId, PlacedComponent] = {}
    for component in placed:
        by_id.setdefault(component.id, component)
    total = 0.0
    for component_id in path:
        component = by_id[component_id]
        component_type = catalog.resolve(component)
        if component_type is None:
            continue
        total += component_type.latency_fn(catalog.params_for(component), traffic)

    return total + config.hop_overhead_ms * (len(path) - 1)


def series_availability(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    config: EngineConfig,
) -> float:
    """Product of every component's availability, as if wired in series."""
    if not placed:
        return 0.0

    factors = []
    for component in placed:
        component_type = catalog.resolve(component)
        if component_type is None:
            logger.debug("unknown type %s for %s", component.type_id, component.id)
            factors.append(config.unknown_availability)
        else:
            factors.append(component_type.availability_fn(catalog.params_for(component)))
    return math.prod(factors)


def total_cost(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    traffic: TrafficProfile,
) -> float:
    cost = 0.0
    for component in placed:
        component_type = catalog.resolve(component)
        if component_type is not None:
            cost += component_type.cost_fn(catalog.params_for(component), traffic)
    return cost


def bottleneck_capacity(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    config: EngineConfig,
) -> float:
    """Smallest replica capacity across the design; infinite when empty."""
    return min(
        (replicas(catalog.params_for(c)) * config.replica_capacity_rps for c in placed),
        default=math.inf,
    )


def compute_metrics(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    connections: Sequence[Connection],
    traffic: TrafficProfile,
    active_faults: Sequence[FaultEvent] = (),
    config: EngineConfig | None = None,
) -> Metrics:
    """Aggregate metrics of a design, degraded by the active fault events.

    Fault effects are applied in activation order and compound
    multiplicatively: two 30% availability reductions leave 0.7 * 0.7 of the
    baseline.
    """
    if config is None:
        config = EngineConfig()

    path = dominant_path(catalog, placed, connections) if placed else []

    latency = dominant_path_latency(catalog, placed, path, traffic, config)
    availability = series_availability(catalog, placed, config)
    cost = total_cost(catalog, placed, traffic)
    throughput = min(traffic.rps, bottleneck_capacity(catalog, placed, config))

    for event in active_faults:
        effects = event.effects
        if effects.latency_multiplier is not None:
            latency *= effects.latency_multiplier
        if effects.availability_reduction is not None:
            availability *= 1.0 - effects.availability_reduction
        if effects.cost_multiplier is not None:
            cost *= effects.cost_multiplier

    return Metrics(
        latency=LatencyPercentiles.from_base(latency, config),
        throughput=throughput,
        availability=availability,
        cost=cost,
        main_path=tuple(path),
    )
