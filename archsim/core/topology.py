"""Graph resolution over a placed design."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, NamedTuple

import networkx as nx

from archsim.core.catalog import Category

if TYPE_CHECKING:
    from collections.abc import Sequence

    from archsim.core.catalog import Catalog
    from archsim.core.design import Connection, Design, PlacedComponent, TrafficProfile
    from archsim.core.types import ComponentId


class CriticalPath(NamedTuple):
    """Highest-latency chain through an acyclic design."""

    nodes: tuple[ComponentId, ...]
    latency_ms: float


def build_graph(
    placed: Sequence[PlacedComponent],
    connections: Sequence[Connection],
) -> nx.DiGraph:
    """Directed graph of placed components.

    Node and successor order follow placement and connection order.
    Connections whose endpoints are not placed are dropped.
    """
    graph = nx.DiGraph()
    for component in placed:
        # First placement wins for duplicated ids
        if component.id not in graph:
            graph.add_node(component.id, component=component)
    for connection in connections:
        if connection.from_id in graph and connection.to_id in graph:
            graph.add_edge(connection.from_id, connection.to_id, connection=connection)
    return graph


def entry_point(catalog: Catalog, placed: Sequence[PlacedComponent]) -> PlacedComponent | None:
    """First placed component whose catalog category is edge."""
    for component in placed:
        component_type = catalog.resolve(component)
        if component_type is not None and component_type.category is Category.EDGE:
            return component
    return None


def dominant_path(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    connections: Sequence[Connection],
) -> list[ComponentId]:
    """Single request path used for latency aggregation.

    Starts at the first edge-category component and repeatedly follows the
    first outgoing connection to a node not yet on the path. This is a
    heuristic: fan-out and redundant parallel paths are not considered, and
    any additional entry points are ignored.
    """
    entry = entry_point(catalog, placed)
    if entry is None:
        return []

    graph = build_graph(placed, connections)
    path = [entry.id]
    visited = {entry.id}
    current = entry.id

    while True:
        next_id = next((n for n in graph.successors(current) if n not in visited), None)
        if next_id is None:
            break
        path.append(next_id)
        visited.add(next_id)
        current = next_id

    return path


def critical_path(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    connections: Sequence[Connection],
    traffic: TrafficProfile,
    hop_overhead_ms: float = 5.0,
) -> CriticalPath:
    """Longest-latency path through the design, or empty if it has a cycle.

    Unlike `dominant_path` this considers every branch. Informational only.
    """
    graph = build_graph(placed, connections)
    if graph.number_of_nodes() == 0:
        return CriticalPath((), 0.0)

    try:
        order = list(nx.topological_sort(graph))
    except nx.NetworkXUnfeasible:
        return CriticalPath((), 0.0)

    own: dict[ComponentId, float] = {}
    for node_id in order:
        component: PlacedComponent = graph.nodes[node_id]["component"]
        component_type = catalog.resolve(component)
        if component_type is None:
            own[node_id] = 0.0
        else:
            own[node_id] = component_type.latency_fn(catalog.params_for(component), traffic)

    dist: dict[ComponentId, float] = {}
    prev: dict[ComponentId, ComponentId | None] = {}
    for node_id in order:
        best = max(graph.predecessors(node_id), key=lambda p: dist[p], default=None)
        if best is None:
            dist[node_id] = own[node_id]
        else:
            dist[node_id] = dist[best] + hop_overhead_ms + own[node_id]
        prev[node_id] = best

    end = max(order, key=lambda n: dist[n])
    nodes: list[ComponentId] = []
    cursor: ComponentId | None = end
    while cursor is not None:
        nodes.append(cursor)
        cursor = prev[cursor]
    nodes.reverse()

    return CriticalPath(tuple(nodes), dist[end])


def validate_design(catalog: Catalog, design: Design) -> tuple[bool, list[str]]:
    """Report malformed references and adjacency-rule breaches.

    Advisory only: the metrics and scoring pipeline tolerates every issue
    reported here.
    """
    warnings: list[str] = []

    id_counts = Counter(c.id for c in design.placed_components)
    for component_id, count in id_counts.items():
        if count > 1:
            warnings.append(f"component id {component_id} is used {count} times")

    by_id: dict[ComponentId, PlacedComponent] = {}
    for component in design.placed_components:
        by_id.setdefault(component.id, component)
    for component in design.placed_components:
        component_type = catalog.resolve(component)
        if component_type is None:
            warnings.append(f"component {component.id} has unknown type {component.type_id}")
            continue
        for key in component_type.invalid_overrides(component.params):
            warnings.append(
                f"component {component.id} param {key}={component.params[key]!r} is not a "
                f"number, using default {component_type.default_params[key]!r}"
            )

    degree: Counter[ComponentId] = Counter()
    for connection in design.connections:
        source = by_id.get(connection.from_id)
        target = by_id.get(connection.to_id)
        if source is None or target is None:
            missing = connection.from_id if source is None else connection.to_id
            warnings.append(f"connection {connection.id} references missing component {missing}")
            continue
        if connection.from_id == connection.to_id:
            warnings.append(f"connection {connection.id} connects {connection.from_id} to itself")

        degree[connection.from_id] += 1
        degree[connection.to_id] += 1

        source_type = catalog.resolve(source)
        if (
            source_type is not None
            and source_type.allowed_connections
            and target.type_id not in source_type.allowed_connections
        ):
            warnings.append(
                f"connection {connection.id}: {source_type.name} should not connect to "
                f"{catalog.display_name(target) or target.type_id}"
            )

    for component_id, count in degree.items():
        component_type = catalog.resolve(by_id[component_id])
        if (
            component_type is not None
            and component_type.max_connections is not None
            and count > component_type.max_connections
        ):
            warnings.append(
                f"component {component_id} has {count} connections "
                f"(max {component_type.max_connections})"
            )

    return (len(warnings) == 0, warnings)
