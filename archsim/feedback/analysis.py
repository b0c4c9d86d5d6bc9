"""Structural analysis of a design and the local feedback fallback."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from archsim.core.topology import critical_path
from archsim.feedback.models import Grade, SupplementaryFeedback

if TYPE_CHECKING:
    from collections.abc import Sequence

    from archsim.core.catalog import Catalog
    from archsim.core.challenge import Challenge
    from archsim.core.design import Connection, PlacedComponent
    from archsim.metrics.results import SimulationResult

type Complexity = Literal["simple", "moderate", "complex"]

LOAD_BALANCER_TAGS = frozenset({"load balancer", "load-balancer", "gateway"})
DATABASE_TAGS = frozenset({"database", "db", "cache"})
CACHING_TAGS = frozenset({"cache", "redis", "memcached"})
MONITORING_TAGS = frozenset({"monitoring", "metrics", "logging"})
SECURITY_TAGS = frozenset({"auth", "security", "firewall", "waf"})


@dataclass(frozen=True)
class SystemAnalysis:
    component_count: int
    connection_count: int
    has_load_balancer: bool
    has_database: bool
    has_caching: bool
    has_monitoring: bool
    has_security: bool
    has_redundancy: bool  # Some type placed more than once
    complexity: Complexity
    longest_chain: int  # Components on the critical path, 0 if cyclic
    longest_chain_latency_ms: float


def estimate_complexity(component_count: int, connection_count: int) -> Complexity:
    weight = component_count + connection_count * 0.5
    if weight < 5:
        return "simple"
    if weight < 10:
        return "moderate"
    return "complex"


def analyze_system(
    catalog: Catalog,
    challenge: Challenge,
    placed: Sequence[PlacedComponent],
    connections: Sequence[Connection],
) -> SystemAnalysis:
    tags: set[str] = set()
    for component in placed:
        component_type = catalog.resolve(component)
        if component_type is not None:
            tags |= component_type.provides

    type_counts = Counter(c.type_id for c in placed)
    chain = critical_path(catalog, placed, connections, challenge.traffic_profile)

    return SystemAnalysis(
        component_count=len(placed),
        connection_count=len(connections),
        has_load_balancer=bool(tags & LOAD_BALANCER_TAGS),
        has_database=bool(tags & DATABASE_TAGS),
        has_caching=bool(tags & CACHING_TAGS),
        has_monitoring=bool(tags & MONITORING_TAGS),
        has_security=bool(tags & SECURITY_TAGS),
        has_redundancy=any(count > 1 for count in type_counts.values()),
        complexity=estimate_complexity(len(placed), len(connections)),
        longest_chain=len(chain.nodes),
        longest_chain_latency_ms=chain.latency_ms,
    )


def cache_key(challenge: Challenge, placed: Sequence[PlacedComponent]) -> str:
    """Stable key from the challenge id and the multiset of placed types."""
    type_ids = ",".join(sorted(c.type_id for c in placed))
    return f"{challenge.id}-{type_ids}"


def grade_for(score: int) -> Grade:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def basic_feedback(
    analysis: SystemAnalysis,
    challenge: Challenge,
    core: SimulationResult,
) -> SupplementaryFeedback:
    """Deterministic review built only from the analysis and the rubric result.

    The grade starts from the rubric score and is marked down for structural
    gaps; the rubric score itself is left untouched.
    """
    pros: list[str] = []
    cons: list[str] = []
    basis = core.score

    if analysis.has_database:
        pros.append("Includes data persistence layer")
    else:
        cons.append("Missing database layer")
        basis -= 5

    if analysis.has_load_balancer:
        pros.append("Includes load balancing")
    elif analysis.component_count > 3:
        cons.append("Consider adding load balancer for scalability")
        basis -= 3

    if analysis.has_caching:
        pros.append("Includes caching layer")
    else:
        cons.append("Consider adding caching for performance")

    if analysis.has_redundancy:
        pros.append("Shows redundancy awareness")
    elif analysis.component_count > 4:
        cons.append("Consider adding redundancy for high availability")
        basis -= 3

    if analysis.component_count < 3:
        cons.append("System is too simple for the challenge")
        basis -= 10

    chain = (
        f" Longest request chain: {analysis.longest_chain} components "
        f"({analysis.longest_chain_latency_ms:.1f}ms)."
        if analysis.longest_chain
        else ""
    )

    return SupplementaryFeedback(
        pros=pros,
        cons=cons,
        detailed_analysis=(
            f"Basic analysis: {analysis.component_count} components, "
            f"{analysis.connection_count} connections. "
            f"{analysis.complexity} complexity.{chain}"
        ),
        optimal_solution=(
            "For this challenge, an optimal solution would include a load balancer, "
            "a replicated database, a caching layer, monitoring and security components."
        ),
        architecture_grade=grade_for(max(0, min(100, basis))),
        cost_optimization=(
            "Within budget" if core.metrics.cost <= challenge.budget else "Over budget"
        ),
        scalability_notes=(
            "Good scalability foundation"
            if analysis.has_load_balancer
            else "Consider scalability improvements"
        ),
        security_considerations=(
            "Security components present"
            if analysis.has_security
            else "Consider adding security layers"
        ),
        source="local",
    )
