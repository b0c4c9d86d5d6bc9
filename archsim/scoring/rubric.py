"""Scoring rubric: turns metrics and topology into a 0-100 score."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from archsim.config import EngineConfig, RequirementMatching

if TYPE_CHECKING:
    from collections.abc import Sequence

    from archsim.core.catalog import Catalog
    from archsim.core.challenge import Challenge
    from archsim.core.design import Connection, PlacedComponent
    from archsim.core.faults import FaultEvent
    from archsim.metrics.results import Metrics

MIN_SCORE = 0
MAX_SCORE = 100

EMPTY_DESIGN_VIOLATION = "No components placed in the system"
DISCONNECTED_VIOLATION = "Components are not connected"

# Keywords for the architecture-quality bonus, matched case-insensitively
LOAD_BALANCER_KEYWORDS = ("load balancer", "gateway")
STORAGE_KEYWORDS = ("db", "database", "cache")
CACHING_KEYWORDS = ("cache", "redis", "memcached")
MONITORING_KEYWORDS = ("monitoring", "logging", "metrics")

LATENCY_RECOMMENDATION = "Reduce request-path latency with caching or fewer hops"
AVAILABILITY_RECOMMENDATION = "Add replicas or redundant components to raise availability"
BUDGET_RECOMMENDATION = "Right-size instances or remove components to bring cost under budget"
RESILIENCE_RECOMMENDATIONS = (
    "Spread critical components across availability zones to survive infrastructure failures",
    "Add circuit breakers and retries with backoff to contain cascading failures",
)


@dataclass(frozen=True)
class ScoreCard:
    score: int
    feedback: tuple[str, ...] = ()
    violations: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()


def clamp_score(total: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, total))


def requirement_met(
    catalog: Catalog,
    placed: Sequence[PlacedComponent],
    phrase: str,
    matching: RequirementMatching = RequirementMatching.CAPABILITY,
) -> bool:
    """Whether any placed component satisfies a free-text requirement.

    Capability matching checks the lowercased phrase against the catalog
    type's capability tags, then falls back to display names. Display-name
    matching is a case-sensitive substring test.
    """
    tag = phrase.lower()
    for component in placed:
        component_type = catalog.resolve(component)
        if component_type is None:
            continue
        if matching is RequirementMatching.CAPABILITY and tag in component_type.provides:
            return True
        if phrase in component_type.name:
            return True
    return False


def _has_keyword(names: Sequence[str], keywords: tuple[str, ...]) -> bool:
    return any(keyword in name for name in names for keyword in keywords)


def score_design(
    catalog: Catalog,
    challenge: Challenge,
    placed: Sequence[PlacedComponent],
    connections: Sequence[Connection],
    metrics: Metrics,
    active_faults: Sequence[FaultEvent] = (),
    config: EngineConfig | None = None,
) -> ScoreCard:
    """Evaluate a design against a challenge.

    Steps are additive and the clamp to [0, 100] is applied once, after the
    last step.
    """
    if config is None:
        config = EngineConfig()
    weights = config.rubric

    if not placed:
        return ScoreCard(score=0, violations=(EMPTY_DESIGN_VIOLATION,))

    feedback: list[str] = []
    violations: list[str] = []
    recommendations: list[str] = []
    total = 0

    # Component presence
    total += min(weights.max_component_credit, weights.per_component * len(placed))
    feedback.append(f"{len(placed)} components placed")

    # Connectivity
    total += min(weights.max_connectivity_credit, weights.per_connection * len(connections))
    if len(placed) > 1 and not connections:
        total -= weights.disconnected_penalty
        violations.append(DISCONNECTED_VIOLATION)

    # Must-haves and anti-patterns
    for phrase in challenge.must_haves:
        if requirement_met(catalog, placed, phrase, config.requirement_matching):
            total += weights.must_have_credit
            feedback.append(f"Includes required component: {phrase}")
        else:
            violations.append(f"Missing required component: {phrase}")

    for phrase in challenge.anti_patterns:
        if requirement_met(catalog, placed, phrase, config.requirement_matching):
            total -= weights.anti_pattern_penalty
            violations.append(f"Anti-pattern detected: {phrase}")

    # SLA
    sla = challenge.sla
    if metrics.latency.p95 <= sla.max_latency:
        total += weights.latency_sla_credit
        feedback.append(
            f"P95 latency {metrics.latency.p95:.1f}ms meets SLA of {sla.max_latency:g}ms"
        )
    else:
        total -= weights.sla_miss_penalty
        violations.append(
            f"P95 latency {metrics.latency.p95:.1f}ms exceeds SLA of {sla.max_latency:g}ms"
        )
        recommendations.append(LATENCY_RECOMMENDATION)

    if metrics.availability >= sla.min_availability:
        total += weights.availability_sla_credit
        feedback.append(
            f"Availability {metrics.availability:.3%} meets SLA of {sla.min_availability:.3%}"
        )
    else:
        total -= weights.sla_miss_penalty
        violations.append(
            f"Availability {metrics.availability:.3%} below SLA of {sla.min_availability:.3%}"
        )
        recommendations.append(AVAILABILITY_RECOMMENDATION)

    # Budget
    if metrics.cost <= challenge.budget:
        total += weights.budget_credit
        feedback.append(
            f"Monthly cost ${metrics.cost:,.2f} within budget of ${challenge.budget:,.2f}"
        )
    else:
        total -= weights.budget_miss_penalty
        violations.append(
            f"Monthly cost ${metrics.cost:,.2f} exceeds budget of ${challenge.budget:,.2f}"
        )
        recommendations.append(BUDGET_RECOMMENDATION)

    # Architecture quality
    names = [name.lower() for c in placed if (name := catalog.display_name(c)) is not None]
    bonus = 0
    if _has_keyword(names, LOAD_BALANCER_KEYWORDS):
        bonus += weights.load_balancer_bonus
        feedback.append("Includes load balancing")
    if _has_keyword(names, STORAGE_KEYWORDS):
        bonus += weights.storage_bonus
        feedback.append("Includes a data storage layer")
    if _has_keyword(names, CACHING_KEYWORDS):
        bonus += weights.caching_bonus
        feedback.append("Includes caching")
    if _has_keyword(names, MONITORING_KEYWORDS):
        bonus += weights.monitoring_bonus
        feedback.append("Includes monitoring")
    total += min(weights.max_quality_bonus, bonus)

    if active_faults:
        recommendations.extend(RESILIENCE_RECOMMENDATIONS)

    return ScoreCard(
        score=clamp_score(total),
        feedback=tuple(feedback),
        violations=tuple(violations),
        recommendations=tuple(recommendations),
    )
