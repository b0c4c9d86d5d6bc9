"""Tests for structural analysis and the local feedback fallback."""

import pytest

from archsim.core.catalog import DEFAULT_CATALOG
from archsim.core.challenge import Challenge
from archsim.core.design import Connection, PlacedComponent
from archsim.core.types import ComponentId, ConnectionId, TypeId
from archsim.feedback.analysis import (
    analyze_system,
    basic_feedback,
    cache_key,
    estimate_complexity,
    grade_for,
)
from archsim.metrics.calculator import compute_metrics
from archsim.metrics.results import SimulationResult
from archsim.scoring.rubric import score_design


def place(component_id: str, type_id: str) -> PlacedComponent:
    return PlacedComponent(id=ComponentId(component_id), type_id=TypeId(type_id))


def connect(from_id: str, to_id: str) -> Connection:
    return Connection(
        id=ConnectionId(f"{from_id}->{to_id}"),
        from_id=ComponentId(from_id),
        to_id=ComponentId(to_id),
    )


def core_result(
    challenge: Challenge, placed: list[PlacedComponent], connections: list[Connection]
) -> SimulationResult:
    metrics = compute_metrics(DEFAULT_CATALOG, placed, connections, challenge.traffic_profile)
    card = score_design(DEFAULT_CATALOG, challenge, placed, connections, metrics)
    return SimulationResult(
        metrics=metrics,
        score=card.score,
        feedback=card.feedback,
        violations=card.violations,
        recommendations=card.recommendations,
    )


THREE_TIER = [
    place("lb", "load-balancer"),
    place("web", "web-app"),
    place("cache", "cache"),
    place("db", "db-primary"),
]
THREE_TIER_LINKS = [connect("lb", "web"), connect("web", "cache"), connect("web", "db")]


class TestComplexity:
    @pytest.mark.parametrize(
        ("components", "connections", "expected"),
        [(2, 0, "simple"), (4, 1, "simple"), (5, 0, "moderate"), (6, 8, "complex")],
    )
    def test_thresholds(self, components: int, connections: int, expected: str) -> None:
        assert estimate_complexity(components, connections) == expected


class TestAnalyzeSystem:
    def test_three_tier(self, challenge: Challenge) -> None:
        analysis = analyze_system(DEFAULT_CATALOG, challenge, THREE_TIER, THREE_TIER_LINKS)

        assert analysis.component_count == 4
        assert analysis.connection_count == 3
        assert analysis.has_load_balancer
        assert analysis.has_database
        assert analysis.has_caching
        assert not analysis.has_monitoring
        assert not analysis.has_security
        assert not analysis.has_redundancy
        assert analysis.complexity == "moderate"
        assert analysis.longest_chain == 3
        assert analysis.longest_chain_latency_ms > 0

    def test_redundancy_and_security(self, challenge: Challenge) -> None:
        placed = [place("a", "web-app"), place("b", "web-app"), place("waf", "waf")]
        analysis = analyze_system(DEFAULT_CATALOG, challenge, placed, [])

        assert analysis.has_redundancy
        assert analysis.has_security
        assert analysis.longest_chain == 1

    def test_unknown_types_ignored(self, challenge: Challenge) -> None:
        analysis = analyze_system(DEFAULT_CATALOG, challenge, [place("x", "mystery")], [])
        assert analysis.component_count == 1
        assert not analysis.has_database


class TestCacheKey:
    def test_independent_of_ids_and_order(self, challenge: Challenge) -> None:
        first = [place("a", "web-app"), place("b", "cache")]
        second = [place("z", "cache"), place("y", "web-app")]

        assert cache_key(challenge, first) == cache_key(challenge, second)
        assert cache_key(challenge, first) == "test-cache,web-app"

    def test_counts_duplicates(self, challenge: Challenge) -> None:
        single = [place("a", "cache")]
        double = [place("a", "cache"), place("b", "cache")]
        assert cache_key(challenge, single) != cache_key(challenge, double)


class TestGrades:
    @pytest.mark.parametrize(
        ("score", "grade"),
        [(100, "A"), (90, "A"), (89, "B"), (80, "B"), (70, "C"), (60, "D"), (59, "F"), (0, "F")],
    )
    def test_grade_for(self, score: int, grade: str) -> None:
        assert grade_for(score) == grade


class TestBasicFeedback:
    def test_three_tier(self, challenge: Challenge) -> None:
        analysis = analyze_system(DEFAULT_CATALOG, challenge, THREE_TIER, THREE_TIER_LINKS)
        core = core_result(challenge, THREE_TIER, THREE_TIER_LINKS)

        feedback = basic_feedback(analysis, challenge, core)

        assert feedback.source == "local"
        assert "Includes data persistence layer" in feedback.pros
        assert "Includes load balancing" in feedback.pros
        assert "Includes caching layer" in feedback.pros
        assert "Basic analysis: 4 components, 3 connections." in feedback.detailed_analysis
        assert feedback.cost_optimization == "Within budget"
        assert feedback.scalability_notes == "Good scalability foundation"
        assert feedback.security_considerations == "Consider adding security layers"

    def test_tiny_design_marked_down(self, challenge: Challenge) -> None:
        placed = [place("gw", "api-gateway")]
        analysis = analyze_system(DEFAULT_CATALOG, challenge, placed, [])
        core = core_result(challenge, placed, [])

        feedback = basic_feedback(analysis, challenge, core)

        assert "System is too simple for the challenge" in feedback.cons
        assert "Missing database layer" in feedback.cons
        assert feedback.architecture_grade == "F"

    def test_rubric_score_untouched(self, challenge: Challenge) -> None:
        placed = [place("gw", "api-gateway")]
        analysis = analyze_system(DEFAULT_CATALOG, challenge, placed, [])
        core = core_result(challenge, placed, [])

        basic_feedback(analysis, challenge, core)

        assert core.score == 32
