"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class RequirementMatching(Enum):
    SUBSTRING = "substring"  # Case-sensitive substring over display names
    CAPABILITY = "capability"  # Capability tags, falling back to substring


@dataclass(frozen=True)
class RubricWeights:
    """Point values of the scoring rubric."""

    per_component: int = 4
    max_component_credit: int = 40
    per_connection: int = 2
    max_connectivity_credit: int = 20
    disconnected_penalty: int = 10

    must_have_credit: int = 5
    anti_pattern_penalty: int = 10

    latency_sla_credit: int = 8
    availability_sla_credit: int = 7
    sla_miss_penalty: int = 5

    budget_credit: int = 10
    budget_miss_penalty: int = 5

    # Architecture-quality bonus
    load_balancer_bonus: int = 3
    storage_bonus: int = 3
    caching_bonus: int = 2
    monitoring_bonus: int = 2
    max_quality_bonus: int = 10

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"rubric weight {f.name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class FeedbackConfig:
    """Settings for the supplementary-feedback collaborator."""

    api_key_env: str = "ANTHROPIC_API_KEY"
    model: str = "claude-3-haiku-20240307"
    max_tokens: int = 1500
    temperature: float = 0.2

    timeout_seconds: float = 10.0
    cache_ttl_seconds: float = 300.0  # 5 minutes
    max_requests_per_session: int = 10

    # Hard checks before spending a request
    min_components: int = 3
    min_components_when_simple: int = 5


@dataclass(frozen=True)
class EngineConfig:
    """Constants of the metrics model and the scoring policy."""

    # Latency model (ms)
    degenerate_latency_ms: float = 1000.0
    hop_overhead_ms: float = 5.0
    p50_factor: float = 0.8
    p95_factor: float = 1.5
    p99_factor: float = 2.0

    # Unresolved component types
    unknown_availability: float = 0.5

    # Requests/sec a single replica can serve
    replica_capacity_rps: float = 1000.0

    requirement_matching: RequirementMatching = RequirementMatching.CAPABILITY
    rubric: RubricWeights = field(default_factory=RubricWeights)
    feedback: FeedbackConfig = field(default_factory=FeedbackConfig)

    @classmethod
    def from_toml(cls, path: Path) -> EngineConfig:
        import tomllib

        with path.open("rb") as f:
            data = tomllib.load(f)

        engine_data: dict[str, Any] = dict(data.get("engine", {}))
        rubric_data = data.get("rubric", {})
        feedback_data = data.get("feedback", {})

        if "requirement_matching" in engine_data:
            engine_data["requirement_matching"] = RequirementMatching(
                engine_data["requirement_matching"]
            )

        rubric = RubricWeights(**rubric_data) if rubric_data else RubricWeights()
        feedback = FeedbackConfig(**feedback_data) if feedback_data else FeedbackConfig()

        return cls(rubric=rubric, feedback=feedback, **engine_data)
