"""Simulation metrics and result data structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from archsim.config import EngineConfig
    from archsim.core.types import ComponentId
    from archsim.feedback.models import SupplementaryFeedback


@dataclass(frozen=True)
class LatencyPercentiles:
    """Fixed-ratio percentiles of a single base latency, in milliseconds."""

    p50: float
    p95: float
    p99: float

    @classmethod
    def from_base(cls, base_ms: float, config: EngineConfig) -> LatencyPercentiles:
        return cls(
            p50=base_ms * config.p50_factor,
            p95=base_ms * config.p95_factor,
            p99=base_ms * config.p99_factor,
        )


@dataclass(frozen=True)
class Metrics:
    latency: LatencyPercentiles
    throughput: float  # requests/sec
    availability: float  # fraction in [0, 1]
    cost: float  # dollars per month
    main_path: tuple[ComponentId, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "latency": {
                "p50": self.latency.p50,
                "p95": self.latency.p95,
                "p99": self.latency.p99,
            },
            "throughput": self.throughput,
            "availability": self.availability,
            "cost": self.cost,
            "main_path": list(self.main_path),
        }


@dataclass(frozen=True)
class SimulationResult:
    """Output of one simulation run.

    `score` and the rubric lists are authoritative. Supplementary feedback is
    attached afterwards and never alters them; when the collaborator is
    unavailable `fallback_feedback` carries a locally derived summary.
    """

    metrics: Metrics
    score: int
    feedback: tuple[str, ...] = ()
    violations: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    supplementary_feedback: SupplementaryFeedback | None = None
    is_supplementary_feedback_available: bool = False
    fallback_feedback: SupplementaryFeedback | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "metrics": self.metrics.to_dict(),
            "score": self.score,
            "feedback": list(self.feedback),
            "violations": list(self.violations),
            "recommendations": list(self.recommendations),
            "supplementary_feedback": (
                self.supplementary_feedback.model_dump(by_alias=True)
                if self.supplementary_feedback is not None
                else None
            ),
            "is_supplementary_feedback_available": self.is_supplementary_feedback_available,
            "fallback_feedback": (
                self.fallback_feedback.model_dump(by_alias=True)
                if self.fallback_feedback is not None
                else None
            ),
        }
