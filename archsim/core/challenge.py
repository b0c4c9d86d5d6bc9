"""Design challenges: traffic, SLA, budget and textual requirements."""

from __future__ import annotations

from dataclasses import dataclass, field

from archsim.core.design import TrafficProfile
from archsim.core.types import ChallengeId


@dataclass(frozen=True)
class SLA:
    max_latency: float  # p95 milliseconds
    min_availability: float  # fraction in [0, 1]

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_availability <= 1.0:
            raise ValueError(f"min_availability must be in [0, 1], got {self.min_availability}")


@dataclass(frozen=True)
class Challenge:
    """A design problem selected by the player.

    `must_haves` and `anti_patterns` are free-text phrases matched against
    component capability tags and display names by the scoring rubric.
    """

    id: ChallengeId
    title: str
    traffic_profile: TrafficProfile
    budget: float  # dollars per month
    sla: SLA
    must_haves: tuple[str, ...] = ()
    anti_patterns: tuple[str, ...] = ()
    description: str = ""
    tags: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "must_haves", tuple(self.must_haves))
        object.__setattr__(self, "anti_patterns", tuple(self.anti_patterns))
        object.__setattr__(self, "tags", tuple(self.tags))


SAMPLE_CHALLENGES: tuple[Challenge, ...] = (
    Challenge(
        id=ChallengeId("c1"),
        title="Image Sharing",
        description="Design image sharing for 2M DAU",
        traffic_profile=TrafficProfile(
            rps=15000, read_ratio=0.9, payload_size=512 * 1024, peak_multiplier=3.0
        ),
        budget=3000.0,
        sla=SLA(max_latency=200.0, min_availability=0.999),
        must_haves=("CDN", "Cache", "Read Replicas", "Queue"),
        anti_patterns=("Single-AZ DB",),
        tags=("media", "read-heavy"),
    ),
    Challenge(
        id=ChallengeId("c2"),
        title="Social Feed",
        description="Design feed for 10M DAU",
        traffic_profile=TrafficProfile(
            rps=50000, read_ratio=0.95, payload_size=4096, peak_multiplier=2.5
        ),
        budget=5000.0,
        sla=SLA(max_latency=150.0, min_availability=0.9995),
        must_haves=("Sharding", "Cache"),
        anti_patterns=("Cache-as-sole-storage",),
        tags=("feed", "fan-out"),
    ),
    Challenge(
        id=ChallengeId("c3"),
        title="E-commerce",
        description="Design checkout and catalog for a mid-size online store",
        traffic_profile=TrafficProfile(
            rps=5000, read_ratio=0.8, payload_size=8192, peak_multiplier=4.0
        ),
        budget=2500.0,
        sla=SLA(max_latency=250.0, min_availability=0.999),
        must_haves=("Load Balancer", "DB", "Cache", "Search"),
        anti_patterns=("Single-AZ DB",),
        tags=("transactions",),
    ),
)


def challenge_by_id(challenge_id: str) -> Challenge | None:
    for challenge in SAMPLE_CHALLENGES:
        if challenge.id == challenge_id:
            return challenge
    return None
