"""Fault-injection (chaos) events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from archsim.core.types import FaultId


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class FaultEffects:
    """Multiplicative degradation applied to computed metrics.

    `affected_components` is informational only: effects apply to the whole
    design, not to the listed component types.
    """

    latency_multiplier: float | None = None
    availability_reduction: float | None = None
    cost_multiplier: float | None = None
    affected_components: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        if self.latency_multiplier is not None and self.latency_multiplier < 1.0:
            raise ValueError(f"latency_multiplier must be >= 1, got {self.latency_multiplier}")
        if self.availability_reduction is not None and not (
            0.0 <= self.availability_reduction <= 1.0
        ):
            raise ValueError(
                f"availability_reduction must be in [0, 1], got {self.availability_reduction}"
            )
        if self.cost_multiplier is not None and self.cost_multiplier < 1.0:
            raise ValueError(f"cost_multiplier must be >= 1, got {self.cost_multiplier}")
        object.__setattr__(self, "affected_components", tuple(self.affected_components))


@dataclass(frozen=True)
class FaultEvent:
    id: FaultId
    name: str
    description: str
    severity: Severity
    effects: FaultEffects


class ActiveFaults:
    """Ordered set of currently active events, toggled by start/stop.

    The engine only reads `snapshot()`; activation order is preserved.
    """

    def __init__(self) -> None:
        self._events: dict[FaultId, FaultEvent] = {}

    def start(self, event: FaultEvent) -> None:
        if event.id not in self._events:
            self._events[event.id] = event

    def stop(self, fault_id: FaultId) -> None:
        self._events.pop(fault_id, None)

    def clear(self) -> None:
        self._events.clear()

    def is_active(self, fault_id: FaultId) -> bool:
        return fault_id in self._events

    def snapshot(self) -> tuple[FaultEvent, ...]:
        return tuple(self._events.values())

    def __len__(self) -> int:
        return len(self._events)


CHAOS_EVENTS: tuple[FaultEvent, ...] = (
    FaultEvent(
        id=FaultId("az-down"),
        name="Availability Zone Down",
        description="An entire availability zone becomes unavailable",
        severity=Severity.HIGH,
        effects=FaultEffects(
            availability_reduction=0.3,
            latency_multiplier=1.5,
            affected_components=("web", "db", "cache"),
        ),
    ),
    FaultEvent(
        id=FaultId("cache-miss-storm"),
        name="Cache Miss Storm",
        description="Cache hit rate drops to 10% due to key expiration",
        severity=Severity.MEDIUM,
        effects=FaultEffects(
            latency_multiplier=2.0,
            cost_multiplier=1.2,
            affected_components=("cache", "db"),
        ),
    ),
    FaultEvent(
        id=FaultId("database-failover"),
        name="Database Failover",
        description="Primary database fails, triggering failover",
        severity=Severity.HIGH,
        effects=FaultEffects(
            latency_multiplier=3.0,
            availability_reduction=0.1,
            affected_components=("db",),
        ),
    ),
    FaultEvent(
        id=FaultId("network-partition"),
        name="Network Partition",
        description="Network connectivity issues between regions",
        severity=Severity.CRITICAL,
        effects=FaultEffects(
            latency_multiplier=5.0,
            availability_reduction=0.5,
            affected_components=("api", "web", "db"),
        ),
    ),
    FaultEvent(
        id=FaultId("thundering-herd"),
        name="Thundering Herd",
        description="Massive spike in requests overwhelms system",
        severity=Severity.HIGH,
        effects=FaultEffects(
            latency_multiplier=4.0,
            availability_reduction=0.2,
            affected_components=("api", "web", "lb"),
        ),
    ),
    FaultEvent(
        id=FaultId("disk-full"),
        name="Disk Space Exhausted",
        description="Storage systems run out of disk space",
        severity=Severity.CRITICAL,
        effects=FaultEffects(
            availability_reduction=0.8,
            affected_components=("db", "object"),
        ),
    ),
    FaultEvent(
        id=FaultId("memory-leak"),
        name="Memory Leak",
        description="Application memory usage grows continuously",
        severity=Severity.MEDIUM,
        effects=FaultEffects(
            latency_multiplier=1.8,
            cost_multiplier=1.5,
            affected_components=("web", "api"),
        ),
    ),
    FaultEvent(
        id=FaultId("dns-outage"),
        name="DNS Outage",
        description="DNS resolution fails for external services",
        severity=Severity.HIGH,
        effects=FaultEffects(
            latency_multiplier=2.5,
            availability_reduction=0.3,
            affected_components=("api", "web"),
        ),
    ),
)


def fault_by_id(fault_id: str) -> FaultEvent | None:
    for event in CHAOS_EVENTS:
        if event.id == fault_id:
            return event
    return None
