"""Tests for fault events and the active fault set."""

import pytest

from archsim.core.faults import (
    CHAOS_EVENTS,
    ActiveFaults,
    FaultEffects,
    FaultEvent,
    Severity,
    fault_by_id,
)
from archsim.core.types import FaultId


def make_event(fault_id: str, **effects: float) -> FaultEvent:
    return FaultEvent(
        id=FaultId(fault_id),
        name=fault_id,
        description="",
        severity=Severity.LOW,
        effects=FaultEffects(**effects),  # type: ignore[arg-type]
    )


class TestFaultEffects:
    def test_library_has_eight_events(self) -> None:
        assert len(CHAOS_EVENTS) == 8
        assert len({e.id for e in CHAOS_EVENTS}) == 8

    def test_lookup(self) -> None:
        event = fault_by_id("az-down")
        assert event is not None
        assert event.effects.availability_reduction == 0.3
        assert event.effects.latency_multiplier == 1.5
        assert fault_by_id("meteor-strike") is None

    @pytest.mark.parametrize(
        "effects",
        [
            {"latency_multiplier": 0.5},
            {"availability_reduction": 1.5},
            {"availability_reduction": -0.1},
            {"cost_multiplier": 0.9},
        ],
    )
    def test_invalid_effects_rejected(self, effects: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            FaultEffects(**effects)  # type: ignore[arg-type]

    def test_affected_components_informational(self) -> None:
        """Affected components do not participate in equality."""
        a = FaultEffects(latency_multiplier=2.0, affected_components=("db",))
        b = FaultEffects(latency_multiplier=2.0, affected_components=("cache",))
        assert a == b


class TestActiveFaults:
    def test_start_preserves_activation_order(self) -> None:
        active = ActiveFaults()
        first = make_event("first", latency_multiplier=2.0)
        second = make_event("second", cost_multiplier=1.5)

        active.start(second)
        active.start(first)

        assert active.snapshot() == (second, first)
        assert len(active) == 2

    def test_start_is_idempotent(self) -> None:
        active = ActiveFaults()
        event = make_event("e", latency_multiplier=2.0)
        active.start(event)
        active.start(event)
        assert len(active) == 1

    def test_stop_and_clear(self) -> None:
        active = ActiveFaults()
        for event in CHAOS_EVENTS[:3]:
            active.start(event)

        active.stop(CHAOS_EVENTS[1].id)
        assert not active.is_active(CHAOS_EVENTS[1].id)
        assert active.snapshot() == (CHAOS_EVENTS[0], CHAOS_EVENTS[2])

        active.stop(FaultId("never-started"))
        active.clear()
        assert active.snapshot() == ()
