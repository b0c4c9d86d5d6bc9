"""Core engine data model and graph resolution."""

from archsim.core.catalog import DEFAULT_CATALOG, Catalog, Category, ComponentType
from archsim.core.challenge import SAMPLE_CHALLENGES, SLA, Challenge
from archsim.core.design import Connection, Design, PlacedComponent, Protocol, TrafficProfile
from archsim.core.faults import CHAOS_EVENTS, ActiveFaults, FaultEffects, FaultEvent, Severity
from archsim.core.topology import critical_path, dominant_path, validate_design
from archsim.core.types import ChallengeId, ComponentId, ConnectionId, FaultId, TypeId

__all__ = [
    "CHAOS_EVENTS",
    "DEFAULT_CATALOG",
    "SAMPLE_CHALLENGES",
    "SLA",
    "ActiveFaults",
    "Catalog",
    "Category",
    "Challenge",
    "ChallengeId",
    "ComponentId",
    "ComponentType",
    "Connection",
    "ConnectionId",
    "Design",
    "FaultEffects",
    "FaultEvent",
    "FaultId",
    "PlacedComponent",
    "Protocol",
    "Severity",
    "TrafficProfile",
    "TypeId",
    "critical_path",
    "dominant_path",
    "validate_design",
]
