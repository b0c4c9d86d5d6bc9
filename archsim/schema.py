"""Wire models for designs and catalog data (camelCase JSON)."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from archsim.core.design import Connection, Design, PlacedComponent, Protocol, TrafficProfile
from archsim.core.faults import fault_by_id
from archsim.core.types import ComponentId, ConnectionId, TypeId

if TYPE_CHECKING:
    from archsim.core.catalog import ComponentType
    from archsim.core.challenge import Challenge
    from archsim.core.faults import FaultEvent


class UnknownFault(LookupError):
    def __init__(self, fault_id: str) -> None:
        super().__init__(f"unknown fault event: {fault_id}")
        self.fault_id = fault_id


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrafficProfileModel(_CamelModel):
    rps: float = Field(ge=0)
    read_ratio: float = Field(default=0.8, ge=0, le=1)
    payload_size: int = Field(default=1024, ge=0)
    peak_multiplier: float = Field(default=2.0, ge=1)

    def to_traffic(self) -> TrafficProfile:
        return TrafficProfile(
            rps=self.rps,
            read_ratio=self.read_ratio,
            payload_size=self.payload_size,
            peak_multiplier=self.peak_multiplier,
        )


class PlacedComponentModel(_CamelModel):
    id: str
    type_id: str
    params: dict[str, Any] = Field(default_factory=dict)
    position: tuple[float, float] = (0.0, 0.0)


class ConnectionModel(_CamelModel):
    id: str
    from_id: str
    to_id: str
    protocol: Protocol = Protocol.HTTP
    capacity: float = 1000.0


class DesignModel(_CamelModel):
    placed_components: list[PlacedComponentModel] = Field(default_factory=list)
    connections: list[ConnectionModel] = Field(default_factory=list)
    active_fault_ids: list[str] = Field(default_factory=list)

    def to_design(self, extra_fault_ids: list[str] | None = None) -> Design:
        """Build an engine Design, resolving fault ids in activation order.

        Raises UnknownFault for ids missing from the chaos event library.
        """
        faults: list[FaultEvent] = []
        seen: set[str] = set()
        for fault_id in [*self.active_fault_ids, *(extra_fault_ids or [])]:
            if fault_id in seen:
                continue
            event = fault_by_id(fault_id)
            if event is None:
                raise UnknownFault(fault_id)
            faults.append(event)
            seen.add(fault_id)

        return Design(
            placed_components=tuple(
                PlacedComponent(
                    id=ComponentId(c.id),
                    type_id=TypeId(c.type_id),
                    params=c.params,
                    position=c.position,
                )
                for c in self.placed_components
            ),
            connections=tuple(
                Connection(
                    id=ConnectionId(e.id),
                    from_id=ComponentId(e.from_id),
                    to_id=ComponentId(e.to_id),
                    protocol=e.protocol,
                    capacity=e.capacity,
                )
                for e in self.connections
            ),
            active_faults=tuple(faults),
        )


class SimulateRequest(_CamelModel):
    challenge_id: str
    design: DesignModel = Field(default_factory=DesignModel)
    traffic: TrafficProfileModel | None = None  # Overrides the challenge's profile


def with_traffic(challenge: Challenge, traffic: TrafficProfile | None) -> Challenge:
    if traffic is None:
        return challenge
    return dataclasses.replace(challenge, traffic_profile=traffic)


def traffic_to_dict(traffic: TrafficProfile) -> dict[str, object]:
    return {
        "rps": traffic.rps,
        "readRatio": traffic.read_ratio,
        "payloadSize": traffic.payload_size,
        "peakMultiplier": traffic.peak_multiplier,
    }


def component_type_to_dict(component_type: ComponentType) -> dict[str, object]:
    return {
        "id": component_type.id,
        "name": component_type.name,
        "category": component_type.category.value,
        "defaultParams": dict(component_type.default_params),
        "maxConnections": component_type.max_connections,
        "allowedConnections": sorted(component_type.allowed_connections),
        "provides": sorted(component_type.provides),
        "description": component_type.description,
    }


def challenge_to_dict(challenge: Challenge) -> dict[str, object]:
    return {
        "id": challenge.id,
        "title": challenge.title,
        "description": challenge.description,
        "trafficProfile": traffic_to_dict(challenge.traffic_profile),
        "budget": challenge.budget,
        "sla": {
            "maxLatency": challenge.sla.max_latency,
            "minAvailability": challenge.sla.min_availability,
        },
        "mustHaves": list(challenge.must_haves),
        "antiPatterns": list(challenge.anti_patterns),
    }


def fault_to_dict(event: FaultEvent) -> dict[str, object]:
    effects = event.effects
    return {
        "id": event.id,
        "name": event.name,
        "description": event.description,
        "severity": event.severity.value,
        "effects": {
            "latencyMultiplier": effects.latency_multiplier,
            "availabilityReduction": effects.availability_reduction,
            "costMultiplier": effects.cost_multiplier,
            "affectedComponents": list(effects.affected_components),
        },
    }
