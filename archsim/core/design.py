"""Design snapshot: placed components, connections and traffic."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from archsim.core.faults import FaultEvent
    from archsim.core.types import ComponentId, ConnectionId, TypeId

type Params = Mapping[str, Any]


class Protocol(Enum):
    HTTP = "http"
    TCP = "tcp"
    UDP = "udp"
    GRPC = "grpc"


@dataclass(frozen=True)
class TrafficProfile:
    """Load applied to a design. Replaced wholesale on every change."""

    rps: float = 1000.0
    read_ratio: float = 0.8
    payload_size: int = 1024  # bytes
    peak_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.rps < 0:
            raise ValueError(f"rps must be >= 0, got {self.rps}")
        if not 0.0 <= self.read_ratio <= 1.0:
            raise ValueError(f"read_ratio must be in [0, 1], got {self.read_ratio}")
        if self.payload_size < 0:
            raise ValueError(f"payload_size must be >= 0, got {self.payload_size}")
        if self.peak_multiplier < 1.0:
            raise ValueError(f"peak_multiplier must be >= 1, got {self.peak_multiplier}")

    @property
    def peak_rps(self) -> float:
        return self.rps * self.peak_multiplier


@dataclass(frozen=True)
class PlacedComponent:
    """A component instance placed on the canvas.

    `type_id` is not guaranteed to resolve in the catalog. `params` holds
    only the overrides of the catalog defaults.
    """

    id: ComponentId
    type_id: TypeId
    params: Params = field(default_factory=dict, hash=False)
    position: tuple[float, float] = (0.0, 0.0)  # UI only

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


@dataclass(frozen=True)
class Connection:
    """Directed edge between two placed components."""

    id: ConnectionId
    from_id: ComponentId
    to_id: ComponentId
    protocol: Protocol = Protocol.HTTP
    capacity: float = 1000.0  # requests/sec, advisory


@dataclass(frozen=True)
class Design:
    """Immutable snapshot handed to the engine by the editor."""

    placed_components: tuple[PlacedComponent, ...] = ()
    connections: tuple[Connection, ...] = ()
    active_faults: tuple[FaultEvent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "placed_components", tuple(self.placed_components))
        object.__setattr__(self, "connections", tuple(self.connections))
        object.__setattr__(self, "active_faults", tuple(self.active_faults))

    @property
    def is_empty(self) -> bool:
        return not self.placed_components
