"""Core type aliases for the engine."""

from typing import NewType

# Placed component identification - unique within a design
ComponentId = NewType("ComponentId", str)

# Catalog key of a component type, e.g. "api-gateway"
TypeId = NewType("TypeId", str)

# Connection identification - unique within a design
ConnectionId = NewType("ConnectionId", str)

# Challenge identification, e.g. "c1"
ChallengeId = NewType("ChallengeId", str)

# Fault-injection event identification, e.g. "az-down"
FaultId = NewType("FaultId", str)
