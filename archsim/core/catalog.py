"""Component catalog: type definitions and their performance models.

Each component type carries three pure model functions:

- latency_fn(params, traffic) -> milliseconds added by one request
- cost_fn(params, traffic) -> dollars per month
- availability_fn(params) -> probability in [0, 1]

The catalog is an immutable mapping built once and passed explicitly into
every pipeline call.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from archsim.core.types import TypeId

if TYPE_CHECKING:
    from archsim.core.design import Params, PlacedComponent, TrafficProfile

type LatencyFn = Callable[[Params, TrafficProfile], float]
type CostFn = Callable[[Params, TrafficProfile], float]
type AvailabilityFn = Callable[[Params], float]


class Category(Enum):
    EDGE = "edge"
    APP = "app"
    STORAGE = "storage"
    INTEGRATION = "integration"
    SEARCH = "search"
    CDN = "cdn"
    SECURITY = "security"
    MONITORING = "monitoring"
    AI = "ai"
    GAMING = "gaming"


@dataclass(frozen=True)
class ComponentType:
    """Catalog entry describing one kind of service component."""

    id: TypeId
    name: str
    category: Category
    latency_fn: LatencyFn = field(compare=False)
    cost_fn: CostFn = field(compare=False)
    availability_fn: AvailabilityFn = field(compare=False)
    default_params: Params = field(default_factory=dict, hash=False)
    max_connections: int | None = None
    allowed_connections: frozenset[TypeId] = frozenset()
    provides: frozenset[str] = frozenset()  # Capability tags, lowercase
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_params", MappingProxyType(dict(self.default_params)))

    def effective_params(self, overrides: Params) -> dict[str, Any]:
        """Catalog defaults updated with the instance overrides.

        An override of a numeric default that is not itself a finite number
        is ignored, so the default applies.
        """
        params = dict(self.default_params)
        for key, value in overrides.items():
            if as_number(params.get(key)) is not None and as_number(value) is None:
                continue
            params[key] = value
        return params

    def invalid_overrides(self, overrides: Params) -> list[str]:
        """Keys whose override `effective_params` ignores."""
        return [
            key
            for key, value in overrides.items()
            if as_number(self.default_params.get(key)) is not None and as_number(value) is None
        ]


class Catalog(Mapping[TypeId, ComponentType]):
    """Read-only registry of component types keyed by type id."""

    def __init__(self, types: list[ComponentType] | tuple[ComponentType, ...]) -> None:
        entries: dict[TypeId, ComponentType] = {}
        for component_type in types:
            if component_type.id in entries:
                raise ValueError(f"Duplicate component type id: {component_type.id}")
            entries[component_type.id] = component_type
        self._types = MappingProxyType(entries)

    def __getitem__(self, type_id: TypeId) -> ComponentType:
        return self._types[type_id]

    def __iter__(self) -> Iterator[TypeId]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def resolve(self, component: PlacedComponent) -> ComponentType | None:
        """Catalog entry of a placed component, None for a dangling type id."""
        return self._types.get(component.type_id)

    def display_name(self, component: PlacedComponent) -> str | None:
        component_type = self.resolve(component)
        return component_type.name if component_type is not None else None

    def params_for(self, component: PlacedComponent) -> dict[str, Any]:
        component_type = self.resolve(component)
        if component_type is None:
            return dict(component.params)
        return component_type.effective_params(component.params)


def as_number(value: object) -> float | None:
    """`value` as a finite float, None for anything else (booleans included)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def number(params: Params, key: str, default: float) -> float:
    value = as_number(params.get(key))
    return default if value is None else value


def replicas(params: Params) -> float:
    return number(params, "replicas", 1.0)


def redundant(single_failure: float) -> AvailabilityFn:
    """Availability of N replicas where any one suffices: 1 - f^N."""

    def availability(params: Params) -> float:
        return 1.0 - single_failure ** max(replicas(params), 1.0)

    return availability


def constant(value: float) -> AvailabilityFn:
    def availability(params: Params) -> float:
        return value

    return availability


# Monthly price by instance size
INSTANCE_SIZE_COST = {"small": 30.0, "medium": 70.0, "large": 150.0}
CACHE_SIZE_COST = {"small": 25.0, "medium": 80.0, "large": 200.0}


def _gateway_latency(params: Params, traffic: TrafficProfile) -> float:
    return 5.0 + traffic.rps / 1000.0


def _gateway_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 50.0 + traffic.rps * 0.001


def _load_balancer_latency(params: Params, traffic: TrafficProfile) -> float:
    return 1.0 + traffic.rps / (5000.0 * max(replicas(params), 1.0))


def _load_balancer_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 25.0 + traffic.rps * 0.0005


def _cdn_latency(params: Params, traffic: TrafficProfile) -> float:
    # Reads are served at the edge, writes pass through to origin
    return 2.0 + 10.0 * (1.0 - traffic.read_ratio)


def _cdn_cost(params: Params, traffic: TrafficProfile) -> float:
    return 20.0 + traffic.rps * traffic.payload_size / 1_000_000 * 0.5


def _waf_latency(params: Params, traffic: TrafficProfile) -> float:
    return 1.0 + number(params, "rules", 100) / 1000.0


def _waf_cost(params: Params, traffic: TrafficProfile) -> float:
    return 20.0 + traffic.rps * 0.0006


def _auth_latency(params: Params, traffic: TrafficProfile) -> float:
    return 8.0


def _auth_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 40.0


def _web_app_latency(params: Params, traffic: TrafficProfile) -> float:
    return 15.0 + traffic.rps / (200.0 * max(replicas(params), 1.0))


def _web_app_cost(params: Params, traffic: TrafficProfile) -> float:
    size = str(params.get("instance_size", "medium"))
    return replicas(params) * INSTANCE_SIZE_COST.get(size, INSTANCE_SIZE_COST["medium"])


def _microservice_latency(params: Params, traffic: TrafficProfile) -> float:
    return 10.0 + traffic.rps / (300.0 * max(replicas(params), 1.0))


def _microservice_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 45.0


def _serverless_latency(params: Params, traffic: TrafficProfile) -> float:
    memory_mb = max(number(params, "memory_mb", 512), 128.0)
    return 30.0 + 100.0 * 128.0 / memory_mb


def _serverless_cost(params: Params, traffic: TrafficProfile) -> float:
    memory_mb = number(params, "memory_mb", 512)
    return traffic.rps * 0.6 * memory_mb / 1024.0


def _cache_latency(params: Params, traffic: TrafficProfile) -> float:
    hit_rate = number(params, "hit_rate", 0.8)
    return 1.0 + (1.0 - hit_rate) * 5.0


def _cache_cost(params: Params, traffic: TrafficProfile) -> float:
    size = str(params.get("size", "small"))
    return replicas(params) * CACHE_SIZE_COST.get(size, CACHE_SIZE_COST["small"])


def _db_primary_latency(params: Params, traffic: TrafficProfile) -> float:
    writes = traffic.rps * (1.0 - traffic.read_ratio)
    return 15.0 + writes / 200.0


def _db_primary_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 150.0 + number(params, "storage_gb", 100) * 0.1


def _single_az_db_latency(params: Params, traffic: TrafficProfile) -> float:
    return 12.0 + traffic.rps / 1000.0


def _single_az_db_cost(params: Params, traffic: TrafficProfile) -> float:
    return 90.0 + number(params, "storage_gb", 100) * 0.1


def _read_replicas_latency(params: Params, traffic: TrafficProfile) -> float:
    reads = traffic.rps * traffic.read_ratio
    return 10.0 + reads / (2000.0 * max(replicas(params), 1.0))


def _read_replicas_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 120.0


def _sharding_latency(params: Params, traffic: TrafficProfile) -> float:
    shards = max(number(params, "shards", 4), 1.0)
    return 12.0 + traffic.rps / (1000.0 * shards)


def _sharding_cost(params: Params, traffic: TrafficProfile) -> float:
    return number(params, "shards", 4) * 110.0


def _object_store_latency(params: Params, traffic: TrafficProfile) -> float:
    return 30.0 + traffic.payload_size / 100_000.0


def _object_store_cost(params: Params, traffic: TrafficProfile) -> float:
    return number(params, "storage_gb", 1000) * 0.023 + traffic.rps * 0.0004


def _object_store_availability(params: Params) -> float:
    return 0.99999 if params.get("region") == "multi" else 0.9999


def _queue_latency(params: Params, traffic: TrafficProfile) -> float:
    return 3.0


def _queue_cost(params: Params, traffic: TrafficProfile) -> float:
    return 30.0 + traffic.rps * 0.0004


def _search_latency(params: Params, traffic: TrafficProfile) -> float:
    return 25.0 + traffic.rps / (500.0 * max(replicas(params), 1.0))


def _search_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 100.0


def _monitoring_latency(params: Params, traffic: TrafficProfile) -> float:
    return 0.0


def _monitoring_cost(params: Params, traffic: TrafficProfile) -> float:
    return 50.0 + number(params, "retention_days", 30) * 2.0


def _inference_latency(params: Params, traffic: TrafficProfile) -> float:
    return 25.0 if params.get("gpu") else 80.0


def _inference_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * (400.0 if params.get("gpu") else 90.0)


def _game_server_latency(params: Params, traffic: TrafficProfile) -> float:
    tick_rate = max(number(params, "tick_rate", 30), 1.0)
    return 1000.0 / tick_rate / 2.0


def _game_server_cost(params: Params, traffic: TrafficProfile) -> float:
    return replicas(params) * 80.0


def _t(value: str) -> TypeId:
    return TypeId(value)


def _ids(*values: str) -> frozenset[TypeId]:
    return frozenset(_t(v) for v in values)


APP_TIER = ("web-app", "microservice", "serverless")
DATA_TIER = ("cache", "db-primary", "db-single-az", "db-read-replicas", "db-sharding")

DEFAULT_COMPONENT_TYPES: tuple[ComponentType, ...] = (
    ComponentType(
        id=_t("api-gateway"),
        name="API Gateway",
        category=Category.EDGE,
        default_params={"replicas": 2},
        latency_fn=_gateway_latency,
        cost_fn=_gateway_cost,
        availability_fn=constant(0.9999),
        allowed_connections=_ids("load-balancer", "auth-service", "waf", *APP_TIER),
        provides=frozenset({"gateway", "edge", "routing"}),
        description="Single entry point that routes, throttles and authenticates requests",
    ),
    ComponentType(
        id=_t("load-balancer"),
        name="Load Balancer",
        category=Category.EDGE,
        default_params={"replicas": 2},
        latency_fn=_load_balancer_latency,
        cost_fn=_load_balancer_cost,
        availability_fn=redundant(0.001),
        max_connections=20,
        allowed_connections=_ids(*APP_TIER, "api-gateway"),
        provides=frozenset({"load balancer", "load-balancer", "edge"}),
        description="Spreads traffic across application replicas",
    ),
    ComponentType(
        id=_t("cdn"),
        name="CDN",
        category=Category.CDN,
        default_params={"edge_locations": 50},
        latency_fn=_cdn_latency,
        cost_fn=_cdn_cost,
        availability_fn=constant(0.99995),
        allowed_connections=_ids("api-gateway", "load-balancer", "object-store"),
        provides=frozenset({"cdn", "static content"}),
        description="Edge cache for static and media content",
    ),
    ComponentType(
        id=_t("waf"),
        name="WAF (Firewall)",
        category=Category.SECURITY,
        default_params={"rules": 100},
        latency_fn=_waf_latency,
        cost_fn=_waf_cost,
        availability_fn=constant(0.9999),
        allowed_connections=_ids("api-gateway", "load-balancer"),
        provides=frozenset({"waf", "firewall", "security"}),
        description="Filters malicious traffic before it reaches the application",
    ),
    ComponentType(
        id=_t("auth-service"),
        name="Auth Service",
        category=Category.SECURITY,
        default_params={"replicas": 2},
        latency_fn=_auth_latency,
        cost_fn=_auth_cost,
        availability_fn=redundant(0.01),
        allowed_connections=_ids("cache", "db-primary", "db-single-az"),
        provides=frozenset({"auth", "security"}),
        description="Issues and validates user sessions and tokens",
    ),
    ComponentType(
        id=_t("web-app"),
        name="Web App",
        category=Category.APP,
        default_params={"replicas": 2, "instance_size": "medium"},
        latency_fn=_web_app_latency,
        cost_fn=_web_app_cost,
        availability_fn=redundant(0.005),
        allowed_connections=_ids(*DATA_TIER, "queue", "search", "object-store", "ml-inference"),
        provides=frozenset({"app", "web"}),
        description="Stateless application servers",
    ),
    ComponentType(
        id=_t("microservice"),
        name="Microservice",
        category=Category.APP,
        default_params={"replicas": 3},
        latency_fn=_microservice_latency,
        cost_fn=_microservice_cost,
        availability_fn=redundant(0.01),
        allowed_connections=_ids(*DATA_TIER, *APP_TIER, "queue", "search", "object-store"),
        provides=frozenset({"app", "microservice"}),
        description="Independently deployed service owning one business capability",
    ),
    ComponentType(
        id=_t("serverless"),
        name="Serverless Function",
        category=Category.APP,
        default_params={"memory_mb": 512},
        latency_fn=_serverless_latency,
        cost_fn=_serverless_cost,
        availability_fn=constant(0.9995),
        allowed_connections=_ids(*DATA_TIER, "queue", "object-store"),
        provides=frozenset({"app", "serverless"}),
        description="Per-request compute billed by invocation and memory",
    ),
    ComponentType(
        id=_t("cache"),
        name="Cache (Redis)",
        category=Category.STORAGE,
        default_params={"size": "small", "replicas": 1, "hit_rate": 0.8},
        latency_fn=_cache_latency,
        cost_fn=_cache_cost,
        availability_fn=redundant(0.001),
        allowed_connections=_ids("db-primary", "db-single-az", "db-read-replicas", "db-sharding"),
        provides=frozenset({"cache", "redis"}),
        description="In-memory key-value cache in front of the database",
    ),
    ComponentType(
        id=_t("db-primary"),
        name="DB (Primary)",
        category=Category.STORAGE,
        default_params={"replicas": 1, "storage_gb": 100},
        latency_fn=_db_primary_latency,
        cost_fn=_db_primary_cost,
        availability_fn=redundant(0.005),
        allowed_connections=_ids("db-read-replicas"),
        provides=frozenset({"database", "db", "persistence"}),
        description="Primary relational database with multi-AZ standby",
    ),
    ComponentType(
        id=_t("db-single-az"),
        name="Single-AZ DB",
        category=Category.STORAGE,
        default_params={"storage_gb": 100},
        latency_fn=_single_az_db_latency,
        cost_fn=_single_az_db_cost,
        availability_fn=constant(0.995),
        provides=frozenset({"database", "db", "persistence"}),
        description="Database confined to a single availability zone",
    ),
    ComponentType(
        id=_t("db-read-replicas"),
        name="DB (Read Replicas)",
        category=Category.STORAGE,
        default_params={"replicas": 2},
        latency_fn=_read_replicas_latency,
        cost_fn=_read_replicas_cost,
        availability_fn=redundant(0.005),
        provides=frozenset({"database", "db", "read replicas", "replication"}),
        description="Read-only replicas that offload read traffic from the primary",
    ),
    ComponentType(
        id=_t("db-sharding"),
        name="DB Sharding Cluster",
        category=Category.STORAGE,
        default_params={"shards": 4, "replicas": 4},
        latency_fn=_sharding_latency,
        cost_fn=_sharding_cost,
        availability_fn=constant(0.9995),
        provides=frozenset({"database", "db", "sharding", "partitioning"}),
        description="Horizontally partitioned database",
    ),
    ComponentType(
        id=_t("object-store"),
        name="Object Store (S3)",
        category=Category.STORAGE,
        default_params={"region": "single", "storage_gb": 1000},
        latency_fn=_object_store_latency,
        cost_fn=_object_store_cost,
        availability_fn=_object_store_availability,
        provides=frozenset({"object store", "blob storage", "storage"}),
        description="Durable blob storage for media and backups",
    ),
    ComponentType(
        id=_t("queue"),
        name="Queue",
        category=Category.INTEGRATION,
        default_params={"ttl": 3600, "replicas": 2},
        latency_fn=_queue_latency,
        cost_fn=_queue_cost,
        availability_fn=constant(0.9995),
        allowed_connections=_ids(*APP_TIER, "search", "ml-inference"),
        provides=frozenset({"queue", "async", "messaging"}),
        description="Message queue decoupling producers from consumers",
    ),
    ComponentType(
        id=_t("search"),
        name="Search Index (Elasticsearch)",
        category=Category.SEARCH,
        default_params={"replicas": 2},
        latency_fn=_search_latency,
        cost_fn=_search_cost,
        availability_fn=redundant(0.01),
        provides=frozenset({"search", "index"}),
        description="Full-text search index",
    ),
    ComponentType(
        id=_t("monitoring"),
        name="Monitoring & Logging",
        category=Category.MONITORING,
        default_params={"retention_days": 30},
        latency_fn=_monitoring_latency,
        cost_fn=_monitoring_cost,
        availability_fn=constant(0.99999),
        provides=frozenset({"monitoring", "logging", "metrics", "observability"}),
        description="Metrics, logs and alerting",
    ),
    ComponentType(
        id=_t("ml-inference"),
        name="ML Inference",
        category=Category.AI,
        default_params={"replicas": 1, "gpu": False},
        latency_fn=_inference_latency,
        cost_fn=_inference_cost,
        availability_fn=redundant(0.02),
        allowed_connections=_ids("cache", "object-store"),
        provides=frozenset({"ml", "inference", "ai"}),
        description="Model serving endpoint",
    ),
    ComponentType(
        id=_t("game-server"),
        name="Game Server",
        category=Category.GAMING,
        default_params={"replicas": 2, "tick_rate": 30},
        latency_fn=_game_server_latency,
        cost_fn=_game_server_cost,
        availability_fn=redundant(0.01),
        allowed_connections=_ids("cache", "db-primary", "queue"),
        provides=frozenset({"game server", "realtime"}),
        description="Authoritative realtime game simulation",
    ),
)

DEFAULT_CATALOG = Catalog(DEFAULT_COMPONENT_TYPES)
