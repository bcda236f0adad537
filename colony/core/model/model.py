from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def distance_to(self, other: "Position") -> int:
        """Manhattan distance, the metric used for every hub/point comparison."""
        return abs(self.x - other.x) + abs(self.y - other.y)


class BodyPart(Enum):
    WORK = "work"
    CARRY = "carry"
    MOVE = "move"
    CLAIM = "claim"
    ATTACK = "attack"
    RANGED_ATTACK = "ranged_attack"
    HEAL = "heal"
    TOUGH = "tough"

    @property
    def cost(self) -> int:
        return BODY_PART_COSTS[self]

    @classmethod
    def parse(cls, name: str) -> "BodyPart | None":
        normalized = name.strip().lower().replace("-", "_")
        return next((p for p in cls if p.value == normalized), None)


BODY_PART_COSTS: dict[BodyPart, int] = {
    BodyPart.WORK: 100,
    BodyPart.CARRY: 50,
    BodyPart.MOVE: 50,
    BodyPart.CLAIM: 600,
    BodyPart.ATTACK: 80,
    BodyPart.RANGED_ATTACK: 150,
    BodyPart.HEAL: 250,
    BodyPart.TOUGH: 10,
}


class SupplyKind(Enum):
    RESOURCE_NODE = "resource_node"
    FIELD_STORAGE = "field_storage"
    RELAY = "relay"
    RESERVOIR = "reservoir"


class Role(Enum):
    GATHERER = "gatherer"
    FIELD_HAULER = "field_hauler"
    RESERVOIR_HAULER = "reservoir_hauler"
    RELAY_HAULER = "relay_hauler"
    HAULER = "hauler"
    BUILDER = "builder"
    UPGRADER = "upgrader"
    EXPANDER = "expander"

    @classmethod
    def parse(cls, tag: str) -> "Role | None":
        normalized = tag.strip().lower().replace("-", "_")
        return next((r for r in cls if r.value == normalized), None)

    def supply_kind(self, has_reservoir: bool) -> SupplyKind | None:
        """Kind of supply point a worker of this role binds to, if any."""
        match self:
            case Role.GATHERER:
                return SupplyKind.RESOURCE_NODE
            case Role.FIELD_HAULER:
                return SupplyKind.FIELD_STORAGE
            case Role.RELAY_HAULER:
                return SupplyKind.RELAY
            case Role.RESERVOIR_HAULER:
                return SupplyKind.RESERVOIR
            case Role.BUILDER | Role.UPGRADER | Role.HAULER:
                return SupplyKind.RESERVOIR if has_reservoir else SupplyKind.RESOURCE_NODE
            case _:
                return None


class ZoneState(Enum):
    NORMAL = "normal"
    DEVELOPING = "developing"
    LOW_RESOURCE = "low_resource"
    UNDER_THREAT = "under_threat"
    EMERGENCY = "emergency"
    FORTIFIED = "fortified"


class ProductionStrategy(Enum):
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"


class DevelopmentStage(Enum):
    EARLY = "early"
    MID = "mid"
    LATE = "late"


def development_stage(level: int) -> DevelopmentStage:
    if level <= 3:
        return DevelopmentStage.EARLY
    if level <= 6:
        return DevelopmentStage.MID
    return DevelopmentStage.LATE


@dataclass(frozen=True)
class ZoneMetrics:
    """Snapshot of the numbers the classifier looks at."""
    energy_stored: int
    energy_capacity: int
    hostile_present: bool = False
    open_construction_sites: int = 0
    damaged_structure_count: int = 0
    development_level: int = 0
    hostile_power: int = 0
    defense_integrity: float = 1.0
    operational_defenses: int = 0

    @property
    def energy_ratio(self) -> float:
        return self.energy_stored / max(self.energy_capacity, 1)


@dataclass(frozen=True)
class SupplyPoint:
    """Read-only view of something a worker can be bound to."""
    id: str
    kind: SupplyKind
    position: Position
    stock: int


@dataclass
class ResourceNode:
    id: str
    position: Position
    energy: int = 3000
    capacity: int = 3000
    regeneration: int = 10

    def as_supply_point(self) -> SupplyPoint:
        return SupplyPoint(id=self.id, kind=SupplyKind.RESOURCE_NODE, position=self.position, stock=self.energy)


class StorageKind(Enum):
    FIELD = "field"
    RESERVOIR = "reservoir"


@dataclass
class StorageStructure:
    id: str
    kind: StorageKind
    position: Position
    energy: int = 0
    capacity: int = 2000

    @property
    def free_capacity(self) -> int:
        return max(self.capacity - self.energy, 0)

    def as_supply_point(self) -> SupplyPoint:
        kind = SupplyKind.RESERVOIR if self.kind == StorageKind.RESERVOIR else SupplyKind.FIELD_STORAGE
        return SupplyPoint(id=self.id, kind=kind, position=self.position, stock=self.energy)


class RelayRole(Enum):
    SOURCE_SIDE = "source_side"
    SINK_SIDE = "sink_side"


@dataclass
class RelayStructure:
    id: str
    position: Position
    energy: int = 0
    capacity: int = 800
    cooldown: int = 0

    @property
    def fill_ratio(self) -> float:
        if self.capacity <= 0:
            return 1.0
        return self.energy / self.capacity

    @property
    def free_capacity(self) -> int:
        return max(self.capacity - self.energy, 0)

    def as_supply_point(self) -> SupplyPoint:
        return SupplyPoint(id=self.id, kind=SupplyKind.RELAY, position=self.position, stock=self.energy)


class WorkerActivity(Enum):
    IDLE = "idle"
    WAITING = "waiting"
    MOVING = "moving"
    WORKING = "working"
    BLOCKED = "blocked"


@dataclass
class WorkerUnit:
    id: str
    role: str
    zone_id: str
    position: Position
    capacity: int = 50
    load: int = 0
    ticks_to_live: int = 1500
    bound_point_id: str | None = None
    activity: WorkerActivity = WorkerActivity.IDLE

    @property
    def is_carrying(self) -> bool:
        return self.load > 0
