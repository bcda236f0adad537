from dataclasses import dataclass, field

from colony.core.model.model import (
    Position, ResourceNode, StorageStructure, StorageKind, RelayStructure, SupplyPoint, SupplyKind
)

ZONE_CENTER = Position(25, 25)


@dataclass
class Zone:
    """Geometry and structures of one bounded region.

    Workers are not part of the zone; they are read through the population
    registry so that unit destruction is visible the same step it happens.
    """
    id: str
    development_level: int
    resource_nodes: list[ResourceNode] = field(default_factory=list)
    storages: list[StorageStructure] = field(default_factory=list)
    relays: list[RelayStructure] = field(default_factory=list)
    facility_position: Position | None = None

    @property
    def field_storages(self) -> list[StorageStructure]:
        return [s for s in self.storages if s.kind == StorageKind.FIELD]

    @property
    def reservoir(self) -> StorageStructure | None:
        return next((s for s in self.storages if s.kind == StorageKind.RESERVOIR), None)

    @property
    def hub(self) -> Position:
        """Logistics hub: the production facility, else the reservoir, else the zone center."""
        if self.facility_position is not None:
            return self.facility_position
        reservoir = self.reservoir
        if reservoir is not None:
            return reservoir.position
        return ZONE_CENTER

    def get_relay(self, relay_id: str) -> RelayStructure | None:
        return next((r for r in self.relays if r.id == relay_id), None)

    def supply_points(self, kind: SupplyKind) -> list[SupplyPoint]:
        match kind:
            case SupplyKind.RESOURCE_NODE:
                return [n.as_supply_point() for n in self.resource_nodes]
            case SupplyKind.FIELD_STORAGE:
                return [s.as_supply_point() for s in self.field_storages]
            case SupplyKind.RESERVOIR:
                reservoir = self.reservoir
                return [reservoir.as_supply_point()] if reservoir else []
            case SupplyKind.RELAY:
                return [r.as_supply_point() for r in self.relays]

    def find_supply_point(self, point_id: str) -> SupplyPoint | None:
        for kind in SupplyKind:
            point = next((p for p in self.supply_points(kind) if p.id == point_id), None)
            if point is not None:
                return point
        return None
