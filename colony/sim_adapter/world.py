"""In-memory simulated world implementing every collaborator the controllers consume."""
import logging
from dataclasses import dataclass, field

from colony.core.model.model import (
    BodyPart, Position, WorkerActivity, WorkerUnit, ZoneMetrics, SupplyKind
)
from colony.core.model.zone import Zone
from colony.core.production.body import body_cost
from colony.core.protocols.facility_protocol import Produced, Rejected, ProduceResult
from colony.core.protocols.movement_protocol import MoveResult

logger = logging.getLogger(__name__)

TICKS_PER_PART = 3
WORKER_LIFETIME = 1500
HARVEST_PER_WORK = 2
FACILITY_REGENERATION = 1
CARRY_CAPACITY = 50


@dataclass
class PendingProduction:
    name: str
    role: str
    body: list[BodyPart]
    remaining: int


class SimFacility:
    """Single-issue production facility. Spends energy up front, releases the worker when done."""

    def __init__(self, zone_id: str, position: Position, energy: int = 300, capacity: int = 300) -> None:
        self.zone_id = zone_id
        self.position = position
        self.energy = energy
        self.capacity = capacity
        self.pending: PendingProduction | None = None

    def is_busy(self) -> bool:
        return self.pending is not None

    def energy_available(self) -> int:
        return self.energy

    def produce(self, body: list[BodyPart], role: str, name: str) -> ProduceResult:
        if self.pending is not None:
            return Rejected(reason="facility busy")
        cost = body_cost(body)
        if cost > self.energy:
            return Rejected(reason=f"not enough energy: need {cost}, have {self.energy}")
        self.energy -= cost
        self.pending = PendingProduction(name=name, role=role, body=body, remaining=len(body) * TICKS_PER_PART)
        return Produced(worker_id=name)

    def deposit(self, amount: int) -> int:
        accepted = min(amount, self.capacity - self.energy)
        self.energy += accepted
        return accepted


@dataclass
class SimZone:
    zone: Zone
    facility: SimFacility | None = None
    hostile_power: int = 0
    construction_sites: int = 0
    damaged_structures: int = 0
    defense_integrity: float = 1.0
    operational_defenses: int = 0
    observable: bool = True


@dataclass
class SimWorld:
    zones: dict[str, SimZone] = field(default_factory=dict)
    workers: dict[str, WorkerUnit] = field(default_factory=dict)
    tick: int = 0
    _targets: dict[str, str] = field(default_factory=dict)
    _working: dict[str, str] = field(default_factory=dict)

    # zone observer

    def observable_zone_ids(self) -> list[str]:
        return [zone_id for zone_id, sim in self.zones.items() if sim.observable]

    def get_zone(self, zone_id: str) -> Zone | None:
        sim = self.zones.get(zone_id)
        if sim is None or not sim.observable:
            return None
        return sim.zone

    def set_observable(self, zone_id: str, observable: bool) -> None:
        self.zones[zone_id].observable = observable

    # metrics provider

    def get_metrics(self, zone_id: str) -> ZoneMetrics:
        sim = self.zones[zone_id]
        stored = sum(s.energy for s in sim.zone.storages)
        capacity = sum(s.capacity for s in sim.zone.storages)
        if sim.facility is not None:
            stored += sim.facility.energy
            capacity += sim.facility.capacity
        return ZoneMetrics(
            energy_stored=stored,
            energy_capacity=capacity,
            hostile_present=sim.hostile_power > 0,
            open_construction_sites=sim.construction_sites,
            damaged_structure_count=sim.damaged_structures,
            development_level=sim.zone.development_level,
            hostile_power=sim.hostile_power,
            defense_integrity=sim.defense_integrity,
            operational_defenses=sim.operational_defenses,
        )

    # population registry

    def list_workers(self, zone_id: str) -> list[WorkerUnit]:
        return [w for w in self.workers.values() if w.zone_id == zone_id]

    def count_by_role(self, zone_id: str, role: str) -> int:
        return sum(1 for w in self.list_workers(zone_id) if w.role == role)

    def list_bindings(self, zone_id: str, role: str) -> dict[str, str]:
        return {
            w.id: w.bound_point_id
            for w in self.list_workers(zone_id)
            if w.role == role and w.bound_point_id is not None
        }

    def bind(self, worker_id: str, point_id: str | None) -> None:
        self.workers[worker_id].bound_point_id = point_id

    def set_activity(self, worker_id: str, activity: WorkerActivity) -> None:
        self.workers[worker_id].activity = activity

    def add_worker(self, worker: WorkerUnit) -> WorkerUnit:
        self.workers[worker.id] = worker
        return worker

    def remove_worker(self, worker_id: str) -> None:
        self.workers.pop(worker_id, None)
        self._targets.pop(worker_id, None)
        self._working.pop(worker_id, None)

    # production facility

    def get_facility(self, zone_id: str) -> SimFacility | None:
        sim = self.zones.get(zone_id)
        return sim.facility if sim else None

    # movement primitive

    def move_toward(self, worker: WorkerUnit, target_point_id: str) -> MoveResult:
        zone = self.get_zone(worker.zone_id)
        point = zone.find_supply_point(target_point_id) if zone else None
        if point is None:
            return MoveResult.UNREACHABLE
        if worker.position.distance_to(point.position) <= 1:
            self._targets.pop(worker.id, None)
            self._working[worker.id] = target_point_id
            return MoveResult.ARRIVED
        self._working.pop(worker.id, None)
        self._targets[worker.id] = target_point_id
        return MoveResult.ONGOING

    # clock

    def advance(self) -> None:
        """Progress the world by one step."""
        self.tick += 1
        self._age_workers()
        for sim in self.zones.values():
            self._finish_production(sim)
            if sim.facility is not None:
                sim.facility.deposit(FACILITY_REGENERATION)
            for relay in sim.zone.relays:
                relay.cooldown = max(relay.cooldown - 1, 0)
            for node in sim.zone.resource_nodes:
                node.energy = min(node.energy + node.regeneration, node.capacity)
        self._move_workers()
        self._do_work()

    def _age_workers(self) -> None:
        for worker in list(self.workers.values()):
            worker.ticks_to_live -= 1
            if worker.ticks_to_live <= 0:
                logger.debug(f"Worker {worker.id} expired")
                self.remove_worker(worker.id)

    def _finish_production(self, sim: SimZone) -> None:
        facility = sim.facility
        if facility is None or facility.pending is None:
            return
        facility.pending.remaining -= 1
        if facility.pending.remaining > 0:
            return
        pending = facility.pending
        facility.pending = None
        carry_parts = sum(1 for p in pending.body if p == BodyPart.CARRY)
        self.add_worker(WorkerUnit(
            id=pending.name,
            role=pending.role,
            zone_id=facility.zone_id,
            position=facility.position,
            capacity=carry_parts * CARRY_CAPACITY,
            ticks_to_live=WORKER_LIFETIME,
        ))
        logger.debug(f"Worker {pending.name} left the facility in zone {facility.zone_id}")

    def _move_workers(self) -> None:
        for worker_id, point_id in list(self._targets.items()):
            worker = self.workers.get(worker_id)
            zone = self.get_zone(worker.zone_id) if worker else None
            point = zone.find_supply_point(point_id) if zone else None
            if point is None:
                self._targets.pop(worker_id, None)
                continue
            worker.position = _step_toward(worker.position, point.position)

    def _do_work(self) -> None:
        """Workers at their point pull energy from it and hand it to the facility."""
        for worker_id, point_id in list(self._working.items()):
            worker = self.workers.get(worker_id)
            if worker is None:
                continue
            sim = self.zones[worker.zone_id]
            point = sim.zone.find_supply_point(point_id)
            if point is None:
                continue
            if point.kind == SupplyKind.RESOURCE_NODE:
                amount = HARVEST_PER_WORK
            else:
                amount = max(worker.capacity, CARRY_CAPACITY)
            taken = self._take(sim, point.kind, point_id, amount)
            if sim.facility is not None and taken > 0:
                sim.facility.deposit(taken)

    @staticmethod
    def _take(sim: SimZone, kind: SupplyKind, point_id: str, amount: int) -> int:
        zone = sim.zone
        match kind:
            case SupplyKind.RESOURCE_NODE:
                holder = next(n for n in zone.resource_nodes if n.id == point_id)
            case SupplyKind.RELAY:
                holder = zone.get_relay(point_id)
            case _:
                holder = next(s for s in zone.storages if s.id == point_id)
        taken = min(holder.energy, amount)
        holder.energy -= taken
        return taken


def _step_toward(current: Position, target: Position) -> Position:
    dx = (target.x > current.x) - (target.x < current.x)
    if dx != 0:
        return Position(current.x + dx, current.y)
    dy = (target.y > current.y) - (target.y < current.y)
    return Position(current.x, current.y + dy)
