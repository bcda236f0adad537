"""Distance-weighted worker assignment.

Each candidate supply point expects a number of workers that grows with its
distance from the zone hub. A worker goes to the point with the largest
deficit (expected minus currently bound), ties going to the closer point.
Bindings are sticky: a bound worker keeps its point until the point vanishes.
"""
import logging
import math
from dataclasses import dataclass

from colony.core.assignment.population import PopulationSnapshot
from colony.core.model.model import Position, Role, SupplyKind, SupplyPoint, WorkerUnit
from colony.core.model.zone import Zone
from colony.core.relay.relay_network import sink_side_relays
from colony.domain.config import AssignmentConfig, ExpectationConstants, RelayConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assigned:
    point_id: str
    reassigned: bool = False


@dataclass(frozen=True)
class Unassigned:
    reason: str


AssignmentResult = Assigned | Unassigned


@dataclass(frozen=True)
class CandidateScore:
    point_id: str
    distance: int
    expected: int
    current: int

    @property
    def deficit(self) -> int:
        return self.expected - self.current


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def expected_workers(distance: int, constants: ExpectationConstants) -> int:
    raw = round_half_up(constants.base + distance / 10 * constants.distance_factor)
    return max(constants.minimum, min(constants.maximum, raw))


def constants_for(kind: SupplyKind, config: AssignmentConfig) -> ExpectationConstants:
    match kind:
        case SupplyKind.RESOURCE_NODE:
            return config.gathering
        case SupplyKind.FIELD_STORAGE:
            return config.field_hauling
        case SupplyKind.RELAY:
            return config.relay_hauling
        case SupplyKind.RESERVOIR:
            return config.reservoir_hauling


def score_candidates(
        candidates: list[SupplyPoint],
        snapshot: PopulationSnapshot,
        role: str,
        hub: Position,
        config: AssignmentConfig,
) -> list[CandidateScore]:
    scores = []
    for point in candidates:
        distance = hub.distance_to(point.position)
        scores.append(CandidateScore(
            point_id=point.id,
            distance=distance,
            expected=expected_workers(distance, constants_for(point.kind, config)),
            current=snapshot.count_bound(point.id, role),
        ))
    return scores


def assign_optimal(
        candidates: list[SupplyPoint],
        snapshot: PopulationSnapshot,
        role: str,
        hub: Position,
        config: AssignmentConfig = AssignmentConfig(),
) -> AssignmentResult:
    """Pick the candidate with the largest deficit, closest first on ties."""
    if not candidates:
        return Unassigned(reason=f"no candidate supply points for {role}")

    scores = score_candidates(candidates, snapshot, role, hub, config)
    # min() keeps the first of equal keys, so declaration order settles exact ties
    best = min(scores, key=lambda s: (-s.deficit, s.distance))
    logger.debug(
        f"Assigning {role} to {best.point_id} (expected {best.expected}, current {best.current}, "
        f"distance {best.distance})"
    )
    return Assigned(point_id=best.point_id)


def candidates_for(role: str, zone: Zone, relay_config: RelayConfig = RelayConfig()) -> list[SupplyPoint]:
    """Supply points a worker of this role may be bound to."""
    parsed = Role.parse(role)
    if parsed is None:
        return []
    kind = parsed.supply_kind(has_reservoir=zone.reservoir is not None)
    if kind is None:
        return []
    if kind == SupplyKind.RELAY:
        return [r.as_supply_point() for r in sink_side_relays(zone, relay_config.source_radius)]
    return zone.supply_points(kind)


def resolve_binding(
        worker: WorkerUnit,
        zone: Zone,
        snapshot: PopulationSnapshot,
        config: AssignmentConfig = AssignmentConfig(),
        relay_config: RelayConfig = RelayConfig(),
) -> AssignmentResult:
    """Keep a worker's binding while its point exists; otherwise assign a new one."""
    bound = snapshot.binding_of(worker.id)

    if bound is not None:
        if zone.find_supply_point(bound) is not None:
            return Assigned(point_id=bound)
        logger.debug(f"Worker {worker.id} binding {bound} is stale, reassigning")
        # drop the stale binding so it doesn't count toward any point
        snapshot = snapshot.with_binding(worker.id, worker.role, None)

    candidates = candidates_for(worker.role, zone, relay_config)
    result = assign_optimal(candidates, snapshot, worker.role, zone.hub, config)
    if isinstance(result, Assigned) and bound is not None:
        return Assigned(point_id=result.point_id, reassigned=True)
    return result
