import logging
from dataclasses import dataclass, field

from colony.core.assignment.assignment_engine import resolve_binding, Assigned, Unassigned
from colony.core.assignment.population import PopulationSnapshot
from colony.core.classifier.emergency import assess_emergency, EmergencyReport
from colony.core.classifier.zone_state_classifier import ZoneStateTracker
from colony.core.errors import FailureKind
from colony.core.model.model import WorkerActivity, WorkerUnit, ZoneMetrics, ZoneState, development_stage
from colony.core.model.records import ZoneRecord, WorkerRecord
from colony.core.model.zone import Zone
from colony.core.production.gating import apply_gates
from colony.core.production.role_config import RoleConfig
from colony.core.production.role_tables import RoleTable, build_role_table, total_worker_cap
from colony.core.production.scheduler import ProductionScheduler, ProductionResult
from colony.core.protocols.facility_protocol import FacilityLocatorProtocol
from colony.core.protocols.metrics_protocol import MetricsProviderProtocol
from colony.core.protocols.movement_protocol import MovementProtocol, MoveResult
from colony.core.protocols.population_protocol import PopulationRegistryProtocol
from colony.core.relay.relay_network import RelayNetwork, RelayTransfer
from colony.domain.config import Config

logger = logging.getLogger(__name__)


@dataclass
class StepReport:
    zone_id: str
    step: int
    state: ZoneState
    table_id: str
    production: ProductionResult
    activities: dict[str, WorkerActivity] = field(default_factory=dict)
    transfers: list[RelayTransfer] = field(default_factory=list)
    emergency: EmergencyReport | None = None
    worker_conditions: dict[str, FailureKind] = field(default_factory=dict)


class ZoneController:
    """Runs one zone through a step: classify, schedule, assign, route."""

    def __init__(
            self,
            zone_id: str,
            metrics: MetricsProviderProtocol,
            population: PopulationRegistryProtocol,
            facilities: FacilityLocatorProtocol,
            movement: MovementProtocol,
            config: Config = Config(),
    ) -> None:
        self.zone_id = zone_id
        self.metrics = metrics
        self.population = population
        self.facilities = facilities
        self.movement = movement
        self.config = config

        self.tracker = ZoneStateTracker(zone_id, config.classifier_config)
        self.scheduler = ProductionScheduler(
            zone_id, population, facilities, config.production_config.max_total_workers
        )
        self.relay_network = RelayNetwork(zone_id, config.relay_config)
        self._role_table: RoleTable | None = None

    def step(self, zone: Zone, step: int) -> StepReport:
        # 1. classify
        metrics = self.metrics.get_metrics(self.zone_id)
        state, reclassified = self.tracker.evaluate(step, metrics)
        emergency = None
        if reclassified:
            emergency = self._check_emergency(zone, metrics)

        # 2. schedule
        table = build_role_table(state, self.config.production_config.role_configs, zone.development_level)
        self._role_table = apply_gates(table, zone, self.config.production_config, self.config.relay_config)
        self.scheduler.max_total_workers = total_worker_cap(
            self.config.production_config.max_total_workers, zone.development_level
        )
        production = self.scheduler.schedule_next(self._role_table, step)

        # 3. assign
        activities, worker_conditions = self._assign_workers(zone)

        # 4. route
        transfers = self.relay_network.route_energy(zone, step)

        return StepReport(
            zone_id=self.zone_id,
            step=step,
            state=state,
            table_id=self._role_table.table_id,
            production=production,
            activities=activities,
            transfers=transfers,
            emergency=emergency,
            worker_conditions=worker_conditions,
        )

    def _check_emergency(self, zone: Zone, metrics: ZoneMetrics) -> EmergencyReport:
        facility_present = self.facilities.get_facility(self.zone_id) is not None
        population = len(self.population.list_workers(self.zone_id))
        report = assess_emergency(
            metrics, facility_present, population, self.config.classifier_config.damaged_structures_threshold
        )
        if report.is_emergency:
            logger.warning(
                f"Zone {self.zone_id} emergency ({report.kind.value}, {report.severity.value}): {report.description}"
            )
        logger.debug(
            f"Zone {self.zone_id} level {zone.development_level} "
            f"({development_stage(zone.development_level).value} stage)"
        )
        return report

    def _assign_workers(self, zone: Zone) -> tuple[dict[str, WorkerActivity], dict[str, FailureKind]]:
        workers = self.population.list_workers(self.zone_id)
        snapshot = PopulationSnapshot.of(self.zone_id, workers)
        activities = {}
        conditions = {}
        for worker in workers:
            result = resolve_binding(
                worker, zone, snapshot, self.config.assignment_config, self.config.relay_config
            )
            match result:
                case Assigned(point_id=point_id, reassigned=reassigned):
                    if point_id != worker.bound_point_id:
                        self.population.bind(worker.id, point_id)
                    if reassigned:
                        conditions[worker.id] = FailureKind.BINDING_STALE
                    snapshot = snapshot.with_binding(worker.id, worker.role, point_id)
                    activity = self._activity_for(worker, zone, point_id)
                case Unassigned(reason=reason):
                    if worker.bound_point_id is not None:
                        conditions[worker.id] = FailureKind.BINDING_STALE
                        self.population.bind(worker.id, None)
                    snapshot = snapshot.with_binding(worker.id, worker.role, None)
                    logger.debug(f"Worker {worker.id} idle: {reason}")
                    activity = WorkerActivity.IDLE
            if activity == WorkerActivity.WAITING:
                conditions[worker.id] = FailureKind.RESOURCE_EXHAUSTED
            self.population.set_activity(worker.id, activity)
            activities[worker.id] = activity
        return activities, conditions

    def _activity_for(self, worker: WorkerUnit, zone: Zone, point_id: str) -> WorkerActivity:
        point = zone.find_supply_point(point_id)
        if point is not None and point.stock == 0 and not worker.is_carrying:
            logger.debug(f"Worker {worker.id} waiting on empty {point_id}")
            return WorkerActivity.WAITING

        match self.movement.move_toward(worker, point_id):
            case MoveResult.ARRIVED:
                return WorkerActivity.WORKING
            case MoveResult.UNREACHABLE:
                logger.debug(f"Worker {worker.id} cannot reach {point_id}, retrying next step")
                return WorkerActivity.BLOCKED
            case _:
                return WorkerActivity.MOVING

    def get_current_role_table(self) -> list[RoleConfig]:
        """Configs the zone is currently producing from, most urgent first."""
        if self._role_table is None:
            return []
        return self._role_table.by_priority()

    def get_zone_state(self) -> ZoneState | None:
        return self.tracker.state

    def to_record(self) -> ZoneRecord | None:
        if self.tracker.state is None or self.tracker.last_classified_step is None:
            return None
        table_id = self._role_table.table_id if self._role_table else self.tracker.state.value
        return ZoneRecord(
            state=self.tracker.state,
            last_classified_step=self.tracker.last_classified_step,
            role_table_id=table_id,
        )

    def worker_records(self) -> dict[str, WorkerRecord]:
        return {worker.id: WorkerRecord.of(worker) for worker in self.population.list_workers(self.zone_id)}

    def restore(self, record: ZoneRecord, step: int) -> bool:
        return self.tracker.restore(record, step)
