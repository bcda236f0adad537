import logging
from dataclasses import dataclass

from colony.core.errors import BodySpecError, ProductionFailure
from colony.core.production.body import body_cost
from colony.core.production.role_config import RoleConfig
from colony.core.production.role_tables import RoleTable
from colony.core.protocols.facility_protocol import FacilityLocatorProtocol, Produced, Rejected
from colony.core.protocols.population_protocol import PopulationRegistryProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductionSuccess:
    role: str
    worker_id: str
    name: str
    cost: int


@dataclass(frozen=True)
class ProductionFailed:
    reason: ProductionFailure
    role: str | None = None
    detail: str = ""


ProductionResult = ProductionSuccess | ProductionFailed


@dataclass(frozen=True)
class RoleProductionStats:
    current: int
    cap: int
    needs_production: bool


class WorkerNamer:
    """Names workers `<role>-<step>-<sequence>`; the sequence restarts every step."""

    def __init__(self) -> None:
        self._step: int | None = None
        self._sequence = 0

    def name(self, role: str, step: int) -> str:
        if step != self._step:
            self._step = step
            self._sequence = 0
        self._sequence += 1
        return f"{role}-{step}-{self._sequence}"


class ProductionScheduler:
    """Greedy, single-issue production for one zone.

    Each call attempts production for at most one role: the most urgent role
    below its cap. Any failure ends the attempt for this step; the next step
    re-sorts the table and starts over.
    """

    def __init__(
            self,
            zone_id: str,
            population: PopulationRegistryProtocol,
            facilities: FacilityLocatorProtocol,
            max_total_workers: int = 20,
            namer: WorkerNamer | None = None,
    ) -> None:
        self.zone_id = zone_id
        self.population = population
        self.facilities = facilities
        self.max_total_workers = max_total_workers
        self.namer = namer or WorkerNamer()

    def next_role(self, table: RoleTable) -> RoleConfig | None:
        for config in table.by_priority():
            if self.population.count_by_role(self.zone_id, config.role) < config.population_cap:
                return config
        return None

    def schedule_next(self, table: RoleTable, step: int) -> ProductionResult:
        total = len(self.population.list_workers(self.zone_id))
        if total >= self.max_total_workers:
            logger.debug(f"Zone {self.zone_id} at total worker cap ({total}/{self.max_total_workers})")
            return ProductionFailed(ProductionFailure.CAPACITY_REACHED, detail="zone worker cap reached")

        config = self.next_role(table)
        if config is None:
            logger.debug(f"Zone {self.zone_id}: every role in table {table.table_id} is at its cap")
            return ProductionFailed(ProductionFailure.CAPACITY_REACHED, detail="all roles at cap")

        try:
            config.validate()
        except BodySpecError as e:
            logger.error(f"Zone {self.zone_id}: invalid role config {config.role!r}: {e}")
            return ProductionFailed(ProductionFailure.CONFIGURATION_ERROR, role=config.role, detail=str(e))

        facility = self.facilities.get_facility(self.zone_id)
        if facility is None:
            logger.debug(f"Zone {self.zone_id} has no production facility")
            return ProductionFailed(ProductionFailure.FACILITY_MISSING, role=config.role)
        if facility.is_busy():
            logger.debug(f"Zone {self.zone_id} facility busy, {config.role} waits")
            return ProductionFailed(ProductionFailure.FACILITY_BUSY, role=config.role)

        try:
            body = config.body.build(facility.energy_available())
        except BodySpecError as e:
            logger.error(f"Zone {self.zone_id}: cannot build body for {config.role!r}: {e}")
            return ProductionFailed(ProductionFailure.CONFIGURATION_ERROR, role=config.role, detail=str(e))

        name = self.namer.name(config.role, step)
        match facility.produce(body, config.role, name):
            case Produced(worker_id=worker_id):
                cost = body_cost(body)
                logger.info(f"Zone {self.zone_id} producing {config.role} {name} ({len(body)} parts, cost {cost})")
                return ProductionSuccess(role=config.role, worker_id=worker_id, name=name, cost=cost)
            case Rejected(reason=reason):
                logger.warning(f"Zone {self.zone_id} facility rejected {config.role} {name}: {reason}")
                return ProductionFailed(ProductionFailure.BUILD_REJECTED, role=config.role, detail=reason)

    def production_statistics(self, table: RoleTable) -> dict[str, RoleProductionStats]:
        stats = {}
        for config in table.by_priority():
            current = self.population.count_by_role(self.zone_id, config.role)
            stats[config.role] = RoleProductionStats(
                current=current,
                cap=config.population_cap,
                needs_production=current < config.population_cap,
            )
        return stats
