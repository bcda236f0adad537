import logging
import math
from dataclasses import dataclass

from colony.core.model.model import ZoneState, ProductionStrategy, Role
from colony.core.production.body import StaticBody, DynamicBody
from colony.core.production.role_config import RoleConfig

logger = logging.getLogger(__name__)

NORMAL_TABLE_ID = "normal"
MAX_EXPANDED_TOTAL_WORKERS = 30

BASE_ROLE_CONFIGS: tuple[RoleConfig, ...] = (
    RoleConfig(role=Role.RELAY_HAULER.value, body=StaticBody(("carry", "carry", "move")),
               population_cap=2, priority=1),
    RoleConfig(role=Role.RESERVOIR_HAULER.value, body=StaticBody(("carry", "carry", "carry", "carry", "move", "move")),
               population_cap=2, priority=5),
    RoleConfig(role=Role.FIELD_HAULER.value, body=StaticBody(("carry", "carry", "move", "move")),
               population_cap=2, priority=6),
    RoleConfig(role=Role.HAULER.value, body=StaticBody(("carry", "carry", "move", "move")),
               population_cap=4, priority=7),
    RoleConfig(role=Role.BUILDER.value, body=StaticBody(("work", "carry", "carry", "move", "move")),
               population_cap=6, priority=8),
    RoleConfig(role=Role.UPGRADER.value, body=StaticBody(("work", "work", "carry", "move")),
               population_cap=4, priority=9),
    RoleConfig(role=Role.GATHERER.value, body=StaticBody(("work", "work", "carry", "move")),
               population_cap=4, priority=10),
    RoleConfig(role=Role.EXPANDER.value, body=DynamicBody(reference=(("claim", 2), ("move", 2)),
                                                          required=("claim", "move")),
               population_cap=1, priority=4, min_body_size=2),
)


@dataclass(frozen=True)
class RoleTable:
    """Immutable role-config table selected for one zone state."""
    table_id: str
    state: ZoneState
    strategy: ProductionStrategy
    configs: tuple[RoleConfig, ...]

    def __post_init__(self):
        roles = [c.role for c in self.configs]
        duplicates = {r for r in roles if roles.count(r) > 1}
        if duplicates:
            raise ValueError(f"Role table {self.table_id!r} repeats roles: {sorted(duplicates)}")

    def by_priority(self) -> list[RoleConfig]:
        """Configs ascending by priority; equal priorities keep declaration order."""
        return sorted(self.configs, key=lambda c: c.priority)

    def get(self, role: str) -> RoleConfig | None:
        return next((c for c in self.configs if c.role == role), None)

    def without(self, roles: set[str]) -> "RoleTable":
        return RoleTable(
            table_id=self.table_id,
            state=self.state,
            strategy=self.strategy,
            configs=tuple(c for c in self.configs if c.role not in roles),
        )


def _scale_cap(configs: tuple[RoleConfig, ...], role: Role, factor: float) -> tuple[RoleConfig, ...]:
    return tuple(
        c.with_cap(math.floor(c.population_cap * factor)) if c.role == role.value else c
        for c in configs
    )


def _only(configs: tuple[RoleConfig, ...], roles: set[Role]) -> tuple[RoleConfig, ...]:
    tags = {r.value for r in roles}
    return tuple(c for c in configs if c.role in tags)


def _developing(configs):
    return _scale_cap(configs, Role.BUILDER, 1.5)


def _low_resource(configs):
    return _only(configs, {Role.GATHERER, Role.FIELD_HAULER})


def _under_threat(configs):
    return _scale_cap(configs, Role.BUILDER, 0.5)


def _emergency(configs):
    return tuple(c.with_cap(min(c.population_cap, 2)) for c in _only(configs, {Role.GATHERER}))


# State -> (transform of the base table, strategy). States not listed use the normal table.
STATE_TABLES = {
    ZoneState.NORMAL: (lambda configs: configs, ProductionStrategy.BALANCED),
    ZoneState.DEVELOPING: (_developing, ProductionStrategy.AGGRESSIVE),
    ZoneState.LOW_RESOURCE: (_low_resource, ProductionStrategy.CONSERVATIVE),
    ZoneState.UNDER_THREAT: (_under_threat, ProductionStrategy.CONSERVATIVE),
    ZoneState.EMERGENCY: (_emergency, ProductionStrategy.CONSERVATIVE),
}


def adjust_for_development_level(configs: tuple[RoleConfig, ...], development_level: int) -> tuple[RoleConfig, ...]:
    """Early zones lean on gatherers and have no reservoir to haul from."""
    if development_level > 3:
        return configs
    adjusted = []
    for config in configs:
        if config.role == Role.GATHERER.value:
            config = config.with_cap(max(config.population_cap, 5))
        elif config.role == Role.RESERVOIR_HAULER.value:
            config = config.with_cap(0)
        adjusted.append(config)
    return tuple(adjusted)


def total_worker_cap(base_cap: int, development_level: int) -> int:
    if development_level >= 6:
        return min(math.floor(base_cap * 1.5), MAX_EXPANDED_TOTAL_WORKERS)
    return base_cap


def build_role_table(state: ZoneState, base_configs: tuple[RoleConfig, ...], development_level: int) -> RoleTable:
    """Build the table for a state as a pure transform of the base table."""
    adjusted = adjust_for_development_level(base_configs, development_level)
    if state in STATE_TABLES:
        transform, strategy = STATE_TABLES[state]
        table_id = state.value
    else:
        transform, strategy = STATE_TABLES[ZoneState.NORMAL]
        table_id = NORMAL_TABLE_ID
        logger.debug(f"No role table for state {state.value}, using {NORMAL_TABLE_ID}")
    return RoleTable(table_id=table_id, state=state, strategy=strategy, configs=transform(adjusted))
