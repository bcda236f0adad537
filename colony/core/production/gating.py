import logging

from colony.core.model.model import Role
from colony.core.model.zone import Zone
from colony.core.production.role_tables import RoleTable
from colony.core.relay.relay_network import relay_statistics
from colony.domain.config import ProductionConfig, RelayConfig

logger = logging.getLogger(__name__)


def relay_hauler_allowed(zone: Zone, relay_config: RelayConfig) -> bool:
    if not relay_config.enabled:
        return False
    stats = relay_statistics(zone, relay_config.source_radius)
    return stats.source_count > 0 and stats.sink_count > 0


def expander_allowed(zone: Zone, production_config: ProductionConfig) -> bool:
    return (
        production_config.expansion_target is not None
        and zone.development_level >= production_config.expansion_min_development_level
    )


def gated_roles(zone: Zone, production_config: ProductionConfig, relay_config: RelayConfig) -> set[str]:
    """Roles whose auxiliary predicate currently fails."""
    gated = set()
    if not relay_hauler_allowed(zone, relay_config):
        gated.add(Role.RELAY_HAULER.value)
    if not expander_allowed(zone, production_config):
        gated.add(Role.EXPANDER.value)
    return gated


def apply_gates(
        table: RoleTable,
        zone: Zone,
        production_config: ProductionConfig,
        relay_config: RelayConfig,
) -> RoleTable:
    gated = gated_roles(zone, production_config, relay_config)
    if gated:
        logger.debug(f"Zone {zone.id}: gating roles {sorted(gated)}")
    return table.without(gated)
