from typing import Protocol

from colony.core.protocols.facility_protocol import FacilityLocatorProtocol
from colony.core.protocols.metrics_protocol import MetricsProviderProtocol
from colony.core.protocols.movement_protocol import MovementProtocol
from colony.core.protocols.population_protocol import PopulationRegistryProtocol
from colony.core.protocols.zone_observer_protocol import ZoneObserverProtocol


class WorldProtocol(
    ZoneObserverProtocol,
    MetricsProviderProtocol,
    PopulationRegistryProtocol,
    FacilityLocatorProtocol,
    MovementProtocol,
    Protocol,
):
    """Everything the bot needs from the simulation, plus the clock."""

    def advance(self) -> None:
        """Let the simulation progress by one step after the bot has acted."""
