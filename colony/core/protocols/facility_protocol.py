from dataclasses import dataclass
from typing import Protocol

from colony.core.model.model import BodyPart


@dataclass(frozen=True)
class Produced:
    worker_id: str


@dataclass(frozen=True)
class Rejected:
    reason: str


ProduceResult = Produced | Rejected


class ProductionFacilityProtocol(Protocol):
    """Single-issue unit that creates workers. At most one production at a time."""

    def is_busy(self) -> bool:
        """True while a previous production is still in progress."""

    def energy_available(self) -> int:
        """Energy the facility can spend on the next body."""

    def produce(self, body: list[BodyPart], role: str, name: str) -> ProduceResult:
        """Start producing a worker. Returns Rejected when the facility refuses the body."""


class FacilityLocatorProtocol(Protocol):

    def get_facility(self, zone_id: str) -> ProductionFacilityProtocol | None:
        """Return the zone's production facility, or None if it has none."""
