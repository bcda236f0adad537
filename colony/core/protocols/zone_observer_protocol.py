from typing import Protocol

from colony.core.model.zone import Zone


class ZoneObserverProtocol(Protocol):
    """Source of zone geometry and structures.

    A zone disappears from `observable_zone_ids` when the region becomes
    unobservable; the bot drops its controller at that point.
    """

    def observable_zone_ids(self) -> list[str]:
        """Return ids of every zone currently observable."""

    def get_zone(self, zone_id: str) -> Zone | None:
        """Return the live zone, or None when it is no longer observable."""
