from typing import Protocol

from colony.core.model.model import ZoneMetrics


class MetricsProviderProtocol(Protocol):

    def get_metrics(self, zone_id: str) -> ZoneMetrics:
        """Return freshly computed metrics for the zone."""
