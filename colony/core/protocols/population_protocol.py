from typing import Protocol

from colony.core.model.model import WorkerUnit, WorkerActivity


class PopulationRegistryProtocol(Protocol):
    """Live worker population, zone-scoped.

    Every query must reflect unit destruction within the same step it happens.
    """

    def count_by_role(self, zone_id: str, role: str) -> int:
        """Number of live workers of `role` produced for `zone_id`."""

    def list_bindings(self, zone_id: str, role: str) -> dict[str, str]:
        """Map worker id -> bound point id for bound workers of `role` in `zone_id`."""

    def list_workers(self, zone_id: str) -> list[WorkerUnit]:
        """All live workers belonging to `zone_id`."""

    def bind(self, worker_id: str, point_id: str | None) -> None:
        """Record (or clear) a worker's binding."""

    def set_activity(self, worker_id: str, activity: WorkerActivity) -> None:
        """Record what the worker is doing this step."""
