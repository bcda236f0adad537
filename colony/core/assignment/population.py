from dataclasses import dataclass, field

from colony.core.model.model import WorkerUnit


@dataclass(frozen=True)
class BindingEntry:
    role: str
    point_id: str | None


@dataclass(frozen=True)
class PopulationSnapshot:
    """Read-only view of one zone's workers and their bindings, taken at the start of a step.

    Assignments made during the step are threaded through `with_binding`, which
    returns a new snapshot, so later calls in the same step see earlier ones.
    """
    zone_id: str
    entries: dict[str, BindingEntry] = field(default_factory=dict)

    @classmethod
    def of(cls, zone_id: str, workers: list[WorkerUnit]) -> "PopulationSnapshot":
        entries = {
            w.id: BindingEntry(role=w.role, point_id=w.bound_point_id)
            for w in workers
            if w.zone_id == zone_id
        }
        return cls(zone_id=zone_id, entries=entries)

    def count_bound(self, point_id: str, role: str) -> int:
        """Live workers of `role` whose binding is `point_id`. Full scan on every call."""
        return sum(1 for e in self.entries.values() if e.role == role and e.point_id == point_id)

    def count_role(self, role: str) -> int:
        return sum(1 for e in self.entries.values() if e.role == role)

    def binding_of(self, worker_id: str) -> str | None:
        entry = self.entries.get(worker_id)
        return entry.point_id if entry else None

    def with_binding(self, worker_id: str, role: str, point_id: str | None) -> "PopulationSnapshot":
        entries = dict(self.entries)
        entries[worker_id] = BindingEntry(role=role, point_id=point_id)
        return PopulationSnapshot(zone_id=self.zone_id, entries=entries)

    def __len__(self) -> int:
        return len(self.entries)
