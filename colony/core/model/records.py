from dataclasses import dataclass
from typing import Any

from colony.core.model.model import ZoneState, WorkerUnit


@dataclass(frozen=True)
class ZoneRecord:
    """Minimal persisted state of a zone."""
    state: ZoneState
    last_classified_step: int
    role_table_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "last_classified_step": self.last_classified_step,
            "role_table_id": self.role_table_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ZoneRecord":
        return cls(
            state=ZoneState(data["state"]),
            last_classified_step=int(data["last_classified_step"]),
            role_table_id=str(data["role_table_id"]),
        )


@dataclass(frozen=True)
class WorkerRecord:
    """Minimal persisted state of a worker."""
    role: str
    bound_point_id: str | None
    zone_id: str

    @classmethod
    def of(cls, worker: WorkerUnit) -> "WorkerRecord":
        return cls(role=worker.role, bound_point_id=worker.bound_point_id, zone_id=worker.zone_id)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "bound_point_id": self.bound_point_id, "zone_id": self.zone_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkerRecord":
        return cls(
            role=str(data["role"]),
            bound_point_id=data.get("bound_point_id"),
            zone_id=str(data["zone_id"]),
        )
