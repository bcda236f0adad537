from enum import Enum
from typing import Protocol

from colony.core.model.model import WorkerUnit


class MoveResult(Enum):
    ONGOING = "ongoing"
    ARRIVED = "arrived"
    UNREACHABLE = "unreachable"


class MovementProtocol(Protocol):
    """Opaque movement primitive, retried by the caller every step until ARRIVED."""

    def move_toward(self, worker: WorkerUnit, target_point_id: str) -> MoveResult:
        """Advance the worker toward the point."""
