from enum import Enum


class FailureKind(Enum):
    """Taxonomy of expected failures. None of these ever propagate out of a step."""
    TRANSIENT_CAPACITY = "transient_capacity"
    TRANSIENT_BUSY = "transient_busy"
    CONFIGURATION_ERROR = "configuration_error"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    BINDING_STALE = "binding_stale"


class ProductionFailure(Enum):
    CAPACITY_REACHED = "capacity-reached"
    FACILITY_BUSY = "facility-busy"
    FACILITY_MISSING = "facility-missing"
    BUILD_REJECTED = "build-rejected"
    CONFIGURATION_ERROR = "configuration-error"

    @property
    def kind(self) -> FailureKind:
        match self:
            case ProductionFailure.CAPACITY_REACHED:
                return FailureKind.TRANSIENT_CAPACITY
            case ProductionFailure.CONFIGURATION_ERROR:
                return FailureKind.CONFIGURATION_ERROR
            case _:
                return FailureKind.TRANSIENT_BUSY


class BodySpecError(ValueError):
    """Raised when a body specification can't be turned into a list of parts."""
    pass
