from dataclasses import dataclass
from enum import Enum

from colony.core.model.model import ZoneMetrics


class EmergencyKind(Enum):
    NONE = "none"
    ENERGY = "energy"
    SECURITY = "security"
    STRUCTURE = "structure"
    POPULATION = "population"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class EmergencyReport:
    kind: EmergencyKind
    severity: Severity
    description: str

    @property
    def is_emergency(self) -> bool:
        return self.kind != EmergencyKind.NONE


NO_EMERGENCY = EmergencyReport(EmergencyKind.NONE, Severity.LOW, "No emergency detected")


def assess_emergency(
        metrics: ZoneMetrics,
        facility_present: bool,
        population: int,
        damaged_structures_threshold: int = 3,
) -> EmergencyReport:
    """Find the most pressing emergency in a zone, checked energy first."""
    ratio = metrics.energy_ratio
    if ratio < 0.1:
        if ratio < 0.05:
            severity = Severity.CRITICAL
        elif ratio < 0.08:
            severity = Severity.HIGH
        else:
            severity = Severity.MEDIUM
        return EmergencyReport(EmergencyKind.ENERGY, severity, f"Energy critically low: {ratio * 100:.1f}%")

    if metrics.hostile_power > 3:
        if metrics.hostile_power > 10 or metrics.operational_defenses == 0:
            severity = Severity.CRITICAL
        elif metrics.hostile_power > 5:
            severity = Severity.HIGH
        else:
            severity = Severity.MEDIUM
        return EmergencyReport(
            EmergencyKind.SECURITY, severity,
            f"Hostile power {metrics.hostile_power} against {metrics.operational_defenses} defenses",
        )

    if metrics.development_level > 0 and not facility_present:
        return EmergencyReport(EmergencyKind.STRUCTURE, Severity.CRITICAL, "Production facility missing")

    if metrics.damaged_structure_count >= damaged_structures_threshold:
        return EmergencyReport(
            EmergencyKind.STRUCTURE, Severity.MEDIUM,
            f"{metrics.damaged_structure_count} damaged structures",
        )

    if population == 0 and metrics.development_level > 0:
        return EmergencyReport(EmergencyKind.POPULATION, Severity.HIGH, "No workers alive")

    return NO_EMERGENCY
