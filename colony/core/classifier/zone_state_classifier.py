import logging

from colony.core.model.model import ZoneMetrics, ZoneState
from colony.core.model.records import ZoneRecord
from colony.domain.config import ClassifierConfig

logger = logging.getLogger(__name__)


def is_fortified(metrics: ZoneMetrics, config: ClassifierConfig) -> bool:
    if metrics.development_level < config.fortified_min_development_level:
        return False
    return (
        metrics.energy_ratio > config.fortified_energy_ratio
        and metrics.defense_integrity > config.fortified_defense_integrity
        and metrics.operational_defenses >= config.fortified_min_defenses
    )


def classify(metrics: ZoneMetrics, config: ClassifierConfig = ClassifierConfig()) -> ZoneState:
    """Map zone metrics to exactly one state. First matching rule wins."""
    energy_percent = metrics.energy_ratio * 100

    if energy_percent < config.emergency_energy_threshold:
        return ZoneState.EMERGENCY
    if metrics.hostile_present:
        return ZoneState.UNDER_THREAT
    if energy_percent < config.low_energy_threshold:
        return ZoneState.LOW_RESOURCE
    if metrics.open_construction_sites > config.max_construction_sites:
        return ZoneState.DEVELOPING
    if is_fortified(metrics, config):
        return ZoneState.FORTIFIED
    return ZoneState.NORMAL


class ZoneStateTracker:
    """Holds the active state of one zone and re-classifies it at most every N steps."""

    def __init__(self, zone_id: str, config: ClassifierConfig = ClassifierConfig()) -> None:
        self.zone_id = zone_id
        self.config = config
        self.state: ZoneState | None = None
        self.last_classified_step: int | None = None

    def is_due(self, step: int) -> bool:
        if self.state is None or self.last_classified_step is None:
            return True
        return step - self.last_classified_step >= self.config.state_check_interval

    def evaluate(self, step: int, metrics: ZoneMetrics) -> tuple[ZoneState, bool]:
        """Return the active state and whether it was re-classified this step."""
        if not self.is_due(step):
            return self.state, False

        new_state = classify(metrics, self.config)
        if new_state != self.state:
            previous = self.state.value if self.state else "none"
            logger.info(f"Zone {self.zone_id} state changed: {previous} -> {new_state.value} at step {step}")
        self.state = new_state
        self.last_classified_step = step
        return new_state, True

    def restore(self, record: ZoneRecord, step: int) -> bool:
        """Adopt a persisted state if it is recent enough. Returns True when restored."""
        age = step - record.last_classified_step
        if age < 0 or age >= self.config.restore_window:
            logger.debug(f"Zone {self.zone_id} record is {age} steps old, re-classifying")
            return False
        self.state = record.state
        self.last_classified_step = record.last_classified_step
        logger.info(f"Zone {self.zone_id} restored state {record.state.value} from step {record.last_classified_step}")
        return True
