from dataclasses import dataclass, field

from colony.core.production.role_config import RoleConfig
from colony.core.production.role_tables import BASE_ROLE_CONFIGS


@dataclass(frozen=True)
class ClassifierConfig:
    """Thresholds used to classify a zone into a ZoneState."""
    emergency_energy_threshold: int = 10  # percent
    low_energy_threshold: int = 30  # percent
    max_construction_sites: int = 0
    damaged_structures_threshold: int = 3
    fortified_energy_ratio: float = 0.8
    fortified_defense_integrity: float = 0.9
    fortified_min_defenses: int = 3
    fortified_min_development_level: int = 7
    state_check_interval: int = 10
    restore_window: int = 100

    def __post_init__(self):
        if self.state_check_interval < 1:
            raise ValueError(f"state_check_interval must be at least 1, got: {self.state_check_interval}")
        if not 0 <= self.emergency_energy_threshold <= self.low_energy_threshold <= 100:
            raise ValueError(
                f"Energy thresholds must satisfy 0 <= emergency <= low <= 100, got: "
                f"{self.emergency_energy_threshold}, {self.low_energy_threshold}"
            )


@dataclass(frozen=True)
class ExpectationConstants:
    """Constants of the expected-worker formula for one kind of supply point."""
    base: float
    distance_factor: float
    minimum: int
    maximum: int

    def __post_init__(self):
        if self.minimum > self.maximum:
            raise ValueError(f"minimum ({self.minimum}) must not exceed maximum ({self.maximum})")


@dataclass(frozen=True)
class AssignmentConfig:
    """Expected-worker constants per supply kind."""
    gathering: ExpectationConstants = ExpectationConstants(base=2, distance_factor=1.5, minimum=1, maximum=6)
    field_hauling: ExpectationConstants = ExpectationConstants(base=1, distance_factor=1.0, minimum=1, maximum=3)
    relay_hauling: ExpectationConstants = ExpectationConstants(base=1, distance_factor=0.5, minimum=1, maximum=2)
    reservoir_hauling: ExpectationConstants = ExpectationConstants(base=2, distance_factor=0.0, minimum=1, maximum=4)


@dataclass(frozen=True)
class RelayConfig:
    """Configuration of the relay routing network."""
    enabled: bool = True
    transfer_interval: int = 3
    source_radius: int = 3
    source_transfer_threshold: float = 0.5
    sink_transfer_threshold: float = 0.7
    min_energy_to_transfer: int = 100
    transfer_loss: float = 0.03
    cooldown: int = 1


@dataclass(frozen=True)
class ProductionConfig:
    """Configuration for worker production."""
    max_total_workers: int = 20
    role_configs: tuple[RoleConfig, ...] = field(default_factory=lambda: BASE_ROLE_CONFIGS)
    expansion_target: str | None = None
    expansion_min_development_level: int = 4

    def __post_init__(self):
        roles = [c.role for c in self.role_configs]
        repeated = sorted({r for r in roles if roles.count(r) > 1})
        if repeated:
            raise ValueError(f"Role table repeats roles: {repeated}")


@dataclass(frozen=True)
class LoopConfig:
    """Configuration of the real-time step loop."""
    step_interval_seconds: float = 1.0
    scenario_path: str | None = None


@dataclass(frozen=True)
class Config:
    """Main configuration containing log level and nested config objects."""
    log_level: str = "INFO"
    classifier_config: ClassifierConfig = ClassifierConfig()
    assignment_config: AssignmentConfig = AssignmentConfig()
    relay_config: RelayConfig = RelayConfig()
    production_config: ProductionConfig = ProductionConfig()
    loop_config: LoopConfig = LoopConfig()
