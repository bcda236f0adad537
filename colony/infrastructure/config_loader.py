import os
import re
from pathlib import Path
from typing import Iterator, Optional, Any

import yaml
from dotenv import load_dotenv

from colony.core.production.body import StaticBody, DynamicBody, BodySpec
from colony.core.production.role_config import RoleConfig
from colony.domain.config import Config, ClassifierConfig, ExpectationConstants, AssignmentConfig, RelayConfig, \
    ProductionConfig, LoopConfig

CONFIG_FILENAME = "config.yaml"


def _search_locations() -> Iterator[Path]:
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        yield directory / CONFIG_FILENAME
    # source checkout: the file sits beside the colony package
    yield Path(__file__).resolve().parents[2] / CONFIG_FILENAME


def find_config_path() -> str:
    """Locate the colony's config.yaml.

    CONFIG_PATH wins when set, and must then name an existing file. Otherwise
    the working directory and each of its parents are tried, then the checkout
    the package was loaded from.
    """
    env_config_path = os.getenv("CONFIG_PATH")
    if env_config_path:
        if not Path(env_config_path).is_file():
            raise FileNotFoundError(f"CONFIG_PATH is set but file not found: {env_config_path}")
        return env_config_path

    for candidate in _search_locations():
        if candidate.is_file():
            return str(candidate)

    raise FileNotFoundError(
        f"No {CONFIG_FILENAME} in {Path.cwd()}, its parents or the colony checkout; set CONFIG_PATH to point at one"
    )


def load(config_path: Optional[str] = None) -> Config:
    file = _find_config(config_path)
    data = _read_config(file)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Parsed config file {file} does not contain a mapping")

    return _map_to_domain(data)


def _read_config(file: Path) -> Any:
    content = file.read_text()

    def replace_env_var(match: re.Match) -> str:
        var_name = match.group(1)
        return os.getenv(var_name, match.group(0))

    content = re.sub(r'\$\{(\w+)}', replace_env_var, content)

    return yaml.safe_load(content)


def _find_config(config_path: str | None) -> Path:
    load_dotenv()

    if config_path:
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return path
    return Path(find_config_path())


def _parse_body(raw: dict) -> BodySpec:
    """Turn a role entry's `body` or `dynamic-body` into a body spec.

    Part names are not checked here; unknown parts surface when the scheduler
    reaches the role.
    """
    dynamic = raw.get('dynamic-body')
    if dynamic is not None:
        reference = tuple((str(name), int(count)) for name, count in (dynamic.get('reference') or {}).items())
        required = tuple(str(name) for name in dynamic.get('required') or [])
        return DynamicBody(reference=reference, required=required)
    return StaticBody(tuple(str(part) for part in raw.get('body', [])))


def _parse_role_configs(raw_roles: list[dict]) -> tuple[RoleConfig, ...]:
    return tuple(
        RoleConfig(
            role=str(raw['role']),
            body=_parse_body(raw),
            population_cap=int(raw.get('population-cap', 0)),
            priority=int(raw.get('priority', 100)),
            min_body_size=int(raw.get('min-body-size', 1)),
        )
        for raw in raw_roles
    )


def _parse_constants(raw: dict | None, default: ExpectationConstants) -> ExpectationConstants:
    if not raw:
        return default
    return ExpectationConstants(
        base=float(raw.get('base', default.base)),
        distance_factor=float(raw.get('distance-factor', default.distance_factor)),
        minimum=int(raw.get('min', default.minimum)),
        maximum=int(raw.get('max', default.maximum)),
    )


def _map_to_domain(data: dict) -> Config:
    classifier_data = data.get('classifier') or {}
    defaults = ClassifierConfig()
    classifier_config = ClassifierConfig(
        emergency_energy_threshold=int(classifier_data.get('emergency-energy-threshold',
                                                           defaults.emergency_energy_threshold)),
        low_energy_threshold=int(classifier_data.get('low-energy-threshold', defaults.low_energy_threshold)),
        max_construction_sites=int(classifier_data.get('max-construction-sites', defaults.max_construction_sites)),
        damaged_structures_threshold=int(classifier_data.get('damaged-structures-threshold',
                                                             defaults.damaged_structures_threshold)),
        fortified_energy_ratio=float(classifier_data.get('fortified-energy-ratio', defaults.fortified_energy_ratio)),
        fortified_defense_integrity=float(classifier_data.get('fortified-defense-integrity',
                                                              defaults.fortified_defense_integrity)),
        fortified_min_defenses=int(classifier_data.get('fortified-min-defenses', defaults.fortified_min_defenses)),
        fortified_min_development_level=int(classifier_data.get('fortified-min-development-level',
                                                                defaults.fortified_min_development_level)),
        state_check_interval=int(classifier_data.get('state-check-interval', defaults.state_check_interval)),
        restore_window=int(classifier_data.get('restore-window', defaults.restore_window)),
    )

    assignment_data = data.get('assignment') or {}
    assignment_defaults = AssignmentConfig()
    assignment_config = AssignmentConfig(
        gathering=_parse_constants(assignment_data.get('gathering'), assignment_defaults.gathering),
        field_hauling=_parse_constants(assignment_data.get('field-hauling'), assignment_defaults.field_hauling),
        relay_hauling=_parse_constants(assignment_data.get('relay-hauling'), assignment_defaults.relay_hauling),
        reservoir_hauling=_parse_constants(assignment_data.get('reservoir-hauling'),
                                           assignment_defaults.reservoir_hauling),
    )

    relay_data = data.get('relay') or {}
    relay_defaults = RelayConfig()
    relay_config = RelayConfig(
        enabled=bool(relay_data.get('enabled', relay_defaults.enabled)),
        transfer_interval=int(relay_data.get('transfer-interval', relay_defaults.transfer_interval)),
        source_radius=int(relay_data.get('source-radius', relay_defaults.source_radius)),
        source_transfer_threshold=float(relay_data.get('source-threshold', relay_defaults.source_transfer_threshold)),
        sink_transfer_threshold=float(relay_data.get('sink-threshold', relay_defaults.sink_transfer_threshold)),
        min_energy_to_transfer=int(relay_data.get('min-transfer', relay_defaults.min_energy_to_transfer)),
        transfer_loss=float(relay_data.get('transfer-loss', relay_defaults.transfer_loss)),
        cooldown=int(relay_data.get('cooldown', relay_defaults.cooldown)),
    )

    production_data = data.get('production') or {}
    production_defaults = ProductionConfig()
    raw_roles = production_data.get('roles')
    production_config = ProductionConfig(
        max_total_workers=int(production_data.get('max-total-workers', production_defaults.max_total_workers)),
        role_configs=_parse_role_configs(raw_roles) if raw_roles else production_defaults.role_configs,
        expansion_target=production_data.get('expansion-target'),
        expansion_min_development_level=int(production_data.get('expansion-min-development-level',
                                                                production_defaults.expansion_min_development_level)),
    )

    loop_data = data.get('loop') or {}
    loop_config = LoopConfig(
        step_interval_seconds=float(loop_data.get('step-interval-seconds', 1.0)),
        scenario_path=loop_data.get('scenario'),
    )

    return Config(
        log_level=data.get('log_level', 'INFO'),
        classifier_config=classifier_config,
        assignment_config=assignment_config,
        relay_config=relay_config,
        production_config=production_config,
        loop_config=loop_config,
    )
