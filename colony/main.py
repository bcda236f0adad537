import logging
import os
from pathlib import Path

from colony.config.logging_config import configure_logging
from colony.domain.config import Config
from colony.infrastructure.config_loader import load, find_config_path

DEFAULT_SCENARIO = Path(__file__).resolve().parents[1] / "scenarios" / "two_nodes.yaml"


def setup_env() -> tuple[Config, Path]:
    """Load configuration and configure logging. Returns the config and the file it came from."""
    config_path = Path(find_config_path())
    config = load(str(config_path))
    configure_logging(os.getenv("LOG_LEVEL", config.log_level))
    return config, config_path


def resolve_scenario_path(config: Config, config_path: Path) -> Path:
    """SCENARIO_PATH wins; a relative scenario in the config is read beside the config file."""
    env_path = os.getenv("SCENARIO_PATH")
    if env_path:
        return Path(env_path)
    configured = config.loop_config.scenario_path
    if not configured:
        return DEFAULT_SCENARIO
    path = Path(configured)
    if path.is_absolute():
        return path
    return config_path.resolve().parent / path


def main() -> None:
    config, config_path = setup_env()

    from colony.core.bot import ColonyBot
    from colony.sim_adapter.scenario_loader import load_scenario

    scenario = resolve_scenario_path(config, config_path)
    world = load_scenario(scenario)
    logging.getLogger(__name__).info(f"Loaded scenario {scenario} with {len(world.zones)} zones")

    bot = ColonyBot(world=world, config=config)
    bot.run()


if __name__ == "__main__":
    main()
