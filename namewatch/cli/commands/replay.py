"""Replay command - run a watch scenario against an in-process bus."""

import sys
from pathlib import Path

import cyclopts
import yaml
from pydantic import ValidationError

from namewatch.application.di import create_container
from namewatch.cli.console import get_console
from namewatch.cli.models import Scenario
from namewatch.cli.util.replay import ScenarioRunner
from namewatch.config import Config, configure_logging
from namewatch.domain.watch.service.watcher import NameWatcher
from namewatch.infrastructure.bus.memory_bus import InMemoryBus

app = cyclopts.App(name="replay", help="Replay a watch scenario")


@app.default
def replay(scenario: Path, /, *, verbose: bool = False) -> None:
    """Run the steps of a scenario file and show delivered notifications.

    Args:
        scenario: YAML scenario file.
        verbose: Log at DEBUG level.
    """
    console = get_console()

    if not scenario.exists():
        console.error(f"{scenario} not found")
        sys.exit(1)

    try:
        loaded = Scenario.load(scenario)
    except (yaml.YAMLError, ValidationError) as e:
        console.error(f"{scenario} is not a valid scenario", hint=str(e))
        sys.exit(1)

    config = Config()
    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config.logging)

    container = create_container(config)
    try:
        runner = ScenarioRunner(container.get(NameWatcher), container.get(InMemoryBus))
        outcomes = runner.run(loaded)
    finally:
        container.close()

    console.step_outcomes(outcomes)
    console.print()
    console.notifications(runner.notifications)
