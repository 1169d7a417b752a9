"""Config commands: write, check and print namewatch settings."""

import json
import sys
from pathlib import Path

import cyclopts
import yaml
from pydantic import ValidationError

from namewatch.cli.console import get_console
from namewatch.config import Config

app = cyclopts.App(name="config", help="Manage namewatch configuration")

DEFAULT_CONFIG_NAME = "namewatch.yaml"

TEMPLATE = """\
# namewatch configuration
# Load it with: NAMEWATCH_CONFIG_FILE=namewatch.yaml

# Signal that reports ownership changes (defaults match the D-Bus daemon)
watch:
  interface: org.freedesktop.DBus
  member: NameOwnerChanged

# Logging (logs to stderr, or to $NAMEWATCH_LOG_FILE when set)
logging:
  level: INFO
"""


@app.command
def init(path: Path = Path(DEFAULT_CONFIG_NAME)) -> None:
    """Write a starter config file.

    Args:
        path: Where to write it. Defaults to ./namewatch.yaml
    """
    console = get_console()

    if path.is_dir():
        console.error(f"{path} is a directory", hint="Pass a file path instead")
        sys.exit(1)
    if path.exists():
        console.error(f"{path} already exists", hint="Remove it first, it is never overwritten")
        sys.exit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(TEMPLATE)
    console.success(f"Wrote {path}")
    console.info(f"Use it with NAMEWATCH_CONFIG_FILE={path}")


@app.command
def validate(path: Path = Path(DEFAULT_CONFIG_NAME)) -> None:
    """Check that a config file parses and holds valid settings.

    Args:
        path: Config file to check. Defaults to ./namewatch.yaml
    """
    console = get_console()

    if not path.exists():
        console.error(f"{path} not found")
        sys.exit(1)

    try:
        Config.model_validate(yaml.safe_load(path.read_text()) or {})
    except (yaml.YAMLError, ValidationError) as e:
        console.error(f"{path} is invalid", hint=str(e))
        sys.exit(1)

    console.success(f"{path} is valid")


@app.command
def show() -> None:
    """Print the effective settings as JSON (env, .env and YAML applied)."""
    settings = Config().model_dump(mode="json")
    get_console().print_json(json.dumps(settings))
