import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from namewatch.domain.watch.model.value import DBUS_INTERFACE, NAME_OWNER_CHANGED


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by NAMEWATCH_CONFIG_FILE env var."""

    def get_field_value(
        self, field: Any, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("NAMEWATCH_CONFIG_FILE")
        if config_file:
            path = Path(config_file).expanduser()
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class WatchConfig(BaseModel):
    interface: str = DBUS_INTERFACE  # Interface of the bus daemon emitting ownership changes
    member: str = NAME_OWNER_CHANGED


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from NAMEWATCH_LOG_FILE env var."""
        return os.environ.get("NAMEWATCH_LOG_FILE")


class Config(BaseSettings):
    watch: WatchConfig = WatchConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="NAMEWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows NAMEWATCH_WATCH__INTERFACE override
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - NAMEWATCH_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called once at startup, before any watches are made.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
