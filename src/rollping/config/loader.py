from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List, Type

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from ..constants import CONFIG_FILE_NAME
from ..exceptions import ConfigError


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A Pydantic settings source that loads variables from a YAML file.
    """

    def __init__(self, settings_cls: Type[BaseSettings], yaml_file: Path | None):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._data: dict[str, Any] = {}
        if self.yaml_file and self.yaml_file.exists():
            try:
                data = yaml.safe_load(self.yaml_file.read_text()) or {}
            except (yaml.YAMLError, OSError) as exc:
                raise ConfigError(f"Cannot read config file {self.yaml_file}: {exc}") from exc
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {self.yaml_file} must contain a mapping")
            self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str] | None:
        if not self._data:
            return None
        return (self._data.get(field_name), field_name)

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


def default_config_paths() -> List[Path]:
    """Locations searched, in order, when no config file is given."""
    config_home = Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config")
    return [Path.cwd() / CONFIG_FILE_NAME, config_home / "rollping" / CONFIG_FILE_NAME]


def load_config(path: Path | None = None) -> "Settings":
    """
    Load application settings from a YAML file and environment variables.

    Without ``path`` the first existing file from `default_config_paths`
    is used, if any.

    Raises:
        ConfigError: If the file is missing or unreadable, or any setting
            fails validation.
    """
    from . import Settings

    config_file = path
    if config_file is None:
        config_file = next((p for p in default_config_paths() if p.exists()), None)
        if config_file is None:
            logging.debug("No %s found; using defaults and environment", CONFIG_FILE_NAME)
        else:
            logging.debug("Loading configuration from %s", config_file)
    elif not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")
    try:
        return Settings(config_file=config_file)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
