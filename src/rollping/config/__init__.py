from __future__ import annotations

from pathlib import Path
from typing import Optional, Type

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .geo import GeoSettings
from .loader import YamlConfigSettingsSource, load_config
from .probe import ProbeSettings


class Settings(BaseSettings):
    """
    Main application configuration model.
    """

    probe: ProbeSettings = Field(default_factory=ProbeSettings)
    geo: GeoSettings = Field(default_factory=GeoSettings)
    log_level: Optional[str] = Field(
        None, description="Explicit log level name; overrides the CLI verbosity."
    )
    show_progress: bool = Field(
        False, description="Show a progress bar on stderr while hosts are probed."
    )

    config_file: Optional[Path] = Field(default=None, exclude=True)

    model_config = SettingsConfigDict(
        env_prefix="ROLLPING_",
        case_sensitive=False,
        env_nested_delimiter="__",
        validate_assignment=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        config_file = init_settings.init_kwargs.get("config_file")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=config_file),
            file_secret_settings,
        )


__all__ = [
    "Settings",
    "ProbeSettings",
    "GeoSettings",
    "load_config",
]
