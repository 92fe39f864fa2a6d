"""Typed configuration models for Mirage core runtime settings."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "mirage" / "mirage.yml"

LogOptionName = Literal["request", "request_body", "response", "response_body", "all"]


def _header_text(value: object) -> object:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "NOTICE", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "mirage"
    environment: str = "dev"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class HttpSettings(BaseModel):
    """Defaults applied to every ``HttpClient`` built from settings."""

    timeout_seconds: float = Field(default=30.0, gt=0)
    follow_redirects: bool = False
    log_options: list[LogOptionName] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("headers", mode="before")
    @classmethod
    def stringify_header_values(cls, value: object) -> object:
        """YAML reads ``X-Api-Version: 2`` as an int; headers are always text."""
        if not isinstance(value, Mapping):
            return value
        return {str(name): _header_text(item) for name, item in value.items()}


class MirageSettings(BaseSettings):
    """Root settings.

    Constructed directly, sources apply as init > ``MIRAGE_*`` env > YAML at
    ``_config_path`` > model defaults. ``load_settings`` resolves the same
    cascade explicitly and validates the result.
    """

    model_config = SettingsConfigDict(
        env_prefix="MIRAGE_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply Mirage precedence: init > env > yaml > model defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )
