"""Typed configuration models for SIAM runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Final, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from resources.substrates.postgres.config import PostgresSettings

DEFAULT_CONFIG_PATH: Final[Path] = Path("config") / "siam.yaml"
ENV_PREFIX: Final[str] = "SIAM_"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class UnknownServiceError(KeyError):
    """Raised when a service has no configured declaration file."""

    def __init__(self, service: str) -> None:
        super().__init__(service)
        self.service = service

    def __str__(self) -> str:
        return f"unknown service: {self.service}"


class LogFileSettings(BaseModel):
    """Size-rotated JSON log file written next to stdout output."""

    enabled: bool = False
    directory: str = "log"
    max_size_mb: int = Field(default=10, gt=0)
    max_backups: int = Field(default=5, ge=0)


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: LogLevel = "INFO"
    json_output: bool = True
    service: str = "siam-apiserver"
    environment: str = "dev"
    enable_trace: bool = False
    file: LogFileSettings = Field(default_factory=LogFileSettings)

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class CodesSettings(BaseModel):
    """Where each service keeps its annotated error-code declarations."""

    base_dir: str = "."
    paths: dict[str, str] = Field(
        default_factory=lambda: {"apiserver": "services/apiserver/codes/apiserver.go"}
    )

    def resolve_path(self, service: str) -> Path:
        """Return the declaration file for ``service``.

        Relative entries are resolved against ``base_dir``.
        """
        try:
            configured = Path(self.paths[service])
        except KeyError:
            raise UnknownServiceError(service) from None
        if configured.is_absolute():
            return configured
        return Path(self.base_dir) / configured


class SiamSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    codes: CodesSettings = Field(default_factory=CodesSettings)

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
        """Apply precedence: init > env > yaml > defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )
