"""Public API for SIAM configuration."""

from .loader import load_config, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    ENV_PREFIX,
    CodesSettings,
    LogFileSettings,
    LoggingSettings,
    SiamSettings,
    UnknownServiceError,
)

__all__ = [
    "CodesSettings",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "load_config",
    "load_settings",
    "LogFileSettings",
    "LoggingSettings",
    "SiamSettings",
    "UnknownServiceError",
]
