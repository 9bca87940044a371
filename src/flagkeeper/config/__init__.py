"""Config – 12-factor settings and their validation errors."""

from flagkeeper.config.settings import EnvSettingsLoader, FlagkeeperSettings, Settings, SettingsLoader
from flagkeeper.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "FlagkeeperSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
