"""Config settings – 12-factor env-based configuration."""
from flagkeeper.config.settings.app import FlagkeeperSettings, access_certs_url
from flagkeeper.config.settings.base import Settings
from flagkeeper.config.settings.loaders import EnvSettingsLoader, SettingsLoader

__all__ = [
    "EnvSettingsLoader",
    "FlagkeeperSettings",
    "Settings",
    "SettingsLoader",
    "access_certs_url",
]
