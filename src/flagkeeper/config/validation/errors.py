"""Config validation errors."""
from flagkeeper.kernel.errors import ApplicationError, ErrorCode


class ConfigError(ApplicationError):
    """Raised when configuration is invalid or loading failed."""

    default_code = ErrorCode.CONFIG_ERROR


class MissingRequiredSettingError(ConfigError):
    """A required environment variable / setting is absent."""

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Required setting '{setting_name}' is missing")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but semantically invalid."""

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            f"Setting '{setting_name}' has invalid value {value!r}: {reason}"
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
