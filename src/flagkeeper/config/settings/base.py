"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses


@dataclasses.dataclass
class Settings:
    """Dataclass base for environment-driven settings.

    ``_prefix`` names the environment namespace that
    :class:`~flagkeeper.config.settings.loaders.EnvSettingsLoader` reads
    (``FLAGKEEPER`` → ``FLAGKEEPER_LOG_LEVEL``). Subclasses check cross-field
    rules in :meth:`_validate`, which runs on every construction and raises
    :class:`~flagkeeper.config.validation.InvalidSettingValueError`.
    """

    _prefix: dataclasses.ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        pass

    @classmethod
    def env_key(cls, field_name: str) -> str:
        """Environment variable holding *field_name*."""
        return f"{cls._prefix}_{field_name}".upper().lstrip("_")


__all__ = ["Settings"]
