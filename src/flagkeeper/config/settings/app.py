"""Config settings – FlagkeeperSettings."""
import dataclasses
from typing import ClassVar

from flagkeeper.config.settings.base import Settings
from flagkeeper.config.validation import InvalidSettingValueError

STORAGE_BACKENDS = frozenset({"memory", "redis", "sql"})


def access_certs_url(team_domain: str) -> str:
    """Key-set URL published for an access team domain."""
    return f"https://{team_domain}.cloudflareaccess.com/cdn-cgi/access/certs"


@dataclasses.dataclass
class FlagkeeperSettings(Settings):
    """Service settings, read from ``FLAGKEEPER_*`` environment variables."""

    _prefix: ClassVar[str] = "FLAGKEEPER"

    service_name: str = "flagkeeper"
    version: str = "0.1.0"
    log_level: str = "INFO"
    storage_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    database_url: str = "sqlite+aiosqlite:///flagkeeper.db"
    auth_required: bool = False
    access_team_domain: str = ""
    access_audience: str = ""
    jwks_url: str = ""
    jwks_timeout_seconds: float = 5.0
    jwks_cache_ttl_seconds: float = 0.0

    def _validate(self) -> None:
        if self.storage_backend not in STORAGE_BACKENDS:
            raise InvalidSettingValueError(
                "storage_backend",
                self.storage_backend,
                f"expected one of {sorted(STORAGE_BACKENDS)}",
            )
        if self.jwks_timeout_seconds <= 0:
            raise InvalidSettingValueError(
                "jwks_timeout_seconds", self.jwks_timeout_seconds, "must be positive"
            )
        if self.jwks_cache_ttl_seconds < 0:
            raise InvalidSettingValueError(
                "jwks_cache_ttl_seconds", self.jwks_cache_ttl_seconds, "must not be negative"
            )
        if self.auth_required:
            if not self.access_audience:
                raise InvalidSettingValueError(
                    "access_audience", self.access_audience, "required when auth_required is set"
                )
            if not self.resolved_jwks_url():
                raise InvalidSettingValueError(
                    "jwks_url", self.jwks_url, "set jwks_url or access_team_domain when auth_required is set"
                )

    def resolved_jwks_url(self) -> str:
        if self.jwks_url:
            return self.jwks_url
        if self.access_team_domain:
            return access_certs_url(self.access_team_domain)
        return ""


__all__ = ["FlagkeeperSettings", "STORAGE_BACKENDS", "access_certs_url"]
