"""Security – TokenClaims decoded from a verified token."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# last second of year 9999; later values cannot become a datetime
MAX_TIMESTAMP = 253402300799


def is_representable_timestamp(value: Any) -> bool:
    """True for a finite numeric epoch value that fits in a ``datetime``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and 0 <= value <= MAX_TIMESTAMP


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    aud: str | list[str]
    exp: datetime
    iss: str = ""
    iat: datetime | None = None
    email: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TokenClaims:
        """Build claims from a verified payload.

        ``exp`` must be representable; an unusable ``iat`` becomes ``None``.
        """
        def _dt(v: Any) -> datetime:
            if not is_representable_timestamp(v):
                raise ValueError(f"timestamp {v!r} out of range")
            return datetime.fromtimestamp(float(v), tz=UTC)

        known = {"sub", "iss", "aud", "exp", "iat", "email"}
        extra = {k: v for k, v in payload.items() if k not in known}
        iat = payload.get("iat")
        return cls(
            sub=str(payload.get("sub", "")),
            aud=payload["aud"],
            exp=_dt(payload["exp"]),
            iss=str(payload.get("iss", "")),
            iat=_dt(iat) if is_representable_timestamp(iat) else None,
            email=payload.get("email") if isinstance(payload.get("email"), str) else None,
            extra=extra,
        )


__all__ = ["MAX_TIMESTAMP", "TokenClaims", "is_representable_timestamp"]
