"""Flags – Flag entity."""
from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from typing import Any


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix."""
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


@dataclasses.dataclass(frozen=True)
class Flag:
    """An on/off feature toggle.

    ``id`` and ``created_at`` never change after creation. ``to_dict`` emits
    the wire field names (``createdAt``, ``updatedAt``) shared by storage and
    the HTTP API.
    """

    id: str
    key: str
    name: str
    enabled: bool
    created_at: datetime
    updated_at: datetime
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "key": self.key,
            "name": self.name,
        }
        if self.description is not None:
            payload["description"] = self.description
        payload["enabled"] = self.enabled
        payload["createdAt"] = format_timestamp(self.created_at)
        payload["updatedAt"] = format_timestamp(self.updated_at)
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Flag:
        """Build a flag from its wire form.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on malformed input.
        """
        description = payload.get("description")
        for field in ("id", "key", "name"):
            if not isinstance(payload[field], str):
                raise TypeError(f"{field} must be a string")
        if description is not None and not isinstance(description, str):
            raise TypeError("description must be a string")
        if not isinstance(payload["enabled"], bool):
            raise TypeError("enabled must be a boolean")
        return cls(
            id=payload["id"],
            key=payload["key"],
            name=payload["name"],
            description=description,
            enabled=payload["enabled"],
            created_at=parse_timestamp(payload["createdAt"]),
            updated_at=parse_timestamp(payload["updatedAt"]),
        )


__all__ = ["Flag", "format_timestamp", "parse_timestamp"]
