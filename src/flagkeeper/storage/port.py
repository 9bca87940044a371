"""Storage – KeyValueStore port."""
from __future__ import annotations

import abc


class KeyValueStore(abc.ABC):
    """Port: ordered, prefix-scannable string key-value map.

    Every call is atomic for the single key it touches; nothing spans keys.
    Backends raise :class:`~flagkeeper.kernel.errors.KeyValueStoreError` on
    any I/O fault, and a failed ``put``/``delete`` leaves the key unchanged.
    """

    @abc.abstractmethod
    async def list(self, prefix: str) -> dict[str, str]:
        """Return every entry whose key starts with *prefix*, ordered by key."""

    @abc.abstractmethod
    async def get(self, key: str) -> str | None: ...

    @abc.abstractmethod
    async def put(self, key: str, value: str) -> None: ...

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; deleting an absent key is a no-op."""


__all__ = ["KeyValueStore"]
