"""Storage – InMemoryKeyValueStore."""
from __future__ import annotations

from flagkeeper.storage.port import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and local development."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def list(self, prefix: str) -> dict[str, str]:
        return {k: self._data[k] for k in sorted(self._data) if k.startswith(prefix)}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the raw contents (test helper)."""
        return dict(self._data)


__all__ = ["InMemoryKeyValueStore"]
