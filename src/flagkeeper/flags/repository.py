"""Flags – FlagRepository over a KeyValueStore."""
from __future__ import annotations

import json

from flagkeeper.flags.flag import Flag
from flagkeeper.kernel.errors import SerializationError
from flagkeeper.storage.port import KeyValueStore

FLAG_KEY_PREFIX = "flag:"


class FlagRepository:
    """Stores each flag as a JSON document under ``flag:<id>``.

    There is no index on ``key``; lookups by key are full scans done by the
    service. A payload that cannot be decoded raises
    :class:`~flagkeeper.kernel.errors.SerializationError` instead of being
    skipped.
    """

    def __init__(self, store: KeyValueStore, prefix: str = FLAG_KEY_PREFIX) -> None:
        self._store = store
        self._prefix = prefix

    def storage_key(self, flag_id: str) -> str:
        return f"{self._prefix}{flag_id}"

    async def list(self) -> list[Flag]:
        entries = await self._store.list(self._prefix)
        return [self._decode(key, raw) for key, raw in entries.items()]

    async def get(self, flag_id: str) -> Flag | None:
        key = self.storage_key(flag_id)
        raw = await self._store.get(key)
        if raw is None:
            return None
        return self._decode(key, raw)

    async def put(self, flag_id: str, flag: Flag) -> None:
        await self._store.put(self.storage_key(flag_id), json.dumps(flag.to_dict()))

    async def delete(self, flag_id: str) -> None:
        await self._store.delete(self.storage_key(flag_id))

    @staticmethod
    def _decode(key: str, raw: str) -> Flag:
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise TypeError("flag payload must be a JSON object")
            return Flag.from_dict(payload)
        except (ValueError, KeyError, TypeError) as exc:
            raise SerializationError(
                f"Corrupt flag payload under '{key}'",
                storage_key=key,
                cause=exc,
            ) from exc


__all__ = ["FLAG_KEY_PREFIX", "FlagRepository"]
