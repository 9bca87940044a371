"""Redis adapter – RedisKeyValueStore."""
from __future__ import annotations

import re
from typing import Any

from flagkeeper.kernel.errors import KeyValueStoreError
from flagkeeper.observability.logging import get_logger
from flagkeeper.storage.port import KeyValueStore

_GLOB_SPECIALS = re.compile(r"([*?\[\]\\])")

logger = get_logger(__name__)


def _require_redis() -> Any:
    try:
        import redis.asyncio as aioredis
        return aioredis
    except ImportError as exc:
        raise ImportError("Install 'flagkeeper[redis]' to use the Redis adapter") from exc


def escape_glob(prefix: str) -> str:
    """Escape Redis ``MATCH`` metacharacters so *prefix* matches literally."""
    return _GLOB_SPECIALS.sub(r"\\\1", prefix)


class RedisKeyValueStore(KeyValueStore):
    """Key-value store on Redis strings.

    ``list`` walks the keyspace with ``SCAN MATCH <prefix>*`` and reads the
    values with one ``MGET``; a key deleted between the two is skipped with a
    warning.
    """

    def __init__(self, url: str, scan_count: int = 500, **kwargs: Any) -> None:
        aioredis = _require_redis()
        self._client = aioredis.from_url(url, decode_responses=True, **kwargs)
        self._scan_count = scan_count

    async def list(self, prefix: str) -> dict[str, str]:
        try:
            keys = sorted(
                {k async for k in self._client.scan_iter(match=f"{escape_glob(prefix)}*", count=self._scan_count)}
            )
            if not keys:
                return {}
            values = await self._client.mget(keys)
        except Exception as exc:
            raise KeyValueStoreError("redis", f"SCAN {prefix!r} failed: {exc}", cause=exc) from exc
        found = {k: v for k, v in zip(keys, values) if v is not None}
        if len(found) < len(keys):
            skipped = [k for k in keys if k not in found]
            logger.warning("redis_keys_skipped", prefix=prefix, keys=skipped)
        return found

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except Exception as exc:
            raise KeyValueStoreError("redis", f"GET {key!r} failed: {exc}", cause=exc) from exc

    async def put(self, key: str, value: str) -> None:
        try:
            await self._client.set(key, value)
        except Exception as exc:
            raise KeyValueStoreError("redis", f"SET {key!r} failed: {exc}", cause=exc) from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except Exception as exc:
            raise KeyValueStoreError("redis", f"DEL {key!r} failed: {exc}", cause=exc) from exc

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except Exception:  # noqa: BLE001
            return False

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["RedisKeyValueStore", "escape_glob"]
