"""Flags – FlagService, the domain core.

Every public operation runs inside the partition actor, so the
read-all-then-write uniqueness check of ``create_flag`` and ``update_flag``
cannot interleave with another mutation on the same partition. Private
``_``-prefixed helpers assume they are already inside the actor and must not
submit to it again.
"""
from __future__ import annotations

import dataclasses
import uuid
from typing import Awaitable, Callable, TypeVar

from flagkeeper.flags.flag import Flag
from flagkeeper.flags.repository import FlagRepository
from flagkeeper.kernel.errors import (
    FlagKeyExistsError,
    FlagNotFoundError,
    StorageError,
    ValidationFailedError,
)
from flagkeeper.kernel.time import Clock, SystemClock
from flagkeeper.observability.logging import get_logger
from flagkeeper.storage.partition import PartitionActor

T = TypeVar("T")

logger = get_logger(__name__)


def _new_flag_id() -> str:
    return str(uuid.uuid4())


def _require_text(field: str, value: str | None, reason: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailedError(field, reason)
    return value.strip()


class FlagService:
    """CRUD over flags with validation and key-uniqueness enforcement.

    Parameters
    ----------
    repository:
        Persistence for flag records.
    partition:
        Single-writer boundary for the partition the repository lives in.
        A private actor is created when omitted.
    clock:
        Source of ``created_at`` / ``updated_at``.
    id_factory:
        Produces new flag ids (UUID-v4 strings by default).
    """

    def __init__(
        self,
        repository: FlagRepository,
        *,
        partition: PartitionActor | None = None,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._repository = repository
        self._partition = partition or PartitionActor()
        self._clock: Clock = clock or SystemClock()
        self._id_factory = id_factory or _new_flag_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_all_flags(self) -> list[Flag]:
        """All flags, newest ``created_at`` first (ties by ``id`` descending)."""
        return await self._partition.submit(self._list_sorted)

    async def get_flag(self, flag_id: str) -> Flag:
        return await self._partition.submit(lambda: self._get(flag_id))

    async def get_flag_by_key(self, key: str) -> Flag | None:
        """Linear scan for the flag holding *key*; ``None`` when nobody does."""
        clean_key = _require_text("key", key, "Key is required and cannot be empty")
        return await self._partition.submit(lambda: self._find_by_key(clean_key))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_flag(
        self,
        key: str,
        name: str,
        description: str | None = None,
        enabled: bool = False,
    ) -> Flag:
        clean_key = _require_text("key", key, "Key is required and cannot be empty")
        clean_name = _require_text("name", name, "Name is required and cannot be empty")
        clean_description = description.strip() if description is not None else None
        return await self._partition.submit(
            lambda: self._create(clean_key, clean_name, clean_description, bool(enabled))
        )

    async def update_flag(
        self,
        flag_id: str,
        *,
        key: str | None = None,
        name: str | None = None,
        description: str | None = None,
        enabled: bool | None = None,
    ) -> Flag:
        """Merge the supplied fields over the stored flag.

        ``None`` means "leave unchanged"; ``id`` and ``created_at`` are never
        touched and ``updated_at`` is recomputed.
        """
        return await self._partition.submit(
            lambda: self._update(flag_id, key, name, description, enabled)
        )

    async def delete_flag(self, flag_id: str) -> None:
        await self._partition.submit(lambda: self._delete(flag_id))

    # ------------------------------------------------------------------
    # Inside the partition actor
    # ------------------------------------------------------------------

    async def _list_sorted(self) -> list[Flag]:
        flags = await self._storage("list flags", self._repository.list)
        return sorted(flags, key=lambda f: (f.created_at, f.id), reverse=True)

    async def _get(self, flag_id: str) -> Flag:
        flag = await self._storage(f"get flag {flag_id}", lambda: self._repository.get(flag_id))
        if flag is None:
            raise FlagNotFoundError(flag_id)
        return flag

    async def _find_by_key(self, key: str) -> Flag | None:
        for flag in await self._list_sorted():
            if flag.key == key:
                return flag
        return None

    async def _create(
        self, key: str, name: str, description: str | None, enabled: bool
    ) -> Flag:
        existing = await self._find_by_key(key)
        if existing is not None:
            raise FlagKeyExistsError(key, existing.id)

        now = self._clock.now()
        flag = Flag(
            id=self._id_factory(),
            key=key,
            name=name,
            description=description,
            enabled=enabled,
            created_at=now,
            updated_at=now,
        )
        await self._storage(f"create flag {key}", lambda: self._repository.put(flag.id, flag))
        logger.info("flag_created", flag_id=flag.id, key=flag.key, enabled=flag.enabled)
        return flag

    async def _update(
        self,
        flag_id: str,
        key: str | None,
        name: str | None,
        description: str | None,
        enabled: bool | None,
    ) -> Flag:
        existing = await self._get(flag_id)

        new_key = existing.key if key is None else _require_text("key", key, "Key cannot be empty")
        new_name = (
            existing.name if name is None else _require_text("name", name, "Name cannot be empty")
        )

        if new_key != existing.key:
            holder = await self._find_by_key(new_key)
            if holder is not None and holder.id != flag_id:
                raise FlagKeyExistsError(new_key, holder.id)

        updated = dataclasses.replace(
            existing,
            key=new_key,
            name=new_name,
            description=existing.description if description is None else description.strip(),
            enabled=existing.enabled if enabled is None else bool(enabled),
            # a clock that steps backwards must not move updated_at behind the last write
            updated_at=max(self._clock.now(), existing.updated_at),
        )
        await self._storage(
            f"update flag {flag_id}", lambda: self._repository.put(flag_id, updated)
        )
        logger.info("flag_updated", flag_id=flag_id, key=updated.key, enabled=updated.enabled)
        return updated

    async def _delete(self, flag_id: str) -> None:
        await self._get(flag_id)
        await self._storage(f"delete flag {flag_id}", lambda: self._repository.delete(flag_id))
        logger.info("flag_deleted", flag_id=flag_id)

    async def _storage(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except Exception as exc:
            logger.error("flag_storage_failed", operation=operation, error=repr(exc))
            raise StorageError(operation, exc) from exc


__all__ = ["FlagService"]
