"""Storage – single-writer partition actor.

Every operation against a partition runs inside its :class:`PartitionActor`,
one at a time in submission order. A read-all-then-write sequence submitted as
one operation therefore cannot interleave with another writer on the same
partition. Nothing coordinates across partitions.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from flagkeeper.observability.logging import get_logger

T = TypeVar("T")

DEFAULT_PARTITION = "default"

logger = get_logger(__name__)


class PartitionActor:
    """Serialized executor for one logical storage partition.

    ``asyncio.Lock`` wakes waiters in FIFO order, so operations complete in
    the order they were submitted. The lock is not re-entrant: an operation
    must never submit to its own actor.
    """

    def __init__(self, name: str = DEFAULT_PARTITION) -> None:
        self.name = name
        self._lock = asyncio.Lock()

    async def submit(self, operation: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            return await operation()


class PartitionRegistry:
    """Hands out exactly one :class:`PartitionActor` per partition name."""

    def __init__(self) -> None:
        self._actors: dict[str, PartitionActor] = {}

    def get(self, name: str = DEFAULT_PARTITION) -> PartitionActor:
        actor = self._actors.get(name)
        if actor is None:
            actor = PartitionActor(name)
            self._actors[name] = actor
            logger.debug("partition_actor_created", partition=name)
        return actor


__all__ = ["DEFAULT_PARTITION", "PartitionActor", "PartitionRegistry"]
