"""Unit tests for FlagRepository over an in-memory store."""

from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime

import pytest

from flagkeeper.flags import FLAG_KEY_PREFIX, Flag, FlagRepository
from flagkeeper.kernel.errors import SerializationError
from flagkeeper.storage import InMemoryKeyValueStore

T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _flag(flag_id: str, key: str) -> Flag:
    return Flag(id=flag_id, key=key, name=key.title(), enabled=False, created_at=T0, updated_at=T0)


class TestFlagRepository:
    def test_storage_key(self) -> None:
        repo = FlagRepository(InMemoryKeyValueStore())
        assert FLAG_KEY_PREFIX == "flag:"
        assert repo.storage_key("abc") == "flag:abc"

    def test_put_writes_json_document(self) -> None:
        store = InMemoryKeyValueStore()
        repo = FlagRepository(store)
        asyncio.run(repo.put("id-1", _flag("id-1", "beta")))
        stored = json.loads(store.snapshot()["flag:id-1"])
        assert stored["key"] == "beta"
        assert stored["createdAt"] == "2026-01-01T00:00:00Z"
        assert "created_at" not in stored

    def test_get_round_trips(self) -> None:
        async def run() -> None:
            repo = FlagRepository(InMemoryKeyValueStore())
            flag = _flag("id-1", "beta")
            await repo.put(flag.id, flag)
            assert await repo.get("id-1") == flag
            assert await repo.get("id-2") is None
        asyncio.run(run())

    def test_list_only_sees_flag_prefix(self) -> None:
        async def run() -> None:
            store = InMemoryKeyValueStore({"session:1": "{not json", "flags": "x"})
            repo = FlagRepository(store)
            await repo.put("b", _flag("b", "bb"))
            await repo.put("a", _flag("a", "aa"))
            flags = await repo.list()
            assert [f.id for f in flags] == ["a", "b"]
        asyncio.run(run())

    def test_delete(self) -> None:
        async def run() -> None:
            store = InMemoryKeyValueStore()
            repo = FlagRepository(store)
            await repo.put("a", _flag("a", "aa"))
            await repo.delete("a")
            await repo.delete("a")
            assert store.snapshot() == {}
        asyncio.run(run())

    def test_custom_prefix(self) -> None:
        store = InMemoryKeyValueStore()
        repo = FlagRepository(store, prefix="tenant-1:flag:")
        asyncio.run(repo.put("a", _flag("a", "aa")))
        assert list(store.snapshot()) == ["tenant-1:flag:a"]


class TestFlagRepositoryCorruption:
    @pytest.mark.parametrize(
        "raw",
        ["{not json", "[1, 2]", json.dumps({"id": "x"}), json.dumps({
            "id": "x", "key": "k", "name": "n", "enabled": "yes",
            "createdAt": "2026-01-01T00:00:00Z", "updatedAt": "2026-01-01T00:00:00Z",
        })],
    )
    def test_corrupt_payload_raises(self, raw: str) -> None:
        repo = FlagRepository(InMemoryKeyValueStore({"flag:x": raw}))
        with pytest.raises(SerializationError) as info:
            asyncio.run(repo.get("x"))
        assert info.value.storage_key == "flag:x"

    def test_corrupt_entry_fails_list(self) -> None:
        store = InMemoryKeyValueStore({"flag:x": "garbage"})
        repo = FlagRepository(store)
        with pytest.raises(SerializationError):
            asyncio.run(repo.list())
