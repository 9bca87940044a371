"""Unit tests for FlagService – validation, key uniqueness, ordering, failures."""

from __future__ import annotations

import asyncio
import itertools
import json
from datetime import UTC, datetime, timedelta

import pytest

from flagkeeper.flags import Flag, FlagRepository, FlagService
from flagkeeper.kernel.errors import (
    ErrorCode,
    FlagKeyExistsError,
    FlagNotFoundError,
    KeyValueStoreError,
    SerializationError,
    StorageError,
    ValidationFailedError,
)
from flagkeeper.storage import InMemoryKeyValueStore, PartitionActor
from flagkeeper.testing.fakes import FakeClock, FlakyKeyValueStore, FrozenClock, StepClock


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _ids(prefix: str = "id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter):03d}"


def _service(store=None, clock=None, **kwargs) -> tuple[FlagService, InMemoryKeyValueStore]:
    store = store if store is not None else InMemoryKeyValueStore()
    service = FlagService(
        FlagRepository(store),
        clock=clock or StepClock(),
        id_factory=kwargs.pop("id_factory", _ids()),
        **kwargs,
    )
    return service, store


class SlowStore(InMemoryKeyValueStore):
    """Yields to the loop on every call so unserialized callers would interleave."""

    async def list(self, prefix: str) -> dict[str, str]:
        await asyncio.sleep(0.001)
        return await super().list(prefix)

    async def put(self, key: str, value: str) -> None:
        await asyncio.sleep(0.001)
        await super().put(key, value)


# ---------------------------------------------------------------------------
# create_flag
# ---------------------------------------------------------------------------


class TestCreateFlag:
    def test_creates_with_defaults(self) -> None:
        async def run() -> None:
            clock = FakeClock()
            service, store = _service(clock=clock)
            flag = await service.create_flag("beta", "Beta")
            assert flag.id == "id-001"
            assert flag.key == "beta"
            assert flag.name == "Beta"
            assert flag.enabled is False
            assert flag.description is None
            assert flag.created_at == flag.updated_at == clock.now()
            assert "flag:id-001" in store.snapshot()
        asyncio.run(run())

    def test_trims_text_fields(self) -> None:
        async def run() -> None:
            service, _ = _service()
            flag = await service.create_flag("  beta ", " Beta  ", "  rollout ", enabled=True)
            assert (flag.key, flag.name, flag.description, flag.enabled) == (
                "beta", "Beta", "rollout", True,
            )
        asyncio.run(run())

    def test_default_ids_are_unique_uuids(self) -> None:
        async def run() -> None:
            service = FlagService(FlagRepository(InMemoryKeyValueStore()))
            a = await service.create_flag("a", "A")
            b = await service.create_flag("b", "B")
            assert a.id != b.id
            assert len(a.id) == 36
        asyncio.run(run())

    @pytest.mark.parametrize(
        ("key", "name", "field", "reason"),
        [
            ("", "Beta", "key", "Key is required and cannot be empty"),
            ("   ", "Beta", "key", "Key is required and cannot be empty"),
            (None, "Beta", "key", "Key is required and cannot be empty"),
            ("beta", "", "name", "Name is required and cannot be empty"),
            ("beta", " \t", "name", "Name is required and cannot be empty"),
        ],
    )
    def test_validation(self, key, name, field, reason) -> None:
        service, store = _service()
        with pytest.raises(ValidationFailedError) as info:
            asyncio.run(service.create_flag(key, name))
        assert info.value.field == field
        assert info.value.reason == reason
        assert info.value.code is ErrorCode.VALIDATION_FAILED
        assert store.snapshot() == {}

    def test_validation_happens_before_storage(self) -> None:
        store = FlakyKeyValueStore(failing={"list", "get", "put"})
        service, _ = _service(store=store)
        with pytest.raises(ValidationFailedError):
            asyncio.run(service.create_flag("", "x"))
        assert store.calls == []

    def test_duplicate_key_conflicts(self) -> None:
        async def run() -> None:
            service, store = _service()
            first = await service.create_flag("beta", "Beta")
            before = store.snapshot()
            with pytest.raises(FlagKeyExistsError) as info:
                await service.create_flag("beta", "Another")
            assert info.value.existing_id == first.id
            assert store.snapshot() == before
        asyncio.run(run())

    def test_duplicate_detected_after_trimming(self) -> None:
        async def run() -> None:
            service, _ = _service()
            await service.create_flag("beta", "Beta")
            with pytest.raises(FlagKeyExistsError):
                await service.create_flag("  beta  ", "Beta again")
        asyncio.run(run())

    def test_keys_are_case_sensitive(self) -> None:
        async def run() -> None:
            service, _ = _service()
            await service.create_flag("beta", "Beta")
            flag = await service.create_flag("Beta", "Beta upper")
            assert flag.key == "Beta"
        asyncio.run(run())

    def test_concurrent_creates_with_same_key(self) -> None:
        async def run() -> list:
            service, store = _service(store=SlowStore())
            results = await asyncio.gather(
                *(service.create_flag("race", f"Racer {i}") for i in range(5)),
                return_exceptions=True,
            )
            return [results, store.snapshot()]

        results, snapshot = asyncio.run(run())
        created = [r for r in results if isinstance(r, Flag)]
        conflicts = [r for r in results if isinstance(r, FlagKeyExistsError)]
        assert len(created) == 1
        assert len(conflicts) == 4
        assert len(snapshot) == 1

    def test_services_sharing_a_partition_stay_unique(self) -> None:
        async def run() -> int:
            store = SlowStore()
            partition = PartitionActor()
            a, _ = _service(store=store, partition=partition, id_factory=_ids("a"))
            b, _ = _service(store=store, partition=partition, id_factory=_ids("b"))
            results = await asyncio.gather(
                a.create_flag("shared", "A"), b.create_flag("shared", "B"), return_exceptions=True
            )
            assert sum(isinstance(r, FlagKeyExistsError) for r in results) == 1
            return len(store.snapshot())

        assert asyncio.run(run()) == 1

    def test_storage_failure_on_put_is_wrapped(self) -> None:
        async def run() -> None:
            store = FlakyKeyValueStore(failing={"put"})
            service, _ = _service(store=store)
            with pytest.raises(StorageError) as info:
                await service.create_flag("beta", "Beta")
            assert isinstance(info.value.cause, KeyValueStoreError)
            assert info.value.operation == "create flag beta"
            assert store.snapshot() == {}
        asyncio.run(run())


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_get_all_flags_newest_first(self) -> None:
        async def run() -> None:
            service, _ = _service(clock=StepClock(seconds=1))
            a = await service.create_flag("a", "A")
            b = await service.create_flag("b", "B")
            c = await service.create_flag("c", "C")
            flags = await service.get_all_flags()
            assert [f.id for f in flags] == [c.id, b.id, a.id]
        asyncio.run(run())

    def test_ties_broken_by_id_descending(self) -> None:
        async def run() -> None:
            service, _ = _service(clock=FakeClock())
            for key in ("a", "b", "c"):
                await service.create_flag(key, key.upper())
            flags = await service.get_all_flags()
            assert [f.id for f in flags] == ["id-003", "id-002", "id-001"]
        asyncio.run(run())

    def test_empty_store(self) -> None:
        service, _ = _service()
        assert asyncio.run(service.get_all_flags()) == []

    def test_get_flag(self) -> None:
        async def run() -> None:
            service, _ = _service()
            created = await service.create_flag("beta", "Beta")
            assert await service.get_flag(created.id) == created
        asyncio.run(run())

    def test_get_flag_missing(self) -> None:
        service, _ = _service()
        with pytest.raises(FlagNotFoundError) as info:
            asyncio.run(service.get_flag("nope"))
        assert info.value.flag_id == "nope"

    def test_get_flag_by_key(self) -> None:
        async def run() -> None:
            service, _ = _service()
            created = await service.create_flag("beta", "Beta")
            assert await service.get_flag_by_key("beta") == created
            assert await service.get_flag_by_key(" beta ") == created
            assert await service.get_flag_by_key("gamma") is None
        asyncio.run(run())

    @pytest.mark.parametrize("key", [None, "", "   ", 42])
    def test_get_flag_by_key_requires_text(self, key) -> None:
        service, _ = _service()
        with pytest.raises(ValidationFailedError) as info:
            asyncio.run(service.get_flag_by_key(key))
        assert info.value.field == "key"

    def test_list_failure_is_wrapped(self) -> None:
        store = FlakyKeyValueStore(failing={"list"})
        service, _ = _service(store=store)
        with pytest.raises(StorageError) as info:
            asyncio.run(service.get_all_flags())
        assert info.value.operation == "list flags"

    def test_corrupt_record_surfaces_as_storage_error(self) -> None:
        store = InMemoryKeyValueStore({"flag:x": "{broken"})
        service, _ = _service(store=store)
        with pytest.raises(StorageError) as info:
            asyncio.run(service.get_all_flags())
        assert isinstance(info.value.cause, SerializationError)

    def test_get_failure_is_wrapped(self) -> None:
        store = FlakyKeyValueStore(failing={"get"})
        service, _ = _service(store=store)
        with pytest.raises(StorageError):
            asyncio.run(service.get_flag("x"))


# ---------------------------------------------------------------------------
# update_flag
# ---------------------------------------------------------------------------


class TestUpdateFlag:
    def test_partial_update_keeps_other_fields(self) -> None:
        async def run() -> None:
            service, _ = _service()
            created = await service.create_flag("beta", "Beta", "desc")
            updated = await service.update_flag(created.id, enabled=True)
            assert updated.enabled is True
            assert (updated.key, updated.name, updated.description) == ("beta", "Beta", "desc")
            assert updated.id == created.id
            assert updated.created_at == created.created_at
            assert updated.updated_at > created.updated_at
            assert await service.get_flag(created.id) == updated
        asyncio.run(run())

    def test_update_all_fields(self) -> None:
        async def run() -> None:
            service, _ = _service()
            created = await service.create_flag("beta", "Beta")
            updated = await service.update_flag(
                created.id, key=" gamma ", name=" Gamma ", description=" new ", enabled=True
            )
            assert (updated.key, updated.name, updated.description, updated.enabled) == (
                "gamma", "Gamma", "new", True,
            )
        asyncio.run(run())

    def test_same_key_is_not_a_conflict(self) -> None:
        async def run() -> None:
            service, _ = _service()
            created = await service.create_flag("beta", "Beta")
            updated = await service.update_flag(created.id, key="beta", name="Renamed")
            assert updated.name == "Renamed"
        asyncio.run(run())

    def test_key_taken_by_other_flag_conflicts(self) -> None:
        async def run() -> None:
            service, _ = _service()
            a = await service.create_flag("a", "A")
            b = await service.create_flag("b", "B")
            with pytest.raises(FlagKeyExistsError) as info:
                await service.update_flag(b.id, key="a")
            assert info.value.existing_id == a.id
            assert (await service.get_flag(b.id)).key == "b"
        asyncio.run(run())

    @pytest.mark.parametrize(
        ("changes", "field", "reason"),
        [
            ({"key": ""}, "key", "Key cannot be empty"),
            ({"key": "   "}, "key", "Key cannot be empty"),
            ({"name": ""}, "name", "Name cannot be empty"),
        ],
    )
    def test_validation(self, changes, field, reason) -> None:
        async def run() -> None:
            service, store = _service()
            created = await service.create_flag("beta", "Beta")
            before = store.snapshot()
            with pytest.raises(ValidationFailedError) as info:
                await service.update_flag(created.id, **changes)
            assert (info.value.field, info.value.reason) == (field, reason)
            assert store.snapshot() == before
        asyncio.run(run())

    def test_missing_flag(self) -> None:
        store = FlakyKeyValueStore()
        service, _ = _service(store=store)
        with pytest.raises(FlagNotFoundError):
            asyncio.run(service.update_flag("nope", key="", enabled=True))
        assert store.writes() == []

    def test_updated_at_never_moves_backwards(self) -> None:
        async def run() -> None:
            clock = FrozenClock(datetime(2026, 6, 1, tzinfo=UTC))
            service, _ = _service(clock=clock)
            created = await service.create_flag("beta", "Beta")
            clock.advance(hours=-1)
            updated = await service.update_flag(created.id, enabled=True)
            assert updated.updated_at == created.updated_at
            assert updated.updated_at >= updated.created_at
        asyncio.run(run())

    def test_empty_description_clears_text(self) -> None:
        async def run() -> None:
            service, _ = _service()
            created = await service.create_flag("beta", "Beta", "desc")
            updated = await service.update_flag(created.id, description="")
            assert updated.description == ""
        asyncio.run(run())

    def test_put_failure_leaves_record_untouched(self) -> None:
        async def run() -> None:
            store = FlakyKeyValueStore()
            service, _ = _service(store=store)
            created = await service.create_flag("beta", "Beta")
            before = store.snapshot()
            store.fail("put")
            with pytest.raises(StorageError) as info:
                await service.update_flag(created.id, enabled=True)
            assert info.value.operation == f"update flag {created.id}"
            assert store.snapshot() == before
        asyncio.run(run())


# ---------------------------------------------------------------------------
# delete_flag
# ---------------------------------------------------------------------------


class TestDeleteFlag:
    def test_delete_removes_record(self) -> None:
        async def run() -> None:
            service, store = _service()
            created = await service.create_flag("beta", "Beta")
            assert await service.delete_flag(created.id) is None
            assert store.snapshot() == {}
            with pytest.raises(FlagNotFoundError):
                await service.get_flag(created.id)
        asyncio.run(run())

    def test_key_is_reusable_after_delete(self) -> None:
        async def run() -> None:
            service, _ = _service()
            created = await service.create_flag("beta", "Beta")
            await service.delete_flag(created.id)
            again = await service.create_flag("beta", "Beta")
            assert again.id != created.id
        asyncio.run(run())

    def test_delete_missing(self) -> None:
        store = FlakyKeyValueStore()
        service, _ = _service(store=store)
        with pytest.raises(FlagNotFoundError):
            asyncio.run(service.delete_flag("nope"))
        assert store.writes() == []

    def test_delete_failure_is_wrapped(self) -> None:
        async def run() -> None:
            store = FlakyKeyValueStore()
            service, _ = _service(store=store)
            created = await service.create_flag("beta", "Beta")
            store.fail("delete")
            with pytest.raises(StorageError):
                await service.delete_flag(created.id)
            assert json.loads(store.snapshot()[f"flag:{created.id}"])["key"] == "beta"
        asyncio.run(run())


class TestTimestamps:
    def test_created_at_is_clock_time(self) -> None:
        async def run() -> None:
            start = datetime(2026, 2, 2, tzinfo=UTC)
            service, _ = _service(clock=StepClock(start=start, step=timedelta(minutes=1)))
            a = await service.create_flag("a", "A")
            b = await service.create_flag("b", "B")
            assert a.created_at == start
            assert b.created_at == start + timedelta(minutes=1)
        asyncio.run(run())
