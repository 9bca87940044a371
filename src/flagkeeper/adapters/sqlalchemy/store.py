"""SQLAlchemy adapter – SqlAlchemyKeyValueStore.

One ``kv_entries`` table, one row per key. Works on any async SQLAlchemy URL;
``sqlite+aiosqlite:///path.db`` gives an embedded file-backed store.
"""
from __future__ import annotations

from typing import Any

from flagkeeper.kernel.errors import KeyValueStoreError
from flagkeeper.storage.port import KeyValueStore


def _require_sqlalchemy() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except ImportError as exc:
        raise ImportError("Install 'flagkeeper[sql]' to use the SQLAlchemy adapter") from exc


def _build_table() -> Any:
    from sqlalchemy import Column, MetaData, String, Table, Text

    metadata = MetaData()
    return Table(
        "kv_entries",
        metadata,
        Column("key", String(512), primary_key=True),
        Column("value", Text, nullable=False),
    )


class SqlAlchemyKeyValueStore(KeyValueStore):
    """Key-value store backed by a relational table.

    Call :meth:`create_schema` once before first use. Each write runs in its
    own transaction, so a failed ``put``/``delete`` is rolled back.
    """

    def __init__(self, database_url: str, **engine_kwargs: Any) -> None:
        _require_sqlalchemy()
        from sqlalchemy.ext.asyncio import create_async_engine  # type: ignore[import-untyped]

        self._engine = create_async_engine(database_url, **engine_kwargs)
        self._table = _build_table()

    async def create_schema(self) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(self._table.metadata.create_all)
        except Exception as exc:
            raise KeyValueStoreError("sql", f"schema creation failed: {exc}", cause=exc) from exc

    async def list(self, prefix: str) -> dict[str, str]:
        from sqlalchemy import select

        t = self._table
        stmt = (
            select(t.c.key, t.c.value)
            .where(t.c.key.startswith(prefix, autoescape=True))
            .order_by(t.c.key)
        )
        try:
            async with self._engine.connect() as conn:
                rows = (await conn.execute(stmt)).all()
        except Exception as exc:
            raise KeyValueStoreError("sql", f"scan {prefix!r} failed: {exc}", cause=exc) from exc
        # SQLite LIKE ignores ASCII case
        return {key: value for key, value in rows if key.startswith(prefix)}

    async def get(self, key: str) -> str | None:
        from sqlalchemy import select

        t = self._table
        try:
            async with self._engine.connect() as conn:
                return (await conn.execute(select(t.c.value).where(t.c.key == key))).scalar_one_or_none()
        except Exception as exc:
            raise KeyValueStoreError("sql", f"get {key!r} failed: {exc}", cause=exc) from exc

    async def put(self, key: str, value: str) -> None:
        from sqlalchemy import delete, insert

        t = self._table
        try:
            async with self._engine.begin() as conn:
                await conn.execute(delete(t).where(t.c.key == key))
                await conn.execute(insert(t).values(key=key, value=value))
        except Exception as exc:
            raise KeyValueStoreError("sql", f"put {key!r} failed: {exc}", cause=exc) from exc

    async def delete(self, key: str) -> None:
        from sqlalchemy import delete

        t = self._table
        try:
            async with self._engine.begin() as conn:
                await conn.execute(delete(t).where(t.c.key == key))
        except Exception as exc:
            raise KeyValueStoreError("sql", f"delete {key!r} failed: {exc}", cause=exc) from exc

    async def dispose(self) -> None:
        await self._engine.dispose()


__all__ = ["SqlAlchemyKeyValueStore"]
