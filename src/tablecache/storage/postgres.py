# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""asyncpg pool backend for the cache table (``pip install tablecache[postgres]``)."""

from __future__ import annotations

from typing import Any

from tablecache.core.exceptions import StorageError
from tablecache.storage.backend import DatabaseBackend
from tablecache.storage.query_adapter import adapt_query

try:
    import asyncpg  # type: ignore[import-not-found]

    HAS_ASYNCPG = True
except ImportError:  # pragma: no cover
    HAS_ASYNCPG = False
    asyncpg = None  # type: ignore[assignment]


def _require_asyncpg() -> None:
    if not HAS_ASYNCPG:
        msg = (
            "The postgres cache backend needs asyncpg. "
            "Install it with:  pip install tablecache[postgres]"
        )
        raise StorageError(msg)


def _status_count(status: str) -> int:
    """Row count from a command tag such as ``DELETE 3`` or ``INSERT 0 1``."""
    tail = status.rsplit(" ", 1)[-1] if status else ""
    return int(tail) if tail.isdigit() else 0


class PostgresDatabase(DatabaseBackend):
    """Runs the repository's ``?``-style SQL on a pooled asyncpg connection."""

    dialect = "postgres"

    def __init__(self, pool: Any) -> None:
        _require_asyncpg()
        self._pool = pool

    @classmethod
    async def create(
        cls, dsn: str, *, min_size: int = 2, max_size: int = 10
    ) -> PostgresDatabase:
        _require_asyncpg()
        try:
            pool = await asyncpg.create_pool(  # type: ignore[union-attr]
                dsn, min_size=min_size, max_size=max_size
            )
        except Exception as exc:
            msg = f"Could not open a PostgreSQL pool for the cache: {exc}"
            raise StorageError(msg) from exc
        return cls(pool)

    async def _call(self, method: str, query: str, args: tuple[Any, ...]) -> Any:
        sql = adapt_query(query, self.dialect)
        async with self._pool.acquire() as conn:
            return await getattr(conn, method)(sql, *args)

    async def execute(self, query: str, params: tuple[Any, ...] | None = None) -> Any:
        return await self._call("execute", query, tuple(params or ()))

    async def execute_count(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> int:
        return _status_count(str(await self.execute(query, params)))

    async def executemany(self, query: str, params_seq: list[tuple[Any, ...]]) -> None:
        await self._call("executemany", query, (params_seq,))

    async def fetch_one(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        record = await self._call("fetchrow", query, tuple(params or ()))
        return None if record is None else dict(record)

    async def fetch_all(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        records = await self._call("fetch", query, tuple(params or ()))
        return [dict(record) for record in records]

    async def commit(self) -> None:
        # asyncpg autocommits each statement outside an explicit transaction
        return None

    async def close(self) -> None:
        await self._pool.close()

    @property
    def backend_name(self) -> str:
        return self.dialect

    @property
    def pool(self) -> Any:
        return self._pool
