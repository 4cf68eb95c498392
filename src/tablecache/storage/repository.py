# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Row-level access to the cache table.

:class:`CacheRowRepository` is the only place that writes SQL for cache
rows.  It works against any :class:`DatabaseBackend`, so the same queries
run on SQLite and PostgreSQL.  Driver exceptions are re-raised as
:class:`~tablecache.core.exceptions.StorageError`; nothing is retried here.
"""

from __future__ import annotations

import contextlib
import logging
import math
from collections.abc import Iterator, Sequence

from tablecache.core.exceptions import ConfigurationError, StorageError
from tablecache.models import CacheRow
from tablecache.storage.backend import DatabaseBackend
from tablecache.storage.query_adapter import placeholders, quote_identifier
from tablecache.storage.schema import cache_table_ddl

logger = logging.getLogger(__name__)

# Stay well below SQLite's bound-parameter limit for IN (...) lists.
_SELECT_CHUNK_SIZE = 500

_HAS_TABLE_SQL = {
    "sqlite": "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
    "postgres": (
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = current_schema() AND table_name = ?"
    ),
}


def table_identifier(name: str) -> str:
    """Return *name* quoted for SQL, or raise :class:`ConfigurationError`."""
    try:
        return quote_identifier(name)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid cache table name: {name!r}") from exc


class CacheRowRepository:
    """CRUD over cache rows stored in a single table."""

    def __init__(self, backend: DatabaseBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> DatabaseBackend:
        return self._backend

    @contextlib.contextmanager
    def _guard(self, action: str, table: str) -> Iterator[None]:
        """Translate driver failures into :class:`StorageError`."""
        try:
            yield
        except (StorageError, ConfigurationError):
            raise
        except Exception as exc:
            msg = f"Failed to {action} on cache table {table!r}: {exc}"
            raise StorageError(msg) from exc

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def has_table(self, name: str) -> bool:
        table_identifier(name)
        query = _HAS_TABLE_SQL.get(self._backend.backend_name, _HAS_TABLE_SQL["sqlite"])
        with self._guard("inspect schema", name):
            row = await self._backend.fetch_one(query, (name,))
        return row is not None

    async def create_table(self, name: str) -> None:
        table_identifier(name)
        with self._guard("create table", name):
            for statement in cache_table_ddl(name, self._backend.backend_name):
                await self._backend.execute(statement)
            await self._backend.commit()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def select_one(self, table: str, key: str) -> CacheRow | None:
        query = (
            f'SELECT "key", "value", "expiration" FROM {table_identifier(table)} '
            'WHERE "key" = ?'
        )
        with self._guard("select", table):
            row = await self._backend.fetch_one(query, (key,))
        if row is None:
            return None
        return CacheRow.model_validate(row)

    async def select_many(self, table: str, keys: Sequence[str]) -> list[CacheRow]:
        """Fetch the rows for *keys*; missing keys are simply absent."""
        quoted = table_identifier(table)
        unique = list(dict.fromkeys(keys))
        rows: list[CacheRow] = []
        for start in range(0, len(unique), _SELECT_CHUNK_SIZE):
            chunk = unique[start : start + _SELECT_CHUNK_SIZE]
            query = (
                f'SELECT "key", "value", "expiration" FROM {quoted} '
                f'WHERE "key" IN ({placeholders(len(chunk))})'
            )
            with self._guard("select", table):
                fetched = await self._backend.fetch_all(query, tuple(chunk))
            rows.extend(CacheRow.model_validate(r) for r in fetched)
        return rows

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _upsert_sql(quoted: str) -> str:
        return (
            f'INSERT INTO {quoted} ("key", "value", "expiration") VALUES (?, ?, ?) '
            'ON CONFLICT ("key") DO UPDATE SET '
            '"value" = excluded."value", "expiration" = excluded."expiration"'
        )

    async def upsert(self, table: str, row: CacheRow) -> None:
        """Insert *row*, or replace value and expiration of the existing key."""
        query = self._upsert_sql(table_identifier(table))
        with self._guard("upsert", table):
            await self._backend.execute(query, (row.key, row.value, row.expiration))
            await self._backend.commit()

    async def upsert_many(self, table: str, rows: Sequence[CacheRow]) -> None:
        if not rows:
            return
        query = self._upsert_sql(table_identifier(table))
        params = [(r.key, r.value, r.expiration) for r in rows]
        with self._guard("upsert", table):
            await self._backend.executemany(query, params)
            await self._backend.commit()

    async def delete_one(self, table: str, key: str) -> int:
        query = f'DELETE FROM {table_identifier(table)} WHERE "key" = ?'
        with self._guard("delete", table):
            count = await self._backend.execute_count(query, (key,))
            await self._backend.commit()
        return count

    async def delete_all(self, table: str) -> int:
        query = f"DELETE FROM {table_identifier(table)}"
        with self._guard("delete", table):
            count = await self._backend.execute_count(query)
            await self._backend.commit()
        return count

    async def delete_expired(self, table: str, now: float) -> int:
        """Delete every row whose expiry is at or before *now*."""
        query = (
            f'DELETE FROM {table_identifier(table)} '
            'WHERE "expiration" IS NOT NULL AND "expiration" <= ?'
        )
        with self._guard("purge", table):
            count = await self._backend.execute_count(query, (math.floor(now),))
            await self._backend.commit()
        logger.debug("Purged %d expired row(s) from %s", count, table)
        return count
