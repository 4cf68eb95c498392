# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Database connection management with pluggable backend support.

Supports both SQLite (aiosqlite, default) and PostgreSQL (asyncpg).
The active backend is controlled by the ``TABLECACHE_DB_BACKEND`` env var
when not passed explicitly.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import aiosqlite

from tablecache.core.exceptions import ConfigurationError, StorageError
from tablecache.core.logging import redact_sensitive
from tablecache.storage.backend import DatabaseBackend

logger = logging.getLogger("tablecache.storage.database")

_backend: DatabaseBackend | None = None
_backend_target: tuple[str, str] | None = None


async def connect_sqlite(db_path: Path | str = "tablecache.db") -> aiosqlite.Connection:
    """Open an aiosqlite connection configured for the cache table.

    Rows come back as :class:`aiosqlite.Row`; file databases use WAL so
    readers do not block the writer.
    """
    try:
        conn = await aiosqlite.connect(str(db_path))
        conn.row_factory = aiosqlite.Row
        if str(db_path) != ":memory:":
            await conn.execute("PRAGMA journal_mode=WAL")
        return conn
    except Exception as exc:
        msg = f"Failed to open SQLite database at {db_path}: {exc}"
        raise StorageError(msg) from exc


async def init_backend(
    *,
    backend: str | None = None,
    db_path: Path | str = "tablecache.db",
    postgres_url: str = "",
    postgres_pool_min: int = 2,
    postgres_pool_max: int = 10,
) -> DatabaseBackend:
    """Initialise and return the process-wide :class:`DatabaseBackend`.

    Args:
        backend: ``"sqlite"`` or ``"postgres"``.  Falls back to the
            ``TABLECACHE_DB_BACKEND`` env var (default ``"sqlite"``).
        db_path: Path for the SQLite database file.
        postgres_url: PostgreSQL DSN (``postgresql://...``).
        postgres_pool_min: Minimum pool size for PostgreSQL.
        postgres_pool_max: Maximum pool size for PostgreSQL.

    Returns:
        A ready-to-use :class:`DatabaseBackend`.  Repeated calls return the
        same instance until :func:`close_backend` is called, even when they
        ask for a different backend or database; that case logs a warning.
    """
    global _backend, _backend_target

    chosen = (backend or os.environ.get("TABLECACHE_DB_BACKEND", "sqlite")).lower()
    url = postgres_url or os.environ.get("TABLECACHE_POSTGRES_URL", "")
    target = (chosen, url if chosen == "postgres" else str(db_path))

    if _backend is not None:
        if _backend_target is not None and target != _backend_target:
            logger.warning(
                "Backend already open on %s; ignoring request for %s",
                redact_sensitive(":".join(_backend_target)),
                redact_sensitive(":".join(target)),
            )
        return _backend

    if chosen == "sqlite":
        conn = await connect_sqlite(db_path)
        from tablecache.storage.sqlite_backend import SQLiteBackend

        _backend = SQLiteBackend(conn)
        _backend_target = target
        return _backend

    if chosen == "postgres":
        if not url:
            msg = (
                "PostgreSQL backend selected but no connection URL provided. "
                "Set TABLECACHE_POSTGRES_URL or pass postgres_url."
            )
            raise ConfigurationError(msg)

        from tablecache.storage.postgres import PostgresDatabase

        _backend = await PostgresDatabase.create(
            url, min_size=postgres_pool_min, max_size=postgres_pool_max
        )
        _backend_target = target
        return _backend

    msg = f"Unknown database backend: {chosen!r}. Expected 'sqlite' or 'postgres'."
    raise ConfigurationError(msg)


async def get_backend() -> DatabaseBackend:
    """Get the active :class:`DatabaseBackend`.

    Raises :class:`StorageError` if no backend has been initialised.
    """
    if _backend is None:
        raise StorageError("Database backend not initialized. Call init_backend() first.")
    return _backend


async def close_backend() -> None:
    """Close the active backend, if any."""
    global _backend, _backend_target

    if _backend is not None:
        await _backend.close()
        _backend = None
        _backend_target = None
