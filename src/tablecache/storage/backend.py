# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract database backend interface for the cache table.

The SQLite (aiosqlite) and PostgreSQL (asyncpg) backends both implement
this interface, so :class:`~tablecache.storage.repository.CacheRowRepository`
only ever writes ``?``-placeholder SQL and never touches a driver directly.
"""

from __future__ import annotations

import abc
from typing import Any


class DatabaseBackend(abc.ABC):
    """Abstract base class for async database backends.

    Concrete implementations wrap a single connection (SQLite) or a
    connection pool (PostgreSQL).
    """

    # ------------------------------------------------------------------
    # Query execution
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def execute(self, query: str, params: tuple[Any, ...] | None = None) -> Any:
        """Execute a single SQL statement.

        Args:
            query: SQL with ``?`` placeholders.
            params: Optional tuple of bind parameters.

        Returns:
            A driver-specific cursor or status object.
        """

    @abc.abstractmethod
    async def execute_count(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> int:
        """Execute a write statement and return the number of affected rows."""

    @abc.abstractmethod
    async def executemany(
        self,
        query: str,
        params_seq: list[tuple[Any, ...]],
    ) -> None:
        """Execute *query* once per parameter tuple in *params_seq*."""

    @abc.abstractmethod
    async def fetch_one(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        """Return the first row of *query* as a dict, or ``None``."""

    @abc.abstractmethod
    async def fetch_all(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        """Return every row of *query* as a list of dicts."""

    # ------------------------------------------------------------------
    # Transaction / connection lifecycle
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def commit(self) -> None:
        """Commit pending writes (no-op for auto-commit pools)."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the underlying connection or pool."""

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    @abc.abstractmethod
    def backend_name(self) -> str:
        """Return ``'sqlite'`` or ``'postgres'``."""
