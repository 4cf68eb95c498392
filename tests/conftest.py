# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from tablecache.storage.database import connect_sqlite
from tablecache.storage.repository import CacheRowRepository
from tablecache.storage.schema import ensure_cache_table
from tablecache.storage.sqlite_backend import SQLiteBackend
from tablecache.store import DatabaseStore

START_TIME = 1_760_000_000.25


class FakeClock:
    """Manually advanced stand-in for :func:`time.time`."""

    def __init__(self, start: float = START_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def backend():
    """In-memory SQLite backend, closed after the test."""
    conn = await connect_sqlite(":memory:")
    sqlite = SQLiteBackend(conn)
    yield sqlite
    await sqlite.close()


@pytest.fixture
async def repository(backend: SQLiteBackend) -> CacheRowRepository:
    repo = CacheRowRepository(backend)
    await ensure_cache_table(repo, "cache")
    return repo


@pytest.fixture
def store(repository: CacheRowRepository, clock: FakeClock) -> DatabaseStore:
    return DatabaseStore(repository, table="cache", prefix="", clock=clock)
