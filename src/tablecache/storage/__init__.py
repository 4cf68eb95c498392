# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage layer -- database backends, cache table schema, and row repository."""

from tablecache.storage.backend import DatabaseBackend
from tablecache.storage.database import close_backend, connect_sqlite, get_backend, init_backend
from tablecache.storage.query_adapter import adapt_query
from tablecache.storage.repository import CacheRowRepository
from tablecache.storage.schema import cache_table_ddl, ensure_cache_table

__all__ = [
    "CacheRowRepository",
    "DatabaseBackend",
    "adapt_query",
    "cache_table_ddl",
    "close_backend",
    "connect_sqlite",
    "ensure_cache_table",
    "get_backend",
    "init_backend",
]
