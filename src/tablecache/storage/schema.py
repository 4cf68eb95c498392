# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""DDL for the cache table.

The store itself never creates tables; this module is used by
:func:`tablecache.store.open_store` and by test setup.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tablecache.storage.query_adapter import quote_identifier

if TYPE_CHECKING:
    from tablecache.storage.repository import CacheRowRepository

logger = logging.getLogger(__name__)

_COLUMN_TYPES: dict[str, dict[str, str]] = {
    "sqlite": {"key": "TEXT", "value": "TEXT", "expiration": "INTEGER"},
    "postgres": {"key": "VARCHAR(255)", "value": "TEXT", "expiration": "BIGINT"},
}


def cache_table_ddl(table: str, dialect: str) -> list[str]:
    """Return the statements that create *table* and its expiry index.

    Raises:
        ValueError: For an unknown dialect or an invalid table name.
    """
    try:
        types = _COLUMN_TYPES[dialect]
    except KeyError:
        msg = f"Unknown SQL dialect: {dialect!r}. Expected 'sqlite' or 'postgres'."
        raise ValueError(msg) from None

    quoted = quote_identifier(table)
    index = quote_identifier(f"ix_{table}_expiration"[:63])
    return [
        f"""
        CREATE TABLE IF NOT EXISTS {quoted} (
            "key" {types["key"]} NOT NULL UNIQUE,
            "value" {types["value"]} NOT NULL,
            "expiration" {types["expiration"]}
        )
        """,
        f'CREATE INDEX IF NOT EXISTS {index} ON {quoted} ("expiration")',
    ]


async def ensure_cache_table(repository: CacheRowRepository, table: str) -> bool:
    """Create *table* unless it already exists.

    Returns:
        ``True`` if the table was created, ``False`` if it was already there.
    """
    if await repository.has_table(table):
        return False
    await repository.create_table(table)
    logger.info("Created cache table %s", table)
    return True
