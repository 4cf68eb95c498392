# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Database-backed cache store.

:class:`DatabaseStore` is the public interface of tablecache.  Values go
through :mod:`tablecache.codec` on the way in and out, TTLs through
:mod:`tablecache.expiration`, and rows through a
:class:`~tablecache.storage.repository.CacheRowRepository`.

Expired rows are not swept in the background.  They stay in the table
until a read touches them (and deletes them), until :meth:`flush`, or
until :meth:`DatabaseStore.purge_expired` is called.

Read-modify-write operations (``increment``, ``decrement``, ``add``) are
not atomic: two callers touching the same key at once can lose an
update.  Callers that need that guarantee must serialise access
themselves.
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from tablecache import codec
from tablecache.core.config import Settings, get_settings
from tablecache.core.exceptions import StorageError
from tablecache.core.logging import setup_logging
from tablecache.expiration import (
    FOREVER_MINUTES,
    Clock,
    compute_expiry,
    current_time,
    is_valid,
)
from tablecache.models import CacheRow
from tablecache.storage.database import close_backend, init_backend
from tablecache.storage.repository import CacheRowRepository, table_identifier
from tablecache.storage.schema import ensure_cache_table

logger = logging.getLogger("tablecache.store")

Factory = Callable[[], Any]


def _check_amount(amount: object) -> None:
    if not codec.is_numeric(amount):
        msg = f"amount must be an int or float, not {type(amount).__name__}"
        raise TypeError(msg)


class CacheStats:
    """Simple hit/miss counter."""

    __slots__ = ("hits", "misses")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "hit_rate": round(self.hit_rate, 4),
        }


class DatabaseStore:
    """Key-value cache kept in one database table.

    Args:
        repository: Row access for the cache table.
        table: Name of the cache table.  The table must already exist;
            see :func:`tablecache.storage.schema.ensure_cache_table`.
        prefix: Host tag prepended to every key, so several applications
            can share one table.
        clock: Returns the current Unix time in (fractional) seconds.
    """

    def __init__(
        self,
        repository: CacheRowRepository,
        table: str = "cache",
        prefix: str = "",
        clock: Clock = time.time,
    ) -> None:
        table_identifier(table)
        self._repository = repository
        self._table = table
        self._prefix = prefix
        self._clock = clock
        self._stats = CacheStats()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def table(self) -> str:
        return self._table

    @property
    def prefix(self) -> str:
        """The host tag prepended to stored keys."""
        return self._prefix

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def repository(self) -> CacheRowRepository:
        return self._repository

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def _evict(self, stored_key: str) -> None:
        """Delete an expired row; failures are logged, not raised."""
        try:
            await self._repository.delete_one(self._table, stored_key)
        except StorageError as exc:
            logger.warning("Could not evict expired key %s: %s", stored_key, exc)
        else:
            logger.debug("Evicted expired key %s", stored_key)

    async def _live_row(self, key: str) -> CacheRow | None:
        """Return the row for *key* if present and unexpired, evicting it otherwise."""
        stored_key = self._key(key)
        row = await self._repository.select_one(self._table, stored_key)
        if row is None:
            return None
        if not is_valid(row.expiration, self._clock()):
            await self._evict(stored_key)
            return None
        return row

    def _row(self, key: str, value: Any, expiration: int | None) -> CacheRow:
        return CacheRow(key=self._key(key), value=codec.encode(value), expiration=expiration)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any:
        """Return the cached value for *key*, or ``None`` if missing or expired.

        Raises:
            CodecError: If the stored text is corrupt.
            StorageError: If the database read fails.
        """
        row = await self._live_row(key)
        if row is None:
            self._stats.misses += 1
            logger.debug("Cache MISS for key %s", key)
            return None
        self._stats.hits += 1
        logger.debug("Cache HIT for key %s", key)
        return codec.decode(row.value)

    async def many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Fetch several keys in one query.

        Returns:
            A dict with one entry per requested key, in request order,
            mapping to the value or ``None``.
        """
        requested = list(keys)
        if not requested:
            return {}

        rows = await self._repository.select_many(
            self._table, [self._key(k) for k in requested]
        )
        by_key = {row.key: row for row in rows}
        now = self._clock()

        result: dict[str, Any] = {}
        for key in requested:
            if key in result:
                continue
            stored_key = self._key(key)
            row = by_key.pop(stored_key, None)
            if row is not None and is_valid(row.expiration, now):
                self._stats.hits += 1
                result[key] = codec.decode(row.value)
                continue
            if row is not None:
                await self._evict(stored_key)
            self._stats.misses += 1
            result[key] = None
        return result

    async def has(self, key: str) -> bool:
        """``True`` if *key* holds an unexpired value."""
        return await self._live_row(key) is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def put(self, key: str, value: Any, minutes: float | None = None) -> None:
        """Store *value* under *key* for *minutes* (``None`` = no expiry).

        Overwrites both value and expiration of an existing key.  A TTL of
        zero or less stores a value that is already expired.

        Raises:
            CodecError: If *value* cannot be cached.
        """
        expiration = compute_expiry(self._clock(), minutes)
        await self._repository.upsert(self._table, self._row(key, value, expiration))

    async def put_many(self, values: Mapping[str, Any], minutes: float | None = None) -> None:
        """Store every entry of *values* with a shared expiry.

        All values are encoded before anything is written, so a
        :class:`CodecError` leaves the table untouched.
        """
        expiration = compute_expiry(self._clock(), minutes)
        rows = [self._row(key, value, expiration) for key, value in values.items()]
        await self._repository.upsert_many(self._table, rows)

    async def forever(self, key: str, value: Any) -> None:
        """Store *value* with a ten-year TTL."""
        await self.put(key, value, FOREVER_MINUTES)

    async def add(self, key: str, value: Any, minutes: float | None = None) -> bool:
        """Store *value* only if *key* has no live value.

        Returns:
            ``True`` if the value was written.
        """
        if await self._live_row(key) is not None:
            return False
        await self.put(key, value, minutes)
        return True

    async def increment(self, key: str, amount: int | float = 1) -> int | float | bool:
        """Add *amount* to a numeric value, keeping its expiration.

        Returns:
            The new value, or ``False`` if the key is missing, expired, or
            holds something other than a number.
        """
        _check_amount(amount)
        return await self._adjust(key, amount)

    async def decrement(self, key: str, amount: int | float = 1) -> int | float | bool:
        """Subtract *amount* from a numeric value, keeping its expiration.

        Returns:
            The new value, or ``False`` under the same conditions as
            :meth:`increment`.
        """
        _check_amount(amount)
        return await self._adjust(key, -amount)

    async def _adjust(self, key: str, delta: int | float) -> int | float | bool:
        row = await self._live_row(key)
        if row is None:
            return False
        current = codec.decode(row.value)
        if not codec.is_numeric(current):
            logger.debug("Refusing to adjust non-numeric key %s", key)
            return False

        updated = current + delta
        await self._repository.upsert(
            self._table, row.model_copy(update={"value": codec.encode(updated)})
        )
        return updated

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    async def forget(self, key: str) -> bool:
        """Delete *key*.

        Returns ``True`` once the delete has run, whether or not the key
        existed.  Storage failures propagate as :class:`StorageError`.
        """
        await self._repository.delete_one(self._table, self._key(key))
        return True

    async def pull(self, key: str, default: Any = None) -> Any:
        """Return the value for *key* and delete it."""
        value = await self.get(key)
        await self.forget(key)
        return default if value is None else value

    async def flush(self) -> None:
        """Delete every row in the cache table, regardless of prefix."""
        count = await self._repository.delete_all(self._table)
        logger.info("Cache flushed: %d entries removed", count)

    async def purge_expired(self) -> int:
        """Delete all expired rows in one statement.

        Returns:
            Number of rows removed.
        """
        count = await self._repository.delete_expired(self._table, current_time(self._clock))
        if count:
            logger.info("Purged %d expired cache entries", count)
        return count

    # ------------------------------------------------------------------
    # Read-through helpers
    # ------------------------------------------------------------------

    async def remember(self, key: str, minutes: float | None, factory: Factory) -> Any:
        """Return the cached value, or compute, store and return it.

        *factory* may be a plain callable or return an awaitable.
        """
        value = await self.get(key)
        if value is not None:
            return value
        value = factory()
        if inspect.isawaitable(value):
            value = await value
        await self.put(key, value, minutes)
        return value

    async def remember_forever(self, key: str, factory: Factory) -> Any:
        return await self.remember(key, FOREVER_MINUTES, factory)


async def open_store(
    settings: Settings | None = None,
    *,
    clock: Clock = time.time,
    configure_logging: bool = False,
) -> DatabaseStore:
    """Build a :class:`DatabaseStore` from application settings.

    Initialises the configured database backend and, when
    ``auto_create_table`` is set, creates the cache table if missing.
    With *configure_logging*, the ``tablecache`` logger is set up from
    ``log_level`` and ``log_format`` first.
    The backend is process-wide: a second call while one is open reuses it,
    and logs a warning if *settings* names a different database.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format)
    backend = await init_backend(
        backend=settings.db_backend,
        db_path=settings.db_path,
        postgres_url=settings.postgres_url,
        postgres_pool_min=settings.postgres_pool_min,
        postgres_pool_max=settings.postgres_pool_max,
    )
    repository = CacheRowRepository(backend)
    if settings.auto_create_table:
        await ensure_cache_table(repository, settings.cache_table)
    logger.debug(
        "Opened cache store on %s table %s", backend.backend_name, settings.cache_table
    )
    return DatabaseStore(
        repository,
        table=settings.cache_table,
        prefix=settings.cache_prefix,
        clock=clock,
    )


async def close_store() -> None:
    """Release the database backend opened by :func:`open_store`."""
    await close_backend()
