# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""tablecache - key-value cache stored in a relational table."""

__version__ = "0.1.0"

from tablecache.codec import decode, encode
from tablecache.core.exceptions import (
    CodecError,
    ConfigurationError,
    StorageError,
    TableCacheError,
)
from tablecache.models import CacheRow, ValueKind
from tablecache.store import CacheStats, DatabaseStore, close_store, open_store

__all__ = [
    "CacheRow",
    "CacheStats",
    "CodecError",
    "ConfigurationError",
    "DatabaseStore",
    "StorageError",
    "TableCacheError",
    "ValueKind",
    "__version__",
    "close_store",
    "decode",
    "encode",
    "open_store",
]
