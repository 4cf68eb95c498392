# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for tablecache."""


class TableCacheError(Exception):
    """Base exception for all tablecache errors."""


class ConfigurationError(TableCacheError):
    """Invalid or missing configuration."""


class StorageError(TableCacheError):
    """Database or storage operation failed."""


class CodecError(TableCacheError):
    """A value could not be encoded, or stored text could not be decoded."""
