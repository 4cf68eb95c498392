# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache row and stored-value envelope models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValueKind(StrEnum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


NUMERIC_KINDS = frozenset({ValueKind.INTEGER, ValueKind.FLOAT})


class Envelope(BaseModel):
    """Tagged payload written to the ``value`` column."""

    model_config = ConfigDict(frozen=True)

    type: ValueKind
    data: Any


class CacheRow(BaseModel):
    """One row of the cache table, exactly as persisted."""

    key: str
    value: str
    expiration: int | None = Field(
        default=None,
        description="Absolute expiry as Unix seconds, None if the row never expires",
    )
