# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Type-preserving serialisation of cached values.

Values are stored as a JSON envelope ``{"type": ..., "data": ...}``.  The
``type`` tag records the top-level kind, so an integer never comes back as
a float (or a string) however the database chose to hold the text.  Inside
objects and arrays, JSON's own number syntax (``2`` vs ``2.0``) keeps ints
and floats apart.

Supported kinds are ``str``, ``int``, ``float``, ``bool``, ``dict`` (string
keys only) and ``list``, nested arbitrarily.  Anything else raises
:class:`~tablecache.core.exceptions.CodecError` instead of being coerced.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from tablecache.core.exceptions import CodecError
from tablecache.models import NUMERIC_KINDS, Envelope, ValueKind


def kind_of(value: Any) -> ValueKind:
    """Classify *value* as one of the storable :class:`ValueKind` members.

    Raises:
        CodecError: If the value's type cannot be cached.
    """
    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, list):
        return ValueKind.ARRAY
    msg = f"Cannot cache value of type {type(value).__name__}"
    raise CodecError(msg)


def _check_tree(value: Any, path: str = "$") -> None:
    """Reject anything JSON would silently alter on the way through."""
    if value is None or isinstance(value, (bool, str, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            msg = f"Non-finite float at {path} cannot be cached"
            raise CodecError(msg)
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_tree(item, f"{path}[{index}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                msg = f"Object key {key!r} at {path} is not a string"
                raise CodecError(msg)
            _check_tree(item, f"{path}.{key}")
        return
    msg = f"Unsupported value of type {type(value).__name__} at {path}"
    raise CodecError(msg)


def encode(value: Any) -> str:
    """Serialise *value* into the text stored in the ``value`` column.

    Raises:
        CodecError: For ``None``, non-JSON types, non-string object keys
            and NaN/infinity.  Also for strings that are not valid UTF-8,
            such as lone surrogates.
    """
    kind = kind_of(value)
    _check_tree(value)
    try:
        return Envelope(type=kind, data=value).model_dump_json()
    except PydanticSerializationError as exc:
        msg = f"Cannot serialise {kind.value} value: {exc}"
        raise CodecError(msg) from exc


def decode(text: str) -> Any:
    """Rebuild the value previously written by :func:`encode`.

    Raises:
        CodecError: If *text* is not a valid envelope or its payload does
            not match its type tag.
    """
    try:
        envelope = Envelope.model_validate_json(text)
    except ValidationError as exc:
        msg = f"Corrupt cache payload: {exc.error_count()} validation error(s)"
        raise CodecError(msg) from exc

    data = envelope.data
    if envelope.type is ValueKind.FLOAT and kind_of_or_none(data) is ValueKind.INTEGER:
        # 1e16 and friends may round-trip through JSON without a fraction
        return float(data)
    if kind_of_or_none(data) is not envelope.type:
        msg = (
            f"Cache payload tagged {envelope.type.value!r} holds "
            f"{type(data).__name__}"
        )
        raise CodecError(msg)
    return data


def kind_of_or_none(value: Any) -> ValueKind | None:
    """Like :func:`kind_of` but returns ``None`` for unsupported values."""
    try:
        return kind_of(value)
    except CodecError:
        return None


def is_numeric(value: Any) -> bool:
    """``True`` for ints and floats, ``False`` for bools and everything else."""
    return kind_of_or_none(value) in NUMERIC_KINDS
