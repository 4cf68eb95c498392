# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Placeholder rewriting between SQL dialects.

Repository queries are written once with ``?`` markers.  SQLite accepts
them as-is; asyncpg wants ``$1, $2, ...``.
"""

from __future__ import annotations

import re

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def adapt_query(query: str, dialect: str) -> str:
    """Rewrite ``?`` parameter placeholders for the target *dialect*.

    Raises:
        ValueError: If *dialect* is not ``"sqlite"`` or ``"postgres"``.
    """
    if dialect == "sqlite":
        return query

    if dialect == "postgres":
        return _question_to_dollar(query)

    msg = f"Unknown SQL dialect: {dialect!r}. Expected 'sqlite' or 'postgres'."
    raise ValueError(msg)


def placeholders(count: int) -> str:
    """Return ``"?, ?, ..."`` with *count* markers, for ``IN (...)`` lists."""
    return ", ".join("?" for _ in range(count))


def quote_identifier(name: str) -> str:
    """Double-quote a plain SQL identifier such as a table name.

    Raises:
        ValueError: If *name* is not a bare identifier.
    """
    if not _IDENTIFIER_RE.match(name):
        msg = f"Invalid SQL identifier: {name!r}"
        raise ValueError(msg)
    return f'"{name}"'


def _question_to_dollar(query: str) -> str:
    """Replace each ``?`` outside single-quoted literals with ``$N``.

    Doubled quotes (``''``) inside a literal are treated as an escape.
    """
    result: list[str] = []
    counter = 0
    in_string = False

    i = 0
    while i < len(query):
        ch = query[i]

        if ch == "'" and not in_string:
            in_string = True
            result.append(ch)
        elif ch == "'" and in_string:
            if i + 1 < len(query) and query[i + 1] == "'":
                result.append("''")
                i += 2
                continue
            in_string = False
            result.append(ch)
        elif ch == "?" and not in_string:
            counter += 1
            result.append(f"${counter}")
        else:
            result.append(ch)

        i += 1

    return "".join(result)
