# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Expiry computation and validity checks for cache rows.

TTLs are given in minutes (fractions allowed, so ``5 / 60`` is five
seconds) and stored as absolute Unix timestamps in whole seconds.  A row
is valid while its expiry is strictly greater than the current second;
reading at exactly the expiry second counts as expired.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable

Clock = Callable[[], float]

# Ten years, used by ``forever`` style writes.
FOREVER_MINUTES = 5_256_000


def current_time(clock: Clock = time.time) -> int:
    """Return the clock's reading truncated to whole Unix seconds."""
    return math.floor(clock())


def ttl_seconds(minutes: float) -> float:
    """Convert a minute TTL to seconds, rounded to the millisecond.

    The rounding strips float noise such as ``5 / 60 * 60`` landing a hair
    below ``5.0``.
    """
    return round(minutes * 60, 3)


def compute_expiry(now: float, minutes: float | None) -> int | None:
    """Absolute expiry for a row written at *now* with a TTL of *minutes*.

    Returns ``None`` (never expires) when *minutes* is ``None``.  Zero or
    negative TTLs give an expiry that is already due.
    """
    if minutes is None:
        return None
    return math.floor(now + ttl_seconds(minutes))


def is_valid(expiration: int | None, now: float) -> bool:
    """``True`` if a row with *expiration* is still readable at *now*."""
    if expiration is None:
        return True
    return expiration > math.floor(now)
