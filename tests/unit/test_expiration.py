# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for expiry computation and the validity check."""

from __future__ import annotations

from tablecache.expiration import (
    FOREVER_MINUTES,
    compute_expiry,
    current_time,
    is_valid,
    ttl_seconds,
)

NOW = 1_760_000_000.25


class TestComputeExpiry:
    def test_none_means_never(self) -> None:
        assert compute_expiry(NOW, None) is None

    def test_whole_minutes(self) -> None:
        assert compute_expiry(NOW, 1) == 1_760_000_060

    def test_fractional_minutes_keep_seconds(self) -> None:
        assert compute_expiry(NOW, 5 / 60) == 1_760_000_005

    def test_zero_ttl_is_already_due(self) -> None:
        expiry = compute_expiry(NOW, 0)
        assert expiry == 1_760_000_000
        assert not is_valid(expiry, NOW)

    def test_negative_ttl_is_in_the_past(self) -> None:
        assert compute_expiry(NOW, -1) == 1_759_999_940

    def test_forever_is_ten_years(self) -> None:
        assert compute_expiry(NOW, FOREVER_MINUTES) - 1_760_000_000 == 10 * 365 * 86_400

    def test_ttl_seconds_strips_float_noise(self) -> None:
        for seconds in range(1, 120):
            assert ttl_seconds(seconds / 60) == seconds


class TestIsValid:
    def test_no_expiration_is_always_valid(self) -> None:
        assert is_valid(None, NOW)
        assert is_valid(None, NOW + 10**9)

    def test_before_expiry(self) -> None:
        expiry = compute_expiry(NOW, 5 / 60)
        assert is_valid(expiry, NOW + 3)

    def test_after_expiry(self) -> None:
        expiry = compute_expiry(NOW, 5 / 60)
        assert not is_valid(expiry, NOW + 6)

    def test_exact_expiry_second_is_expired(self) -> None:
        expiry = compute_expiry(NOW, 5 / 60)
        assert not is_valid(expiry, float(expiry))

    def test_last_moment_before_expiry_second(self) -> None:
        expiry = compute_expiry(NOW, 5 / 60)
        assert is_valid(expiry, expiry - 0.001)


def test_current_time_truncates() -> None:
    assert current_time(lambda: NOW) == 1_760_000_000
