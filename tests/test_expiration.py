"""
Tests for kvstash.expiration module.

Covers:
- TTL shapes: None, seconds, timedelta, datetime
- Fallback to the default TTL for non-positive and past values
- Inclusive expiry at the deadline
- ExpirationPolicy default validation and clock use
"""

from datetime import datetime, timedelta, timezone

import pytest

from kvstash.errors import InvalidArgumentError, InvalidTTLError
from kvstash.expiration import (
    DEFAULT_TTL_SECONDS,
    ExpirationPolicy,
    is_expired,
    to_deadline,
    ttl_to_seconds,
)

NOW = 1_700_000_000.0


class TestTtlToSeconds:
    def test_none(self):
        assert ttl_to_seconds(None) is None

    def test_int(self):
        assert ttl_to_seconds(30) == 30

    def test_float_truncated(self):
        assert ttl_to_seconds(2.9) == 2

    def test_timedelta(self):
        assert ttl_to_seconds(timedelta(minutes=2, seconds=5)) == 125

    @pytest.mark.parametrize("ttl", ["60", True, object(), [60]])
    def test_unsupported_types_rejected(self, ttl):
        with pytest.raises(InvalidTTLError):
            ttl_to_seconds(ttl)

    @pytest.mark.parametrize("ttl", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_floats_rejected(self, ttl):
        with pytest.raises(InvalidTTLError):
            ttl_to_seconds(ttl)


class TestToDeadline:
    def test_absent_uses_default(self):
        assert to_deadline(None, NOW, 3600) == NOW + 3600

    def test_seconds_are_relative_to_now(self):
        assert to_deadline(30, NOW, 3600) == NOW + 30

    def test_timedelta_is_relative_to_now(self):
        assert to_deadline(timedelta(hours=1), NOW, 60) == NOW + 3600

    def test_absolute_datetime(self):
        when = datetime.fromtimestamp(NOW + 500, tz=timezone.utc)
        assert to_deadline(when, NOW, 3600) == NOW + 500

    @pytest.mark.parametrize("ttl", [0, -1, -3600, timedelta(seconds=-5), timedelta(0)])
    def test_non_positive_durations_use_default(self, ttl):
        assert to_deadline(ttl, NOW, 60) == NOW + 60

    def test_past_datetime_uses_default(self):
        when = datetime.fromtimestamp(NOW - 10, tz=timezone.utc)
        assert to_deadline(when, NOW, 60) == NOW + 60

    def test_datetime_equal_to_now_uses_default(self):
        when = datetime.fromtimestamp(NOW, tz=timezone.utc)
        assert to_deadline(when, NOW, 60) == NOW + 60

    def test_sub_second_duration_truncates_to_default(self):
        assert to_deadline(0.5, NOW, 60) == NOW + 60

    def test_fractional_now_counts_from_current_second(self):
        assert to_deadline(1, NOW + 0.25, 60) == NOW + 1
        assert to_deadline(None, NOW + 0.75, 60) == NOW + 60

    def test_fractional_datetime_truncated(self):
        when = datetime.fromtimestamp(NOW + 30.9, tz=timezone.utc)
        assert to_deadline(when, NOW, 60) == NOW + 30

    def test_datetime_within_current_second_uses_default(self):
        when = datetime.fromtimestamp(NOW + 0.5, tz=timezone.utc)
        assert to_deadline(when, NOW + 0.25, 60) == NOW + 60

    def test_never_longer_than_ttl(self):
        for offset in (0.0, 0.1, 0.5, 0.999):
            assert to_deadline(1, NOW + offset, 60) - (NOW + offset) <= 1

    def test_always_in_the_future(self):
        for now in (NOW, NOW + 0.5, NOW + 0.999):
            for ttl in (None, 1, 0, -100, timedelta(days=1)):
                assert to_deadline(ttl, now, 1) > now

    def test_returns_int(self):
        assert isinstance(to_deadline(None, NOW + 0.5, 10), int)


class TestIsExpired:
    def test_before_deadline(self):
        assert is_expired(1000, 999.999) is False

    def test_exactly_at_deadline(self):
        assert is_expired(1000, 1000.0) is True

    def test_after_deadline(self):
        assert is_expired(1000, 1000.5) is True


class TestExpirationPolicy:
    def test_default_ttl(self):
        assert ExpirationPolicy().default_ttl_seconds == DEFAULT_TTL_SECONDS == 3600

    @pytest.mark.parametrize("value", [0, -1, 1.5, "60", True])
    def test_invalid_default_rejected(self, value):
        with pytest.raises(InvalidArgumentError):
            ExpirationPolicy(default_ttl_seconds=value)

    def test_deadline_uses_clock(self, clock):
        policy = ExpirationPolicy(default_ttl_seconds=10, clock=clock)
        assert policy.deadline_for() == clock.now + 10
        assert policy.deadline_for(5) == clock.now + 5

    def test_is_expired_follows_clock(self, clock):
        policy = ExpirationPolicy(clock=clock)
        deadline = policy.deadline_for(5)
        assert policy.is_expired(deadline) is False
        clock.advance(5)
        assert policy.is_expired(deadline) is True

    def test_default_can_be_changed(self):
        policy = ExpirationPolicy()
        policy.default_ttl_seconds = 60
        assert policy.default_ttl_seconds == 60
