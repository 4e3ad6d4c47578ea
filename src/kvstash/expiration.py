"""
TTL normalization and expiry checks.

A TTL arrives in one of four shapes and always leaves as an absolute Unix
epoch deadline in whole seconds:

    ::

        None                 → now + default_ttl
        int | float seconds  → now + seconds
        timedelta            → now + total_seconds()
        datetime             → datetime.timestamp()

        result <= now        → now + default_ttl

Deadlines are whole seconds counted from the current second (``int(now)``),
so an entry never outlives its TTL and a duration of one second or more
still lands strictly after ``now``. An entry is expired from the instant
``now >= deadline`` (inclusive).

Examples:
    >>> to_deadline(None, now=1000.0, default_ttl_seconds=3600)
    4600
    >>> to_deadline(30, now=1000.5, default_ttl_seconds=3600)
    1030
    >>> to_deadline(-5, now=1000.0, default_ttl_seconds=3600)
    4600
    >>> is_expired(1000, now=1000.0)
    True

Tags:
    ttl, expiration, time, kvstash
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Union

from kvstash.errors import InvalidArgumentError, InvalidTTLError

DEFAULT_TTL_SECONDS = 3600

TTL = Union[None, int, float, timedelta, datetime]
Clock = Callable[[], float]


def ttl_to_seconds(ttl: TTL) -> int | None:
    """Convert a duration-like TTL to whole seconds (``None`` stays ``None``)."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return int(ttl.total_seconds())
    # bool is an int subclass; True as "1 second" is always a mistake
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise InvalidTTLError(ttl)
    if not math.isfinite(ttl):
        raise InvalidTTLError(ttl)
    return int(ttl)


def to_deadline(ttl: TTL, now: float, default_ttl_seconds: int) -> int:
    """Turn ``ttl`` into an absolute epoch deadline strictly after ``now``."""
    current = int(now)
    if isinstance(ttl, datetime):
        deadline = int(ttl.timestamp())
    else:
        seconds = ttl_to_seconds(ttl)
        deadline = current + seconds if seconds is not None and seconds > 0 else None

    if deadline is None or deadline <= now:
        deadline = current + default_ttl_seconds

    return deadline


def is_expired(deadline: float, now: float) -> bool:
    """An entry expires exactly at its deadline."""
    return deadline <= now


class ExpirationPolicy:
    """
    TTL policy bound to a default lifetime and a clock.

    Backends and the cache share one policy so every expiry decision reads
    the same clock; tests inject a fake clock instead of sleeping.

    Example:
        policy = ExpirationPolicy(default_ttl_seconds=600)
        deadline = policy.deadline_for(timedelta(minutes=5))
        policy.is_expired(deadline)  # False
    """

    def __init__(
        self,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Clock | None = None,
    ):
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock or time.time

    @property
    def default_ttl_seconds(self) -> int:
        return self._default_ttl_seconds

    @default_ttl_seconds.setter
    def default_ttl_seconds(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidArgumentError(
                f"Default TTL must be a positive number of seconds, got {value!r}"
            )
        self._default_ttl_seconds = value

    def now(self) -> float:
        return self._clock()

    def deadline_for(self, ttl: TTL = None) -> int:
        return to_deadline(ttl, self.now(), self._default_ttl_seconds)

    def is_expired(self, deadline: float) -> bool:
        return is_expired(deadline, self.now())


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "TTL",
    "Clock",
    "ttl_to_seconds",
    "to_deadline",
    "is_expired",
    "ExpirationPolicy",
]
