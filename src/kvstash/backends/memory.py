"""
Process-local shared-memory storage backend.

Entries live in a :class:`cachetools.TLRUCache` whose per-item time-to-use
is the entry deadline, so the store evicts expired entries natively. By
default every :class:`MemoryBackend` in the process shares one store, the
way APCu-style user caches are shared by everything in a worker process.

Architecture:
    ::

        ┌──────────────────────────────────────────────────┐
        │        shared TLRUCache (source of truth)         │
        │   hashed_key → _Entry(payload, deadline)          │
        └──────────────────────────────────────────────────┘
              ▲                          ▲
              │                          │
        MemoryBackend A            MemoryBackend B
        _keys = {k1, k2}           _keys = {k3}
        (registry / index)         (registry / index)

    The store cannot be enumerated per owner, so each backend keeps a
    registry of the keys it wrote. ``clear()`` walks that registry and only
    touches its own keys. The registry is an index, not the source of truth:
    a registered key whose value already vanished (native expiry, or deleted
    through another backend) counts as deleted.

Examples:
    >>> backend = MemoryBackend(store=create_store())
    >>> backend.write("6a992d5529f459a44fee58c733255e86", b"payload", 2**40)
    True
    >>> backend.exists("6a992d5529f459a44fee58c733255e86")
    True
    >>> len(backend)
    1

Tags:
    cache, in-memory, cachetools, ttl, registry, kvstash
"""

from __future__ import annotations

import math
import threading
import time
from typing import NamedTuple

from cachetools import TLRUCache

from kvstash.expiration import Clock
from kvstash.logging import get_logger

logger = get_logger(__name__)

# Guards every store mutation together with the owning registry update.
_LOCK = threading.RLock()

_shared_store: TLRUCache | None = None


class _Entry(NamedTuple):
    payload: bytes
    deadline: int


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    return entry.deadline


def create_store(clock: Clock | None = None) -> TLRUCache:
    """Create an unbounded store that expires entries at their deadline."""
    return TLRUCache(maxsize=math.inf, ttu=_time_to_use, timer=clock or time.time)


def shared_store() -> TLRUCache:
    """The process-wide store used by backends built without one."""
    global _shared_store
    with _LOCK:
        if _shared_store is None:
            _shared_store = create_store()
        return _shared_store


class MemoryBackend:
    """
    Store entries in a process-local TTL-aware mapping.

    Args:
        store: Backing store; defaults to :func:`shared_store`, or to a
            private store when ``clock`` is given (the shared store always
            runs on wall-clock time).
        clock: Time source for the private store.
    """

    def __init__(self, store: TLRUCache | None = None, *, clock: Clock | None = None):
        if store is None:
            store = shared_store() if clock is None else create_store(clock)
        self._store = store
        self._keys: set[str] = set()

    def write(self, hashed_key: str, payload: bytes, deadline: int) -> bool:
        with _LOCK:
            # An already-expired entry is skipped by the store, so drop the
            # old one first instead of leaving it behind.
            self._discard(hashed_key)
            for expired_key, _ in self._store.expire():
                self._keys.discard(expired_key)
            self._store[hashed_key] = _Entry(payload, deadline)
            self._keys.add(hashed_key)
        logger.debug("cache_entry_written", backend="MemoryBackend", hashed_key=hashed_key, deadline=deadline)
        return True

    def read(self, hashed_key: str) -> bytes | None:
        entry = self._store.get(hashed_key)
        if entry is None:
            return None
        return entry.payload

    def exists(self, hashed_key: str) -> bool:
        with _LOCK:
            if hashed_key in self._store:
                return True
            # Expired entries still occupy the store until touched.
            self._discard(hashed_key)
        return False

    def remove(self, hashed_key: str) -> bool:
        with _LOCK:
            removed = self._discard(hashed_key)
        if not removed:
            logger.warning("cache_delete_failed", backend="MemoryBackend", hashed_key=hashed_key)
        return removed

    def clear(self) -> bool:
        with _LOCK:
            registered = list(self._keys)
            failed = [hashed_key for hashed_key in registered if not self._discard(hashed_key)]

        if failed:
            logger.warning("cache_clear_partial", backend="MemoryBackend", failed=len(failed), total=len(registered))
            return False

        logger.info("cache_cleared", backend="MemoryBackend", removed=len(registered))
        return True

    def keys(self) -> frozenset[str]:
        """
        Snapshot of the hashed keys this backend has registered.

        Expired keys leave the registry on the next ``write``, ``exists`` or
        ``clear``; until then they are still listed (and counted by ``len``).
        """
        with _LOCK:
            return frozenset(self._keys)

    def _discard(self, hashed_key: str) -> bool:
        """Delete from store and registry; ``True`` once the key is gone."""
        try:
            del self._store[hashed_key]
        except KeyError:
            pass  # never written, already evicted, or expired (expired ones are still removed)

        if hashed_key in self._store:
            return False
        self._keys.discard(hashed_key)
        return True

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        shared = self._store is _shared_store
        return f"MemoryBackend(keys={len(self._keys)}, shared={shared})"


def reset_shared_store() -> None:
    """Drop the process-wide store. Meant for test isolation."""
    global _shared_store
    with _LOCK:
        _shared_store = None


__all__ = [
    "create_store",
    "shared_store",
    "reset_shared_store",
    "MemoryBackend",
]
