"""
Cache façade: the public get/set/delete/has/clear API over one backend.

Manifesto:
    Backends only know hashed keys, payload bytes and deadlines. Everything
    an application sees goes through :class:`Cache`:

    - **Keys:** validated raw, stored hashed (:mod:`kvstash.keys`)
    - **TTL:** normalized to an absolute deadline (:mod:`kvstash.expiration`)
    - **Values:** encoded by a pluggable codec (:mod:`kvstash.serialization`)
    - **Bulk ops:** plain loops over the single-key ops, results AND-folded

Architecture:
    ::

        Cache
        ├── normalize_key()      raw key → hashed key (raises on bad keys)
        ├── ExpirationPolicy     ttl → deadline, shared clock
        ├── Serializer           value ↔ bytes
        └── StorageBackend       write / read / exists / remove / clear
            ├── FileBackend
            └── MemoryBackend

        get(key, default=False)             → value | default
        lookup(key)                         → CacheLookup(found, value)
        set(key, value, ttl=None)           → bool
        delete(key)                         → bool
        has(key)                            → bool
        clear()                             → bool
        get_multiple(keys, default=None)    → {key: value}
        set_multiple(values, ttl=None)      → bool
        delete_multiple(keys)               → bool

Error policy:
    Bad keys, TTLs and bulk arguments raise :class:`InvalidArgumentError`
    subclasses. Storage and serialization failures are logged and returned
    as ``False`` (or a miss, for reads). Bulk operations validate every key
    first, so they either raise before touching storage or attempt every
    element.

Examples:
    >>> from kvstash import Cache, MemoryBackend
    >>> cache = Cache(MemoryBackend())
    >>> cache.set_multiple({"a": 1, "b": 2})
    True
    >>> cache.get_multiple(["a", "b", "c"], default=0)
    {'a': 1, 'b': 2, 'c': 0}

Guardrails:
    ❌ DON'T: Cache falsy values (``0``, ``""``, ``[]``, ``None``) and read them with ``get``
    ✅ DO: Use ``lookup`` when a stored falsy value must be told apart from a miss

    ❌ DON'T: Use ``has(key)`` then ``get(key)`` as a correctness check
    ✅ DO: Call ``get``/``lookup`` directly; ``has`` is for cache warming

Tags:
    cache, facade, ttl, bulk-operations, kvstash
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from kvstash.backends.base import StorageBackend
from kvstash.errors import InvalidIterableError, SerializationError
from kvstash.expiration import DEFAULT_TTL_SECONDS, TTL, Clock, ExpirationPolicy
from kvstash.keys import normalize_key, validate_key
from kvstash.logging import get_logger
from kvstash.serialization import PickleSerializer, Serializer

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheLookup:
    """Result of :meth:`Cache.lookup`; ``found`` is ``False`` on any miss."""

    found: bool
    value: Any = None

    def __bool__(self) -> bool:
        return self.found


_MISS = CacheLookup(found=False)


class Cache:
    """
    Key-value cache with per-entry TTL over a pluggable storage backend.

    Args:
        backend: Any :class:`StorageBackend` implementation.
        default_ttl: Lifetime in seconds for entries set without a usable TTL.
        serializer: Value codec; pickle by default.
        clock: Time source (``time.time`` by default). Pass the same clock
            the backend uses.

    Example:
        cache = Cache(FileBackend("/var/cache/pages"), default_ttl=600)
        cache.set("index", rendered_page, ttl=timedelta(minutes=5))
        page = cache.get("index", default=None)
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        serializer: Serializer | None = None,
        clock: Clock | None = None,
    ):
        self._backend = backend
        self._policy = ExpirationPolicy(default_ttl, clock)
        self._serializer = serializer or PickleSerializer()

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def default_ttl(self) -> int:
        return self._policy.default_ttl_seconds

    @default_ttl.setter
    def default_ttl(self, seconds: int) -> None:
        self._policy.default_ttl_seconds = seconds

    def with_default_ttl(self, seconds: int) -> Cache:
        """Set the default TTL and return ``self`` for chaining."""
        self.default_ttl = seconds
        return self

    # ------------------------------------------------------------------ #
    # Single-key operations
    # ------------------------------------------------------------------ #

    def get(self, key: str, default: Any = False) -> Any:
        """
        Fetch a value, or ``default`` on a miss.

        A stored value that is falsy (``0``, ``""``, ``[]``, ``None``...) is
        also returned as ``default``; use :meth:`lookup` to tell them apart.
        """
        result = self.lookup(key)
        if not result.found or not result.value:
            return default
        return result.value

    def lookup(self, key: str) -> CacheLookup:
        """Fetch a value, reporting presence separately from the value."""
        hashed_key = normalize_key(key)

        if not self._backend.exists(hashed_key):
            logger.debug("cache_miss", key=key)
            return _MISS

        payload = self._backend.read(hashed_key)
        if payload is None:
            # removed between exists() and read()
            logger.debug("cache_miss", key=key, reason="vanished")
            return _MISS

        try:
            value = self._serializer.deserialize(payload)
        except SerializationError as exc:
            logger.warning("cache_payload_undecodable", key=key, error=self._describe(exc, key, hashed_key))
            return _MISS

        logger.debug("cache_hit", key=key)
        return CacheLookup(found=True, value=value)

    def set(self, key: str, value: Any, ttl: TTL = None) -> bool:
        """Store ``value`` under ``key`` until the deadline derived from ``ttl``."""
        hashed_key = normalize_key(key)
        deadline = self._policy.deadline_for(ttl)

        try:
            payload = self._serializer.serialize(value)
        except SerializationError as exc:
            logger.warning("cache_serialize_failed", key=key, error=self._describe(exc, key, hashed_key))
            return False

        return self._backend.write(hashed_key, payload, deadline)

    def delete(self, key: str) -> bool:
        """Remove ``key``. Deleting a missing key succeeds."""
        return self._backend.remove(normalize_key(key))

    def has(self, key: str) -> bool:
        """
        ``True`` if ``key`` is present and not expired.

        Subject to a race: another process may delete the entry right after
        this returns ``True``. Use it for cache warming, not before ``get``.
        """
        return self._backend.exists(normalize_key(key))

    def clear(self) -> bool:
        """Remove every entry owned by the backend."""
        return self._backend.clear()

    # ------------------------------------------------------------------ #
    # Bulk operations
    # ------------------------------------------------------------------ #

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """Fetch many keys; misses map to ``default``."""
        return {key: self.get(key, default) for key in self._collect_keys(keys)}

    def set_multiple(self, values: Mapping[str, Any], ttl: TTL = None) -> bool:
        """Store every pair with the same ``ttl``; ``True`` only if all succeed."""
        if not isinstance(values, Mapping):
            raise InvalidIterableError(values, expected="a mapping of keys to values")

        items = list(values.items())
        for key, _ in items:
            validate_key(key)
        self._policy.deadline_for(ttl)

        failed = [key for key, value in items if not self.set(key, value, ttl)]
        return self._report_bulk("set_multiple", failed, len(items))

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Delete every key; ``True`` only if all deletions succeed."""
        keys = self._collect_keys(keys)
        failed = [key for key in keys if not self.delete(key)]
        return self._report_bulk("delete_multiple", failed, len(keys))

    def _describe(self, error: SerializationError, key: str, hashed_key: str) -> SerializationError:
        return error.with_context(key=key, hashed_key=hashed_key, backend=type(self._backend).__name__)

    @staticmethod
    def _collect_keys(keys: Iterable[str]) -> list[str]:
        # A str is iterable, but iterating it yields characters, not keys.
        if isinstance(keys, (str, bytes)) or not isinstance(keys, Iterable):
            raise InvalidIterableError(keys)
        keys = list(keys)
        for key in keys:
            validate_key(key)
        return keys

    @staticmethod
    def _report_bulk(operation: str, failed: list[str], total: int) -> bool:
        if failed:
            logger.warning("cache_bulk_partial", operation=operation, failed=failed, total=total)
            return False
        return True

    # ------------------------------------------------------------------ #
    # Mapping-style conveniences
    # ------------------------------------------------------------------ #

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __getitem__(self, key: str) -> Any:
        result = self.lookup(key)
        if not result.found:
            raise KeyError(key)
        return result.value

    def __repr__(self) -> str:
        return f"Cache(backend={self._backend!r}, default_ttl={self.default_ttl})"


__all__ = [
    "CacheLookup",
    "Cache",
]
