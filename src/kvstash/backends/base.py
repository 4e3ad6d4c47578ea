"""Storage backend protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """Protocol for cache storage implementations.

    Backends store opaque payload bytes under a hashed key together with an
    absolute expiration deadline. They never see raw keys or values; the
    :class:`~kvstash.cache.Cache` owns validation and serialization.

    Mutations report success as a boolean. I/O failures are logged by the
    backend and surface as ``False``, never as exceptions.

    Implementations:
        - :class:`~kvstash.backends.filesystem.FileBackend` - one file per entry
        - :class:`~kvstash.backends.memory.MemoryBackend` - process-local store
    """

    def write(self, hashed_key: str, payload: bytes, deadline: int) -> bool:
        """Persist ``payload`` until ``deadline`` (epoch seconds).

        Replaces any existing entry; readers never observe a partial write.
        """
        ...

    def read(self, hashed_key: str) -> bytes | None:
        """Return the stored payload, or ``None`` if there is none.

        Does not check the deadline; callers check :meth:`exists` first.
        """
        ...

    def exists(self, hashed_key: str) -> bool:
        """``True`` if the entry is present and not expired.

        A present but expired entry is deleted before returning ``False``.
        """
        ...

    def remove(self, hashed_key: str) -> bool:
        """Delete the entry. Removing a missing entry succeeds."""
        ...

    def clear(self) -> bool:
        """Delete every entry this backend owns.

        Every entry is attempted; ``False`` if any single deletion failed.
        """
        ...
