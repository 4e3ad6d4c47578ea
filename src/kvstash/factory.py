"""Build backends and caches from :class:`~kvstash.settings.CacheSettings`."""

from __future__ import annotations

from pathlib import Path

from kvstash.backends.base import StorageBackend
from kvstash.backends.filesystem import FileBackend, prepare_directory
from kvstash.backends.memory import MemoryBackend
from kvstash.cache import Cache
from kvstash.expiration import Clock
from kvstash.logging import configure_logging, get_logger
from kvstash.serialization import get_serializer
from kvstash.settings import BackendKind, CacheSettings

logger = get_logger(__name__)


def resolve_directory(settings: CacheSettings) -> Path:
    """Storage root for *settings*, created if missing.

    Raises:
        InvalidDirectoryError: the root can't be created or used.
    """
    return prepare_directory(settings.directory)


def create_backend(settings: CacheSettings, *, clock: Clock | None = None) -> StorageBackend:
    """Create the storage backend named by *settings.backend*."""
    match settings.backend:
        case BackendKind.FILE:
            return FileBackend(resolve_directory(settings), clock=clock)
        case BackendKind.MEMORY:
            return MemoryBackend(clock=clock)


def create_cache(settings: CacheSettings | None = None, *, clock: Clock | None = None) -> Cache:
    """Create a fully wired :class:`Cache`.

    With no arguments, settings come from ``KVSTASH_*`` environment
    variables and ``.env``.
    """
    settings = settings or CacheSettings()

    if settings.configure_logging:
        configure_logging(level=settings.log_level, json_format=settings.log_format == "json")

    cache = Cache(
        create_backend(settings, clock=clock),
        default_ttl=settings.default_ttl,
        serializer=get_serializer(settings.serializer.value),
        clock=clock,
    )
    logger.info(
        "cache_created",
        backend=settings.backend.value,
        default_ttl=settings.default_ttl,
        serializer=settings.serializer.value,
    )
    return cache


__all__ = [
    "resolve_directory",
    "create_backend",
    "create_cache",
]
