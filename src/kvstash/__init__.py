"""
kvstash - key-value cache with per-entry TTL over file or in-memory storage.

Examples:
    >>> from kvstash import Cache, FileBackend
    >>> cache = Cache(FileBackend("/tmp/kvstash-demo"), default_ttl=600)
    >>> cache.set("index", "Under Construction")
    True
    >>> cache.get("index")
    'Under Construction'
"""

from kvstash.backends import FileBackend, MemoryBackend, StorageBackend
from kvstash.cache import Cache, CacheLookup
from kvstash.errors import (
    CacheError,
    EmptyKeyError,
    InvalidArgumentError,
    InvalidDirectoryError,
    InvalidIterableError,
    InvalidKeyCharactersError,
    InvalidKeyError,
    InvalidTTLError,
    KeyNotStringError,
    SerializationError,
)
from kvstash.factory import create_cache
from kvstash.settings import CacheSettings

__version__ = "0.1.0"

__all__ = [
    "Cache",
    "CacheLookup",
    "CacheSettings",
    "create_cache",
    "StorageBackend",
    "FileBackend",
    "MemoryBackend",
    "CacheError",
    "InvalidArgumentError",
    "InvalidKeyError",
    "KeyNotStringError",
    "EmptyKeyError",
    "InvalidKeyCharactersError",
    "InvalidIterableError",
    "InvalidTTLError",
    "InvalidDirectoryError",
    "SerializationError",
]
