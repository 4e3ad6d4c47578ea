"""Storage backends: where cache entries physically live."""

from kvstash.backends.base import StorageBackend
from kvstash.backends.filesystem import FileBackend, prepare_directory
from kvstash.backends.memory import MemoryBackend, create_store, shared_store

__all__ = [
    "StorageBackend",
    "FileBackend",
    "MemoryBackend",
    "prepare_directory",
    "create_store",
    "shared_store",
]
