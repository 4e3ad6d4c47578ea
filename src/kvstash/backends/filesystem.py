"""
Filesystem storage backend.

One file per entry under a storage root, named by the hashed key. Each file
starts with a fixed header carrying the expiration deadline, followed by the
serialized payload:

    ::

        ┌──────────┬────────────────────────┬──────────────────────┐
        │ b"KVS1"  │ deadline (int64, BE)   │ payload bytes ...    │
        │ 4 bytes  │ 8 bytes                │                      │
        └──────────┴────────────────────────┴──────────────────────┘

Keeping the deadline inside the file (instead of abusing the mtime) makes
expiry independent of filesystem timestamp granularity and of tools that
touch files. Writes land in a temp file in the same directory and are moved
into place with ``os.replace``, so readers see the old entry or the new one,
never half of either.

Expiry is lazy: :meth:`FileBackend.exists` reads the header and deletes the
file once its deadline has passed. Nothing sweeps the directory in the
background.

Guardrails:
    ❌ DON'T: Share a storage root between unrelated applications
    ✅ DO: Give each cache its own directory (``clear`` empties all of it)

    ❌ DON'T: Rely on ``has()`` followed by ``get()`` under concurrency
    ✅ DO: Treat ``has()`` as a warming hint; another process may delete in between

Tags:
    cache, filesystem, ttl, atomic-write, kvstash
"""

from __future__ import annotations

import contextlib
import os
import struct
import tempfile
import time
from pathlib import Path

from kvstash.errors import InvalidDirectoryError
from kvstash.expiration import Clock, is_expired
from kvstash.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DIRECTORY = Path(".tmp") / "cache"

_MAGIC = b"KVS1"
_HEADER = struct.Struct(">4sq")


def prepare_directory(directory: str | os.PathLike[str] | None = None) -> Path:
    """
    Resolve the storage root, creating it if needed.

    ``None`` means ``<cwd>/.tmp/cache``.

    Raises:
        InvalidDirectoryError: the directory can't be created, or exists but
            is not a readable and writable directory.
    """
    path = Path(directory).expanduser() if directory is not None else Path.cwd() / DEFAULT_DIRECTORY

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise InvalidDirectoryError(path, cause=exc) from exc

    if not path.is_dir() or not os.access(path, os.R_OK | os.W_OK | os.X_OK):
        raise InvalidDirectoryError(path)

    return path.resolve()


class FileBackend:
    """
    Store each entry as a file under ``directory``.

    Example:
        backend = FileBackend("/var/cache/pages")
        backend.write(hash_key("index"), b"...", deadline)
        backend.exists(hash_key("index"))  # True until the deadline
    """

    def __init__(
        self,
        directory: str | os.PathLike[str] | None = None,
        *,
        clock: Clock | None = None,
    ):
        self._directory = prepare_directory(directory)
        self._clock = clock or time.time

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, hashed_key: str) -> Path:
        return self._directory / hashed_key

    def write(self, hashed_key: str, payload: bytes, deadline: int) -> bool:
        path = self.path_for(hashed_key)
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=self._directory,
                prefix=f".{hashed_key}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_path = Path(handle.name)
                handle.write(_HEADER.pack(_MAGIC, deadline))
                handle.write(payload)
            os.replace(tmp_path, path)
        except (OSError, struct.error) as exc:
            logger.warning(
                "cache_write_failed",
                backend="FileBackend",
                path=str(path),
                error=str(exc),
            )
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    tmp_path.unlink(missing_ok=True)
            return False

        logger.debug("cache_entry_written", path=str(path), deadline=deadline)
        return True

    def read(self, hashed_key: str) -> bytes | None:
        path = self.path_for(hashed_key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("cache_read_failed", backend="FileBackend", path=str(path), error=str(exc))
            return None

        if self._parse_header(data, path) is None:
            return None
        return data[_HEADER.size:]

    def exists(self, hashed_key: str) -> bool:
        path = self.path_for(hashed_key)
        deadline = self._read_deadline(path)
        if deadline is None:
            return False

        if is_expired(deadline, self._clock()):
            logger.debug("cache_entry_expired", path=str(path), deadline=deadline)
            self.remove(hashed_key)
            return False

        return True

    def remove(self, hashed_key: str) -> bool:
        path = self.path_for(hashed_key)
        try:
            path.unlink()
        except FileNotFoundError:
            return True
        except OSError as exc:
            logger.warning("cache_delete_failed", backend="FileBackend", path=str(path), error=str(exc))
            return False
        return True

    def clear(self) -> bool:
        try:
            entries = list(self._directory.iterdir())
        except OSError as exc:
            logger.warning("cache_clear_failed", backend="FileBackend", directory=str(self._directory), error=str(exc))
            return False

        failed = []
        for entry in entries:
            try:
                entry.unlink()
            except FileNotFoundError:
                continue  # removed concurrently
            except OSError as exc:
                logger.warning("cache_delete_failed", backend="FileBackend", path=str(entry), error=str(exc))
                failed.append(entry.name)

        if failed:
            logger.warning("cache_clear_partial", backend="FileBackend", failed=len(failed), total=len(entries))
            return False

        logger.info("cache_cleared", backend="FileBackend", removed=len(entries))
        return True

    def _read_deadline(self, path: Path) -> int | None:
        try:
            with path.open("rb") as handle:
                header = handle.read(_HEADER.size)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("cache_read_failed", backend="FileBackend", path=str(path), error=str(exc))
            return None
        return self._parse_header(header, path)

    @staticmethod
    def _parse_header(data: bytes, path: Path) -> int | None:
        if len(data) < _HEADER.size:
            logger.warning("cache_entry_corrupt", path=str(path), reason="truncated header")
            return None
        magic, deadline = _HEADER.unpack_from(data)
        if magic != _MAGIC:
            logger.warning("cache_entry_corrupt", path=str(path), reason="bad magic")
            return None
        return deadline

    def __repr__(self) -> str:
        return f"FileBackend(directory={str(self._directory)!r})"


__all__ = [
    "DEFAULT_DIRECTORY",
    "prepare_directory",
    "FileBackend",
]
