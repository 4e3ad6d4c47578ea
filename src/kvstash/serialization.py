"""Payload codecs: the bytes that backends store for each value."""

from __future__ import annotations

import json
import pickle
from typing import Any, Protocol, runtime_checkable

from kvstash.errors import InvalidConfigError, SerializationError


@runtime_checkable
class Serializer(Protocol):
    """Byte codec used consistently for every write and read of a cache."""

    def serialize(self, value: Any) -> bytes: ...

    def deserialize(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Round-trips arbitrary picklable Python values.

    Only read caches you wrote yourself: unpickling runs code chosen by
    whoever wrote the payload.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self._protocol = protocol

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise SerializationError(
                f"Cannot pickle value of type {type(value).__name__}", cause=exc
            ) from exc

    def deserialize(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, ValueError, TypeError, AttributeError, ImportError) as exc:
            raise SerializationError("Cannot unpickle cached payload", cause=exc) from exc


class JsonSerializer:
    """UTF-8 JSON; values must be JSON-serializable."""

    def serialize(self, value: Any) -> bytes:
        try:
            return json.dumps(value).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                f"Value of type {type(value).__name__} is not JSON-serializable", cause=exc
            ) from exc

    def deserialize(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise SerializationError("Cached payload is not valid JSON", cause=exc) from exc


_SERIALIZERS: dict[str, type] = {
    "pickle": PickleSerializer,
    "json": JsonSerializer,
}


def get_serializer(name: str) -> Serializer:
    """Build a serializer by name (``pickle`` or ``json``)."""
    try:
        return _SERIALIZERS[name]()
    except KeyError:
        raise InvalidConfigError(
            f"Unknown serializer {name!r}; expected one of {sorted(_SERIALIZERS)}"
        ) from None


__all__ = [
    "Serializer",
    "PickleSerializer",
    "JsonSerializer",
    "get_serializer",
]
