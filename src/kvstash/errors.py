"""
Structured error types for kvstash.

Every error raised by the cache carries a category, structured context and an
optional chained cause, so callers can log it with ``to_dict()`` and route
on ``category`` instead of parsing messages.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure the caller can act on
    - **Fail fast on bad input:** Keys, TTLs, iterables, directories raise
    - **Booleans for I/O:** Storage failures are reported, not raised
    - **Error Chaining:** Preserve original exceptions as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        CacheError                            │
        │            (category, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  InvalidArgumentError (ValueError)   ConfigError            │
        │  (VALIDATION)                        (CONFIG)               │
        │       │                                   │                 │
        │  InvalidKeyError                     InvalidDirectoryError  │
        │  ├── KeyNotStringError (TypeError)   InvalidConfigError     │
        │  ├── EmptyKeyError                                          │
        │  └── InvalidKeyCharactersError       SerializationError     │
        │  InvalidIterableError (TypeError)    (SERIALIZATION)        │
        │  InvalidTTLError                                            │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = EmptyKeyError("")
    >>> error.reason
    <InvalidKeyReason.EMPTY: 'EMPTY'>
    >>> isinstance(error, ValueError)
    True
    >>> error.to_dict()["category"]
    'VALIDATION'

Tags:
    error-handling, exception-hierarchy, cache, kvstash

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    VALIDATION = "VALIDATION"        # Bad key, ttl, iterable argument
    CONFIG = "CONFIG"                # Storage root, settings
    SERIALIZATION = "SERIALIZATION"  # Codec failures
    INTERNAL = "INTERNAL"            # Bugs, unexpected state


class InvalidKeyReason(str, Enum):
    """Why a raw cache key was rejected."""

    NOT_A_STRING = "NOT_A_STRING"
    EMPTY = "EMPTY"
    INVALID_CHARACTERS = "INVALID_CHARACTERS"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a cache error.

    Attributes:
        key: Raw application key, when one is involved
        hashed_key: Physical storage token derived from ``key``
        backend: Backend class name (``FileBackend``, ``MemoryBackend``)
        path: Filesystem path for file-backed operations
        metadata: Additional key-value pairs
    """

    key: str | None = None
    hashed_key: str | None = None
    backend: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["key", "hashed_key", "backend", "path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CacheError(Exception):
    """
    Base exception for all kvstash errors.

    Subclasses set ``default_category``; everything else is per-instance.

    Examples:
        >>> try:
        ...     raise OSError("disk full")
        ... except OSError as e:
        ...     error = CacheError("Write failed", cause=e)
        >>> error.cause
        OSError('disk full')
        >>> error.with_context(backend="FileBackend").context.backend
        'FileBackend'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CacheError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SerializationError("Failed").with_context(key="index")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# ARGUMENT ERRORS (raised to the caller, never retried)
# =============================================================================


class InvalidArgumentError(CacheError, ValueError):
    """An argument passed to a cache operation is not a legal value."""

    default_category = ErrorCategory.VALIDATION


class InvalidKeyError(InvalidArgumentError):
    """
    A raw cache key failed validation.

    ``reason`` tells which rule failed; the concrete subclasses exist so
    callers can catch a single rule.
    """

    reason: InvalidKeyReason

    def __init__(self, key: Any, message: str, **kwargs: Any):
        self.key = key
        super().__init__(message, **kwargs)
        if isinstance(key, str):
            self.context.key = key


class KeyNotStringError(InvalidKeyError, TypeError):
    """Key is not a ``str``."""

    reason = InvalidKeyReason.NOT_A_STRING

    def __init__(self, key: Any):
        super().__init__(
            key,
            f"The specified key: {key!r} is not a string (got {type(key).__name__})",
        )


class EmptyKeyError(InvalidKeyError):
    """Key is the empty string."""

    reason = InvalidKeyReason.EMPTY

    def __init__(self, key: Any = ""):
        super().__init__(key, "The specified key is empty")


class InvalidKeyCharactersError(InvalidKeyError):
    """Key contains one of the reserved characters ``{}()/\\@:;``."""

    reason = InvalidKeyReason.INVALID_CHARACTERS

    def __init__(self, key: str, forbidden: str):
        self.forbidden = forbidden
        super().__init__(
            key,
            f"The specified key: {key!r} must not contain any of {forbidden!r}",
        )


class InvalidIterableError(InvalidArgumentError, TypeError):
    """A bulk operation was given something it cannot iterate."""

    def __init__(self, value: Any, expected: str = "a non-string iterable"):
        self.value = value
        super().__init__(f"Expected {expected}, got {type(value).__name__}")


class InvalidTTLError(InvalidArgumentError):
    """TTL is not ``None``, a number, a ``timedelta`` or a ``datetime``."""

    def __init__(self, ttl: Any):
        self.ttl = ttl
        super().__init__(f"Unsupported TTL value: {ttl!r} ({type(ttl).__name__})")


# =============================================================================
# CONFIG ERRORS (construction time, fail fast)
# =============================================================================


class ConfigError(CacheError):
    """Configuration error. Never recoverable at runtime."""

    default_category = ErrorCategory.CONFIG


class InvalidDirectoryError(ConfigError):
    """Storage root does not exist and cannot be created, or is not readable and writable."""

    def __init__(self, directory: Any, *, cause: Exception | None = None):
        self.directory = str(directory)
        super().__init__(
            f"The directory {self.directory} does not exist, can't be created, "
            "or isn't readable and writable",
            context=ErrorContext(path=self.directory),
            cause=cause,
        )


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    pass


# =============================================================================
# SERIALIZATION ERRORS (converted to boolean results by the cache)
# =============================================================================


class SerializationError(CacheError):
    """A value could not be encoded, or a stored payload could not be decoded."""

    default_category = ErrorCategory.SERIALIZATION


__all__ = [
    "ErrorCategory",
    "InvalidKeyReason",
    "ErrorContext",
    "CacheError",
    "InvalidArgumentError",
    "InvalidKeyError",
    "KeyNotStringError",
    "EmptyKeyError",
    "InvalidKeyCharactersError",
    "InvalidIterableError",
    "InvalidTTLError",
    "ConfigError",
    "InvalidDirectoryError",
    "InvalidConfigError",
    "SerializationError",
]
