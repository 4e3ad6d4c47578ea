"""
Cache key validation and hashing.

Application keys are arbitrary strings; storage backends need a fixed-length,
filesystem-safe token. Validation always runs on the **raw** key: the hash of
a key full of reserved characters is perfectly clean hex, so checking the
hashed form would accept everything.

Examples:
    >>> normalize_key("index")
    '6a992d5529f459a44fee58c733255e86'
    >>> validate_key("a/b")
    Traceback (most recent call last):
    ...
    kvstash.errors.InvalidKeyCharactersError: ...

Tags:
    hashing, keys, validation, kvstash
"""

from __future__ import annotations

import hashlib
import re
from typing import Any

from kvstash.errors import EmptyKeyError, InvalidKeyCharactersError, KeyNotStringError

FORBIDDEN_CHARACTERS = "{}()/\\@:;"
HASHED_KEY_LENGTH = 32

_FORBIDDEN_PATTERN = re.compile("[" + re.escape(FORBIDDEN_CHARACTERS) + "]")


def validate_key(key: Any) -> str:
    """Return ``key`` unchanged if it is a legal cache key.

    Raises:
        KeyNotStringError: ``key`` is not a ``str``
        EmptyKeyError: ``key`` is ``""``
        InvalidKeyCharactersError: ``key`` contains one of ``{}()/\\@:;``
    """
    if not isinstance(key, str):
        raise KeyNotStringError(key)
    if not key:
        raise EmptyKeyError(key)
    if _FORBIDDEN_PATTERN.search(key):
        raise InvalidKeyCharactersError(key, FORBIDDEN_CHARACTERS)
    return key


def hash_key(key: str) -> str:
    """
    Derive the physical storage token for a raw key.

    128-bit MD5 rendered as 32 lowercase hex characters. Deterministic and
    safe as a file name on every platform. Not used for anything
    security-sensitive.

    Lone surrogates (``"\\ud800"``) are legal in a ``str``, so they are
    encoded with ``surrogatepass`` rather than rejected.
    """
    return hashlib.md5(key.encode("utf-8", "surrogatepass")).hexdigest()


def normalize_key(key: Any) -> str:
    """Validate the raw key, then hash it."""
    return hash_key(validate_key(key))


__all__ = [
    "FORBIDDEN_CHARACTERS",
    "HASHED_KEY_LENGTH",
    "validate_key",
    "hash_key",
    "normalize_key",
]
