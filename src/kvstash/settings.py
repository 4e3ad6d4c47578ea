"""Environment-driven settings for building a cache.

``CacheSettings`` reads ``KVSTASH_*`` environment variables (and a ``.env``
file) so the backend, storage root and default TTL can change per
deployment without code changes.

Examples:
    >>> from kvstash.settings import CacheSettings
    >>> settings = CacheSettings(backend="memory", default_ttl=60)
    >>> settings.backend
    <BackendKind.MEMORY: 'memory'>

Tags:
    settings, configuration, pydantic, environment, kvstash
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from kvstash.expiration import DEFAULT_TTL_SECONDS


class BackendKind(str, Enum):
    """Supported storage backends."""

    FILE = "file"
    MEMORY = "memory"


class SerializerKind(str, Enum):
    """Supported payload codecs."""

    PICKLE = "pickle"
    JSON = "json"


class CacheSettings(BaseSettings):
    """kvstash configuration.

    Fields
    ──────
    backend            : Storage backend (``file`` or ``memory``)
    directory          : Storage root for the file backend (``None`` → ``<cwd>/.tmp/cache``)
    default_ttl        : Seconds an entry lives when no usable TTL is given
    serializer         : Payload codec (``pickle`` or ``json``)
    log_level          : Structlog log level
    log_format         : ``json`` or ``console``
    configure_logging  : Let the factory call ``configure_logging`` on build
    """

    model_config = SettingsConfigDict(
        env_prefix="KVSTASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    backend: BackendKind = Field(default=BackendKind.FILE)
    directory: Path | None = Field(
        default=None,
        description="Storage root for the file backend",
    )

    # ── Entries ──────────────────────────────────────────────────
    default_ttl: int = Field(default=DEFAULT_TTL_SECONDS, gt=0)
    serializer: SerializerKind = Field(default=SerializerKind.PICKLE)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    configure_logging: bool = Field(default=False)


__all__ = [
    "BackendKind",
    "SerializerKind",
    "CacheSettings",
]
