"""Pydantic models for CDN distributions, resolved storage configuration, and upload DTOs."""

from collections.abc import Awaitable
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any

from pydantic import BaseModel, ConfigDict, Field

WILDCARD_PATH_PATTERN = "*"
DEFAULT_VIEWER_PROTOCOL_POLICY = "allow-all"


# --- CDN distribution descriptor (read-only input from the control plane) ---

class OriginRef(BaseModel):
    """Backend origin registered on a distribution."""

    model_config = ConfigDict(frozen=True)

    id: str = Field("", description="Origin id referenced by cache behaviors")
    domain_name: str = Field(..., description="Backend domain, e.g. bucket.s3.amazonaws.com")
    origin_path: str = Field("", description="Path prefix prepended to viewer requests")


class CacheBehaviorRef(BaseModel):
    """Path pattern routed to a target origin."""

    model_config = ConfigDict(frozen=True)

    path_pattern: str = Field(WILDCARD_PATH_PATTERN, description="CloudFront path pattern")
    target_origin_id: str | None = Field(None, description="Id of the origin serving the pattern")
    viewer_protocol_policy: str = DEFAULT_VIEWER_PROTOCOL_POLICY

    @property
    def is_wildcard(self) -> bool:
        return self.path_pattern == WILDCARD_PATH_PATTERN


class DistributionDescriptor(BaseModel):
    """The parts of a CDN distribution that drive key/URL resolution."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    domain_name: str = Field("", description="Distribution's own domain (e.g. d123.cloudfront.net)")
    domain_aliases: frozenset[str] = frozenset()
    origins: tuple[OriginRef, ...] = ()
    default_cache_behavior: CacheBehaviorRef | None = None
    cache_behaviors: tuple[CacheBehaviorRef, ...] = ()


# --- Resolution input/output ---

class StoragePreferences(BaseModel):
    """User-declared preferences; each may be overridden by what the distribution contains."""

    model_config = ConfigDict(frozen=True)

    domain_name: str | None = None
    origin_path: str | None = None
    cache_behavior_pattern: str | None = None


class DegradedReason(str, Enum):
    """Why a preference could not be honoured and a fallback was applied."""

    DISTRIBUTION_UNAVAILABLE = "distribution_unavailable"
    DOMAIN_NOT_IN_ALIASES = "domain_not_in_aliases"
    NO_ALIASES = "no_aliases"
    ORIGIN_PATH_NOT_FOUND = "origin_path_not_found"
    NO_STORAGE_ORIGIN = "no_storage_origin"
    BUCKET_FROM_ORIGIN = "bucket_from_origin"
    BUCKET_MISMATCH = "bucket_mismatch"
    CACHE_BEHAVIOR_NOT_FOUND = "cache_behavior_not_found"
    CACHE_BEHAVIOR_ORIGIN_MISMATCH = "cache_behavior_origin_mismatch"


class ConfigurationDegraded(BaseModel):
    """Non-fatal configuration event: a fallback replaced what was asked for."""

    model_config = ConfigDict(frozen=True)

    reason: DegradedReason
    message: str


class ResolvedConfig(BaseModel):
    """Effective base URL, bucket, storage origin and cache behavior. Immutable snapshot."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    bucket: str | None = None
    storage_origin: OriginRef | None = None
    cache_behavior: CacheBehaviorRef | None = None
    degradations: tuple[ConfigurationDegraded, ...] = ()

    @property
    def origin_path(self) -> str:
        if self.storage_origin is None:
            return ""
        return self.storage_origin.origin_path

    def has_degradation(self, reason: DegradedReason) -> bool:
        return any(d.reason == reason for d in self.degradations)


# --- Upload / stream DTOs ---

class FileUpload(BaseModel):
    """An uploaded file as handed over by the host: original name and optional local path."""

    original_name: str = Field(..., description="Caller-declared logical filename")
    path: str | None = Field(None, description="Local file holding the upload body")


class UploadResult(BaseModel):
    """Public URL of a stored object."""

    url: str


@dataclass(frozen=True)
class UploadStreamDescriptor:
    """Writable sink plus completion awaitable for a streamed upload.

    The caller writes the body to write_stream and closes it, then must await
    promise: it resolves when the backing write has completed and raises
    UploadFailed (or the backend error) when it did not. A dropped promise only
    surfaces a failure through the service log.
    """

    write_stream: IO[bytes]
    promise: Awaitable[Any]
    url: str
    file_key: str
