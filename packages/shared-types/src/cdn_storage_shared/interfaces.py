"""
Cloud-agnostic interfaces for the object store, the CDN control plane, and
URL signing.

Implementations (e.g. AWS via S3 and CloudFront) live in separate packages
(e.g. aws-adapters). The storage service depends on these interfaces and
receives the implementation by config.
"""

from datetime import datetime
from typing import Any, BinaryIO, Protocol, runtime_checkable

from .models import DistributionDescriptor


@runtime_checkable
class ObjectStore(Protocol):
    """Object store: put, get and delete objects by bucket and key."""

    def put(
        self,
        bucket: str,
        key: str,
        body: bytes | BinaryIO,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Write the object. Returns the backend's result, or None when it reported nothing."""
        ...

    def put_stream(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Write the object from a non-seekable stream, reading until EOF."""
        ...

    def get(self, bucket: str, key: str) -> bytes | None:
        """Return the object body, or None if the object does not exist."""
        ...

    def delete(self, bucket: str, key: str) -> dict[str, Any] | None:
        """Delete the object. Returns the backend's result, or None when it reported nothing."""
        ...


@runtime_checkable
class CdnControlPlane(Protocol):
    """CDN control plane: read a distribution and invalidate cached paths."""

    def get_distribution(self, distribution_id: str) -> DistributionDescriptor:
        """Fetch the distribution. Raises on any failure."""
        ...

    def invalidate(self, distribution_id: str, paths: list[str]) -> None:
        """Request eviction of the given paths. Raises InvalidationFailed on rejection."""
        ...


@runtime_checkable
class UrlSigner(Protocol):
    """Time-boxed download URLs for the object store or the CDN."""

    def sign_object_store(self, bucket: str, key: str, *, expires_in: int) -> str:
        """Return a presigned GET URL for bucket/key valid for expires_in seconds."""
        ...

    def sign_cdn(
        self,
        url: str,
        *,
        key_pair_id: str,
        private_key: str,
        expires_at: datetime,
    ) -> str:
        """Return a canned-policy signed CDN URL valid until expires_at."""
        ...
