"""CloudFront implementation of CdnControlPlane."""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import boto3
from botocore.exceptions import ClientError
from cdn_storage_shared import (
    CacheBehaviorRef,
    DistributionDescriptor,
    InvalidationFailed,
    OriginRef,
)

logger = logging.getLogger(__name__)

# Characters encodeURI leaves untouched besides alphanumerics.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


def encode_uri(path: str) -> str:
    """Percent-encode a path the way a browser's encodeURI does."""
    return quote(path, safe=_URI_SAFE)


def _items(container: dict[str, Any] | None) -> list[dict[str, Any]]:
    """Return the Items list of a CloudFront {Quantity, Items} container (may be absent)."""
    if not container:
        return []
    return container.get("Items") or []


def _cache_behavior(data: dict[str, Any], *, path_pattern: str | None = None) -> CacheBehaviorRef:
    fields: dict[str, Any] = {
        "path_pattern": path_pattern or data.get("PathPattern") or "*",
        "target_origin_id": data.get("TargetOriginId"),
    }
    if data.get("ViewerProtocolPolicy"):
        fields["viewer_protocol_policy"] = data["ViewerProtocolPolicy"]
    return CacheBehaviorRef(**fields)


def descriptor_from_distribution(distribution: dict[str, Any]) -> DistributionDescriptor:
    """
    Build a DistributionDescriptor from a GetDistribution "Distribution" payload.

    Only aliases, origins and cache behaviors are read; everything else in the
    distribution config is ignored.
    """
    config = distribution.get("DistributionConfig") or {}
    origins = [
        OriginRef(
            id=o.get("Id", ""),
            domain_name=o.get("DomainName", ""),
            origin_path=o.get("OriginPath") or "",
        )
        for o in _items(config.get("Origins"))
    ]
    default = config.get("DefaultCacheBehavior")
    return DistributionDescriptor(
        id=distribution.get("Id", ""),
        domain_name=distribution.get("DomainName", ""),
        domain_aliases=frozenset(_items(config.get("Aliases"))),
        origins=tuple(origins),
        default_cache_behavior=_cache_behavior(default, path_pattern="*") if default else None,
        cache_behaviors=tuple(_cache_behavior(b) for b in _items(config.get("CacheBehaviors"))),
    )


class CloudFrontControlPlane:
    """CdnControlPlane implementation using CloudFront."""

    def __init__(
        self,
        *,
        region_name: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: Any = None,
    ) -> None:
        self._client = client or boto3.client(
            "cloudfront",
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    def get_distribution(self, distribution_id: str) -> DistributionDescriptor:
        """Fetch the distribution; raises on any client error or empty response."""
        resp = self._client.get_distribution(Id=distribution_id)
        if not resp or not resp.get("Distribution"):
            raise RuntimeError("Could not get CloudFront distribution")
        return descriptor_from_distribution(resp["Distribution"])

    def invalidate(self, distribution_id: str, paths: list[str]) -> None:
        """Create one invalidation batch for the given viewer paths."""
        items = [encode_uri(p) for p in paths if p]
        if not items:
            return
        try:
            self._client.create_invalidation(
                DistributionId=distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(items), "Items": items},
                    "CallerReference": str(time.time_ns()),
                },
            )
        except ClientError as e:
            raise InvalidationFailed(
                f"Invalidation failed for path(s): {', '.join(items)}: {e}",
                path=items[0],
            ) from e
        logger.debug("invalidation: distribution=%s paths=%s", distribution_id, items)
