"""
Lazily resolved storage configuration.

Holds the last ResolvedConfig snapshot. The first call to ensure_resolved()
fetches the CDN distribution (when one is configured) and resolves; later calls
return the same snapshot until refresh() or invalidate(). A refresh publishes a
new immutable snapshot; readers holding the previous one are unaffected.

Concurrent first calls may each fetch the distribution. Resolution is
side-effect free, so the last one to finish wins.
"""

from __future__ import annotations

import asyncio
import logging

from cdn_storage_shared import (
    CdnControlPlane,
    ConfigurationDegraded,
    DegradedReason,
    DistributionDescriptor,
    DistributionResolver,
    ResolvedConfig,
    StoragePreferences,
)

logger = logging.getLogger(__name__)


class ConfigurationCache:
    """Process-lifetime holder of the resolved configuration."""

    def __init__(
        self,
        resolver: DistributionResolver,
        preferences: StoragePreferences,
        *,
        control_plane: CdnControlPlane | None = None,
        distribution_id: str | None = None,
    ) -> None:
        self._resolver = resolver
        self._preferences = preferences
        self._control_plane = control_plane
        self._distribution_id = distribution_id or None
        self._snapshot: ResolvedConfig | None = None
        self._version = 0

    @property
    def snapshot(self) -> ResolvedConfig | None:
        """Current snapshot, or None before the first resolution."""
        return self._snapshot

    @property
    def version(self) -> int:
        """Number of snapshots published so far."""
        return self._version

    async def ensure_resolved(self) -> ResolvedConfig:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        return await self.refresh()

    async def refresh(self) -> ResolvedConfig:
        """Fetch the distribution (if any), resolve, and publish a new snapshot."""
        descriptor, events = await self._fetch_descriptor()
        prefs = self._preferences
        if events:
            # The configured domain is a CDN alias; without the distribution, serve from S3.
            prefs = prefs.model_copy(update={"domain_name": None})
        snapshot = self._resolver.resolve(descriptor, prefs, degradations=events)
        self._snapshot = snapshot
        self._version += 1
        logger.info(
            "storage config resolved: version=%s base_url=%s bucket=%s degraded=%s",
            self._version,
            snapshot.base_url,
            snapshot.bucket,
            [d.reason.value for d in snapshot.degradations],
        )
        return snapshot

    def invalidate(self) -> None:
        """Drop the snapshot; the next ensure_resolved() recomputes it."""
        self._snapshot = None

    async def _fetch_descriptor(
        self,
    ) -> tuple[DistributionDescriptor | None, list[ConfigurationDegraded]]:
        if not self._distribution_id or self._control_plane is None:
            return None, []
        try:
            descriptor = await asyncio.to_thread(
                self._control_plane.get_distribution, self._distribution_id
            )
        except Exception as e:
            message = (
                f"Could not get CloudFront distribution '{self._distribution_id}': {e}. "
                "Using S3 defaults."
            )
            logger.warning("%s", message)
            return None, [
                ConfigurationDegraded(
                    reason=DegradedReason.DISTRIBUTION_UNAVAILABLE, message=message
                )
            ]
        return descriptor, []
