"""
Resolve the effective base URL, bucket, storage origin and cache behavior from a
CDN distribution (or its absence) and the user's declared preferences.

Resolution never raises. Every preference that the distribution cannot honour
falls back to a default candidate and is recorded as a ConfigurationDegraded
event (and logged at WARNING).
"""

import logging

from .models import (
    DEFAULT_VIEWER_PROTOCOL_POLICY,
    WILDCARD_PATH_PATTERN,
    CacheBehaviorRef,
    ConfigurationDegraded,
    DegradedReason,
    DistributionDescriptor,
    OriginRef,
    ResolvedConfig,
    StoragePreferences,
)

logger = logging.getLogger(__name__)

S3_DOMAIN_SUFFIX = ".s3.amazonaws.com"


class DistributionResolver:
    """Compute a ResolvedConfig for one scheme and configured bucket."""

    def __init__(
        self,
        *,
        scheme: str = "http",
        bucket: str | None = None,
        storage_domain_suffix: str = S3_DOMAIN_SUFFIX,
    ) -> None:
        self._scheme = scheme
        self._bucket = bucket or None
        self._suffix = storage_domain_suffix

    def storage_domain(self, bucket: str | None) -> str:
        return f"{bucket or ''}{self._suffix}"

    def resolve(
        self,
        descriptor: DistributionDescriptor | None,
        prefs: StoragePreferences | None = None,
        *,
        degradations: list[ConfigurationDegraded] | None = None,
    ) -> ResolvedConfig:
        """
        Resolve configuration.

        Args:
            descriptor: The CDN distribution, or None when no CDN is configured or it
                could not be fetched.
            prefs: Declared domain name, origin path and cache-behavior pattern.
            degradations: Events already raised by the caller (e.g. a failed
                distribution fetch); carried onto the result.
        """
        prefs = prefs or StoragePreferences()
        events = list(degradations or [])
        if descriptor is None:
            return self._resolve_without_distribution(prefs, events)
        return self._resolve_with_distribution(descriptor, prefs, events)

    def _degrade(
        self,
        events: list[ConfigurationDegraded],
        reason: DegradedReason,
        message: str,
    ) -> None:
        logger.warning("%s", message)
        events.append(ConfigurationDegraded(reason=reason, message=message))

    def _resolve_without_distribution(
        self,
        prefs: StoragePreferences,
        events: list[ConfigurationDegraded],
    ) -> ResolvedConfig:
        host = prefs.domain_name or self.storage_domain(self._bucket)
        storage_origin = None
        if prefs.origin_path:
            storage_origin = OriginRef(
                id="",
                domain_name=self.storage_domain(self._bucket),
                origin_path=prefs.origin_path,
            )
        return ResolvedConfig(
            base_url=f"{self._scheme}://{host}",
            bucket=self._bucket,
            storage_origin=storage_origin,
            cache_behavior=None,
            degradations=tuple(events),
        )

    def _resolve_with_distribution(
        self,
        descriptor: DistributionDescriptor,
        prefs: StoragePreferences,
        events: list[ConfigurationDegraded],
    ) -> ResolvedConfig:
        origin = self._select_storage_origin(descriptor, prefs.origin_path, events)
        if origin is None:
            # Nothing on the distribution routes to storage; use direct S3 URLs.
            return self._resolve_without_distribution(
                prefs.model_copy(update={"domain_name": None}), events
            )
        bucket = self._select_bucket(origin, events)
        base_url = self._select_base_url(descriptor, prefs.domain_name, bucket, events)
        behavior = self._select_cache_behavior(
            descriptor, prefs.cache_behavior_pattern, origin, events
        )
        return ResolvedConfig(
            base_url=base_url,
            bucket=bucket,
            storage_origin=origin,
            cache_behavior=behavior,
            degradations=tuple(events),
        )

    def _select_base_url(
        self,
        descriptor: DistributionDescriptor,
        domain_name: str | None,
        bucket: str | None,
        events: list[ConfigurationDegraded],
    ) -> str:
        host = descriptor.domain_name or self.storage_domain(bucket)
        if domain_name:
            if not descriptor.domain_aliases:
                self._degrade(
                    events,
                    DegradedReason.NO_ALIASES,
                    "CloudFront distribution does not have any aliases. "
                    "Using distribution domain name.",
                )
            elif domain_name not in descriptor.domain_aliases:
                self._degrade(
                    events,
                    DegradedReason.DOMAIN_NOT_IN_ALIASES,
                    f"Domain name '{domain_name}' is not included in the CloudFront "
                    "distribution aliases. Using distribution domain name.",
                )
            else:
                host = domain_name
        return f"{self._scheme}://{host}"

    def _select_storage_origin(
        self,
        descriptor: DistributionDescriptor,
        origin_path: str | None,
        events: list[ConfigurationDegraded],
    ) -> OriginRef | None:
        storage_origins = [o for o in descriptor.origins if o.domain_name.endswith(self._suffix)]
        default_target = (
            descriptor.default_cache_behavior.target_origin_id
            if descriptor.default_cache_behavior is not None
            else None
        )
        origin = next((o for o in storage_origins if o.id == default_target), None)
        if origin is None and storage_origins:
            origin = storage_origins[0]

        if origin_path:
            found = next((o for o in storage_origins if o.origin_path == origin_path), None)
            if found is not None:
                origin = found
            else:
                self._degrade(
                    events,
                    DegradedReason.ORIGIN_PATH_NOT_FOUND,
                    f"S3 origin path '{origin_path}' is not included in the CloudFront "
                    "distribution origins. Using default cache behavior S3 origin.",
                )

        if origin is None:
            logger.error("Could not find S3 origin")
            events.append(
                ConfigurationDegraded(
                    reason=DegradedReason.NO_STORAGE_ORIGIN,
                    message="Could not find S3 origin",
                )
            )
        return origin

    def _select_bucket(
        self,
        origin: OriginRef,
        events: list[ConfigurationDegraded],
    ) -> str:
        origin_bucket = origin.domain_name.removesuffix(self._suffix)
        if not self._bucket:
            self._degrade(
                events,
                DegradedReason.BUCKET_FROM_ORIGIN,
                "S3 bucket name is not provided. Using the bucket name from the "
                "CloudFront distribution origin.",
            )
        elif origin_bucket != self._bucket:
            self._degrade(
                events,
                DegradedReason.BUCKET_MISMATCH,
                f"CloudFront distribution's S3 origin bucket name '{origin_bucket}' does "
                f"not match the provided S3 bucket name '{self._bucket}'. Using CloudFront "
                "distribution's S3 origin bucket name.",
            )
        return origin_bucket

    def _select_cache_behavior(
        self,
        descriptor: DistributionDescriptor,
        pattern: str | None,
        origin: OriginRef,
        events: list[ConfigurationDegraded],
    ) -> CacheBehaviorRef:
        declared_default = descriptor.default_cache_behavior
        viewer_policy = (
            declared_default.viewer_protocol_policy
            if declared_default is not None
            else DEFAULT_VIEWER_PROTOCOL_POLICY
        )
        default_behavior = CacheBehaviorRef(
            path_pattern=WILDCARD_PATH_PATTERN,
            target_origin_id=(
                declared_default.target_origin_id
                if declared_default is not None
                else origin.id
            ),
            viewer_protocol_policy=viewer_policy,
        )

        behavior = default_behavior
        if pattern:
            found = next((b for b in descriptor.cache_behaviors if b.path_pattern == pattern), None)
            if found is not None:
                behavior = found
            else:
                self._degrade(
                    events,
                    DegradedReason.CACHE_BEHAVIOR_NOT_FOUND,
                    f"Cache behavior path pattern '{pattern}' is not included in the "
                    "CloudFront distribution cache behaviors. Using default Cache Behavior.",
                )

        if behavior.target_origin_id != origin.id:
            target = next(
                (o for o in descriptor.origins if o.id == behavior.target_origin_id), None
            )
            target_label = target.origin_path if target is not None else behavior.target_origin_id
            self._degrade(
                events,
                DegradedReason.CACHE_BEHAVIOR_ORIGIN_MISMATCH,
                f"Cache behavior target origin '{target_label}' is not the resolved S3 "
                "origin. Using default Cache Behavior.",
            )
            behavior = CacheBehaviorRef(
                path_pattern=WILDCARD_PATH_PATTERN,
                target_origin_id=origin.id,
                viewer_protocol_policy=viewer_policy,
            )
        return behavior
