"""Tests for DistributionResolver fallback and mismatch policy."""

import pytest
from cdn_storage_shared import (
    CacheBehaviorRef,
    DegradedReason,
    DistributionDescriptor,
    DistributionResolver,
    OriginRef,
    StoragePreferences,
)

S3_ORIGIN = OriginRef(id="s3-main", domain_name="media.s3.amazonaws.com", origin_path="/assets")
S3_ORIGIN_2 = OriginRef(id="s3-docs", domain_name="media.s3.amazonaws.com", origin_path="/docs")
WEB_ORIGIN = OriginRef(id="web", domain_name="app.example.com", origin_path="")


def _descriptor(**overrides) -> DistributionDescriptor:
    fields = {
        "id": "E123",
        "domain_name": "d111.cloudfront.net",
        "domain_aliases": {"cdn.example.com"},
        "origins": [WEB_ORIGIN, S3_ORIGIN, S3_ORIGIN_2],
        "default_cache_behavior": CacheBehaviorRef(
            path_pattern="*", target_origin_id="s3-main", viewer_protocol_policy="redirect-to-https"
        ),
        "cache_behaviors": [
            CacheBehaviorRef(path_pattern="docs/*", target_origin_id="s3-docs"),
            CacheBehaviorRef(path_pattern="api/*", target_origin_id="web"),
        ],
    }
    fields.update(overrides)
    return DistributionDescriptor(**fields)


def _resolver(bucket: str | None = "media", scheme: str = "https") -> DistributionResolver:
    return DistributionResolver(scheme=scheme, bucket=bucket)


class TestWithoutDistribution:
    """No CDN: S3 host, optional domain override, synthesized origin."""

    def test_defaults(self) -> None:
        config = _resolver(bucket="b").resolve(None)
        assert config.base_url == "https://b.s3.amazonaws.com"
        assert config.bucket == "b"
        assert config.storage_origin is None
        assert config.cache_behavior is None
        assert config.degradations == ()

    def test_domain_name_overrides_host(self) -> None:
        config = _resolver(scheme="http").resolve(
            None, StoragePreferences(domain_name="files.example.com")
        )
        assert config.base_url == "http://files.example.com"

    def test_origin_path_synthesizes_origin(self) -> None:
        config = _resolver(bucket="b").resolve(None, StoragePreferences(origin_path="/assets"))
        assert config.storage_origin == OriginRef(
            id="", domain_name="b.s3.amazonaws.com", origin_path="/assets"
        )
        assert config.cache_behavior is None

    def test_carries_caller_degradations(self) -> None:
        from cdn_storage_shared import ConfigurationDegraded

        event = ConfigurationDegraded(
            reason=DegradedReason.DISTRIBUTION_UNAVAILABLE, message="boom"
        )
        config = _resolver().resolve(None, degradations=[event])
        assert config.degradations == (event,)


class TestBaseUrl:
    def test_distribution_domain_by_default(self) -> None:
        config = _resolver().resolve(_descriptor())
        assert config.base_url == "https://d111.cloudfront.net"
        assert config.degradations == ()

    def test_alias_used_when_present(self) -> None:
        config = _resolver().resolve(
            _descriptor(), StoragePreferences(domain_name="cdn.example.com")
        )
        assert config.base_url == "https://cdn.example.com"
        assert config.degradations == ()

    def test_unknown_alias_degrades(self, caplog: pytest.LogCaptureFixture) -> None:
        config = _resolver().resolve(
            _descriptor(), StoragePreferences(domain_name="other.example.com")
        )
        assert config.base_url == "https://d111.cloudfront.net"
        assert config.has_degradation(DegradedReason.DOMAIN_NOT_IN_ALIASES)
        assert "other.example.com" in caplog.text

    def test_no_aliases_degrades(self) -> None:
        config = _resolver().resolve(
            _descriptor(domain_aliases=set()), StoragePreferences(domain_name="cdn.example.com")
        )
        assert config.base_url == "https://d111.cloudfront.net"
        assert config.has_degradation(DegradedReason.NO_ALIASES)
        assert not config.has_degradation(DegradedReason.DOMAIN_NOT_IN_ALIASES)

    def test_missing_distribution_domain_falls_back_to_bucket_host(self) -> None:
        config = _resolver().resolve(_descriptor(domain_name=""))
        assert config.base_url == "https://media.s3.amazonaws.com"


class TestStorageOrigin:
    def test_default_behavior_origin(self) -> None:
        config = _resolver().resolve(_descriptor())
        assert config.storage_origin == S3_ORIGIN

    def test_first_storage_origin_when_default_targets_other(self) -> None:
        descriptor = _descriptor(
            default_cache_behavior=CacheBehaviorRef(target_origin_id="web"),
        )
        config = _resolver().resolve(descriptor)
        assert config.storage_origin == S3_ORIGIN

    def test_origin_path_selects_origin(self) -> None:
        config = _resolver().resolve(
            _descriptor(), StoragePreferences(origin_path="/docs")
        )
        assert config.storage_origin == S3_ORIGIN_2

    def test_unknown_origin_path_keeps_default(self) -> None:
        config = _resolver().resolve(
            _descriptor(), StoragePreferences(origin_path="/nope")
        )
        assert config.storage_origin == S3_ORIGIN
        assert config.has_degradation(DegradedReason.ORIGIN_PATH_NOT_FOUND)

    def test_no_storage_origin_falls_back_to_s3(self) -> None:
        descriptor = _descriptor(
            origins=[WEB_ORIGIN],
            default_cache_behavior=CacheBehaviorRef(target_origin_id="web"),
        )
        config = _resolver().resolve(
            descriptor,
            StoragePreferences(domain_name="cdn.example.com", origin_path="/assets"),
        )
        assert config.base_url == "https://media.s3.amazonaws.com"
        assert config.cache_behavior is None
        assert config.storage_origin == OriginRef(
            id="", domain_name="media.s3.amazonaws.com", origin_path="/assets"
        )
        assert config.has_degradation(DegradedReason.ORIGIN_PATH_NOT_FOUND)
        assert config.has_degradation(DegradedReason.NO_STORAGE_ORIGIN)
        assert config.bucket == "media"


class TestBucket:
    def test_bucket_from_origin_when_not_configured(self) -> None:
        config = _resolver(bucket=None).resolve(_descriptor())
        assert config.bucket == "media"
        assert config.has_degradation(DegradedReason.BUCKET_FROM_ORIGIN)

    def test_origin_bucket_wins_on_mismatch(self) -> None:
        config = _resolver(bucket="other").resolve(_descriptor())
        assert config.bucket == "media"
        assert config.has_degradation(DegradedReason.BUCKET_MISMATCH)

    def test_matching_bucket_no_degradation(self) -> None:
        config = _resolver(bucket="media").resolve(_descriptor())
        assert config.bucket == "media"
        assert config.degradations == ()


class TestCacheBehavior:
    def test_default_is_wildcard_with_declared_policy(self) -> None:
        config = _resolver().resolve(_descriptor())
        assert config.cache_behavior == CacheBehaviorRef(
            path_pattern="*", target_origin_id="s3-main", viewer_protocol_policy="redirect-to-https"
        )

    def test_synthesized_when_descriptor_has_no_default(self) -> None:
        config = _resolver().resolve(_descriptor(default_cache_behavior=None))
        assert config.cache_behavior == CacheBehaviorRef(
            path_pattern="*", target_origin_id="s3-main", viewer_protocol_policy="allow-all"
        )

    def test_pattern_selects_behavior(self) -> None:
        config = _resolver().resolve(
            _descriptor(),
            StoragePreferences(origin_path="/docs", cache_behavior_pattern="docs/*"),
        )
        assert config.cache_behavior.path_pattern == "docs/*"
        assert config.cache_behavior.target_origin_id == config.storage_origin.id

    def test_unknown_pattern_keeps_default(self) -> None:
        config = _resolver().resolve(
            _descriptor(), StoragePreferences(cache_behavior_pattern="img/*")
        )
        assert config.cache_behavior.path_pattern == "*"
        assert config.has_degradation(DegradedReason.CACHE_BEHAVIOR_NOT_FOUND)

    def test_behavior_targeting_other_origin_falls_back(self) -> None:
        config = _resolver().resolve(
            _descriptor(), StoragePreferences(cache_behavior_pattern="api/*")
        )
        assert config.cache_behavior == CacheBehaviorRef(
            path_pattern="*", target_origin_id="s3-main", viewer_protocol_policy="redirect-to-https"
        )
        assert config.has_degradation(DegradedReason.CACHE_BEHAVIOR_ORIGIN_MISMATCH)

    def test_default_behavior_realigned_to_selected_origin(self) -> None:
        config = _resolver().resolve(
            _descriptor(), StoragePreferences(origin_path="/docs")
        )
        assert config.storage_origin == S3_ORIGIN_2
        assert config.cache_behavior.target_origin_id == "s3-docs"
        assert config.has_degradation(DegradedReason.CACHE_BEHAVIOR_ORIGIN_MISMATCH)


@pytest.mark.parametrize(
    "prefs",
    [
        StoragePreferences(),
        StoragePreferences(domain_name="x.example.com", origin_path="/x", cache_behavior_pattern="x/*"),
        StoragePreferences(origin_path="/docs", cache_behavior_pattern="api/*"),
        StoragePreferences(origin_path="/assets", cache_behavior_pattern="docs/*"),
        StoragePreferences(cache_behavior_pattern="docs/*"),
    ],
)
@pytest.mark.parametrize(
    "descriptor",
    [
        _descriptor(),
        _descriptor(default_cache_behavior=None),
        _descriptor(origins=[WEB_ORIGIN]),
        _descriptor(cache_behaviors=[]),
        DistributionDescriptor(),
    ],
)
def test_behavior_always_targets_storage_origin(
    descriptor: DistributionDescriptor, prefs: StoragePreferences
) -> None:
    """Resolution never raises, and a resolved behavior always targets the resolved origin."""
    config = _resolver().resolve(descriptor, prefs)
    if config.cache_behavior is not None:
        assert config.storage_origin is not None
        assert config.cache_behavior.target_origin_id == config.storage_origin.id
