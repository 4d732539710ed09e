"""Pytest fixtures for storage-service tests (in-memory collaborators)."""

from unittest.mock import MagicMock

import pytest
from cdn_storage_service import StorageService, StorageSettings
from cdn_storage_shared import CacheBehaviorRef, DistributionDescriptor, OriginRef


class InMemoryObjectStore:
    """ObjectStore keeping objects in a dict; records put options per key."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.options: dict[tuple[str, str], dict] = {}

    def put(self, bucket, key, body, options=None):
        data = body if isinstance(body, bytes) else body.read()
        self.objects[(bucket, key)] = data
        self.options[(bucket, key)] = dict(options or {})
        return {"ETag": '"etag"'}

    def put_stream(self, bucket, key, stream, options=None):
        return self.put(bucket, key, stream, options)

    def get(self, bucket, key):
        return self.objects.get((bucket, key))

    def delete(self, bucket, key):
        self.objects.pop((bucket, key), None)
        return {"DeleteMarker": False}


def make_descriptor(origin_path: str = "/assets") -> DistributionDescriptor:
    return DistributionDescriptor(
        id="E123",
        domain_name="d111.cloudfront.net",
        domain_aliases={"cdn.example.com"},
        origins=[OriginRef(id="s3", domain_name="b.s3.amazonaws.com", origin_path=origin_path)],
        default_cache_behavior=CacheBehaviorRef(path_pattern="*", target_origin_id="s3"),
    )


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def control_plane() -> MagicMock:
    cp = MagicMock()
    cp.get_distribution.return_value = make_descriptor()
    return cp


@pytest.fixture
def url_signer() -> MagicMock:
    signer = MagicMock()
    signer.sign_object_store.return_value = "https://b.s3.amazonaws.com/photo.png?X-Amz-Signature=sig"
    signer.sign_cdn.return_value = "https://cdn.example.com/a.png?Signature=sig"
    return signer


@pytest.fixture
def s3_service(object_store, url_signer) -> StorageService:
    """Service without a CDN: bucket b, https."""
    settings = StorageSettings(region="us-east-1", s3_bucket="b", use_https=True)
    return StorageService(settings, object_store=object_store, url_signer=url_signer)


@pytest.fixture
def cdn_service(object_store, url_signer, control_plane) -> StorageService:
    """Service fronted by distribution E123 (origin path /assets, alias cdn.example.com)."""
    settings = StorageSettings(
        region="us-east-1",
        s3_bucket="b",
        use_https=True,
        cloud_front_distribution_id="E123",
        domain_name="cdn.example.com",
        s3_origin_path="/assets",
        cloud_front_key_pair_id="K1",
        cloud_front_key_private_key="pem",
        download_url_duration=120,
    )
    return StorageService(
        settings,
        object_store=object_store,
        url_signer=url_signer,
        control_plane=control_plane,
    )


@pytest.fixture
def descriptor_factory():
    """Return make_descriptor(origin_path=...) for tests that vary the distribution."""
    return make_descriptor
