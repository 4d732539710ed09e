"""Build a StorageService wired to the AWS adapters from StorageSettings."""

from __future__ import annotations

from typing import Any

from cdn_storage_aws_adapters import AwsUrlSigner, CloudFrontControlPlane, S3ObjectStore

from .config import StorageSettings, bootstrap_env, get_settings
from .service import StorageService


def object_store_from_settings(settings: StorageSettings) -> S3ObjectStore:
    """Build S3ObjectStore (explicit credentials if set, else the default chain)."""
    return S3ObjectStore(
        region_name=settings.region,
        endpoint_url=settings.endpoint_url,
        access_key_id=settings.access_key_id,
        secret_access_key=settings.secret_access_key,
    )


def control_plane_from_settings(settings: StorageSettings) -> CloudFrontControlPlane | None:
    """Build CloudFrontControlPlane when a distribution id is set; else None."""
    if not settings.use_cdn:
        return None
    return CloudFrontControlPlane(
        region_name=settings.region,
        access_key_id=settings.access_key_id,
        secret_access_key=settings.secret_access_key,
    )


def storage_service_from_settings(settings: StorageSettings) -> StorageService:
    """Build StorageService with S3, CloudFront and signing adapters."""
    settings.log_missing_required()
    object_store = object_store_from_settings(settings)
    return StorageService(
        settings,
        object_store=object_store,
        url_signer=AwsUrlSigner(object_store.client),
        control_plane=control_plane_from_settings(settings),
    )


def storage_service_from_env(**options: Any) -> StorageService:
    """Load .env (if configured), read settings from options and env, and build the service."""
    bootstrap_env()
    return storage_service_from_settings(get_settings(**options))
