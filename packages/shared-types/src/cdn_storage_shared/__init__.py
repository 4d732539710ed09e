"""Shared types, interfaces and key/URL conventions for CDN-fronted object storage."""

from .errors import (
    DeletionFailed,
    InvalidationFailed,
    NotFound,
    SigningFailed,
    StorageError,
    UploadFailed,
)
from .interfaces import CdnControlPlane, ObjectStore, UrlSigner
from .keys import KeyCodec, normalize_origin_path, path_matches_pattern
from .logging_config import configure_logging
from .models import (
    CacheBehaviorRef,
    ConfigurationDegraded,
    DegradedReason,
    DistributionDescriptor,
    FileUpload,
    OriginRef,
    ResolvedConfig,
    StoragePreferences,
    UploadResult,
    UploadStreamDescriptor,
)
from .resolution import S3_DOMAIN_SUFFIX, DistributionResolver

__version__ = "0.1.0"
__all__ = [
    "CacheBehaviorRef",
    "CdnControlPlane",
    "ConfigurationDegraded",
    "DegradedReason",
    "DeletionFailed",
    "DistributionDescriptor",
    "DistributionResolver",
    "FileUpload",
    "InvalidationFailed",
    "KeyCodec",
    "NotFound",
    "ObjectStore",
    "OriginRef",
    "ResolvedConfig",
    "S3_DOMAIN_SUFFIX",
    "SigningFailed",
    "StorageError",
    "StoragePreferences",
    "UploadFailed",
    "UploadResult",
    "UploadStreamDescriptor",
    "UrlSigner",
    "configure_logging",
    "normalize_origin_path",
    "path_matches_pattern",
]
