"""Storage service for S3 buckets optionally fronted by CloudFront."""

from .config import S3UploadOptions, StorageSettings, bootstrap_env, get_settings
from .config_cache import ConfigurationCache
from .factory import storage_service_from_env, storage_service_from_settings
from .service import StorageService

__all__ = [
    "ConfigurationCache",
    "S3UploadOptions",
    "StorageService",
    "StorageSettings",
    "bootstrap_env",
    "get_settings",
    "storage_service_from_env",
    "storage_service_from_settings",
]
