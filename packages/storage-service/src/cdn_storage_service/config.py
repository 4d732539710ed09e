"""
Storage options from keyword arguments or the environment, with defaults.
Uses pydantic-settings so all options are validated and documented in one model.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from cdn_storage_shared import StoragePreferences
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class S3UploadOptions(BaseModel):
    """Extra PutObject parameters applied to every upload (S3 API names)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    acl: str | None = Field(None, alias="ACL")
    cache_control: str | None = Field(None, alias="CacheControl")
    server_side_encryption: str | None = Field(None, alias="ServerSideEncryption")
    storage_class: str | None = Field(None, alias="StorageClass")

    def as_put_params(self) -> dict[str, str]:
        """Return set options keyed by their S3 parameter names (ACL excluded)."""
        params = self.model_dump(by_alias=True, exclude_none=True)
        params.pop("ACL", None)
        return params


class StorageSettings(BaseSettings):
    """
    All options of the storage service.
    Keyword arguments take precedence; otherwise env vars are read with the
    STORAGE_ prefix (e.g. STORAGE_S3_BUCKET, STORAGE_S3_UPLOAD_OPTIONS as JSON).
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=None,  # .env is loaded via bootstrap_env() so env is ready
        extra="ignore",
    )

    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    # Optional S3 endpoint override (e.g. LocalStack)
    endpoint_url: str | None = None

    s3_bucket: str | None = None
    s3_origin_path: str | None = None
    s3_upload_options: S3UploadOptions = Field(default_factory=S3UploadOptions)

    cloud_front_distribution_id: str | None = None
    cloud_front_cache_behavior_path_pattern: str | None = None
    cloud_front_key_pair_id: str | None = None
    cloud_front_key_private_key: str | None = None

    domain_name: str | None = None
    use_https: bool = False
    # Lifetime of presigned / signed download URLs
    download_url_duration: int = 3600

    @field_validator("download_url_duration", mode="before")
    @classmethod
    def parse_and_clamp_duration(cls, v: object) -> int:
        if isinstance(v, int):
            return max(1, v)
        if isinstance(v, str):
            try:
                return max(1, int(v))
            except ValueError:
                return 3600
        return 3600

    @property
    def scheme(self) -> str:
        return "https" if self.use_https else "http"

    @property
    def use_cdn(self) -> bool:
        return bool(self.cloud_front_distribution_id)

    @property
    def preferences(self) -> StoragePreferences:
        return StoragePreferences(
            domain_name=self.domain_name,
            origin_path=self.s3_origin_path,
            cache_behavior_pattern=self.cloud_front_cache_behavior_path_pattern,
        )

    def log_missing_required(self) -> list[str]:
        """Log (do not raise) each missing required option; return the messages."""
        problems: list[str] = []
        if not self.access_key_id or not self.secret_access_key:
            problems.append("You must provide an access key ID and a secret access key")
        if not self.region:
            problems.append("You must provide a region")
        if not self.s3_bucket and not self.cloud_front_distribution_id:
            problems.append(
                "You must provide either a S3 bucket name or a CloudFront distribution ID"
            )
        for message in problems:
            logger.error("%s", message)
        return problems


def get_settings(**options: Any) -> StorageSettings:
    """Return validated settings from options and the current environment."""
    return StorageSettings(**options)


def bootstrap_env() -> None:
    """
    Load .env from path in CDN_STORAGE_ENV_FILE if set.
    Call once at startup before using get_settings() so vars from the file are in os.environ.
    """
    import os

    import dotenv

    path = os.environ.get("CDN_STORAGE_ENV_FILE")
    if path:
        dotenv.load_dotenv(Path(path).resolve())
