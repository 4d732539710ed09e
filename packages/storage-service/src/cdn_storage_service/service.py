"""
Storage service: upload, delete, stream and sign downloads for objects in a
bucket optionally fronted by a CloudFront distribution.

Every operation first ensures the storage configuration is resolved (once per
process, see ConfigurationCache), derives keys and URLs through KeyCodec, and
calls the synchronous collaborators via asyncio.to_thread.

After a successful upload the object's viewer path is invalidated on the CDN
in a background task; invalidation failures are logged and never affect the
upload result. Deletes do not invalidate.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO

from cdn_storage_shared import (
    CdnControlPlane,
    DeletionFailed,
    DistributionResolver,
    FileUpload,
    KeyCodec,
    NotFound,
    ObjectStore,
    ResolvedConfig,
    SigningFailed,
    UploadFailed,
    UploadResult,
    UploadStreamDescriptor,
    UrlSigner,
)

from .config import StorageSettings
from .config_cache import ConfigurationCache

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_ACL = "public-read"
PRIVATE_ACL = "private"
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _iter_chunks(data: bytes, chunk_size: int = DOWNLOAD_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the buffered object once, in chunks."""
    for start in range(0, len(data), chunk_size):
        yield data[start : start + chunk_size]


def _log_stream_failure(key: str, future: asyncio.Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error("upload stream failed: key=%s (%s)", key, future.exception())


class StorageService:
    """File service over an ObjectStore, with optional CDN URLs, invalidation and signing."""

    def __init__(
        self,
        settings: StorageSettings,
        *,
        object_store: ObjectStore,
        url_signer: UrlSigner,
        control_plane: CdnControlPlane | None = None,
        config_cache: ConfigurationCache | None = None,
    ) -> None:
        self._settings = settings
        self._store = object_store
        self._signer = url_signer
        self._control_plane = control_plane
        self._config = config_cache or ConfigurationCache(
            DistributionResolver(scheme=settings.scheme, bucket=settings.s3_bucket),
            settings.preferences,
            control_plane=control_plane,
            distribution_id=settings.cloud_front_distribution_id,
        )
        self._background: set[asyncio.Task[None]] = set()

    @property
    def config_cache(self) -> ConfigurationCache:
        return self._config

    async def resolved_config(self) -> ResolvedConfig:
        return await self._config.ensure_resolved()

    async def _codec(self) -> KeyCodec:
        return KeyCodec(await self._config.ensure_resolved())

    def _put_options(self, is_protected: bool = False) -> dict[str, Any]:
        upload_options = self._settings.s3_upload_options
        options: dict[str, Any] = upload_options.as_put_params()
        options["ACL"] = PRIVATE_ACL if is_protected else (upload_options.acl or DEFAULT_PUBLIC_ACL)
        return options

    # --- uploads ---

    async def upload(self, file: FileUpload) -> UploadResult:
        """Upload a public file and return its URL."""
        return await self._upload_file(file)

    async def upload_protected(self, file: FileUpload) -> UploadResult:
        """Upload a file with a private ACL and return its URL."""
        return await self._upload_file(file, is_protected=True)

    async def _upload_file(self, file: FileUpload, is_protected: bool = False) -> UploadResult:
        codec = await self._codec()
        bucket = codec.config.bucket
        key = codec.key_from_logical_name(file.original_name)
        options = self._put_options(is_protected)
        result = await asyncio.to_thread(self._put_file, bucket, key, file.path, options)
        if not result:
            raise UploadFailed("File upload failed", key=key)
        logger.info("upload: bucket=%s key=%s protected=%s", bucket, key, is_protected)
        self._schedule_invalidation(codec.key_to_url(key, relative=True))
        return UploadResult(url=codec.key_to_url(key))

    def _put_file(
        self,
        bucket: str | None,
        key: str,
        path: str | None,
        options: dict[str, Any],
    ) -> dict[str, Any] | None:
        if path:
            with open(path, "rb") as f:
                return self._store.put(bucket, key, f, options)
        return self._store.put(bucket, key, b"", options)

    async def get_upload_stream_descriptor(self, name: str, ext: str) -> UploadStreamDescriptor:
        """
        Open a streamed upload for "{name}.{ext}".

        The backing write starts immediately in a worker thread and reads from a
        pipe until the caller closes write_stream; await promise for completion.
        """
        codec = await self._codec()
        key = codec.key_from_logical_name(f"{name}.{ext}")
        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, "rb")
        writer = os.fdopen(write_fd, "wb")
        loop = asyncio.get_running_loop()
        promise = loop.run_in_executor(
            None,
            functools.partial(
                self._put_stream, codec.config.bucket, key, reader, self._put_options()
            ),
        )
        promise.add_done_callback(functools.partial(_log_stream_failure, key))
        return UploadStreamDescriptor(
            write_stream=writer,
            promise=promise,
            url=codec.key_to_url(key),
            file_key=key,
        )

    def _put_stream(
        self,
        bucket: str | None,
        key: str,
        reader: BinaryIO,
        options: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            result = self._store.put_stream(bucket, key, reader, options)
        finally:
            reader.close()
        if not result:
            raise UploadFailed("File upload failed", key=key)
        logger.info("upload stream: bucket=%s key=%s done", bucket, key)
        return result

    # --- delete ---

    async def delete(self, file_key: str) -> None:
        """Delete the object at file_key. No CDN invalidation is issued."""
        config = await self._config.ensure_resolved()
        result = await asyncio.to_thread(self._store.delete, config.bucket, file_key)
        if not result:
            raise DeletionFailed("File deletion failed", key=file_key)
        logger.info("delete: bucket=%s key=%s", config.bucket, file_key)

    # --- downloads ---

    async def get_download_stream(self, file_key: str) -> Iterator[bytes]:
        """Buffer the object and return a single-pass iterator over its bytes."""
        config = await self._config.ensure_resolved()
        data = await asyncio.to_thread(self._store.get, config.bucket, file_key)
        if data is None:
            raise NotFound("File not found", key=file_key)
        return _iter_chunks(data)

    async def get_presigned_download_url(
        self,
        file_key: str,
        expires_in: int | None = None,
    ) -> str:
        """
        Return a time-boxed download URL for file_key.

        Without a CDN, or when the distribution could not be resolved: an S3
        presigned GET URL. With a CDN: a canned-policy CloudFront URL signed
        with the configured key pair. Either expires expires_in seconds
        (default download_url_duration, at least 1) from now.
        """
        codec = await self._codec()
        if expires_in is None:
            expires_in = self._settings.download_url_duration
        ttl = max(1, int(expires_in))
        if not self._settings.use_cdn or codec.config.cache_behavior is None:
            return await asyncio.to_thread(
                functools.partial(
                    self._signer.sign_object_store,
                    codec.config.bucket,
                    file_key,
                    expires_in=ttl,
                )
            )

        key_pair_id = self._settings.cloud_front_key_pair_id
        private_key = self._settings.cloud_front_key_private_key
        if not key_pair_id or not private_key:
            raise SigningFailed(
                "cloud_front_key_pair_id and cloud_front_key_private_key are required "
                "to sign CloudFront URLs",
                key=file_key,
            )
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
        return await asyncio.to_thread(
            functools.partial(
                self._signer.sign_cdn,
                codec.key_to_url(file_key),
                key_pair_id=key_pair_id,
                private_key=private_key,
                expires_at=expires_at,
            )
        )

    # --- invalidation ---

    def _schedule_invalidation(self, path: str) -> None:
        distribution_id = self._settings.cloud_front_distribution_id
        if not distribution_id or self._control_plane is None or not path:
            return
        task = asyncio.create_task(self._invalidate(distribution_id, path))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _invalidate(self, distribution_id: str, path: str) -> None:
        try:
            await asyncio.to_thread(self._control_plane.invalidate, distribution_id, [path])
        except Exception as e:
            logger.warning("Invalidation failed for path: %s (%s)", path, e)

    async def drain(self) -> None:
        """Wait for outstanding background invalidations."""
        if self._background:
            await asyncio.gather(*list(self._background))
