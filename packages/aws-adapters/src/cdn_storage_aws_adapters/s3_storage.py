"""S3 implementation of ObjectStore."""

from typing import Any, BinaryIO

import boto3
from botocore.exceptions import ClientError

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")

# upload_fileobj: part size for streamed bodies of unknown length
MULTIPART_CHUNK_SIZE = 8 * 1024 * 1024  # 8 MB


class S3ObjectStore:
    """ObjectStore implementation using S3."""

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
            "s3",
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    @property
    def client(self) -> Any:
        return self._client

    def put(
        self,
        bucket: str,
        key: str,
        body: bytes | BinaryIO,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Put bytes or a seekable file body at bucket/key; returns the PutObject response."""
        return self._client.put_object(Bucket=bucket, Key=key, Body=body, **(options or {}))

    def put_stream(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Upload a stream of unknown length (reads until EOF) via managed multipart transfer."""
        from boto3.s3.transfer import TransferConfig

        self._client.upload_fileobj(
            stream,
            bucket,
            key,
            ExtraArgs=dict(options or {}),
            Config=TransferConfig(multipart_chunksize=MULTIPART_CHUNK_SIZE),
        )
        return {"Bucket": bucket, "Key": key}

    def get(self, bucket: str, key: str) -> bytes | None:
        """Return the object body, or None if the object does not exist."""
        try:
            resp = self._client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if e.response["Error"]["Code"] in _NOT_FOUND_CODES:
                return None
            raise
        body = resp.get("Body")
        if body is None:
            return None
        return body.read()

    def delete(self, bucket: str, key: str) -> dict[str, Any] | None:
        """Delete bucket/key; returns the DeleteObject response."""
        return self._client.delete_object(Bucket=bucket, Key=key)

