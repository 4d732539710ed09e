"""
Download URL signing: S3 presigned GET URLs and CloudFront canned-policy URLs.

CloudFront URLs are signed with the distribution's trusted key pair (RSA, SHA-1
PKCS#1 v1.5, as required by CloudFront) using botocore's CloudFrontSigner.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from botocore.signers import CloudFrontSigner
from cdn_storage_shared import SigningFailed
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


def _rsa_signer(private_key_pem: str):
    """Return a callable that signs a message with the PEM private key."""
    pem = private_key_pem.encode("utf-8") if isinstance(private_key_pem, str) else private_key_pem
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError) as e:
        raise SigningFailed(f"CloudFront private key could not be loaded: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningFailed("CloudFront private key must be an RSA key")

    def sign(message: bytes) -> bytes:
        return key.sign(message, padding.PKCS1v15(), hashes.SHA1())

    return sign


class AwsUrlSigner:
    """UrlSigner implementation backed by an S3 client and CloudFront key pairs."""

    def __init__(self, s3_client: Any) -> None:
        self._s3_client = s3_client

    def sign_object_store(self, bucket: str, key: str, *, expires_in: int) -> str:
        """Return a presigned GET URL for the given bucket and key."""
        return self._s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=int(expires_in),
        )

    def sign_cdn(
        self,
        url: str,
        *,
        key_pair_id: str,
        private_key: str,
        expires_at: datetime,
    ) -> str:
        """Return a canned-policy signed URL valid until expires_at."""
        if not key_pair_id or not private_key:
            raise SigningFailed("CloudFront key pair id and private key are required to sign URLs")
        signer = CloudFrontSigner(key_pair_id, _rsa_signer(private_key))
        return signer.generate_presigned_url(url, date_less_than=expires_at)
