"""AWS implementations of the cdn-storage collaborator interfaces."""

from .cloudfront import CloudFrontControlPlane, descriptor_from_distribution, encode_uri
from .s3_storage import S3ObjectStore
from .url_signer import AwsUrlSigner

__all__ = [
    "AwsUrlSigner",
    "CloudFrontControlPlane",
    "S3ObjectStore",
    "descriptor_from_distribution",
    "encode_uri",
]
