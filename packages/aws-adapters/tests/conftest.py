"""Pytest fixtures for aws-adapters tests (moto-backed AWS resources)."""

import os

import pytest
from moto import mock_aws

S3_CLOUDFRONT_ORIGIN_DOMAIN = "media.s3.amazonaws.com"


@pytest.fixture(scope="function")
def aws_credentials():
    """Set fake AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def moto_aws(aws_credentials):
    """Enable moto mock for S3 and CloudFront."""
    with mock_aws():
        yield


@pytest.fixture
def s3_bucket(moto_aws):
    """Create the media bucket."""
    import boto3

    client = boto3.client("s3", region_name="us-east-1")
    client.create_bucket(Bucket="media")
    return "media"


@pytest.fixture
def distribution_id(moto_aws):
    """Create a CloudFront distribution with one S3 origin and return its id."""
    import boto3

    client = boto3.client("cloudfront", region_name="us-east-1")
    resp = client.create_distribution(
        DistributionConfig={
            "CallerReference": "test-distribution",
            "Origins": {
                "Quantity": 1,
                "Items": [
                    {
                        "Id": "s3-media",
                        "DomainName": S3_CLOUDFRONT_ORIGIN_DOMAIN,
                        "S3OriginConfig": {"OriginAccessIdentity": ""},
                    }
                ],
            },
            "DefaultCacheBehavior": {
                "TargetOriginId": "s3-media",
                "ViewerProtocolPolicy": "allow-all",
            },
            "Comment": "media distribution",
            "Enabled": False,
        }
    )
    return resp["Distribution"]["Id"]


@pytest.fixture(scope="session")
def rsa_private_key_pem() -> str:
    """A throwaway RSA key in PEM form, as used for CloudFront key pairs."""
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    ).decode("ascii")
