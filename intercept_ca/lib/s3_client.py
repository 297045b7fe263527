"""S3 client for publishing the root CA certificate to clients."""

import boto3
from mypy_boto3_s3 import S3Client as S3ClientType


class S3Client:
    """S3 client for root CA certificate distribution."""

    def __init__(self, region: str = "eu-west-2") -> None:
        """Initialize S3 client.

        Args:
            region: AWS region for S3 client
        """
        self.client: S3ClientType = boto3.client("s3", region_name=region)

    def upload_root_ca_cert(
        self, bucket_name: str, certificate_pem: bytes, key: str = "root-ca.pem"
    ) -> str:
        """Upload root CA certificate PEM to S3 bucket.

        Args:
            bucket_name: S3 bucket name
            certificate_pem: Root CA certificate in PEM format
            key: S3 object key (default: root-ca.pem)

        Returns:
            S3 version ID if versioning enabled, empty string otherwise

        Raises:
            ClientError: If upload fails
        """
        response = self.client.put_object(
            Bucket=bucket_name,
            Key=key,
            Body=certificate_pem,
            ContentType="application/x-pem-file",
        )
        return response.get("VersionId", "")
