"""
S3 Storage Backend
==================

Object storage on Amazon S3 or S3-compatible services (MinIO, etc.).

Requirements:
    pip install stowage[s3]
    # or
    pip install boto3

Usage:
    from stowage.backends.s3_backend import S3Storage

    # Amazon S3
    store = S3Storage(bucket="my-bucket", prefix="objects/v1")

    # MinIO
    store = S3Storage(
        bucket="local-objects",
        endpoint_url="http://minio.internal:9000",
        access_key="minioadmin",
        secret_key="minioadmin",
        use_ssl=False,
    )

    store.write("report.json", body, StorageOptions(ttl=3600))

S3 offers no hierarchical listing consumed here, so this backend supports
read, write and remove only.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ..config import StorageOptions
from ..error_handling import (
    NotFoundError,
    handle_missing_dependency,
    log_storage_performance,
)
from .base import StorageBackend

logger = logging.getLogger(__name__)


# Check for boto3 availability
try:
    import boto3
    from botocore.exceptions import ClientError

    BOTO3_AVAILABLE = True
except ImportError:
    BOTO3_AVAILABLE = False
    boto3 = None
    ClientError = None

NO_SUCH_KEY_CODES = ("NoSuchKey", "404")


def _is_no_such_key(error: "ClientError") -> bool:
    error_code = error.response.get("Error", {}).get("Code", "")
    return error_code in NO_SUCH_KEY_CODES


class S3Storage(StorageBackend):
    """
    S3-compatible storage backend.

    ``NoSuchKey`` on read or remove raises ``NotFoundError``; every other
    ``ClientError`` propagates unchanged.

    Attributes:
        bucket: S3 bucket name
        prefix: Optional prefix (folder) for all objects
        region: AWS region (default: us-east-1)
        endpoint_url: Custom endpoint URL for S3-compatible services (MinIO)
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        use_ssl: bool = True,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        client: Any = None,
        **kwargs,
    ):
        """
        Initialize S3 storage backend.

        Args:
            bucket: S3 bucket name
            prefix: Optional key prefix (e.g., "objects/v1/")
            region: AWS region (default: us-east-1)
            endpoint_url: Custom endpoint for S3-compatible services (MinIO)
            use_ssl: Use HTTPS (default: True)
            access_key: AWS access key (optional, falls back to credential chain)
            secret_key: AWS secret key (optional, falls back to credential chain)
            client: Existing boto3 S3 client to use instead of creating one
            **kwargs: Additional boto3 client options
        """
        self.bucket = bucket
        self.prefix = (
            prefix.rstrip("/") + "/" if prefix and not prefix.endswith("/") else prefix
        )
        self.region = region
        self.endpoint_url = endpoint_url

        if client is not None:
            self._client = client
        else:
            if not BOTO3_AVAILABLE:
                handle_missing_dependency("boto3", "S3 storage")

            client_kwargs = {
                "region_name": region,
                "use_ssl": use_ssl,
            }

            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url

            # Only add credentials if explicitly provided
            # Otherwise boto3 will use its credential chain
            if access_key and secret_key:
                client_kwargs["aws_access_key_id"] = access_key
                client_kwargs["aws_secret_access_key"] = secret_key

            client_kwargs.update(kwargs)
            self._client = boto3.client("s3", **client_kwargs)

        logger.debug(
            f"S3Storage initialized: bucket={bucket}, prefix={self.prefix}, "
            f"region={region}, endpoint={endpoint_url}"
        )

    def _get_s3_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @log_storage_performance
    def write(
        self, key: str, data: bytes, options: Optional[StorageOptions] = None
    ) -> None:
        """
        Upload an object, setting ``Expires`` when ``options.ttl`` is non-zero.
        """
        put_kwargs = {
            "Bucket": self.bucket,
            "Key": self._get_s3_key(key),
            "Body": data,
        }

        if options is not None and options.ttl > 0:
            put_kwargs["Expires"] = datetime.now(timezone.utc) + timedelta(
                seconds=options.ttl
            )

        self._client.put_object(**put_kwargs)
        logger.debug(
            f"Wrote {key} ({len(data)} bytes) to s3://{self.bucket}/{put_kwargs['Key']}"
        )

    @log_storage_performance
    def read(self, key: str) -> bytes:
        """Download an object."""
        s3_key = self._get_s3_key(key)

        try:
            response = self._client.get_object(Bucket=self.bucket, Key=s3_key)
        except ClientError as e:
            if _is_no_such_key(e):
                raise NotFoundError(key, {"s3_key": s3_key}) from e
            raise

        return response["Body"].read()

    @log_storage_performance
    def remove(self, key: str) -> None:
        """Delete an object."""
        s3_key = self._get_s3_key(key)

        try:
            self._client.delete_object(Bucket=self.bucket, Key=s3_key)
        except ClientError as e:
            if _is_no_such_key(e):
                raise NotFoundError(key, {"s3_key": s3_key}) from e
            raise

        logger.debug(f"Deleted s3://{self.bucket}/{s3_key}")
