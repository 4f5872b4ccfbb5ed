"""
Amazon S3 client adapter.

Wraps boto3 so the rest of the publisher deals only in sessions, buckets
and local files, and in the publisher's own error types:

- client creation / credential failures -> StorageConnectionError
- anything going wrong while putting one object -> TransferError

Works against AWS S3 and S3-compatible services (MinIO) via endpoint_url.

Example usage:
    >>> client = S3Client(region="eu-west-1")
    >>> session = client.login("AKIA...", "secret")
    >>> session.put_file("artifacts", "app.zip", Path("out/app.zip"))
    >>> session.close()
"""

import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3publisher.exceptions import StorageConnectionError, TransferError
from s3publisher.utils.logging import get_logger
from s3publisher.utils.metrics import get_metrics

logger = get_logger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def describe_error(error: Exception) -> str:
    """Short, log-friendly description of a boto3 error."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        code = details.get("Code", "Unknown")
        message = details.get("Message", str(error))
        return f"{code}: {message}"
    return str(error)


class S3Session:
    """
    Authenticated connection to S3 for one publish step.

    Not thread-safe and never shared between builds. Invalid after close().
    """

    def __init__(self, client: BaseClient, access_key: str) -> None:
        self._client: Optional[BaseClient] = client
        # Only the key id is kept, for log messages
        self.access_key = access_key

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"S3Session(access_key={self.access_key!r}, {state})"

    @property
    def closed(self) -> bool:
        return self._client is None

    def _require_client(self) -> BaseClient:
        if self._client is None:
            raise StorageConnectionError("S3 session is already logged out")
        return self._client

    def list_buckets(self) -> List[str]:
        """
        List the bucket names visible to these credentials.

        Raises:
            StorageConnectionError: If the service rejects the request
        """
        client = self._require_client()
        metrics = get_metrics()
        try:
            with metrics.track_s3_call("list_buckets"):
                response = client.list_buckets()
        except (BotoCoreError, ClientError) as e:
            metrics.record_s3_error("list_buckets", type(e).__name__)
            raise StorageConnectionError(describe_error(e)) from e
        return [bucket["Name"] for bucket in response.get("Buckets", [])]

    def put_file(
        self,
        bucket: str,
        key: str,
        local_path: Path,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Upload one local file as ``s3://bucket/key``.

        Args:
            bucket: Target bucket name
            key: Object key
            local_path: File to read
            metadata: Optional user metadata (x-amz-meta-*)

        Raises:
            TransferError: On local I/O errors or S3 protocol errors
        """
        client = self._require_client()
        metrics = get_metrics()

        content_type, _ = mimetypes.guess_type(local_path.name)
        extra_args: Dict[str, Any] = {"ContentType": content_type or DEFAULT_CONTENT_TYPE}
        if metadata:
            extra_args["Metadata"] = dict(metadata)

        logger.debug(f"PutObject s3://{bucket}/{key} <- {local_path}")
        try:
            with open(local_path, "rb") as body, metrics.track_s3_call("put_object"):
                client.put_object(Bucket=bucket, Key=key, Body=body, **extra_args)
        except (BotoCoreError, ClientError) as e:
            metrics.record_s3_error("put_object", type(e).__name__)
            raise TransferError(
                f"Failed to upload {local_path} to s3://{bucket}/{key}: {describe_error(e)}",
                bucket=bucket,
                key=key,
            ) from e
        except OSError as e:
            raise TransferError(
                f"Failed to read {local_path}: {e}", bucket=bucket, key=key
            ) from e

    def close(self) -> None:
        """Release the underlying HTTP connection pool. Idempotent."""
        client, self._client = self._client, None
        if client is not None:
            client.close()


class S3Client:
    """
    Factory for S3 sessions.

    Attributes:
        endpoint_url: Custom endpoint for S3-compatible services (None = AWS)
        region: Region used for request signing
        connect_timeout: Socket connect timeout in seconds
        read_timeout: Socket read timeout in seconds
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        region: str = DEFAULT_REGION,
        connect_timeout: float = 60.0,
        read_timeout: float = 60.0,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.region = region
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

    def login(self, access_key: str, secret_key: str) -> S3Session:
        """
        Create a session authenticated with the given key pair.

        Args:
            access_key: AWS access key id
            secret_key: AWS secret access key

        Returns:
            Open S3Session

        Raises:
            StorageConnectionError: If the key pair is incomplete or the
                client cannot be created for the configured endpoint
        """
        if not access_key or not secret_key:
            raise StorageConnectionError("Access key and secret key are both required")

        config = Config(
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            signature_version="s3v4",
            # Uploads are never retried by the publisher
            retries={"max_attempts": 1, "mode": "standard"},
        )
        try:
            session = boto3.session.Session(
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=self.region,
            )
            client = session.client("s3", endpoint_url=self.endpoint_url, config=config)
        except (BotoCoreError, ValueError) as e:
            raise StorageConnectionError(describe_error(e)) from e

        logger.info(f"Opened S3 session for access key {access_key}")
        return S3Session(client, access_key)


__all__ = ["S3Client", "S3Session", "describe_error", "DEFAULT_REGION"]
