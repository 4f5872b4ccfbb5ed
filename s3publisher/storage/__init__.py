"""
S3 storage adapter.

Thin boto3 wrapper that turns credentials into sessions and sessions into
object uploads, translating boto3 errors into the publisher's own
StorageConnectionError / TransferError.
"""

from .s3 import S3Client, S3Session, describe_error

__all__ = ["S3Client", "S3Session", "describe_error"]
