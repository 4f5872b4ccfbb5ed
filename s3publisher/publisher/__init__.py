"""
S3 bucket publisher (post-build step).

Resolves configured file patterns against a build's workspace, expands
build variables, and uploads every match to its bucket with one profile's
session. Upload problems mark the build UNSTABLE instead of failing it.
"""

from .publisher import (
    DISPLAY_NAME,
    SHORT_NAME,
    PublishEntry,
    PublishReport,
    PublishStatus,
    PublishStepConfig,
    S3BucketPublisher,
    UploadResult,
    UploadStatus,
)

__all__ = [
    "DISPLAY_NAME",
    "SHORT_NAME",
    "PublishEntry",
    "PublishReport",
    "PublishStatus",
    "PublishStepConfig",
    "S3BucketPublisher",
    "UploadResult",
    "UploadStatus",
]
