"""
S3 Bucket Publisher

Publishes build-produced files to Amazon S3 buckets as a post-build step.

This package provides:
- publisher: the publish step (pattern resolution, upload, result policy)
- profiles: named S3 credentials, the shared registry, credential checks
- storage: boto3 session/upload adapter
- utils: logging, configuration, macro expansion and metrics
"""

__version__ = "0.1.0"

# Package-level imports
from s3publisher.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging()
