"""Shared fixtures for publisher tests."""

import io

import pytest

from s3publisher.build import BuildLog
from s3publisher.profiles import Profile, ProfileRegistry
from tests.helpers import RecordingS3Client


@pytest.fixture
def s3_client() -> RecordingS3Client:
    """S3 client that records calls instead of talking to AWS."""
    return RecordingS3Client()


@pytest.fixture
def registry(s3_client: RecordingS3Client) -> ProfileRegistry:
    return ProfileRegistry(
        [
            Profile("default", "AKIADEFAULT", "default-secret", client=s3_client),
            Profile("release", "AKIARELEASE", "release-secret", client=s3_client),
        ]
    )


@pytest.fixture
def build_log() -> BuildLog:
    return BuildLog(io.StringIO())
