"""Tests for the interactive credential check."""

from s3publisher.exceptions import StorageConnectionError
from s3publisher.profiles import CredentialCheck, check_credentials
from tests.helpers import RecordingS3Client, client_error


class TestCheckCredentials:
    """Test check_credentials function."""

    def test_valid_credentials(self):
        client = RecordingS3Client()

        result = check_credentials("release", "AKIA1", "secret", client=client)

        assert result == CredentialCheck(ok=True)
        client.boto.list_buckets.assert_called_once()
        assert client.logouts == 1

    def test_blank_name_is_ok_without_contacting_s3(self):
        client = RecordingS3Client()

        assert check_credentials(None, "AKIA1", "secret", client=client).ok
        assert check_credentials("   ", "AKIA1", "secret", client=client).ok
        assert client.logins == 0

    def test_rejected_credentials(self):
        client = RecordingS3Client()
        client.boto.list_buckets.side_effect = client_error("InvalidAccessKeyId", "ListBuckets")

        result = check_credentials("release", "AKIA1", "wrong", client=client)

        assert result.ok is False
        assert result.message.startswith("Can't connect to S3 service:")
        assert "InvalidAccessKeyId" in result.message
        assert client.logouts == 1

    def test_login_failure(self):
        client = RecordingS3Client()
        client.login_error = StorageConnectionError("endpoint unreachable")

        result = check_credentials("release", "AKIA1", "secret", client=client)

        assert result.ok is False
        assert "endpoint unreachable" in result.message

    def test_missing_secret_key(self):
        result = check_credentials("release", "AKIA1", None)

        assert result.ok is False
        assert "both required" in result.message
