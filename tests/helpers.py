"""Test doubles shared by the test modules."""

from pathlib import Path
from typing import List, Optional, Tuple
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from s3publisher.build import BuildLog
from s3publisher.storage.s3 import S3Client, S3Session


class RecordingS3Client(S3Client):
    """S3Client whose sessions share one MagicMock boto3 client."""

    def __init__(self) -> None:
        super().__init__()
        self.boto = MagicMock()
        self.boto.list_buckets.return_value = {"Buckets": [{"Name": "artifacts"}]}
        self.login_error: Optional[Exception] = None
        self.logins = 0

    def login(self, access_key: str, secret_key: str) -> S3Session:
        if self.login_error is not None:
            raise self.login_error
        self.logins += 1
        return S3Session(self.boto, access_key)

    @property
    def logouts(self) -> int:
        return self.boto.close.call_count

    @property
    def uploaded(self) -> List[Tuple[str, str]]:
        return [
            (call.kwargs["Bucket"], call.kwargs["Key"])
            for call in self.boto.put_object.call_args_list
        ]


def client_error(code: str = "AccessDenied", operation: str = "PutObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} for test"}}, operation)


def log_text(log: BuildLog) -> str:
    return log.stream.getvalue()


def make_files(root: Path, *relative: str) -> List[Path]:
    """Create small files under root and return their paths."""
    paths = []
    for name in relative:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(f"contents of {name}".encode())
        paths.append(path)
    return paths
