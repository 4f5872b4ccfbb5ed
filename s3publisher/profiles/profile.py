"""
Named S3 credential profiles and their session lifecycle.

A profile is an immutable (name, access key, secret key) triple. It is
shared by every build that publishes with it, so it never holds a session
itself: login() hands out a fresh S3Session that the caller owns until
logout().

Example usage:
    >>> profile = Profile("release", "AKIA...", "secret")
    >>> with profile.session() as session:
    ...     profile.upload(session, "artifacts-${BRANCH}", Path("out/app.zip"),
    ...                    {"BRANCH": "main"}, BuildLog())
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

from s3publisher.build import BuildLog
from s3publisher.exceptions import StorageConnectionError, TransferError
from s3publisher.storage.s3 import S3Client, S3Session
from s3publisher.utils.logging import get_logger
from s3publisher.utils.macros import replace_macro

logger = get_logger(__name__)


@dataclass(frozen=True)
class Profile:
    """
    Named S3 credentials.

    Attributes:
        name: Unique name within a registry
        access_key: AWS access key id
        secret_key: AWS secret access key (never logged)
        client: Factory used to open sessions
    """

    name: str
    access_key: str
    secret_key: str = field(repr=False)
    client: S3Client = field(default_factory=S3Client, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], client: Optional[S3Client] = None) -> "Profile":
        """
        Build a profile from its persisted form ``{name, accessKey, secretKey}``.

        Raises:
            ValueError: If ``name`` is missing or blank
        """
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Profile name is required")
        return cls(
            name=name,
            access_key=str(data.get("accessKey") or ""),
            secret_key=str(data.get("secretKey") or ""),
            client=client if client is not None else S3Client(),
        )

    def to_dict(self) -> Dict[str, str]:
        """Persisted form of this profile."""
        return {"name": self.name, "accessKey": self.access_key, "secretKey": self.secret_key}

    def login(self) -> S3Session:
        """
        Open an authenticated session with this profile's credentials.

        The credentials are verified with one ListBuckets call before the
        session is handed out; on failure the session is closed again.

        Raises:
            StorageConnectionError: If the service is unreachable or rejects
                the credentials
        """
        logger.info(f"Logging in to S3 with profile '{self.name}'")
        session = self.client.login(self.access_key, self.secret_key)
        try:
            self.check(session)
        except StorageConnectionError:
            session.close()
            raise
        return session

    def check(self, session: S3Session) -> None:
        """
        Verify the credentials with a cheap authenticated call.

        Raises:
            StorageConnectionError: If the service rejects the call
        """
        buckets = session.list_buckets()
        logger.info(f"Profile '{self.name}' can see {len(buckets)} bucket(s)")

    def logout(self, session: S3Session) -> None:
        """Release ``session``."""
        session.close()
        logger.info(f"Logged out of S3 profile '{self.name}'")

    @contextmanager
    def session(self) -> Iterator[S3Session]:
        """Scoped login: the session is released on every exit path."""
        session = self.login()
        try:
            yield session
        finally:
            self.logout(session)

    def upload(
        self,
        session: S3Session,
        bucket: str,
        file: Path,
        env: Mapping[str, str],
        log: BuildLog,
    ) -> str:
        """
        Upload ``file`` to ``bucket`` under the file's base name.

        Args:
            session: Session from this profile's login()
            bucket: Bucket expression, may contain ``${VAR}`` macros
            file: Local file to upload
            env: Build variables for macro expansion
            log: Build log for user-facing progress

        Returns:
            The object URI, ``s3://bucket/key``

        Raises:
            TransferError: If reading the file or the S3 request fails
        """
        bucket_name = replace_macro(bucket, env) or ""
        if not bucket_name.strip():
            raise TransferError(f"Bucket expression {bucket!r} expands to an empty name")

        key = file.name
        start_time = time.time()
        session.put_file(bucket_name, key, file)
        duration = time.time() - start_time

        uri = f"s3://{bucket_name}/{key}"
        log.println(f"Uploaded {file.name} to {uri}")
        logger.info(f"Upload successful: {uri} ({duration:.2f}s)")
        return uri


__all__ = ["Profile"]
