"""
Post-build step that publishes workspace files to S3 buckets.

For every configured entry the source pattern and bucket expression are
expanded against the build's environment, the pattern is resolved against
the workspace, and each matching file is uploaded under one profile's
session.

Failure policy:
    - build already FAILURE     -> nothing happens
    - no profile resolvable     -> build UNSTABLE, step returns normally
    - login fails               -> StorageConnectionError raised to the caller
    - pattern matches nothing   -> logged with a diagnostic, nothing else
    - an upload fails           -> build UNSTABLE, remaining files and
                                   entries skipped, session still released

Example usage:
    >>> registry = ProfileRegistry([Profile("ci", "AKIA...", "secret")])
    >>> publisher = S3BucketPublisher(
    ...     registry,
    ...     entries=[PublishEntry("out/*.zip", "releases-${BRANCH}")],
    ... )
    >>> build = Build(Result.SUCCESS, Workspace("."), {"BRANCH": "main"})
    >>> report = publisher.perform(build, BuildLog())
    >>> report.uploaded_count
    2
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from s3publisher.build import Build, BuildLog, Result
from s3publisher.exceptions import StorageConnectionError
from s3publisher.profiles.profile import Profile
from s3publisher.profiles.registry import ProfileRegistry
from s3publisher.storage.s3 import S3Session
from s3publisher.utils.logging import build_context, get_logger
from s3publisher.utils.macros import replace_macro
from s3publisher.utils.metrics import get_metrics

logger = get_logger(__name__)

# Prefix of every line this step writes to the build log
SHORT_NAME = "[S3] "
DISPLAY_NAME = "Publish artifacts to S3 Bucket"


@dataclass(frozen=True)
class PublishEntry:
    """
    One (source pattern, target bucket) pair.

    Attributes:
        source_file: Ant pattern relative to the workspace, may contain macros
        bucket: Bucket name, may contain macros
    """

    source_file: str
    bucket: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PublishEntry":
        return cls(source_file=str(data.get("sourceFile") or ""), bucket=str(data.get("bucket") or ""))

    def to_dict(self) -> dict:
        return {"sourceFile": self.source_file, "bucket": self.bucket}


@dataclass(frozen=True)
class PublishStepConfig:
    """
    Persisted configuration of one publish step.

    Attributes:
        profile_name: Profile to publish with (None = registry default)
        entries: Entries in the order they are processed
    """

    profile_name: Optional[str] = None
    entries: Tuple[PublishEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PublishStepConfig":
        return cls(
            profile_name=data.get("profileName") or None,
            entries=tuple(PublishEntry.from_dict(entry) for entry in data.get("entries") or []),
        )

    def to_dict(self) -> dict:
        return {
            "profileName": self.profile_name,
            "entries": [entry.to_dict() for entry in self.entries],
        }


class UploadStatus(str, Enum):
    UPLOADED = "uploaded"
    NOT_FOUND = "not_found"
    TRANSFER_ERROR = "transfer_error"


@dataclass
class UploadResult:
    """
    Outcome for one file (or, for NOT_FOUND, one pattern).

    Attributes:
        status: What happened
        source: Local file path, or the expanded pattern when nothing matched
        bucket: Expanded bucket name
        uri: s3:// URI when uploaded
        file_size_bytes: Size of the file read
        duration_seconds: Time spent on this file
        error_message: Why it failed, or the pattern diagnostic
    """

    status: UploadStatus
    source: str
    bucket: str
    uri: Optional[str] = None
    file_size_bytes: int = 0
    duration_seconds: float = 0.0
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status is UploadStatus.UPLOADED


class PublishStatus(str, Enum):
    SKIPPED = "skipped"
    NOT_CONFIGURED = "not_configured"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class PublishReport:
    """
    Summary of one perform() call.

    The build's own result carries the verdict; this is the detail.
    """

    status: PublishStatus
    profile_name: Optional[str] = None
    results: List[UploadResult] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def uploaded_count(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def uploaded_bytes(self) -> int:
        return sum(result.file_size_bytes for result in self.results if result.success)

    @property
    def unmatched_patterns(self) -> List[str]:
        return [r.source for r in self.results if r.status is UploadStatus.NOT_FOUND]


class S3BucketPublisher:
    """
    Publishes build files to S3 after the build has run.

    Attributes:
        registry: Shared profile registry, read at perform() time
        profile_name: Profile to use (None = registry default)
        entries: Entries processed in order
    """

    def __init__(
        self,
        registry: ProfileRegistry,
        profile_name: Optional[str] = None,
        entries: Iterable[PublishEntry] = (),
    ) -> None:
        self.registry = registry
        self.profile_name = profile_name
        self.entries: List[PublishEntry] = list(entries)

    @classmethod
    def from_config(cls, registry: ProfileRegistry, config: PublishStepConfig) -> "S3BucketPublisher":
        return cls(registry, profile_name=config.profile_name, entries=config.entries)

    def to_config(self) -> PublishStepConfig:
        return PublishStepConfig(profile_name=self.profile_name, entries=tuple(self.entries))

    def get_profile(self) -> Optional[Profile]:
        return self.registry.resolve(self.profile_name)

    def perform(self, build: Build, log: BuildLog) -> PublishReport:
        """
        Run the publish step for ``build``.

        Args:
            build: Finished build; its result may be downgraded to UNSTABLE
            log: Build log for user-facing messages

        Returns:
            PublishReport describing what was done

        Raises:
            StorageConnectionError: If the profile cannot log in to S3
        """
        with build_context(build.tag):
            return self._perform(build, log)

    def _perform(self, build: Build, log: BuildLog) -> PublishReport:
        metrics = get_metrics()
        if build.result is Result.FAILURE:
            logger.info("Build failed, not publishing to S3")
            metrics.record_publish(PublishStatus.SKIPPED.value)
            return PublishReport(status=PublishStatus.SKIPPED)

        profile = self.get_profile()
        if profile is None:
            self._log(log, "No S3 profile is configured.")
            build.set_result(Result.UNSTABLE)
            metrics.record_publish(PublishStatus.NOT_CONFIGURED.value)
            return PublishReport(status=PublishStatus.NOT_CONFIGURED)

        self._log(log, f"Using S3 profile: {profile.name}")
        try:
            session = profile.login()
        except StorageConnectionError as e:
            metrics.record_publish("error")
            raise StorageConnectionError(f"Can't connect to S3 service: {e}") from e

        report = PublishReport(status=PublishStatus.COMPLETED, profile_name=profile.name)
        try:
            self._publish_entries(profile, session, build, log, report)
        except OSError as e:
            log.error("Failed to upload files", e)
            logger.error(f"S3 publish aborted: {e}", exc_info=True)
            build.set_result(Result.UNSTABLE)
            report.status = PublishStatus.ABORTED
            report.error_message = str(e)
        finally:
            profile.logout(session)

        metrics.record_publish(report.status.value)
        logger.info(
            f"S3 publish {report.status.value}: {report.uploaded_count} file(s), "
            f"{report.uploaded_bytes} bytes"
        )
        return report

    def _publish_entries(
        self,
        profile: Profile,
        session: S3Session,
        build: Build,
        log: BuildLog,
        report: PublishReport,
    ) -> None:
        metrics = get_metrics()
        env = build.env_vars

        for entry in self.entries:
            expanded = replace_macro(entry.source_file, env)
            paths = build.workspace.list(expanded)
            bucket = replace_macro(entry.bucket, env)

            if not paths:
                self._log(log, f"No file(s) found: {expanded}")
                error = build.workspace.validate_ant_file_mask(expanded)
                if error is not None:
                    self._log(log, error)
                report.results.append(
                    UploadResult(
                        status=UploadStatus.NOT_FOUND,
                        source=expanded,
                        bucket=bucket,
                        error_message=error,
                    )
                )
                metrics.record_upload_not_found()

            for src in paths:
                self._log(log, f"bucket={bucket}, file={src.name}")
                self._upload_one(profile, session, bucket, src, env, log, report)

    def _upload_one(
        self,
        profile: Profile,
        session: S3Session,
        bucket: str,
        src: Path,
        env: Mapping[str, str],
        log: BuildLog,
        report: PublishReport,
    ) -> None:
        """Upload one file and record it; a failure is recorded, then re-raised."""
        metrics = get_metrics()
        start_time = time.time()
        try:
            size = src.stat().st_size
            with metrics.track_upload():
                uri = profile.upload(session, bucket, src, env, log)
        except OSError as e:
            metrics.record_upload_failure()
            report.results.append(
                UploadResult(
                    status=UploadStatus.TRANSFER_ERROR,
                    source=str(src),
                    bucket=bucket,
                    duration_seconds=time.time() - start_time,
                    error_message=str(e),
                )
            )
            raise

        metrics.record_upload_success(bytes_uploaded=size)
        report.results.append(
            UploadResult(
                status=UploadStatus.UPLOADED,
                source=str(src),
                bucket=bucket,
                uri=uri,
                file_size_bytes=size,
                duration_seconds=time.time() - start_time,
            )
        )

    def _log(self, log: BuildLog, message: str) -> None:
        log.println(SHORT_NAME + message)
        logger.info(message)
