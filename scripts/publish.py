#!/usr/bin/env python3
"""
Publish build artifacts to S3 buckets.

CLI wrapper around the publish step for build pipelines that call it as a
command after the build has finished.

Usage:
    python scripts/publish.py --config publish.yaml --workspace .
    python scripts/publish.py -c publish.yaml -w build/ --result UNSTABLE
    python scripts/publish.py -c publish.yaml -e BRANCH=main -e BUILD_ID=42
    python scripts/publish.py -c publish.yaml --profiles /etc/ci/s3-profiles.yaml
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from s3publisher.build import Build, BuildLog, Result  # noqa: E402
from s3publisher.exceptions import StorageConnectionError  # noqa: E402
from s3publisher.profiles import ProfileRegistry  # noqa: E402
from s3publisher.publisher import PublishStatus, S3BucketPublisher  # noqa: E402
from s3publisher.utils.config import get_settings  # noqa: E402
from s3publisher.utils.config_loader import (  # noqa: E402
    ConfigValidationError,
    load_profiles,
    load_step_config,
)
from s3publisher.utils.logging import get_logger, setup_logging  # noqa: E402
from s3publisher.utils.metrics import start_metrics_server  # noqa: E402
from s3publisher.workspace import Workspace  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Publish build artifacts to S3 buckets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Publish using the step file and the profiles from S3_PROFILES_FILE
  %(prog)s -c publish.yaml

  # Resolve patterns against another directory
  %(prog)s -c publish.yaml -w build/

  # Provide build variables for ${VAR} expansion
  %(prog)s -c publish.yaml -e BRANCH=main -e BUILD_ID=42

  # Pretend the build already failed (nothing is uploaded)
  %(prog)s -c publish.yaml --result FAILURE

  # Exit non-zero when the build ends up UNSTABLE
  %(prog)s -c publish.yaml --strict
        """,
    )

    parser.add_argument(
        "-c",
        "--config",
        required=True,
        help="Publish step YAML file (kind: publish)",
    )

    parser.add_argument(
        "-p",
        "--profiles",
        help="Profiles YAML file (default: S3_PROFILES_FILE or profiles.yaml)",
    )

    parser.add_argument(
        "--profile",
        help="Profile name, overrides profileName from the step file",
    )

    parser.add_argument(
        "-w",
        "--workspace",
        default=".",
        help="Workspace directory patterns are resolved against (default: .)",
    )

    parser.add_argument(
        "-r",
        "--result",
        default="SUCCESS",
        help="Current build result: SUCCESS, UNSTABLE or FAILURE (default: SUCCESS)",
    )

    parser.add_argument(
        "-e",
        "--env",
        action="append",
        help="Build variable KEY=VALUE (can specify multiple times)",
    )

    parser.add_argument(
        "--no-os-env",
        action="store_true",
        help="Do not expose the process environment as build variables",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when the build result ends up UNSTABLE",
    )

    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while publishing",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(argv)


def parse_env(env_args: List[str]) -> Dict[str, str]:
    """Parse KEY=VALUE arguments into a dictionary."""
    env: Dict[str, str] = {}
    for item in env_args:
        if "=" not in item:
            logger.warning(f"Invalid variable format (use KEY=VALUE): {item}")
            continue
        key, value = item.split("=", 1)
        env[key.strip()] = value
    return env


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for publish CLI."""
    args = parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        return 1
    setup_logging(level="DEBUG" if args.verbose else settings.log_level)

    try:
        result = Result.parse(args.result)
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    profiles_path = Path(args.profiles or settings.profiles_file)
    try:
        if args.profiles is None and not profiles_path.exists():
            # Nothing configured yet; the publish step reports it as UNSTABLE
            logger.warning(f"Profiles file not found: {profiles_path}")
            registry = ProfileRegistry()
        else:
            registry = load_profiles(profiles_path, client=settings.make_client())
        step = load_step_config(args.config)
    except (FileNotFoundError, ConfigValidationError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        return 1

    env_vars: Dict[str, str] = {} if args.no_os_env else dict(os.environ)
    env_vars.update(parse_env(args.env or []))

    publisher = S3BucketPublisher.from_config(registry, step)
    if args.profile:
        publisher.profile_name = args.profile

    build = Build(result=result, workspace=Workspace(args.workspace), env_vars=env_vars)

    if args.metrics_port:
        start_metrics_server(port=args.metrics_port)

    try:
        report = publisher.perform(build, BuildLog(sys.stdout))
    except StorageConnectionError as e:
        logger.error(f"Publish step failed: {e}")
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⚠️  Publish cancelled by user")
        return 130

    print("\n📊 Publish Summary:")
    print(f"  Status: {report.status.value}")
    if report.status in (PublishStatus.COMPLETED, PublishStatus.ABORTED):
        print(f"  ✅ Uploaded: {report.uploaded_count} file(s), {report.uploaded_bytes:,} bytes")
        for pattern in report.unmatched_patterns:
            print(f"  ⚠️  No match: {pattern}")
    print(f"  Build result: {build.result.value}")

    if args.strict and build.result is Result.UNSTABLE:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
