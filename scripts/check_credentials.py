#!/usr/bin/env python3
"""
Check an S3 key pair before saving it as a profile.

Usage:
    python scripts/check_credentials.py --name release --access-key AKIA...
    S3_SECRET_KEY=... python scripts/check_credentials.py -n release -a AKIA...
    python scripts/check_credentials.py --profiles profiles.yaml --name release
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from s3publisher.profiles import check_credentials  # noqa: E402
from s3publisher.utils.config import get_settings  # noqa: E402
from s3publisher.utils.config_loader import ConfigValidationError, load_profiles  # noqa: E402
from s3publisher.utils.logging import get_logger  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Check S3 credentials by logging in and listing buckets",
    )
    parser.add_argument("-n", "--name", required=True, help="Profile name")
    parser.add_argument("-a", "--access-key", help="AWS access key id")
    parser.add_argument(
        "-s",
        "--secret-key",
        help="AWS secret access key (default: S3_SECRET_KEY environment variable)",
    )
    parser.add_argument(
        "-p",
        "--profiles",
        help="Check the named profile from this profiles YAML file instead",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the credential check CLI."""
    args = parse_args(argv)
    try:
        settings = get_settings()
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        return 1
    client = settings.make_client()

    access_key = args.access_key
    secret_key = args.secret_key or os.getenv("S3_SECRET_KEY")

    if args.profiles:
        try:
            registry = load_profiles(args.profiles, client=client)
        except (FileNotFoundError, ConfigValidationError, ValueError) as e:
            print(f"❌ Configuration error: {e}")
            return 1
        profile = registry.resolve(args.name)
        if profile is None:
            print(f"❌ No profile named '{args.name}' in {args.profiles}")
            return 1
        access_key, secret_key = profile.access_key, profile.secret_key

    result = check_credentials(args.name, access_key, secret_key, client=client)
    if result.ok:
        print(f"✅ Credentials for '{args.name}' are valid")
        return 0

    print(f"❌ {result.message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
