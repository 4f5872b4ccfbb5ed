"""
Environment configuration loader for the S3 bucket publisher.

Loads settings from a .env file or environment variables: where S3 lives,
where the profile list is persisted, and logging defaults.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from dotenv import load_dotenv

from s3publisher.storage.s3 import DEFAULT_REGION, S3Client


@dataclass
class PublisherSettings:
    """Publisher environment configuration."""

    # S3 endpoint (None means AWS itself)
    endpoint_url: Optional[str] = None
    region: str = DEFAULT_REGION

    # Persisted profile list
    profiles_file: str = "profiles.yaml"

    # Network timeouts (seconds)
    connect_timeout: float = 60.0
    read_timeout: float = 60.0

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "PublisherSettings":
        """
        Load configuration from environment variables.

        Loads ``env_file`` (default: ``.env`` in the working directory) if
        present, then reads from os.environ. Variables already set in the
        environment win over the file.

        Returns:
            PublisherSettings instance with loaded values

        Raises:
            ValueError: If a numeric variable is not a number
        """
        env_path = env_file if env_file is not None else Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        return cls(
            endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
            region=os.getenv("S3_REGION", DEFAULT_REGION),
            profiles_file=os.getenv("S3_PROFILES_FILE", "profiles.yaml"),
            connect_timeout=_float_env("S3_CONNECT_TIMEOUT", 60.0),
            read_timeout=_float_env("S3_READ_TIMEOUT", 60.0),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def make_client(self) -> S3Client:
        """Build the S3 client factory these settings describe."""
        return S3Client(
            endpoint_url=self.endpoint_url,
            region=self.region,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


# Global settings instance (lazy-loaded)
_settings: Optional[PublisherSettings] = None


def get_settings() -> PublisherSettings:
    """
    Get or create publisher settings singleton.

    Example:
        >>> settings = get_settings()
        >>> print(settings.region)
        us-east-1
    """
    global _settings
    if _settings is None:
        _settings = PublisherSettings.from_env()
    return _settings
