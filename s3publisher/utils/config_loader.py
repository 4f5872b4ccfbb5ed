"""
Configuration loader and validator for publisher files.

Two YAML documents are supported, told apart by their ``kind`` field.

Profiles file (persisted profile list, replaced wholesale on save):
    ```yaml
    version: "1.0"
    kind: profiles
    profiles:
      - name: release
        accessKey: AKIAEXAMPLE
        secretKey: wJalrXUtnFEMI/K7MDENG
    ```

Publish step file (one build step):
    ```yaml
    version: "1.0"
    kind: publish
    profileName: release
    entries:
      - sourceFile: out/*.zip
        bucket: releases-${BRANCH}
    ```

Usage:
    >>> config = load_config("publish.yaml")
    >>> errors = validate_config(config)
    >>> if not errors:
    ...     step = PublishStepConfig.from_dict(config)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from s3publisher.profiles.registry import ProfileRegistry
from s3publisher.publisher.publisher import PublishStepConfig
from s3publisher.storage.s3 import S3Client
from s3publisher.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


# Supported config versions
SUPPORTED_VERSIONS = ["1.0"]

# Valid document kinds
VALID_KINDS = ["profiles", "publish"]


@dataclass
class ConfigError:
    """Validation error in configuration file."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


class ConfigValidationError(ValueError):
    """Raised by the load_* helpers when a file fails validation."""

    def __init__(self, path: Path, errors: List[ConfigError]) -> None:
        self.path = path
        self.errors = errors
        details = "; ".join(str(error) for error in errors)
        super().__init__(f"Invalid configuration in {path}: {details}")


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing parsed configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is empty or not a mapping
        yaml.YAMLError: If YAML is malformed
    """
    path = Path(config_path)
    logger.info(f"Loading configuration from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Configuration path is not a file: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise

    if config is None:
        raise ValueError("Configuration file is empty")
    if not isinstance(config, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(config).__name__}")

    logger.info(f"Configuration loaded: {config.get('kind', 'unknown')}")
    return config


def validate_config(config: Dict[str, Any]) -> List[ConfigError]:
    """
    Validate configuration against expected schema.

    Args:
        config: Configuration dictionary to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[ConfigError] = []

    if "version" not in config:
        errors.append(ConfigError("version", "Missing required field"))
    elif str(config["version"]) not in SUPPORTED_VERSIONS:
        errors.append(
            ConfigError(
                "version",
                f"Unsupported version (supported: {SUPPORTED_VERSIONS})",
                config["version"],
            )
        )

    kind = config.get("kind")
    if kind is None:
        errors.append(ConfigError("kind", "Missing required field"))
    elif kind not in VALID_KINDS:
        errors.append(ConfigError("kind", f"Invalid kind (valid: {VALID_KINDS})", kind))
    elif kind == "profiles":
        errors.extend(_validate_profiles(config))
    else:
        errors.extend(_validate_publish(config))

    if errors:
        logger.warning(f"Configuration validation failed with {len(errors)} errors")

    return errors


def _validate_profiles(config: Dict[str, Any]) -> List[ConfigError]:
    """Validate a profiles document."""
    errors: List[ConfigError] = []

    # An empty profile list is valid
    profiles = config.get("profiles") or []
    if not isinstance(profiles, list):
        return [ConfigError("profiles", "Must be a list", type(profiles).__name__)]

    seen = set()
    for i, profile in enumerate(profiles):
        prefix = f"profiles[{i}]"
        if not isinstance(profile, dict):
            errors.append(ConfigError(prefix, "Must be a mapping", type(profile).__name__))
            continue

        for field in ["name", "accessKey", "secretKey"]:
            value = profile.get(field)
            if value is None or str(value).strip() == "":
                errors.append(ConfigError(f"{prefix}.{field}", "Missing required field"))

        name = profile.get("name")
        if name:
            if name in seen:
                errors.append(ConfigError(f"{prefix}.name", "Duplicate profile name", name))
            seen.add(name)

    return errors


def _validate_publish(config: Dict[str, Any]) -> List[ConfigError]:
    """Validate a publish step document."""
    errors: List[ConfigError] = []

    profile_name = config.get("profileName")
    if profile_name is not None and not isinstance(profile_name, str):
        errors.append(
            ConfigError("profileName", "Must be a string", type(profile_name).__name__)
        )

    entries = config.get("entries")
    if entries is None:
        return errors + [ConfigError("entries", "Missing required field for publish")]
    if not isinstance(entries, list):
        return errors + [ConfigError("entries", "Must be a list", type(entries).__name__)]

    for i, entry in enumerate(entries):
        prefix = f"entries[{i}]"
        if not isinstance(entry, dict):
            errors.append(ConfigError(prefix, "Must be a mapping", type(entry).__name__))
            continue
        for field in ["sourceFile", "bucket"]:
            value = entry.get(field)
            if value is None or str(value).strip() == "":
                errors.append(ConfigError(f"{prefix}.{field}", "Missing required field"))

    return errors


def _load_validated(path: Union[str, Path], kind: str) -> Dict[str, Any]:
    config = load_config(path)
    errors = validate_config(config)
    if not errors and config.get("kind") != kind:
        errors.append(ConfigError("kind", f"Expected a '{kind}' document", config.get("kind")))
    if errors:
        raise ConfigValidationError(Path(path), errors)
    return config


@log_function_call
def load_profiles(path: Union[str, Path], client: Optional[S3Client] = None) -> ProfileRegistry:
    """
    Load a profiles file into a new registry.

    Raises:
        ConfigValidationError: If the file fails validation
    """
    config = _load_validated(path, "profiles")
    return ProfileRegistry.from_config(config.get("profiles") or [], client=client)


@log_function_call
def save_profiles(path: Union[str, Path], registry: ProfileRegistry) -> None:
    """Write the registry's current profiles, replacing the whole file."""
    document = {"version": "1.0", "kind": "profiles", "profiles": registry.to_config()}
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        yaml.safe_dump(document, f, sort_keys=False)
    tmp.replace(target)
    logger.info(f"Saved {len(registry)} profile(s) to {target}")


@log_function_call
def load_step_config(path: Union[str, Path]) -> PublishStepConfig:
    """
    Load a publish step file.

    Raises:
        ConfigValidationError: If the file fails validation
    """
    config = _load_validated(path, "publish")
    return PublishStepConfig.from_dict(config)


def get_config_examples() -> Dict[str, str]:
    """Example configuration templates, keyed by kind."""
    return {
        "profiles": """version: "1.0"
kind: profiles

profiles:
  - name: release
    accessKey: AKIAEXAMPLE
    secretKey: change-me
""",
        "publish": """version: "1.0"
kind: publish

profileName: release
entries:
  - sourceFile: out/*.zip
    bucket: releases-${BRANCH}

  - sourceFile: "${OUT_DIR}/**/*.log"
    bucket: build-logs
""",
    }
