"""Tests for configuration loader and validator."""

from pathlib import Path

import pytest
import yaml

from s3publisher.profiles import Profile, ProfileRegistry
from s3publisher.publisher import PublishEntry
from s3publisher.utils.config_loader import (
    ConfigError,
    ConfigValidationError,
    get_config_examples,
    load_config,
    load_profiles,
    load_step_config,
    save_profiles,
    validate_config,
)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_yaml(self, tmp_path: Path):
        config_file = tmp_path / "publish.yaml"
        config_file.write_text(
            """
version: "1.0"
kind: publish
entries:
  - sourceFile: out/*.zip
    bucket: releases
"""
        )

        config = load_config(config_file)
        assert config["kind"] == "publish"
        assert len(config["entries"]) == 1

    def test_load_nonexistent_file(self):
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent.yaml")

    def test_load_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        with pytest.raises(ValueError, match="empty"):
            load_config(config_file)

    def test_load_non_mapping(self, tmp_path: Path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config(config_file)

    def test_load_invalid_yaml(self, tmp_path: Path):
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text('version: "1.0"\nkind: [unclosed bracket\n')

        with pytest.raises(yaml.YAMLError):
            load_config(config_file)

    def test_load_directory(self, tmp_path: Path):
        with pytest.raises(ValueError, match="not a file"):
            load_config(tmp_path)


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_publish_config(self):
        config = {
            "version": "1.0",
            "kind": "publish",
            "profileName": "release",
            "entries": [{"sourceFile": "out/*.zip", "bucket": "releases"}],
        }
        assert validate_config(config) == []

    def test_valid_profiles_config(self):
        config = {
            "version": "1.0",
            "kind": "profiles",
            "profiles": [{"name": "ci", "accessKey": "AKIA1", "secretKey": "s"}],
        }
        assert validate_config(config) == []

    def test_empty_profile_list_is_valid(self):
        assert validate_config({"version": "1.0", "kind": "profiles", "profiles": []}) == []

    def test_missing_version_and_kind(self):
        fields = [error.field for error in validate_config({})]
        assert fields == ["version", "kind"]

    def test_unsupported_version(self):
        errors = validate_config({"version": "2.0", "kind": "publish", "entries": []})
        assert errors[0].field == "version"
        assert errors[0].value == "2.0"

    def test_invalid_kind(self):
        errors = validate_config({"version": "1.0", "kind": "deploy"})
        assert [error.field for error in errors] == ["kind"]

    def test_publish_entries_required(self):
        errors = validate_config({"version": "1.0", "kind": "publish"})
        assert [error.field for error in errors] == ["entries"]

    def test_publish_entry_fields_required(self):
        config = {
            "version": "1.0",
            "kind": "publish",
            "entries": [{"sourceFile": "a/*"}, {"bucket": " "}, "not-a-mapping"],
        }
        fields = [error.field for error in validate_config(config)]
        assert fields == [
            "entries[0].bucket",
            "entries[1].sourceFile",
            "entries[1].bucket",
            "entries[2]",
        ]

    def test_profile_fields_and_duplicates(self):
        config = {
            "version": "1.0",
            "kind": "profiles",
            "profiles": [
                {"name": "ci", "accessKey": "a", "secretKey": "s"},
                {"name": "ci", "accessKey": "a"},
            ],
        }
        fields = [error.field for error in validate_config(config)]
        assert fields == ["profiles[1].secretKey", "profiles[1].name"]

    def test_config_error_str(self):
        assert str(ConfigError("kind", "Invalid", "x")) == "kind: Invalid (got: x)"
        assert str(ConfigError("kind", "Missing")) == "kind: Missing"


class TestProfilesFiles:
    """Tests for loading and saving profile lists."""

    def test_save_then_load(self, tmp_path: Path):
        path = tmp_path / "profiles.yaml"
        registry = ProfileRegistry([Profile("ci", "AKIA1", "s1"), Profile("prod", "AKIA2", "s2")])

        save_profiles(path, registry)
        loaded = load_profiles(path)

        assert loaded.names() == ["ci", "prod"]
        assert loaded.resolve("prod").secret_key == "s2"
        assert not (tmp_path / "profiles.yaml.tmp").exists()

    def test_load_profiles_rejects_wrong_kind(self, tmp_path: Path):
        path = tmp_path / "profiles.yaml"
        path.write_text('version: "1.0"\nkind: publish\nentries: []\n')

        with pytest.raises(ConfigValidationError, match="Expected a 'profiles' document"):
            load_profiles(path)

    def test_load_profiles_reports_all_errors(self, tmp_path: Path):
        path = tmp_path / "profiles.yaml"
        path.write_text('version: "1.0"\nkind: profiles\nprofiles:\n  - name: ci\n')

        with pytest.raises(ConfigValidationError) as excinfo:
            load_profiles(path)

        assert [e.field for e in excinfo.value.errors] == [
            "profiles[0].accessKey",
            "profiles[0].secretKey",
        ]


class TestStepConfigFiles:
    """Tests for loading publish step files."""

    def test_load_step_config(self, tmp_path: Path):
        path = tmp_path / "publish.yaml"
        path.write_text(get_config_examples()["publish"])

        step = load_step_config(path)

        assert step.profile_name == "release"
        assert step.entries == (
            PublishEntry("out/*.zip", "releases-${BRANCH}"),
            PublishEntry("${OUT_DIR}/**/*.log", "build-logs"),
        )

    def test_examples_are_valid(self):
        for text in get_config_examples().values():
            assert validate_config(yaml.safe_load(text)) == []
