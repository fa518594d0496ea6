"""
Unit Tests for ConfigLoader.

Test Aspects Covered:
    ✅ Business Logic: Config loading, defaults and profile merging
    ✅ Error Handling: Invalid values, missing files, non-mapping YAML
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from relative_range_cache.caching.relative_range_cache import RelativeRangeCache
from relative_range_cache.config.loader import ConfigLoader, load_config, merge_settings
from relative_range_cache.config.models import RangeCacheConfig
from relative_range_cache.errors import ConfigError


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    def test_loads_sample_config(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Sample YAML configuration file
        EXPECTED: RangeCacheConfig with the file's values
        """
        # Act
        config = load_config(sample_config_path)

        # Assert
        assert isinstance(config, RangeCacheConfig)
        assert config.cache.refresh_window == timedelta(minutes=15)
        assert config.eviction.max_entries == 500
        assert config.eviction.ttl_seconds == 3600
        assert config.logging.use_json is False

    def test_applies_defaults(self) -> None:
        """
        SCENARIO: Minimal config with only the version
        EXPECTED: Caching enabled, unbounded, never expiring
        """
        # Arrange
        loader = ConfigLoader()

        # Act
        config = loader.load_from_dict({"version": "1.0"})

        # Assert
        assert config.cache.enabled is True
        assert config.cache.refresh_window_minutes == 15
        assert config.cache.time_field_name == "time"
        assert config.eviction.max_entries is None
        assert config.eviction.ttl_seconds is None

    def test_validates_invalid_config(self, tmp_path: Path) -> None:
        """
        SCENARIO: Refresh window below one minute
        EXPECTED: ValidationError raised
        """
        # Arrange
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("cache:\n  refresh_window_minutes: 0\n")
        loader = ConfigLoader(base_path=tmp_path)

        # Act & Assert
        with pytest.raises(ValidationError):
            loader.load("invalid.yaml")

    def test_rejects_non_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- cache\n- eviction\n")
        loader = ConfigLoader(base_path=tmp_path)

        with pytest.raises(ConfigError):
            loader.load("list.yaml")

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "empty.yaml").write_text("")

        config = ConfigLoader(base_path=tmp_path).load("empty.yaml")

        assert config == RangeCacheConfig()

    def test_file_not_found(self, tmp_path: Path) -> None:
        loader = ConfigLoader(base_path=tmp_path)

        with pytest.raises(FileNotFoundError):
            loader.load("nonexistent.yaml")

    def test_applies_profile(self, tmp_path: Path) -> None:
        """
        SCENARIO: Base config plus an inline profile overriding one setting
        EXPECTED: Profile value wins, other values kept
        """
        # Arrange
        (tmp_path / "config.yaml").write_text(
            "cache:\n"
            "  refresh_window_minutes: 15\n"
            "  log_access: true\n"
            "profiles:\n"
            "  dashboard:\n"
            "    cache:\n"
            "      refresh_window_minutes: 5\n"
        )

        # Act
        config = ConfigLoader(base_path=tmp_path).load("config.yaml", profile="dashboard")

        # Assert
        assert config.cache.refresh_window_minutes == 5
        assert config.cache.log_access is True

    def test_sample_config_live_profile(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Shipped sample config loaded with its "live" profile
        EXPECTED: Shorter refresh window and smaller store, other values kept
        """
        # Act
        config = load_config(sample_config_path, profile="live")

        # Assert
        assert config.cache.refresh_window == timedelta(minutes=5)
        assert config.eviction.max_entries == 100
        assert config.eviction.ttl_seconds == 3600
        assert config.logging.level == "DEBUG"

    def test_profiles_ignored_without_selection(self, sample_config_path: Path) -> None:
        config = load_config(sample_config_path)

        assert config.cache.refresh_window_minutes == 15
        assert config.eviction.max_entries == 500

    def test_missing_profile(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("version: '1.0'\n")

        with pytest.raises(ConfigError, match="missing"):
            ConfigLoader(base_path=tmp_path).load("config.yaml", profile="missing")

    def test_rejects_non_mapping_profiles(self) -> None:
        with pytest.raises(ConfigError):
            ConfigLoader().load_from_dict({"profiles": ["live"]})

    def test_merge_settings(self) -> None:
        # Arrange
        base = {"cache": {"enabled": True, "refresh_window_minutes": 15}}
        overlay = {"cache": {"refresh_window_minutes": 30}}

        # Act
        merged = merge_settings(base, overlay)

        # Assert
        assert merged["cache"]["enabled"] is True
        assert merged["cache"]["refresh_window_minutes"] == 30
        assert base["cache"]["refresh_window_minutes"] == 15


class TestCacheFromConfig:
    """Building a cache from a loaded config."""

    def test_eviction_settings_reach_store(self, sample_config_path: Path) -> None:
        config = load_config(sample_config_path)

        cache = RelativeRangeCache.from_config(config)

        assert cache.cache.config.max_entries == 500
        assert cache.cache.config.default_ttl_seconds == 3600
        assert cache.settings.refresh_window == timedelta(minutes=15)
