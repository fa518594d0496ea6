"""
Configuration Loader - YAML Loading with Validation.

A config file holds the base settings plus optional named profiles that
override them, e.g. a short refresh window for fast-moving dashboards::

    cache:
      refresh_window_minutes: 15
    profiles:
      live:
        cache:
          refresh_window_minutes: 5

Profiles are deep-merged over the base before validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from relative_range_cache.config.models import RangeCacheConfig
from relative_range_cache.errors import ConfigError

PROFILES_KEY = "profiles"


def merge_settings(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge ``overlay`` into a copy of ``base``; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_settings(current, value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Reads cache configuration files and validates them."""

    def __init__(self, base_path: Optional[Path] = None) -> None:
        """
        Args:
            base_path: Directory that relative config paths are resolved against
        """
        self._base_path = base_path or Path(".")

    def load(
        self,
        config_path: Union[str, Path],
        profile: Optional[str] = None,
    ) -> RangeCacheConfig:
        """
        Load a config file, applying one of its profiles if requested.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigError: If the file is not a mapping or the profile is unknown
            ValidationError: If the resulting settings are invalid
        """
        path = Path(config_path)
        if not path.is_absolute():
            path = self._base_path / path

        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        return self.load_from_dict(raw, profile, source=str(path))

    def load_from_dict(
        self,
        raw: Mapping[str, Any],
        profile: Optional[str] = None,
        source: str = "<dict>",
    ) -> RangeCacheConfig:
        """Validate already-parsed settings, applying a profile if requested."""
        settings = dict(raw)
        profiles = settings.pop(PROFILES_KEY, None) or {}
        if not isinstance(profiles, dict):
            raise ConfigError(f"'{PROFILES_KEY}' in {source} must be a mapping")

        if profile is not None:
            overlay = profiles.get(profile)
            if not isinstance(overlay, dict):
                known = ", ".join(sorted(profiles)) or "none"
                raise ConfigError(
                    f"Unknown profile {profile!r} in {source} (available: {known})"
                )
            settings = merge_settings(settings, overlay)

        return RangeCacheConfig.model_validate(settings)


def load_config(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
) -> RangeCacheConfig:
    """Convenience wrapper around ``ConfigLoader.load``."""
    return ConfigLoader(base_path=base_path).load(config_path, profile)
