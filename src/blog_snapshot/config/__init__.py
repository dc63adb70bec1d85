"""Configuration management: profiles, snapshot settings, TOML and env loading.

Usage:
    >>> from blog_snapshot.config import load_config, AppConfig, SnapshotSettings
"""

from blog_snapshot.config.loader import EnvSettings, load_config
from blog_snapshot.config.models import (
    AppConfig,
    DatabaseProfile,
    SettingsDefaults,
    SnapshotSettings,
)

__all__ = [
    "load_config",
    "EnvSettings",
    "AppConfig",
    "DatabaseProfile",
    "SettingsDefaults",
    "SnapshotSettings",
]
