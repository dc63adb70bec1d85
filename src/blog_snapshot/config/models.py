"""Pydantic models for database profiles and snapshot settings."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from blog_snapshot.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution


class SettingsDefaults(BaseModel):
    """Values written to the settings row when a snapshot leaves a field empty."""

    site_title: str = "My Blog"
    footer_text: str = "Building the future, one commit at a time."
    site_description: str = "No expectations, just building weird stuff for fun."


class SnapshotSettings(BaseModel):
    """Tunables for export and import."""

    version: str = "1.0.0"
    supported_major: int = 1
    default_owner_id: int = 1       # bootstrap administrator
    settings_row_id: int = 1        # reserved singleton settings row
    filename_prefix: str = "blog_backup"
    max_file_bytes: int = 50 * 1024 * 1024
    settings_defaults: SettingsDefaults = Field(default_factory=SettingsDefaults)


class AppConfig(BaseModel):
    """Complete configuration from blog_snapshot.toml."""

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
