"""Configuration loading: TOML profiles file and environment settings."""

import tomllib
from pathlib import Path
from urllib.parse import quote

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from blog_snapshot.config.models import AppConfig

DEFAULT_CONFIG_FILE = "blog_snapshot.toml"


class EnvSettings(BaseSettings):
    """Environment-driven connection settings.

    ``BLOG_DB_PROFILE`` selects a profile from the TOML file.  Without one,
    ``DATABASE_URL`` is used directly, and failing that a URL is assembled
    from the ``DB_USER``/``DB_HOST``/``DB_NAME``/``DB_PASSWORD``/``DB_PORT``
    variables of a classic deployment.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    db_profile: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BLOG_DB_PROFILE", "DB_PROFILE"),
    )
    database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BLOG_DATABASE_URL", "DATABASE_URL"),
    )
    db_user: str | None = Field(default=None, validation_alias="DB_USER")
    db_host: str | None = Field(default=None, validation_alias="DB_HOST")
    db_name: str | None = Field(default=None, validation_alias="DB_NAME")
    db_password: str | None = Field(default=None, validation_alias="DB_PASSWORD")
    db_port: str | None = Field(default=None, validation_alias="DB_PORT")

    def missing_parts(self) -> list[str]:
        """Names of the ``DB_*`` variables that are not set."""
        parts = {
            "DB_USER": self.db_user,
            "DB_HOST": self.db_host,
            "DB_NAME": self.db_name,
            "DB_PASSWORD": self.db_password,
            "DB_PORT": self.db_port,
        }
        return [name for name, value in parts.items() if not value]

    def url_from_parts(self) -> str:
        """Assemble a PostgreSQL URL from the ``DB_*`` variables.

        Raises:
            ValueError: Naming every missing variable.
        """
        missing = self.missing_parts()
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return (
            f"postgresql://{quote(self.db_user, safe='')}:"
            f"{quote(self.db_password, safe='')}@"
            f"{self.db_host}:{self.db_port}/{self.db_name}"
        )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load profiles and snapshot settings from a TOML file.

    Args:
        config_path: Path to the config file.  When ``None``, looks for
            ``blog_snapshot.toml`` in the current directory and falls back
            to built-in defaults if it doesn't exist.

    Returns:
        AppConfig with all profiles and snapshot settings.

    Raises:
        FileNotFoundError: If an explicitly given file doesn't exist.
        ValueError: If the file is not valid TOML or has invalid values.
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not config_path.exists():
            return AppConfig()
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        return AppConfig(
            profiles=data.get("profiles", {}),
            snapshot=data.get("snapshot", {}),
        )
    except ValidationError as e:
        raise ValueError(f"Invalid config in {config_path}: {e}") from e
