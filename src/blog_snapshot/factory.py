"""Database adapter factory.

Resolves a connection URL from, in order:

1. An explicit profile name (``--profile`` on the CLI)
2. ``BLOG_DB_PROFILE`` naming a profile in ``blog_snapshot.toml``
3. ``DATABASE_URL``
4. The ``DB_USER``/``DB_HOST``/``DB_NAME``/``DB_PASSWORD``/``DB_PORT`` variables

and builds a fresh ``AsyncPostgresAdapter``.  There is no cached adapter:
the caller owns the handle and must ``await adapter.close()``.
"""

import logging
from urllib.parse import quote

from blog_snapshot.adapters.postgres import AsyncPostgresAdapter
from blog_snapshot.config.loader import EnvSettings, load_config
from blog_snapshot.config.models import AppConfig, DatabaseProfile

logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no usable database configuration is found."""

    pass


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with ``[YOUR-PASSWORD]`` replaced by the
        URL-encoded ``db_password``
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def resolve_database_url(
    profile_name: str | None = None,
    config: AppConfig | None = None,
    env: EnvSettings | None = None,
) -> str:
    """Pick the connection URL according to the resolution order above.

    Raises:
        ProfileNotFoundError: If the named profile doesn't exist or nothing
            is configured.
    """
    env = env or EnvSettings()
    profile_name = profile_name or env.db_profile

    if profile_name:
        config = config or load_config()
        if profile_name not in config.profiles:
            available = ", ".join(config.profiles.keys()) or "none"
            raise ProfileNotFoundError(
                f"Profile '{profile_name}' not found. Available: {available}"
            )
        logger.debug(f"Using database profile '{profile_name}'")
        return resolve_url(config.profiles[profile_name])

    if env.database_url:
        return env.database_url

    try:
        return env.url_from_parts()
    except ValueError as e:
        raise ProfileNotFoundError(
            "No database configuration found.\n"
            "Either:\n"
            "  1. Set BLOG_DB_PROFILE to a profile in blog_snapshot.toml\n"
            "  2. Set DATABASE_URL\n"
            f"  3. Set DB_USER, DB_HOST, DB_NAME, DB_PASSWORD, DB_PORT ({e})"
        ) from e


def get_adapter(
    profile_name: str | None = None,
    config: AppConfig | None = None,
    env: EnvSettings | None = None,
) -> AsyncPostgresAdapter:
    """Create a database adapter for the resolved connection URL.

    Example:
        >>> adapter = get_adapter("local")
        >>> doc = await export_snapshot(adapter)
        >>> await adapter.close()
    """
    return AsyncPostgresAdapter(resolve_database_url(profile_name, config, env))
