"""blog-snapshot: backup and restore engine for the blog store.

Exports the store's collections (users, posts, subscribers, links,
settings) to a portable JSON snapshot and restores from one inside a single
atomic transaction with a per-collection merge policy.

Usage:
    from blog_snapshot import get_adapter, export_snapshot, import_snapshot
    from blog_snapshot import FormatError, StoreError

    adapter = get_adapter("local")
    doc = await export_snapshot(adapter)
    result = await import_snapshot(adapter, doc.model_dump(mode="json"))
    await adapter.close()
"""

__version__ = "0.1.0"

# Adapters
from blog_snapshot.adapters.base import DatabaseClient, DatabaseSession
from blog_snapshot.adapters.postgres import AsyncPostgresAdapter

# Config
from blog_snapshot.config.loader import EnvSettings, load_config
from blog_snapshot.config.models import AppConfig, DatabaseProfile, SnapshotSettings

# Errors
from blog_snapshot.errors import (
    CollectionReadError,
    FormatError,
    SnapshotError,
    StoreError,
    UnsupportedVersionError,
)

# Factory
from blog_snapshot.factory import ProfileNotFoundError, get_adapter, resolve_url

# Snapshot engine
from blog_snapshot.snapshot.exporter import export_snapshot
from blog_snapshot.snapshot.files import load_snapshot, write_snapshot
from blog_snapshot.snapshot.importer import import_snapshot, validate_snapshot
from blog_snapshot.snapshot.models import CollectionRead, ImportResult, SnapshotDocument

__all__ = [
    # Adapters
    "DatabaseClient",
    "DatabaseSession",
    "AsyncPostgresAdapter",
    # Config
    "load_config",
    "EnvSettings",
    "AppConfig",
    "DatabaseProfile",
    "SnapshotSettings",
    # Errors
    "SnapshotError",
    "FormatError",
    "UnsupportedVersionError",
    "CollectionReadError",
    "StoreError",
    # Factory
    "get_adapter",
    "resolve_url",
    "ProfileNotFoundError",
    # Snapshot engine
    "export_snapshot",
    "import_snapshot",
    "validate_snapshot",
    "load_snapshot",
    "write_snapshot",
    "SnapshotDocument",
    "CollectionRead",
    "ImportResult",
]
