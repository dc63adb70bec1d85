"""Snapshot export and import for the blog store.

Usage:
    from blog_snapshot.snapshot import export_snapshot, import_snapshot
    from blog_snapshot.snapshot import load_snapshot, write_snapshot
"""

from blog_snapshot.snapshot.exporter import export_snapshot, read_collection, read_collections
from blog_snapshot.snapshot.files import load_snapshot, snapshot_filename, write_snapshot
from blog_snapshot.snapshot.importer import (
    ValidatedSnapshot,
    apply_snapshot,
    import_snapshot,
    validate_snapshot,
)
from blog_snapshot.snapshot.models import (
    CollectionRead,
    ImportResult,
    LinkRecord,
    PostRecord,
    SettingsRecord,
    SnapshotDocument,
    SubscriberRecord,
    UserRecord,
)
from blog_snapshot.snapshot.registry import COLLECTIONS, CollectionDef, MergePolicy

__all__ = [
    "export_snapshot",
    "read_collection",
    "read_collections",
    "import_snapshot",
    "validate_snapshot",
    "apply_snapshot",
    "ValidatedSnapshot",
    "load_snapshot",
    "write_snapshot",
    "snapshot_filename",
    "SnapshotDocument",
    "CollectionRead",
    "ImportResult",
    "PostRecord",
    "SubscriberRecord",
    "LinkRecord",
    "SettingsRecord",
    "UserRecord",
    "COLLECTIONS",
    "CollectionDef",
    "MergePolicy",
]
