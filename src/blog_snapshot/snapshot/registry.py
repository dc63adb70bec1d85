"""Declarative registry of the collections a snapshot carries.

Each collection is one ``CollectionDef`` entry naming its merge policy,
record model, and keys.  The exporter and importer iterate this registry
instead of branching on collection names.

Usage:
    from blog_snapshot.snapshot.registry import COLLECTIONS, MergePolicy

    posts = COLLECTIONS["posts"]
    assert posts.policy is MergePolicy.UPSERT
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from blog_snapshot.snapshot.models import (
    LinkRecord,
    PostRecord,
    SettingsRecord,
    SnapshotRecord,
    SubscriberRecord,
    UserRecord,
)


class MergePolicy(str, Enum):
    """How an import merges a collection into the store."""

    READ_ONLY = "read_only"                 # exported, never touched by import
    UPSERT = "upsert"                       # insert, update in place on key collision
    INSERT_IGNORE = "insert_ignore"         # insert, first write wins on key collision
    INSERT = "insert"                       # plain insert, duplicates allowed
    SINGLETON_UPDATE = "singleton_update"   # update the reserved row only


class CollectionDef(BaseModel):
    """Definition of one snapshot collection."""

    model_config = ConfigDict(frozen=True)

    name: str                                   # table name
    policy: MergePolicy
    record_model: type[SnapshotRecord]
    pk: str = "id"                              # primary key, export ordering
    conflict_key: str | None = None             # unique column for UPSERT / INSERT_IGNORE
    update_fields: tuple[str, ...] = ()         # overwritten on UPSERT collision
    columns: tuple[str, ...] = ()               # columns the store must have

    @property
    def importable(self) -> bool:
        """Whether import clears and repopulates this collection."""
        return self.policy is not MergePolicy.READ_ONLY


USERS = CollectionDef(
    name="users",
    policy=MergePolicy.READ_ONLY,
    record_model=UserRecord,
    conflict_key="username",
    columns=("id", "username", "password", "display_name", "created_at"),
)

POSTS = CollectionDef(
    name="posts",
    policy=MergePolicy.UPSERT,
    record_model=PostRecord,
    conflict_key="slug",
    # slug and created_at are never rewritten on collision
    update_fields=("subject", "message", "view_count", "pinned", "updated_at"),
    columns=(
        "id", "subject", "message", "slug", "author_id",
        "view_count", "pinned", "created_at", "updated_at",
    ),
)

SUBSCRIBERS = CollectionDef(
    name="subscribers",
    policy=MergePolicy.INSERT_IGNORE,
    record_model=SubscriberRecord,
    conflict_key="email",
    columns=("id", "email", "ip_address", "created_at"),
)

LINKS = CollectionDef(
    name="links",
    policy=MergePolicy.INSERT,
    record_model=LinkRecord,
    columns=("id", "title", "url", "created_at"),
)

SETTINGS = CollectionDef(
    name="settings",
    policy=MergePolicy.SINGLETON_UPDATE,
    record_model=SettingsRecord,
    update_fields=("site_title", "footer_text", "site_description"),
    columns=("id", "site_title", "footer_text", "site_description", "updated_at"),
)

# Export order; import skips READ_ONLY entries
COLLECTIONS: dict[str, CollectionDef] = {
    c.name: c for c in (USERS, POSTS, SUBSCRIBERS, LINKS, SETTINGS)
}


def importable_collections() -> list[CollectionDef]:
    """Collections an import writes to, in application order."""
    return [c for c in COLLECTIONS.values() if c.importable]


def expected_columns() -> dict[str, set[str]]:
    """Table name -> column names the store must provide."""
    return {c.name: set(c.columns) for c in COLLECTIONS.values()}
