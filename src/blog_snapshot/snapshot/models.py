"""Snapshot document, typed collection records, and result models.

Records are deliberately lenient: every field is optional so that the
store's own constraints (NOT NULL, UNIQUE) decide what a missing value
means.  Type coercion failures, on the other hand, are format problems and
surface before the store is touched.

Usage:
    from blog_snapshot.snapshot.models import SnapshotDocument, PostRecord

    doc = SnapshotDocument(timestamp="2026-01-01T00:00:00+00:00", tables={})
    post = PostRecord.model_validate({"subject": "Hi", "slug": "hi"})
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blog_snapshot.errors import CollectionReadError


# ============================================================================
# Snapshot Document
# ============================================================================


class SnapshotDocument(BaseModel):
    """Self-contained snapshot of every collection."""

    timestamp: str
    version: str = "1.0.0"
    tables: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)

    def counts(self) -> dict[str, int]:
        """Row count per collection."""
        return {name: len(rows) for name, rows in self.tables.items()}


# ============================================================================
# Collection Records
# ============================================================================


class SnapshotRecord(BaseModel):
    """Base for one row of a collection as carried in a snapshot."""

    model_config = ConfigDict(extra="ignore")

    id: Any = None

    @field_validator("created_at", "updated_at", mode="after", check_fields=False)
    @classmethod
    def _naive_utc(cls, value: datetime | None) -> datetime | None:
        # Store columns are TIMESTAMP WITHOUT TIME ZONE
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class UserRecord(SnapshotRecord):
    username: str | None = None
    display_name: str | None = None
    created_at: datetime | None = None


class PostRecord(SnapshotRecord):
    subject: str | None = None
    message: str | None = None
    slug: str | None = None
    author_id: int | None = None
    view_count: int | None = None
    pinned: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SubscriberRecord(SnapshotRecord):
    email: str | None = None
    ip_address: str | None = None
    created_at: datetime | None = None


class LinkRecord(SnapshotRecord):
    title: str | None = None
    url: str | None = None
    created_at: datetime | None = None


class SettingsRecord(SnapshotRecord):
    site_title: str | None = None
    footer_text: str | None = None
    site_description: str | None = None


# ============================================================================
# Results
# ============================================================================


class CollectionRead(BaseModel):
    """Outcome of reading one collection during export.

    Either ok (``rows`` holds the data) or degraded (``rows`` is empty and
    ``cause`` says why).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    rows: list[dict[str, Any]] = Field(default_factory=list)
    cause: CollectionReadError | None = None

    @property
    def degraded(self) -> bool:
        return self.cause is not None

    @classmethod
    def ok(cls, name: str, rows: list[dict[str, Any]]) -> "CollectionRead":
        return cls(name=name, rows=rows)

    @classmethod
    def failed(cls, name: str, cause: CollectionReadError) -> "CollectionRead":
        return cls(name=name, rows=[], cause=cause)


class ImportResult(BaseModel):
    """Statistics of a successful import."""

    stats: dict[str, int]
    timestamp: datetime

    @property
    def total(self) -> int:
        """Total records processed across collections."""
        return sum(self.stats.values())
