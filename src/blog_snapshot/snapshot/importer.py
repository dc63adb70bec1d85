"""Snapshot import.

Validates a snapshot document, then applies it to the store inside one
transaction: importable collections are cleared (the reserved settings row
excepted) and repopulated according to each collection's merge policy.
``users`` is never touched.

Usage:
    from blog_snapshot.snapshot.importer import import_snapshot

    try:
        result = await import_snapshot(adapter, data)
    except FormatError:
        ...  # invalid file, store untouched
    except StoreError:
        ...  # import failed, transaction rolled back
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError

from blog_snapshot.adapters.base import DatabaseClient, DatabaseSession
from blog_snapshot.config.models import SnapshotSettings
from blog_snapshot.errors import FormatError, StoreError, UnsupportedVersionError
from blog_snapshot.snapshot.models import (
    ImportResult,
    LinkRecord,
    PostRecord,
    SettingsRecord,
    SnapshotRecord,
    SubscriberRecord,
)
from blog_snapshot.snapshot.registry import (
    COLLECTIONS,
    LINKS,
    POSTS,
    SETTINGS,
    SUBSCRIBERS,
    CollectionDef,
    MergePolicy,
    importable_collections,
)

logger = logging.getLogger(__name__)


class ValidatedSnapshot(BaseModel):
    """Snapshot content that passed validation, as typed records.

    A collection missing from ``records`` was absent (or not a list) in the
    source document; its insert step is skipped.
    """

    version: str | None = None
    records: dict[str, list[SnapshotRecord]]


# ============================================================================
# Validation
# ============================================================================


def _check_version(version: Any, settings: SnapshotSettings) -> str | None:
    if version is None:
        return None
    if not isinstance(version, str):
        raise FormatError(f"Snapshot version must be a string, got {type(version).__name__}")
    major = version.split(".", 1)[0]
    if major != str(settings.supported_major):
        raise UnsupportedVersionError(version, settings.supported_major)
    return version


def _parse_records(collection: CollectionDef, rows: list) -> list[SnapshotRecord]:
    records: list[SnapshotRecord] = []
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise FormatError(
                f"{collection.name}[{index}] must be an object, got {type(row).__name__}"
            )
        try:
            records.append(collection.record_model.model_validate(dict(row)))
        except ValidationError as e:
            raise FormatError(f"{collection.name}[{index}] is invalid: {e}") from e
    return records


def validate_snapshot(
    data: Any, settings: SnapshotSettings | None = None
) -> ValidatedSnapshot:
    """Check the structure of a snapshot document and parse its records.

    Pure function: no store access.

    Args:
        data: Decoded snapshot document (usually ``json.load`` output).
        settings: Snapshot settings (``supported_major`` is used).

    Returns:
        ``ValidatedSnapshot`` with typed records per present collection.

    Raises:
        FormatError: If ``data`` or its ``tables`` field is not an object,
            or a record is malformed.
        UnsupportedVersionError: If the declared major version is unknown.
    """
    settings = settings or SnapshotSettings()

    if not isinstance(data, Mapping):
        raise FormatError("Invalid backup file format: document must be an object")
    tables = data.get("tables")
    if not isinstance(tables, Mapping):
        raise FormatError("Invalid backup file format: 'tables' must be an object")

    version = _check_version(data.get("version"), settings)

    records: dict[str, list[SnapshotRecord]] = {}
    for collection in importable_collections():
        rows = tables.get(collection.name)
        if rows is None:
            continue
        if not isinstance(rows, list):
            logger.warning(
                f"Skipping '{collection.name}': expected a list, got {type(rows).__name__}"
            )
            continue
        records[collection.name] = _parse_records(collection, rows)

    return ValidatedSnapshot(version=version, records=records)


# ============================================================================
# Apply
# ============================================================================


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _without_none(data: dict[str, Any], *fields: str) -> dict[str, Any]:
    """Drop ``fields`` whose value is None so the column default applies."""
    return {k: v for k, v in data.items() if not (k in fields and v is None)}


async def _clear(session: DatabaseSession, settings: SnapshotSettings) -> None:
    for collection in importable_collections():
        if collection.policy is MergePolicy.SINGLETON_UPDATE:
            await session.delete(
                collection.name, exclude={collection.pk: settings.settings_row_id}
            )
        else:
            await session.delete(collection.name)


async def _apply_posts(
    session: DatabaseSession, records: list[PostRecord], settings: SnapshotSettings
) -> int:
    count = 0
    for post in records:
        row = _without_none(
            {
                "subject": post.subject,
                "message": post.message,
                "slug": post.slug,
                "author_id": post.author_id or settings.default_owner_id,
                "view_count": post.view_count or 0,
                "pinned": post.pinned or False,
                "created_at": post.created_at,
                "updated_at": post.updated_at,
            },
            "created_at",
            "updated_at",
        )
        await session.upsert(
            POSTS.name,
            row,
            conflict_columns=[POSTS.conflict_key],
            update_columns=POSTS.update_fields,
        )
        count += 1
    return count


async def _apply_subscribers(
    session: DatabaseSession, records: list[SubscriberRecord]
) -> int:
    count = 0
    for subscriber in records:
        row = _without_none(
            {
                "email": subscriber.email,
                "ip_address": subscriber.ip_address,
                "created_at": subscriber.created_at,
            },
            "created_at",
        )
        # Duplicate email: first write wins, still counted
        await session.upsert(SUBSCRIBERS.name, row, conflict_columns=[SUBSCRIBERS.conflict_key])
        count += 1
    return count


async def _apply_links(session: DatabaseSession, records: list[LinkRecord]) -> int:
    count = 0
    for link in records:
        row = _without_none(
            {"title": link.title, "url": link.url, "created_at": link.created_at},
            "created_at",
        )
        await session.insert(LINKS.name, row)
        count += 1
    return count


async def _apply_settings(
    session: DatabaseSession, records: list[SettingsRecord], settings: SnapshotSettings
) -> int:
    if not records:
        return 0
    incoming = records[0]
    defaults = settings.settings_defaults
    try:
        await session.update(
            SETTINGS.name,
            {
                "site_title": incoming.site_title or defaults.site_title,
                "footer_text": incoming.footer_text or defaults.footer_text,
                "site_description": incoming.site_description or defaults.site_description,
                "updated_at": _utcnow(),
            },
            filters={SETTINGS.pk: settings.settings_row_id},
        )
    except ValueError:
        # Never create the singleton; a store without it keeps none
        logger.warning(
            f"Settings row {settings.settings_row_id} not found; settings not updated"
        )
    return 1


async def apply_snapshot(
    session: DatabaseSession,
    snapshot: ValidatedSnapshot,
    settings: SnapshotSettings,
) -> dict[str, int]:
    """Clear and repopulate the importable collections on one session.

    Must run inside a transaction; on error the caller rolls back.

    Returns:
        Count of processed records per collection (``users`` always 0).
    """
    stats = {name: 0 for name in COLLECTIONS}
    records = snapshot.records

    await _clear(session, settings)

    if POSTS.name in records:
        stats[POSTS.name] = await _apply_posts(session, records[POSTS.name], settings)
    if SUBSCRIBERS.name in records:
        stats[SUBSCRIBERS.name] = await _apply_subscribers(session, records[SUBSCRIBERS.name])
    if LINKS.name in records:
        stats[LINKS.name] = await _apply_links(session, records[LINKS.name])
    if SETTINGS.name in records:
        stats[SETTINGS.name] = await _apply_settings(session, records[SETTINGS.name], settings)

    return stats


async def import_snapshot(
    adapter: DatabaseClient,
    data: Any,
    settings: SnapshotSettings | None = None,
) -> ImportResult:
    """Validate a snapshot document and apply it atomically.

    Validation runs before any store access.  The apply step runs in a
    single transaction on a dedicated connection: either every change is
    committed or none is.

    Args:
        adapter: Database adapter implementing ``DatabaseClient``.
        data: Decoded snapshot document.
        settings: Snapshot settings (defaults, reserved ids, version).

    Returns:
        ``ImportResult`` with per-collection counts and completion time.

    Raises:
        FormatError: If the document is malformed.  The store is untouched.
        StoreError: If any statement failed.  The transaction was rolled
            back and the store is as it was before the call.

    Example:
        result = await import_snapshot(adapter, json.load(f))
        print(result.stats["posts"])
    """
    settings = settings or SnapshotSettings()
    snapshot = validate_snapshot(data, settings)

    logger.info(
        "Importing snapshot: "
        + ", ".join(f"{name}={len(rows)}" for name, rows in snapshot.records.items())
    )

    try:
        async with adapter.transaction() as session:
            stats = await apply_snapshot(session, snapshot, settings)
    except Exception as e:
        logger.error(f"Snapshot import rolled back: {e}")
        raise StoreError(f"Failed to import snapshot: {e}") from e

    result = ImportResult(stats=stats, timestamp=datetime.now(timezone.utc))
    logger.info(f"Snapshot imported: {result.stats}")
    return result
