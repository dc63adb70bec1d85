"""Snapshot export.

Reads every registered collection independently and assembles a fresh
``SnapshotDocument``.  A collection that cannot be read degrades to an
empty list and is logged; it never aborts the export.

Usage:
    from blog_snapshot.snapshot.exporter import export_snapshot

    doc = await export_snapshot(adapter)
    doc.tables["posts"]  # list of row dicts ordered by id
"""

import logging
from datetime import datetime, timezone

from blog_snapshot.adapters.base import DatabaseClient
from blog_snapshot.config.models import SnapshotSettings
from blog_snapshot.errors import CollectionReadError
from blog_snapshot.snapshot.models import CollectionRead, SnapshotDocument
from blog_snapshot.snapshot.registry import COLLECTIONS, CollectionDef

logger = logging.getLogger(__name__)


async def read_collection(
    adapter: DatabaseClient, collection: CollectionDef
) -> CollectionRead:
    """Read all rows of one collection ordered by primary key.

    Any failure (missing table, query error, lost connection) is turned
    into a degraded ``CollectionRead`` instead of being raised.
    """
    try:
        rows = await adapter.select(collection.name, "*", order_by=collection.pk)
    except Exception as e:
        return CollectionRead.failed(
            collection.name, CollectionReadError(collection.name, str(e))
        )
    return CollectionRead.ok(collection.name, rows)


async def read_collections(
    adapter: DatabaseClient,
    collections: list[CollectionDef] | None = None,
) -> list[CollectionRead]:
    """Read each collection as an isolated operation.

    Args:
        adapter: Database adapter implementing ``DatabaseClient``.
        collections: Collections to read.  Defaults to every registered
            collection in registry order.

    Returns:
        One ``CollectionRead`` per collection, in the same order.
    """
    if collections is None:
        collections = list(COLLECTIONS.values())

    results: list[CollectionRead] = []
    for collection in collections:
        result = await read_collection(adapter, collection)
        if result.degraded:
            logger.warning(f"Exported '{collection.name}' as empty: {result.cause}")
        results.append(result)
    return results


async def export_snapshot(
    adapter: DatabaseClient,
    settings: SnapshotSettings | None = None,
) -> SnapshotDocument:
    """Build a snapshot document of the current store state.

    Every call reads the store afresh.  Collections are not read as one
    consistent snapshot; each is its own query.

    Args:
        adapter: Database adapter implementing ``DatabaseClient``.
        settings: Snapshot settings (only ``version`` is used here).

    Returns:
        ``SnapshotDocument`` with all registered collections present.
        Unreadable collections are empty lists.
    """
    settings = settings or SnapshotSettings()

    reads = await read_collections(adapter)
    document = SnapshotDocument(
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.version,
        tables={read.name: read.rows for read in reads},
    )

    degraded = [read.name for read in reads if read.degraded]
    logger.info(
        f"Exported snapshot: {document.counts()}"
        + (f" (degraded: {', '.join(degraded)})" if degraded else "")
    )
    return document
