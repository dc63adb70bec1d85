"""Snapshot files on disk.

Writes snapshot documents as indented JSON under a dated download name and
loads them back with the size and shape checks an upload endpoint would
apply.

Usage:
    from blog_snapshot.snapshot.files import load_snapshot, write_snapshot

    path = write_snapshot(doc, directory="backups")
    data = load_snapshot(path)
"""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from blog_snapshot.errors import FormatError
from blog_snapshot.snapshot.models import SnapshotDocument

DEFAULT_PREFIX = "blog_backup"
DEFAULT_MAX_BYTES = 50 * 1024 * 1024


def snapshot_filename(prefix: str = DEFAULT_PREFIX, when: date | None = None) -> str:
    """Download name for a snapshot, e.g. ``blog_backup_2026-01-15.json``."""
    if when is None:
        when = datetime.now(timezone.utc).date()
    return f"{prefix}_{when.isoformat()}.json"


def write_snapshot(
    document: SnapshotDocument,
    output_path: str | Path | None = None,
    directory: str | Path | None = None,
    prefix: str = DEFAULT_PREFIX,
) -> Path:
    """Write a snapshot document to a JSON file.

    Args:
        document: Snapshot to write.
        output_path: Exact file path.  Takes precedence over ``directory``.
        directory: Directory for a dated file name.  Defaults to
            ``./backups``.
        prefix: File name prefix used with ``directory``.

    Returns:
        Path of the written file.
    """
    if output_path is None:
        backups_dir = Path(directory) if directory is not None else Path.cwd() / "backups"
        output_path = backups_dir / snapshot_filename(prefix)

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(document.model_dump(mode="json"), f, indent=2, default=str)

    return path


def load_snapshot(path: str | Path, max_bytes: int = DEFAULT_MAX_BYTES) -> dict[str, Any]:
    """Read a snapshot file into a dict without validating its tables.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        FormatError: If the file is larger than ``max_bytes``, is not valid
            JSON, or its top level is not an object.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    size = path.stat().st_size
    if size > max_bytes:
        raise FormatError(f"Snapshot file too large: {size} bytes (limit {max_bytes})")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FormatError(f"Invalid JSON file: {e}") from e

    if not isinstance(data, dict):
        raise FormatError("Invalid backup file format: document must be an object")
    return data
