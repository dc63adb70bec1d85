"""Database adapters package.

Provides the ``DatabaseClient`` / ``DatabaseSession`` Protocols and the
async PostgreSQL implementation.

Usage:
    from blog_snapshot.adapters import DatabaseClient, AsyncPostgresAdapter
"""

from blog_snapshot.adapters.base import DatabaseClient, DatabaseSession
from blog_snapshot.adapters.postgres import AsyncPostgresAdapter, AsyncPostgresSession

__all__ = [
    "DatabaseClient",
    "DatabaseSession",
    "AsyncPostgresAdapter",
    "AsyncPostgresSession",
]
