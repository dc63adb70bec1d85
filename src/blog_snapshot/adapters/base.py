"""Database client protocol definitions.

Defines the ``DatabaseSession`` Protocol (CRUD bound to one connection) and
the ``DatabaseClient`` Protocol (pooled CRUD plus scoped transactions).
All methods are ``async def``.

Usage:
    from blog_snapshot.adapters.base import DatabaseClient

    async def do_work(client: DatabaseClient) -> None:
        rows = await client.select("posts", "*", order_by="id")
        async with client.transaction() as session:
            await session.delete("links")
            await session.insert("links", {"title": "Home", "url": "/"})
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, Sequence


class DatabaseSession(Protocol):
    """CRUD operations that all run on the same connection.

    Obtained from ``DatabaseClient.transaction()``; every statement issued
    through a session belongs to the surrounding transaction.
    """

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        """Select rows from table.

        Args:
            table: Table name.
            columns: Comma-separated column names (e.g., ``"id, slug"``) or ``"*"``.
            filters: Optional dict of field=value filters (all must match via AND).
            order_by: Optional column name to sort by.

        Returns:
            List of dicts, one per row.  Empty list if no matches.
        """
        ...

    async def insert(self, table: str, data: dict) -> dict:
        """Insert row into table and return the created row.

        Raises:
            Exception: If duplicate key or constraint violation.
        """
        ...

    async def upsert(
        self,
        table: str,
        data: dict,
        conflict_columns: Sequence[str],
        update_columns: Sequence[str] = (),
    ) -> dict | None:
        """Insert a row, resolving unique-key collisions in place.

        Args:
            table: Table name.
            data: Dict of field=value pairs to insert.
            conflict_columns: Columns of the unique constraint to match on.
            update_columns: Columns overwritten from the incoming row on
                collision.  When empty, a colliding row is left untouched.

        Returns:
            The inserted or updated row, or ``None`` when the collision was
            ignored.
        """
        ...

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        """Update rows in table and return the first updated row.

        Raises:
            ValueError: If no rows match filters.
        """
        ...

    async def delete(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        exclude: dict[str, Any] | None = None,
    ) -> None:
        """Delete rows from table.

        Args:
            table: Table name.
            filters: Optional field=value filters (all must match).
            exclude: Optional field=value pairs; matching rows are kept.

        With neither ``filters`` nor ``exclude`` every row is deleted.
        """
        ...

    async def execute(self, sql: str, params: dict | None = None) -> None:
        """Execute a raw SQL statement."""
        ...


class DatabaseClient(DatabaseSession, Protocol):
    """Database client interface that all adapters must implement.

    Single-statement methods inherited from ``DatabaseSession`` each run in
    their own short transaction.  Multi-statement atomic work goes through
    ``transaction()``.
    """

    def transaction(self) -> AbstractAsyncContextManager[DatabaseSession]:
        """Open a transaction on a dedicated connection.

        The transaction commits when the ``async with`` block exits normally
        and rolls back when it exits with an exception.  The connection is
        released on every exit path.

        Example:
            async with client.transaction() as session:
                await session.delete("posts")
                await session.insert("posts", {...})
        """
        ...

    async def close(self) -> None:
        """Close database connections and clean up resources."""
        ...
