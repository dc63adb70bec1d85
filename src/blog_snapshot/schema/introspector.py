"""Read table and column names from the live store via information_schema."""

from blog_snapshot.adapters.base import DatabaseClient


async def get_column_names(
    adapter: DatabaseClient, schema_name: str = "public"
) -> dict[str, set[str]]:
    """Get column names for every table in a schema.

    Args:
        adapter: Database adapter implementing ``DatabaseClient``.
        schema_name: PostgreSQL schema to inspect (default: public).

    Returns:
        Dict mapping table name to set of column names.
    """
    rows = await adapter.select(
        "information_schema.columns",
        "table_name, column_name",
        filters={"table_schema": schema_name},
        order_by="table_name, ordinal_position",
    )

    columns: dict[str, set[str]] = {}
    for row in rows:
        columns.setdefault(row["table_name"], set()).add(row["column_name"])
    return columns
