"""Compare live store columns against the collection registry.

Pure logic: no I/O.  A collection whose table is missing still exports (as
an empty list), so a failed check is a warning for operators, not a hard
precondition of the engine.

Usage:
    from blog_snapshot.schema.comparator import check_store_structure
    from blog_snapshot.schema.introspector import get_column_names

    report = check_store_structure(await get_column_names(adapter))
    if not report.valid:
        print(report.format_report())
"""

from blog_snapshot.schema.models import ColumnDiff, StructureReport
from blog_snapshot.snapshot.registry import expected_columns as registry_columns


def check_store_structure(
    actual_columns: dict[str, set[str]],
    expected_columns: dict[str, set[str]] | None = None,
) -> StructureReport:
    """Report tables and columns the snapshot engine needs but the store lacks.

    Args:
        actual_columns: Table name -> column names, as returned by
            ``get_column_names()``.
        expected_columns: Table name -> required column names.  Defaults to
            the columns declared in the collection registry.

    Returns:
        ``StructureReport``; tables present in the store but unknown to the
        registry are ignored.

    Examples:
        >>> check_store_structure({"links": {"id"}}, {"links": {"id", "url"}}).valid
        False
    """
    if expected_columns is None:
        expected_columns = registry_columns()

    missing_tables = sorted(set(expected_columns) - set(actual_columns))

    missing_columns: list[ColumnDiff] = []
    for table_name in sorted(set(expected_columns) & set(actual_columns)):
        for col_name in sorted(expected_columns[table_name] - actual_columns[table_name]):
            missing_columns.append(
                ColumnDiff(
                    table=table_name,
                    column=col_name,
                    message=f"Column '{col_name}' missing from table '{table_name}'",
                )
            )

    return StructureReport(
        valid=not missing_tables and not missing_columns,
        missing_tables=missing_tables,
        missing_columns=missing_columns,
    )
