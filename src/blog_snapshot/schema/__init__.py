"""Store structure checks against the collection registry.

Usage:
    from blog_snapshot.schema import check_store_structure, get_column_names
"""

from blog_snapshot.schema.comparator import check_store_structure
from blog_snapshot.schema.introspector import get_column_names
from blog_snapshot.schema.models import ColumnDiff, StructureReport

__all__ = [
    "check_store_structure",
    "get_column_names",
    "ColumnDiff",
    "StructureReport",
]
