"""Pydantic models for store structure checks."""

from pydantic import BaseModel, Field


class ColumnDiff(BaseModel):
    """A missing column detected during a structure check."""

    table: str
    column: str
    message: str = ""


class StructureReport(BaseModel):
    """Result of comparing the live store with the collection registry."""

    valid: bool
    missing_tables: list[str] = Field(default_factory=list)
    missing_columns: list[ColumnDiff] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        """Count of missing tables plus missing columns."""
        return len(self.missing_tables) + len(self.missing_columns)

    def format_report(self) -> str:
        """Format the report as human-readable text."""
        if self.valid:
            return "Store structure valid"

        lines = ["Store structure check failed:"]

        if self.missing_tables:
            lines.append(f"\n  Missing tables ({len(self.missing_tables)}):")
            for table in self.missing_tables:
                lines.append(f"    - {table}")

        if self.missing_columns:
            lines.append(f"\n  Missing columns ({len(self.missing_columns)}):")
            for diff in self.missing_columns:
                lines.append(f"    - {diff.table}.{diff.column}")

        return "\n".join(lines)
