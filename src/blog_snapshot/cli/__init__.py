"""CLI for blog store snapshots.

Provides commands to export the store to a snapshot file, import a snapshot
file, validate a snapshot file offline, and check the store structure.

Usage:
    blog-snapshot export
    blog-snapshot export --output backups/before-upgrade.json
    blog-snapshot --profile local import backups/blog_backup_2026-01-15.json
    blog-snapshot import backups/blog_backup_2026-01-15.json --yes
    blog-snapshot validate backups/blog_backup_2026-01-15.json
    blog-snapshot check

Commands:
    export    - Export every collection to a snapshot file
    import    - Replace posts, subscribers, links and settings from a snapshot
    validate  - Validate a snapshot file without touching the store
    check     - Compare the store's tables and columns with what snapshots need
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from blog_snapshot.config.loader import load_config
from blog_snapshot.config.models import AppConfig
from blog_snapshot.errors import FormatError, StoreError
from blog_snapshot.factory import ProfileNotFoundError, get_adapter
from blog_snapshot.schema.comparator import check_store_structure
from blog_snapshot.schema.introspector import get_column_names
from blog_snapshot.snapshot.exporter import export_snapshot
from blog_snapshot.snapshot.files import load_snapshot, write_snapshot
from blog_snapshot.snapshot.importer import import_snapshot, validate_snapshot

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_app_config(args: argparse.Namespace) -> AppConfig | None:
    """Load config, printing the error and returning None on failure."""
    config_path = Path(args.config) if args.config else None
    try:
        return load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return None


def _counts_table(title: str, counts: dict[str, int]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Collection", style="dim")
    table.add_column("Records", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    return table


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_export(args: argparse.Namespace, config: AppConfig) -> int:
    """Async implementation for export command.

    Returns:
        0 on success, 1 if no database is configured.
    """
    try:
        adapter = get_adapter(args.profile, config)
    except ProfileNotFoundError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return 1

    try:
        document = await export_snapshot(adapter, config.snapshot)
    finally:
        await adapter.close()

    try:
        path = write_snapshot(
            document,
            output_path=args.output,
            directory=args.dir,
            prefix=config.snapshot.filename_prefix,
        )
    except OSError as e:
        console.print(f"[red]Error: failed to write snapshot: {e}[/red]")
        return 1

    console.print(_counts_table("Exported", document.counts()))
    console.print(f"[bold green]v[/bold green] Snapshot written to [cyan]{path}[/cyan]")
    return 0


async def _async_import(args: argparse.Namespace, config: AppConfig) -> int:
    """Async implementation for import command.

    Returns:
        0 on success, 1 on invalid file, failed import, or cancellation.
    """
    try:
        data = load_snapshot(args.backup_path, max_bytes=config.snapshot.max_file_bytes)
        validate_snapshot(data, config.snapshot)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except FormatError as e:
        console.print(f"[bold red]x[/bold red] Invalid backup file: {e}")
        return 1

    if not args.yes:
        console.print(f"[yellow]This will replace store data from:[/yellow] {args.backup_path}")
        console.print("  Posts, subscribers, links and settings will be overwritten.")
        console.print("  Users are kept.")
        response = input("Continue? [y/N] ")
        if response.lower() not in ["y", "yes"]:
            console.print("Cancelled.")
            return 1

    try:
        adapter = get_adapter(args.profile, config)
    except ProfileNotFoundError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return 1

    try:
        result = await import_snapshot(adapter, data, config.snapshot)
    except StoreError as e:
        console.print(f"[bold red]x[/bold red] Import failed, no changes were made: {e}")
        return 1
    finally:
        await adapter.close()

    console.print(_counts_table("Imported", result.stats))
    console.print(
        f"[bold green]v[/bold green] Database imported successfully "
        f"at {result.timestamp.isoformat()}"
    )
    return 0


async def _async_check(args: argparse.Namespace, config: AppConfig) -> int:
    """Async implementation for check command.

    Returns:
        0 if the store has every required table and column, 1 otherwise.
    """
    try:
        adapter = get_adapter(args.profile, config)
    except ProfileNotFoundError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return 1

    try:
        await adapter.test_connection()
        actual_columns = await get_column_names(adapter)
    except Exception as e:
        console.print(f"[red]Failed to connect to database: {e}[/red]")
        return 1
    finally:
        await adapter.close()

    report = check_store_structure(actual_columns)
    if report.valid:
        console.print("[bold green]v[/bold green] Store structure is valid")
        return 0

    console.print("[bold red]x[/bold red] Store structure has drifted")
    console.print(report.format_report())
    return 1


# ============================================================================
# Command handlers
# ============================================================================


def cmd_export(args: argparse.Namespace) -> int:
    """Export the store to a snapshot file."""
    config = _load_app_config(args)
    if config is None:
        return 1
    return asyncio.run(_async_export(args, config))


def cmd_import(args: argparse.Namespace) -> int:
    """Import a snapshot file into the store."""
    config = _load_app_config(args)
    if config is None:
        return 1
    return asyncio.run(_async_import(args, config))


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a snapshot file without connecting to the store."""
    config = _load_app_config(args)
    if config is None:
        return 1

    try:
        data = load_snapshot(args.backup_path, max_bytes=config.snapshot.max_file_bytes)
        snapshot = validate_snapshot(data, config.snapshot)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except FormatError as e:
        console.print(f"[bold red]x[/bold red] Invalid backup file: {e}")
        return 1

    counts = {name: len(records) for name, records in snapshot.records.items()}
    console.print(_counts_table("Snapshot contents", counts))
    console.print(
        f"[bold green]v[/bold green] Valid snapshot "
        f"(version {snapshot.version or 'unspecified'})"
    )
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Check the store structure."""
    config = _load_app_config(args)
    if config is None:
        return 1
    return asyncio.run(_async_check(args, config))


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="blog-snapshot",
        description="Export and import blog store snapshots",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to blog_snapshot.toml (default: ./blog_snapshot.toml if present)",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="Database profile name (overrides BLOG_DB_PROFILE)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show info-level log output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # export command
    p_export = subparsers.add_parser("export", help="Export the store to a snapshot file")
    target = p_export.add_mutually_exclusive_group()
    target.add_argument("--output", "-o", default=None, help="Output file path")
    target.add_argument("--dir", default=None, help="Directory for a dated file name")
    p_export.set_defaults(func=cmd_export)

    # import command
    p_import = subparsers.add_parser("import", help="Import a snapshot file")
    p_import.add_argument("backup_path", help="Path to snapshot JSON file")
    p_import.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")
    p_import.set_defaults(func=cmd_import)

    # validate command
    p_validate = subparsers.add_parser("validate", help="Validate a snapshot file")
    p_validate.add_argument("backup_path", help="Path to snapshot JSON file")
    p_validate.set_defaults(func=cmd_validate)

    # check command
    p_check = subparsers.add_parser("check", help="Check the store structure")
    p_check.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
