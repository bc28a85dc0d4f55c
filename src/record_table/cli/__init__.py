"""CLI for browsing and editing content records.

Provides a terminal front end over ``RecordTable`` for every built-in
entity: list with search and pagination, create, update and delete.

Usage:
    record-table profiles
    record-table status
    record-table entities
    record-table list tags --search rock --page 2
    record-table create tags --set name=Rock --set slug=rock --set color=#FF6B6B
    record-table update users abc123 --set isActive=false
    record-table delete tags abc123
    RECORD_TABLE_PROFILE=cloud record-table list posts

Commands:
    profiles  - List available backend profiles
    status    - Show config file, active profile and table settings
    entities  - List the built-in entities and their fields
    list      - Show one page of an entity's records
    create    - Create a record
    update    - Update fields of a record
    delete    - Delete a record (asks for confirmation)
"""

import argparse
import asyncio
import logging
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from record_table.adapters.base import DataClient
from record_table.config.loader import load_config, resolve_config_path
from record_table.config.models import AppConfig
from record_table.errors import ConfigError, ProfileNotFoundError
from record_table.factory import create_client, get_active_profile_name, open_table
from record_table.schema.entities import ENTITY_CONFIGS, resolve_entity
from record_table.schema.fields import TableConfig
from record_table.table.controller import RecordTable, TableState
from record_table.table.render import parse_input

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


# ============================================================================
# Terminal notifier
# ============================================================================


class ConsoleNotifier:
    """``Notifier`` that prints alerts and asks for confirmation on the terminal.

    Args:
        console: Rich console to write to.
        assume_yes: Answer every confirmation with yes (``--yes``).
    """

    def __init__(self, console: Console, assume_yes: bool = False) -> None:
        self.console = console
        self.assume_yes = assume_yes
        self.declined = False

    def alert(self, message: str) -> None:
        self.console.print(f"[bold red]x[/bold red] {escape(message)}")

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        answer = Confirm.ask(message, console=self.console, default=False)
        self.declined = not answer
        return answer


# ============================================================================
# Helpers
# ============================================================================


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _parse_assignments(config: TableConfig, assignments: list[str]) -> dict[str, Any]:
    """Turn ``key=value`` arguments into a typed draft.

    Raises:
        ValueError: If an assignment is malformed, names an unknown or
            read-only field, or holds a value the field cannot parse.
    """
    draft: dict[str, Any] = {}
    for item in assignments:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{item}'")
        spec = config.field(key)
        if spec is None:
            raise ValueError(
                f"{config.model_name} has no field '{key}'. "
                f"Fields: {', '.join(config.field_keys)}"
            )
        if key in ("id", "createdAt", "updatedAt"):
            raise ValueError(f"Field '{key}' is assigned by the backend")
        try:
            draft[key] = parse_input(spec, raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for '{key}': {e}") from e
    return draft


def _load_app_config(args: argparse.Namespace) -> AppConfig | None:
    try:
        return load_config(args.config, env_prefix=args.env_prefix)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
    except ValueError as e:
        console.print(f"[red]Error: invalid config: {escape(str(e))}[/red]")
    return None


def _connect(args: argparse.Namespace, config: AppConfig) -> DataClient | None:
    try:
        return create_client(config, args.profile, env_prefix=args.env_prefix)
    except (ProfileNotFoundError, ConfigError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return None


def _open(
    args: argparse.Namespace, assume_yes: bool = False
) -> tuple[RecordTable, DataClient] | None:
    """Load config, connect, and build the table for ``args.entity``."""
    try:
        resolve_entity(args.entity)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return None

    config = _load_app_config(args)
    if config is None:
        return None
    client = _connect(args, config)
    if client is None:
        return None

    page_size = getattr(args, "page_size", None) or config.table.page_size
    table = open_table(
        args.entity,
        client,
        ConsoleNotifier(console, assume_yes=assume_yes),
        page_size=page_size,
    )
    return table, client


def _find(table: RecordTable, record_id: str) -> dict[str, Any] | None:
    for record in table.records:
        if record.get("id") == record_id:
            return record
    return None


def _print_page(table: RecordTable) -> None:
    page = table.paginate()
    view = Table(title=table.config.title, show_header=True, header_style="bold")
    for spec in table.config.fields:
        view.add_column(spec.label, style="dim" if spec.key == "id" else None)
    for record in page.items:
        view.add_row(*(Text(cell) for cell in table.render_row(record)))
    console.print(view)

    if page.total_pages > 1:
        console.print(
            f"[dim]{page.summary()} (page {page.page} of {page.total_pages})[/dim]"
        )
    elif page.total_count == 0:
        console.print("[dim]No records.[/dim]")


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_list(args: argparse.Namespace) -> int:
    """Async implementation for list command.

    Returns:
        0 on success, 1 on failure.
    """
    opened = _open(args)
    if opened is None:
        return 1
    table, client = opened

    try:
        await table.load()
        if table.state is TableState.FAILED:
            console.print(f"[bold red]x[/bold red] Error loading {table.config.title}")
            console.print(f"  [dim]{escape(table.last_error or '')}[/dim]")
            return 1

        table.set_search(args.search or "")
        table.go_to_page(args.page)
        _print_page(table)
        if table.rejected:
            console.print(
                f"[yellow]Skipped {len(table.rejected)} invalid "
                f"{table.config.model_name} rows[/yellow]"
            )
        return 0
    finally:
        await client.close()


async def _async_create(args: argparse.Namespace) -> int:
    """Async implementation for create command.

    Returns:
        0 on success, 1 on failure.
    """
    opened = _open(args)
    if opened is None:
        return 1
    table, client = opened

    try:
        try:
            draft = _parse_assignments(table.config, args.assignments)
        except ValueError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            return 1

        table.open_create()
        if not await table.submit(draft):
            return 1

        console.print(
            f"[bold green]v[/bold green] Created {table.config.singular_title}"
        )
        return 0
    finally:
        await client.close()


async def _async_update(args: argparse.Namespace) -> int:
    """Async implementation for update command.

    Only the assigned fields are sent to the backend.

    Returns:
        0 on success, 1 on failure.
    """
    opened = _open(args)
    if opened is None:
        return 1
    table, client = opened

    try:
        try:
            draft = _parse_assignments(table.config, args.assignments)
        except ValueError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            return 1

        await table.load()
        if table.state is TableState.FAILED:
            console.print(f"[bold red]x[/bold red] Error loading {table.config.title}")
            return 1

        record = _find(table, args.record_id)
        if record is None:
            console.print(
                f"[red]Error: no {table.config.singular_title} with id "
                f"{args.record_id}[/red]"
            )
            return 1

        table.open_edit(record)
        if not await table.submit(draft):
            return 1

        console.print(
            f"[bold green]v[/bold green] Updated {table.config.singular_title} "
            f"[cyan]{args.record_id}[/cyan]"
        )
        return 0
    finally:
        await client.close()


async def _async_delete(args: argparse.Namespace) -> int:
    """Async implementation for delete command.

    Returns:
        0 on success or when cancelled, 1 on failure.
    """
    opened = _open(args, assume_yes=args.yes)
    if opened is None:
        return 1
    table, client = opened

    try:
        if await table.remove(args.record_id):
            console.print(
                f"[bold green]v[/bold green] Deleted {table.config.singular_title} "
                f"[cyan]{args.record_id}[/cyan]"
            )
            return 0
        if table.notifier.declined:
            console.print("Cancelled.")
            return 0
        return 1
    finally:
        await client.close()


# ============================================================================
# Sync command wrappers (profiles, status, entities read local state only)
# ============================================================================


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from the config file.

    Returns:
        0 on success, 1 if the config file is missing or invalid.
    """
    config = _load_app_config(args)
    if config is None:
        return 1

    try:
        current = get_active_profile_name(config, args.profile, args.env_prefix)
    except ProfileNotFoundError:
        current = None

    table = Table(title="Backend Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        table.add_row(
            marker,
            f"[bold cyan]{name}[/bold cyan]" if name == current else name,
            profile.provider,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = active profile")

    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show config file, active profile and table settings.

    Returns:
        0 always (informational command).
    """
    path = resolve_config_path(args.config, args.env_prefix)

    table = Table(title="Status", show_header=False)
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Config file", str(path))

    try:
        config = load_config(path)
    except FileNotFoundError:
        table.add_row("Warning", "[yellow]config file not found[/yellow]")
        console.print(table)
        return 0
    except ValueError as e:
        table.add_row("Warning", f"[yellow]invalid config: {escape(str(e))}[/yellow]")
        console.print(table)
        return 0

    try:
        name = get_active_profile_name(config, args.profile, args.env_prefix)
        profile = config.profiles[name]
        table.add_row("Active profile", f"[bold cyan]{name}[/bold cyan]")
        table.add_row("Provider", profile.provider)
        if profile.description:
            table.add_row("Description", profile.description)
    except ProfileNotFoundError:
        table.add_row("Active profile", "[yellow]none selected[/yellow]")

    table.add_row("Page size", str(config.table.page_size))
    console.print(table)
    return 0


def cmd_entities(args: argparse.Namespace) -> int:
    """List the built-in entities.

    Returns:
        0 always.
    """
    table = Table(title="Entities", show_header=True, header_style="bold")
    table.add_column("Entity", style="bold cyan")
    table.add_column("Table")
    table.add_column("Fields")
    table.add_column("Search")

    for entity, config in ENTITY_CONFIGS.items():
        fields = ", ".join(
            f"{spec.key}*" if spec.required else spec.key for spec in config.fields
        )
        table.add_row(
            entity.value,
            config.table_name or "",
            fields,
            ", ".join(config.search_fields),
        )

    console.print(table)
    console.print("\n[dim]* = required[/dim]")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Show one page of records.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_list(args))


def cmd_create(args: argparse.Namespace) -> int:
    """Create a record.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_create(args))


def cmd_update(args: argparse.Namespace) -> int:
    """Update a record.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_update(args))


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete a record.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_delete(args))


# ============================================================================
# Main entry point
# ============================================================================


def _positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the ``record-table`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="record-table",
        description="Browse and edit content records over a managed data API",
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to record-table.toml (default: ./record-table.toml)",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_RECORD_TABLE_PROFILE)"
        ),
    )
    parser.add_argument(
        "--profile",
        "-p",
        default=None,
        help="Backend profile to use",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    p_status = subparsers.add_parser("status", help="Show configuration status")
    p_status.set_defaults(func=cmd_status)

    p_entities = subparsers.add_parser("entities", help="List built-in entities")
    p_entities.set_defaults(func=cmd_entities)

    # list command
    p_list = subparsers.add_parser("list", help="Show records of an entity")
    p_list.add_argument("entity", help="Entity or table name (e.g., Tag or tags)")
    p_list.add_argument("--search", "-s", default="", help="Case-insensitive search term")
    p_list.add_argument("--page", type=int, default=1, help="Page number (clamped)")
    p_list.add_argument(
        "--page-size",
        type=_positive_int,
        default=None,
        help="Rows per page (default: [table] page_size from config)",
    )
    p_list.set_defaults(func=cmd_list)

    # create command
    p_create = subparsers.add_parser("create", help="Create a record")
    p_create.add_argument("entity", help="Entity or table name")
    p_create.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Field value (repeatable)",
    )
    p_create.set_defaults(func=cmd_create)

    # update command
    p_update = subparsers.add_parser("update", help="Update a record")
    p_update.add_argument("entity", help="Entity or table name")
    p_update.add_argument("record_id", help="Record id")
    p_update.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Field value (repeatable)",
    )
    p_update.set_defaults(func=cmd_update)

    # delete command
    p_delete = subparsers.add_parser("delete", help="Delete a record")
    p_delete.add_argument("entity", help="Entity or table name")
    p_delete.add_argument("record_id", help="Record id")
    p_delete.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip the confirmation prompt",
    )
    p_delete.set_defaults(func=cmd_delete)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
