#!/usr/bin/env python3
"""CLI entry point for the settings sync system."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .core.errors import SyncError
from .core.operations import SyncOperations
from .models.config import ConfigStore, SyncConfig

console = Console()


def _load(args: argparse.Namespace) -> tuple[SyncConfig, ConfigStore]:
    store = ConfigStore(Path(args.config) if args.config else None)
    return store.load(), store


def _report_error(e: SyncError) -> None:
    console.print(f"[red]Error: {e}")
    if e.user_action_required:
        console.print("[yellow]Fix the problem above and run the command again.")
    elif e.retryable:
        console.print("[yellow]This may be temporary, try again later.")


def cmd_verify_auth(args: argparse.Namespace, config: SyncConfig, store: ConfigStore) -> int:
    """Verify API authentication."""
    console.print("Verifying GitHub credentials...", style="blue")

    ops = SyncOperations(config, config_store=store)
    account = args.username or config.github.username
    try:
        login = ops.test_credential(account, args.token)
    except SyncError as e:
        console.print(f"[red]Authentication failed: {e}")
        return 1

    console.print(f"[green]Authentication successful! Token belongs to {login}")
    if account and login != account:
        console.print(f"[yellow]Configured username is {account}")
    return 0


def cmd_push(args: argparse.Namespace, config: SyncConfig, store: ConfigStore) -> int:
    """Push selected files to the gist."""
    ops = SyncOperations(config, config_store=store)

    console.print("Pushing settings...", style="blue")
    try:
        result = ops.push(selection=args.select or None)
    except SyncError as e:
        _report_error(e)
        return 1

    action = "Created" if result.created else "Updated"
    console.print(f"[green]{action} gist {result.blob_id} ({result.file_count} files)")
    if result.html_url:
        console.print(f"  {result.html_url}")
    for name in result.skipped:
        console.print(f"  [yellow]Skipped: {name}")
    for blob_id in result.removed_duplicates:
        console.print(f"  [dim]Removed duplicate gist {blob_id}")
    return 0


def cmd_pull(args: argparse.Namespace, config: SyncConfig, store: ConfigStore) -> int:
    """Pull selected files from the gist."""
    ops = SyncOperations(config, config_store=store)

    console.print("Pulling settings...", style="blue")
    try:
        result = ops.pull(
            selection=args.select or None,
            adopt_remote_selection=args.adopt_selection,
        )
    except SyncError as e:
        _report_error(e)
        return 1

    table = Table(title="Restored Files")
    table.add_column("File")
    table.add_column("Backed Up")
    for name in result.restored_files:
        backed_up = "[green]Yes" if name in result.backed_up else "[dim]No"
        table.add_row(name, backed_up)
    console.print(table)

    if result.backup_root:
        console.print(f"[dim]Backups in {result.backup_root}")
    console.print(f"[green]Restored {len(result.restored_files)} files")
    return 0


def cmd_status(args: argparse.Namespace, config: SyncConfig, store: ConfigStore) -> int:
    """Show sync status."""
    status = SyncOperations(config, config_store=store).status()

    console.print(f"\n[bold]Config File:[/bold] {store.config_path}")
    console.print(f"[bold]Identity:[/bold] {status['identity']}")
    console.print(f"[bold]Settings Path:[/bold] {status['local_root'] or '[red]Not set'}")
    console.print(f"[bold]Gist ID:[/bold] {status['gist_id'] or '[yellow]Unknown'}")
    console.print(f"[bold]Backup Directory:[/bold] {status['backup_root'] or '-'}")
    console.print(f"[bold]Token:[/bold] {'[green]Found' if status['has_token'] else '[red]Missing'}")

    if status["selection"]:
        console.print("\n[bold]Selection:[/bold]")
        for name in status["selection"]:
            console.print(f"  {name}")
    else:
        console.print("\n[yellow]Nothing selected. Use `select` to choose files.")
    return 0


def cmd_select(args: argparse.Namespace, config: SyncConfig, store: ConfigStore) -> int:
    """Persist the selection."""
    config.selection = list(args.names)
    store.save(config)
    console.print(f"[green]Selected {len(config.selection)} entries")
    return 0


def cmd_discover(args: argparse.Namespace, config: SyncConfig, store: ConfigStore) -> int:
    """Search the account for the owned gist."""
    ops = SyncOperations(config, config_store=store)

    try:
        blob_id = ops.discover(save=args.save)
    except SyncError as e:
        _report_error(e)
        return 1

    if not blob_id:
        console.print("[yellow]No gist found for this identity")
        return 1

    console.print(f"[green]Found gist {blob_id}")
    if args.save:
        console.print("[dim]Saved to config")
    return 0


def cmd_gists(args: argparse.Namespace, config: SyncConfig, store: ConfigStore) -> int:
    """List visible gists."""
    ops = SyncOperations(config, config_store=store)

    try:
        blobs = ops.list_blobs()
    except SyncError as e:
        _report_error(e)
        return 1

    table = Table(title="Gists")
    table.add_column("ID")
    table.add_column("Description")
    table.add_column("Files")
    table.add_column("Sync")

    for blob, has_identity in blobs:
        marker = "[green]Yes" if has_identity else ""
        if blob.id == config.github.gist_id:
            marker = "[bold green]Current"
        table.add_row(blob.id, blob.description, str(len(blob.files)), marker)

    console.print(table)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cursor-settings-sync",
        description="Sync editor settings with a GitHub Gist",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # verify-auth command
    verify_parser = subparsers.add_parser("verify-auth", help="Verify API authentication")
    verify_parser.add_argument("--username", help="Expected GitHub account")
    verify_parser.add_argument("--token", help="Token to check instead of the configured one")

    # push command
    push_parser = subparsers.add_parser("push", help="Push files to the gist")
    push_parser.add_argument("--select", nargs="+", help="Override the configured selection")

    # pull command
    pull_parser = subparsers.add_parser("pull", help="Pull files from the gist")
    pull_parser.add_argument("--select", nargs="+", help="Override the configured selection")
    pull_parser.add_argument(
        "--adopt-selection",
        action="store_true",
        help="Use and save the selection stored in the gist",
    )

    # status command
    subparsers.add_parser("status", help="Show sync status")

    # select command
    select_parser = subparsers.add_parser("select", help="Set the files and directories to sync")
    select_parser.add_argument("names", nargs="+", help="Names relative to the settings path")

    # discover command
    discover_parser = subparsers.add_parser("discover", help="Find the gist owned by this identity")
    discover_parser.add_argument("--save", action="store_true", help="Save the found gist id")

    # gists command
    subparsers.add_parser("gists", help="List visible gists")

    args = parser.parse_args(argv)

    config, store = _load(args)
    logging.basicConfig(
        level=logging.INFO if args.verbose or config.settings.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "verify-auth":
        return cmd_verify_auth(args, config, store)
    elif args.command == "push":
        return cmd_push(args, config, store)
    elif args.command == "pull":
        return cmd_pull(args, config, store)
    elif args.command == "status":
        return cmd_status(args, config, store)
    elif args.command == "select":
        return cmd_select(args, config, store)
    elif args.command == "discover":
        return cmd_discover(args, config, store)
    elif args.command == "gists":
        return cmd_gists(args, config, store)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
