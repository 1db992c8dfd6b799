from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich import print
from rich.markup import escape

from ..errors import PersistenceFailure
from ..notify import ConsoleNotifier
from ..sync.attempts import list_sync_attempts, record_sync_attempt
from ..sync.daemon import run_sync_daemon
from ..sync.sync_pass import run_sync_pass


def sync_once_cmd(*, open_db, open_store_on, open_gateway, config, db_path: str | None) -> None:
    """Run one reconciliation pass now."""

    notifier = ConsoleNotifier()
    with open_db(db_path) as conn:
        try:
            store = open_store_on(conn)
        except PersistenceFailure as exc:
            print(f"[red]Sync failed: {exc}[/red]")
            raise typer.Exit(code=1) from exc
        with open_gateway(config) as gateway:
            result = run_sync_pass(store, gateway, notifier)
        record_sync_attempt(conn, result)
    if not result.ok:
        raise typer.Exit(code=1)
    if result.outcome is None:
        print("No new updates from server.")
    elif not result.outcome.changed and not result.grew_by:
        print(f"Up to date ({result.fetched} server quotes checked).")


def sync_daemon_cmd(
    *,
    resolve_db_path,
    config,
    db_path: str | None,
    interval_s: int | None,
    verbose: bool,
) -> None:
    """Run the sync loop in the foreground until interrupted."""

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if interval_s is not None:
        if interval_s <= 0:
            print("[red]Interval must be positive[/red]")
            raise typer.Exit(code=1)
        config.sync_interval_s = interval_s
    path: Path = resolve_db_path(db_path, config)
    print(f"[green]Syncing with {config.server_url} every {config.sync_interval_s}s[/green]")
    print(f"- Database: {path}")
    try:
        run_sync_daemon(config, db_path=path, notifier=ConsoleNotifier())
    except KeyboardInterrupt:
        print("\nSync stopped")


def sync_attempts_cmd(*, open_db, db_path: str | None, limit: int) -> None:
    """Show recent sync attempts."""

    with open_db(db_path) as conn:
        rows = list_sync_attempts(conn, limit=limit)
    for row in rows:
        status = "ok" if int(row["ok"] or 0) else "error"
        error = str(row["error"] or "")
        suffix = f" | {escape(error)}" if error else ""
        print(
            f"{row['finished_at']}|{status}|fetched={row['fetched']}|added={row['added']}|conflicts={row['conflicts']}{suffix}"
        )
