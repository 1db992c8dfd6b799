from __future__ import annotations

import sqlite3

import typer

from .commands.common import (
    open_db,
    open_gateway,
    open_session,
    open_store,
    read_config_or_exit,
    resolve_db_path,
    write_config_or_exit,
)
from .commands.config_cmds import config_set_cmd, config_show_cmd
from .commands.import_export_cmds import export_quotes_cmd, import_quotes_cmd
from .commands.quote_cmds import add_cmd, categories_cmd, filter_cmd, list_cmd, show_cmd
from .commands.sync_cmds import sync_attempts_cmd, sync_daemon_cmd, sync_once_cmd
from .config import get_config_path, load_config
from .storage import SqliteKeyValueStorage
from .store import RecordStore

app = typer.Typer(help="quotesync: local-first quote collection synced with a remote source")
sync_app = typer.Typer(help="Reconcile quotes with the server")
config_app = typer.Typer(help="Inspect and edit configuration")
app.add_typer(sync_app, name="sync")
app.add_typer(config_app, name="config")


def _store_on(conn: sqlite3.Connection) -> RecordStore:
    return RecordStore(SqliteKeyValueStorage(conn))


@app.command()
def add(
    text: str = typer.Argument(..., help="Quote text"),
    category: str = typer.Argument(..., help="Quote category"),
    push: bool = typer.Option(None, "--push/--no-push", help="Push to the server after saving"),
    sync_now: bool = typer.Option(
        False, "--sync/--no-sync", help="Run a sync pass right after saving"
    ),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Add a quote locally."""

    add_cmd(
        open_store=open_store,
        open_gateway=open_gateway,
        config=load_config(),
        db_path=db_path,
        text=text,
        category=category,
        push=push,
        sync_now=sync_now,
    )


@app.command("list")
def list_quotes(
    category: str = typer.Option(None, help="Category to show (defaults to saved filter)"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """List quotes."""

    list_cmd(open_store=open_store, db_path=db_path, category=category)


@app.command()
def categories(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """Show categories; the saved filter is marked with *."""

    categories_cmd(open_store=open_store, db_path=db_path)


@app.command("filter")
def filter_quotes(
    category: str = typer.Argument(..., help="Category name or 'all'"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Save the category filter."""

    filter_cmd(open_store=open_store, db_path=db_path, category=category)


@app.command()
def show(
    category: str = typer.Option(None, help="Category to pick from (defaults to saved filter)"),
    last: bool = typer.Option(False, "--last", help="Repeat the quote last shown in this shell"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Show a random quote."""

    show_cmd(
        open_store=open_store,
        open_session=open_session,
        db_path=db_path,
        category=category,
        last=last,
    )


@app.command("export")
def export_quotes(
    output: str = typer.Argument(..., help="Output file path, or '-' for stdout"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Export quotes to JSON."""

    export_quotes_cmd(open_store=open_store, db_path=db_path, output=output)


@app.command("import")
def import_quotes(
    input_file: str = typer.Argument(..., help="Input JSON file, or '-' for stdin"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Import quotes from JSON, skipping texts already present."""

    import_quotes_cmd(open_store=open_store, db_path=db_path, input_file=input_file)


@sync_app.command("once")
def sync_once(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """Run one sync pass now."""

    sync_once_cmd(
        open_db=open_db,
        open_store_on=_store_on,
        open_gateway=open_gateway,
        config=load_config(),
        db_path=db_path,
    )


@sync_app.command("daemon")
def sync_daemon(
    interval_s: int = typer.Option(None, "--interval", help="Seconds between passes"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Run the periodic sync loop in the foreground."""

    sync_daemon_cmd(
        resolve_db_path=resolve_db_path,
        config=load_config(),
        db_path=db_path,
        interval_s=interval_s,
        verbose=verbose,
    )


@sync_app.command("attempts")
def sync_attempts(
    db_path: str = typer.Option(None, help="Path to SQLite database"),
    limit: int = typer.Option(10, help="Number of attempts to show"),
) -> None:
    """Show recent sync attempts."""

    sync_attempts_cmd(open_db=open_db, db_path=db_path, limit=limit)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration."""

    config_show_cmd(get_config_path=get_config_path, load_config=load_config)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Config key"),
    value: str = typer.Argument(..., help="Value to store"),
) -> None:
    """Set a configuration value."""

    config_set_cmd(
        read_config_or_exit=read_config_or_exit,
        write_config_or_exit=write_config_or_exit,
        key=key,
        value=value,
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
