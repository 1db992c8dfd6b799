from __future__ import annotations

import typer
from rich import print
from rich.markup import escape

from ..errors import PersistenceFailure, ValidationError
from ..notify import ConsoleNotifier
from ..store import ALL_CATEGORIES
from ..sync.daemon import SyncScheduler
from ..views import format_record, last_shown, pick_random, remember_shown


def add_cmd(
    *,
    open_store,
    open_gateway,
    config,
    db_path: str | None,
    text: str,
    category: str,
    push: bool | None,
    sync_now: bool = False,
) -> None:
    """Add a quote locally, optionally push it, and optionally sync right away."""

    with open_store(db_path) as store:
        try:
            record = store.insert_new(text, category)
        except ValidationError as exc:
            print(f"[red]Add failed: {exc}[/red]")
            raise typer.Exit(code=1) from exc
        except PersistenceFailure as exc:
            print(f"[red]Add failed: {exc}[/red]")
            raise typer.Exit(code=1) from exc
    print(f"[green]Quote added locally ({record.id}). Will sync with server soon.[/green]")

    should_push = config.push_on_add if push is None else push
    if should_push:
        with open_gateway(config) as gateway:
            if gateway.push_record(record):
                print("- Pushed to server")
            else:
                print(f"[yellow]- Push failed: {gateway.last_error}; kept locally[/yellow]")

    if sync_now:
        with open_store(db_path) as store, open_gateway(config) as gateway:
            SyncScheduler(store, gateway, notifier=ConsoleNotifier()).run_pass()


def list_cmd(*, open_store, db_path: str | None, category: str | None) -> None:
    """List quotes, filtered by category."""

    with open_store(db_path) as store:
        selected = category or store.filter
        records = store.get(selected)
    if not records:
        print(f"[yellow]No quotes found for the category: {escape(selected)}[/yellow]")
        return
    for record in records:
        print(escape(f"[{record.id}] ({record.category}) {record.text}"))


def categories_cmd(*, open_store, db_path: str | None) -> None:
    """Show known categories."""

    with open_store(db_path) as store:
        active = store.filter
        categories = store.categories()
    for name in categories:
        marker = "*" if name == active else " "
        print(f"{marker} {escape(name)}")


def filter_cmd(*, open_store, db_path: str | None, category: str) -> None:
    """Remember the category filter."""

    with open_store(db_path) as store:
        try:
            store.set_filter(category)
        except (ValidationError, PersistenceFailure) as exc:
            print(f"[red]Filter failed: {exc}[/red]")
            raise typer.Exit(code=1) from exc
    print(f"[green]Filter set to {escape(category.strip())}[/green]")


def show_cmd(
    *,
    open_store,
    open_session,
    db_path: str | None,
    category: str | None,
    last: bool = False,
) -> None:
    """Show a random quote, or the one last shown in this shell session."""

    if last:
        with open_session(db_path) as session:
            record = last_shown(session)
        if record is None:
            print("[yellow]No quote shown yet in this session[/yellow]")
            return
        print(escape(format_record(record)))
        return

    with open_store(db_path) as store:
        selected = category or store.filter or ALL_CATEGORIES
        record = pick_random(store, selected)
    if record is None:
        print(f"[yellow]No quotes found for the category: {escape(selected)}[/yellow]")
        return
    with open_session(db_path) as session:
        try:
            remember_shown(session, record)
        except PersistenceFailure as exc:
            print(f"[yellow]Could not remember shown quote: {exc}[/yellow]")
    print(escape(format_record(record)))
