from __future__ import annotations

from typing import Protocol

from rich.console import Console

from .store import SyncOutcome


class Notifier(Protocol):
    def sync_completed(self, outcome: SyncOutcome) -> None: ...

    def records_added(self, count: int) -> None: ...

    def sync_failed(self, message: str) -> None: ...


def describe_outcome(outcome: SyncOutcome) -> str:
    return (
        f"Sync complete! {outcome.added} new quotes added, "
        f"{outcome.conflicts} conflicts resolved (Server data won)."
    )


class ConsoleNotifier:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def sync_completed(self, outcome: SyncOutcome) -> None:
        self.console.print(f"[green]{describe_outcome(outcome)}[/green]")

    def records_added(self, count: int) -> None:
        self.console.print(f"[green]Sync complete! {count} quotes added.[/green]")

    def sync_failed(self, message: str) -> None:
        self.console.print(f"[red]Error syncing with server: {message}[/red]")


class NullNotifier:
    def sync_completed(self, outcome: SyncOutcome) -> None:
        return

    def records_added(self, count: int) -> None:
        return

    def sync_failed(self, message: str) -> None:
        return
