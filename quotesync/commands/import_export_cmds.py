from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich import print

from ..errors import ImportFormatError, PersistenceFailure
from ..transfer import export_all, import_batch, import_file


def export_quotes_cmd(*, open_store, db_path: str | None, output: str) -> None:
    """Export all quotes to a JSON file."""

    with open_store(db_path) as store:
        payload = export_all(store)
        count = len(store)
    if output == "-":
        sys.stdout.write(payload.decode("utf-8"))
        return
    output_path = Path(output).expanduser()
    try:
        output_path.write_bytes(payload)
    except OSError as exc:
        print(f"[red]Export failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    print(f"[green]✓ Exported {count} quotes to {output_path}[/green]")


def import_quotes_cmd(*, open_store, db_path: str | None, input_file: str) -> None:
    """Import quotes from an exported JSON file."""

    with open_store(db_path) as store:
        try:
            if input_file == "-":
                imported = import_batch(store, sys.stdin.buffer.read())
            else:
                imported = import_file(store, Path(input_file).expanduser())
        except (ImportFormatError, PersistenceFailure) as exc:
            print(f"[red]Import failed: {exc}[/red]")
            raise typer.Exit(code=1) from exc
    print(f"[green]Quotes imported successfully! ({imported} new)[/green]")
