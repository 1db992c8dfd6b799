from __future__ import annotations

import json

import typer
from rich import print

from ..config import QuoteSyncConfig


def config_show_cmd(*, get_config_path, load_config) -> None:
    """Print the effective configuration."""

    config = load_config()
    print(f"- Config: {get_config_path()}")
    print(json.dumps(config.to_dict(), indent=2))


def config_set_cmd(
    *,
    read_config_or_exit,
    write_config_or_exit,
    key: str,
    value: str,
) -> None:
    """Persist one configuration value."""

    if key not in QuoteSyncConfig.__dataclass_fields__:
        print(f"[red]Unknown config key: {key}[/red]")
        raise typer.Exit(code=1)
    data = read_config_or_exit()
    data[key] = value
    write_config_or_exit(data)
    print(f"[green]Set {key}[/green]")
