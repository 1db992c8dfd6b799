from __future__ import annotations

import contextlib
import sqlite3
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import typer
from rich import print

from .. import db
from ..config import QuoteSyncConfig, load_config, read_config_file, write_config_file
from ..errors import PersistenceFailure
from ..storage import KeyValueStorage, SqliteKeyValueStorage, session_storage
from ..store import RecordStore
from ..sync import http_client
from ..sync.gateway import RemoteGateway


def resolve_db_path(db_path: str | None, config: QuoteSyncConfig | None = None) -> Path:
    cfg = config or load_config()
    return Path(db_path or cfg.db_path or db.DEFAULT_DB_PATH).expanduser()


@contextlib.contextmanager
def open_db(db_path: str | None) -> Iterator[sqlite3.Connection]:
    conn = db.connect(resolve_db_path(db_path), check_same_thread=False)
    try:
        db.initialize_schema(conn)
        yield conn
    finally:
        conn.close()


@contextlib.contextmanager
def open_store(db_path: str | None) -> Iterator[RecordStore]:
    with open_db(db_path) as conn:
        try:
            store = RecordStore(SqliteKeyValueStorage(conn))
        except PersistenceFailure as exc:
            print(f"[red]Load failed: {exc}[/red]")
            raise typer.Exit(code=1) from exc
        yield store


@contextlib.contextmanager
def open_session(db_path: str | None) -> Iterator[KeyValueStorage]:
    with open_db(db_path) as conn:
        yield session_storage(SqliteKeyValueStorage(conn))


@contextlib.contextmanager
def open_gateway(config: QuoteSyncConfig) -> Iterator[RemoteGateway]:
    client: httpx.Client = http_client.build_client(timeout_s=config.http_timeout_s)
    try:
        yield RemoteGateway(
            client,
            config.server_url,
            fetch_limit=config.fetch_limit,
            push_user_id=config.push_user_id,
        )
    finally:
        client.close()


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except ValueError as exc:
        print(f"[red]Invalid config file: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def write_config_or_exit(data: dict[str, Any]) -> None:
    try:
        write_config_file(data)
    except OSError as exc:
        print(f"[red]Failed to write config: {exc}[/red]")
        raise typer.Exit(code=1) from exc
