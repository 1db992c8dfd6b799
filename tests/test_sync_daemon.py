from __future__ import annotations

import logging
import threading
from pathlib import Path

import httpx

from quotesync import db
from quotesync.config import QuoteSyncConfig
from quotesync.storage import SqliteKeyValueStorage
from quotesync.store import RecordStore, SyncOutcome
from quotesync.sync.attempts import list_sync_attempts
from quotesync.sync.daemon import run_sync_daemon


def _posts() -> list[dict[str, object]]:
    return [{"id": n, "userId": 1, "title": f"server title {n}"} for n in range(1, 4)]


class _InsertOnFirstSync:
    """Simulates a user adding a quote from another process between passes."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.typed_id: str | None = None

    def sync_completed(self, outcome: SyncOutcome) -> None:
        if self.typed_id is not None:
            return
        conn = db.connect(self.path)
        try:
            self.typed_id = RecordStore(SqliteKeyValueStorage(conn)).insert_new(
                "typed by user", "Mine"
            ).id
        finally:
            conn.close()

    def records_added(self, count: int) -> None:
        return

    def sync_failed(self, message: str) -> None:
        return


def test_daemon_keeps_quotes_added_between_passes(tmp_path: Path) -> None:
    path = tmp_path / "quotes.sqlite"
    stop = threading.Event()
    gets: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        gets.append(request)
        payload = _posts()
        if len(gets) >= 2:
            payload[0]["title"] = "server title 1 (edited)"
            stop.set()
        return httpx.Response(200, json=payload)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    notifier = _InsertOnFirstSync(path)
    config = QuoteSyncConfig(sync_interval_s=1)
    runner = threading.Thread(
        target=run_sync_daemon,
        args=(config,),
        kwargs={
            "db_path": path,
            "notifier": notifier,
            "stop_event": stop,
            "client": client,
            "log_path": tmp_path / "daemon.log",
        },
    )
    runner.start()
    runner.join(15)
    assert not runner.is_alive()
    assert not client.is_closed
    client.close()

    conn = db.connect(path)
    try:
        store = RecordStore(SqliteKeyValueStorage(conn))
        assert notifier.typed_id is not None
        assert store.find(notifier.typed_id).text == "typed by user"
        assert store.find("server-1").text == "server title 1 (edited)"
        assert store.find("server-3") is not None
        attempts = list_sync_attempts(conn, limit=10)
    finally:
        conn.close()
    assert len(attempts) >= 2
    assert all(row["ok"] == 1 for row in attempts)


def test_daemon_logs_failed_passes_to_file(tmp_path: Path) -> None:
    stop = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        stop.set()
        return httpx.Response(503)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    log_path = tmp_path / "logs" / "daemon.log"
    run_sync_daemon(
        QuoteSyncConfig(sync_interval_s=60),
        db_path=tmp_path / "quotes.sqlite",
        stop_event=stop,
        client=client,
        log_path=log_path,
    )
    client.close()

    assert "sync pass failed: fetch failed (503)" in log_path.read_text()
    assert not any(
        isinstance(handler, logging.FileHandler)
        for handler in logging.getLogger("quotesync").handlers
    )
