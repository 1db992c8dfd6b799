from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

import httpx

from .. import db
from ..config import QuoteSyncConfig
from ..notify import Notifier, NullNotifier
from ..storage import SqliteKeyValueStorage
from ..store import RecordStore
from . import http_client
from .attempts import record_sync_attempt
from .gateway import RemoteGateway
from .sync_pass import SyncPassResult, run_sync_pass

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs reconciliation passes on a timer and on demand.

    At most one pass runs at a time. A pass requested while another is in
    flight is dropped, not queued.
    """

    def __init__(
        self,
        store: RecordStore,
        gateway: RemoteGateway,
        *,
        notifier: Notifier | None = None,
        on_pass: Callable[[SyncPassResult], None] | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.notifier = notifier or NullNotifier()
        self.on_pass = on_pass
        self._in_flight = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_pass(self) -> SyncPassResult | None:
        if not self._in_flight.acquire(blocking=False):
            logger.debug("sync pass already in flight; dropping tick")
            return None
        try:
            result = run_sync_pass(self.store, self.gateway, self.notifier)
            if self.on_pass is not None:
                self.on_pass(result)
            return result
        finally:
            self._in_flight.release()

    def start(self, interval_s: float) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        if self.running:
            raise RuntimeError("sync scheduler already started")
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            args=(interval_s,),
            name="quotesync-sync",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _loop(self, interval_s: float) -> None:
        self._safe_pass()
        while not self._stop.wait(interval_s):
            self._safe_pass()

    def _safe_pass(self) -> None:
        try:
            self.run_pass()
        except Exception as exc:
            logger.exception("sync pass crashed", exc_info=exc)


def run_sync_daemon(
    config: QuoteSyncConfig,
    *,
    db_path: Path | None = None,
    notifier: Notifier | None = None,
    stop_event: threading.Event | None = None,
    client: httpx.Client | None = None,
    log_path: Path | None = None,
) -> None:
    """Run the scheduler until ``stop_event`` is set (or forever).

    Each pass is written to ``sync_attempts``; failures also go to the
    daemon log file. A ``client`` passed in is left open for the caller.
    """
    conn = db.connect(db_path or config.db_path or db.DEFAULT_DB_PATH, check_same_thread=False)
    owns_client = client is None
    if client is None:
        client = http_client.build_client(timeout_s=config.http_timeout_s)
    handler = _attach_daemon_log(log_path or default_daemon_log_path())
    try:
        db.initialize_schema(conn)
        store = RecordStore(SqliteKeyValueStorage(conn))
        gateway = RemoteGateway(
            client,
            config.server_url,
            fetch_limit=config.fetch_limit,
            push_user_id=config.push_user_id,
        )

        def _record(result: SyncPassResult) -> None:
            record_sync_attempt(conn, result)
            if not result.ok:
                logger.warning("sync pass failed: %s", result.error or "unknown error")

        scheduler = SyncScheduler(store, gateway, notifier=notifier, on_pass=_record)
        scheduler.start(config.sync_interval_s)
        stop = stop_event or threading.Event()
        try:
            while not stop.wait(0.5):
                continue
        finally:
            scheduler.stop()
    finally:
        if handler is not None:
            logging.getLogger("quotesync").removeHandler(handler)
            handler.close()
        if owns_client:
            client.close()
        conn.close()


def default_daemon_log_path() -> Path:
    return Path.home() / ".quotesync" / "sync-daemon.log"


def _attach_daemon_log(path: Path) -> logging.Handler | None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        logger.warning("daemon log unavailable: %s", exc)
        return None
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logging.getLogger("quotesync").addHandler(handler)
    return handler
