"""String-keyed, string-valued storage used to mirror the record store.

Durable values live in the SQLite ``kv_store`` table. Session-scoped values,
such as the last record shown, go in the same table under a per-session key
prefix so they outlive a single command but not the shell that ran it.
"""

from __future__ import annotations

import contextlib
import datetime as dt
import os
import sqlite3
import threading
from collections.abc import Iterator
from typing import ContextManager, Protocol

from .errors import PersistenceFailure


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def atomic(self) -> ContextManager[None]: ...


class SqliteKeyValueStorage:
    """Key/value rows in ``kv_store``.

    ``atomic()`` holds an immediate write transaction, so a read followed by
    a write inside it cannot interleave with another connection, including
    one in another process. Writes outside ``atomic()`` commit at once.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._lock = threading.RLock()
        self._atomic_depth = 0

    def get_item(self, key: str) -> str | None:
        with self._lock:
            try:
                row = self.conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as exc:
                raise PersistenceFailure(f"read of {key!r} failed: {exc}") from exc
        if row is None:
            return None
        return str(row["value"])

    def set_item(self, key: str, value: str) -> None:
        now = dt.datetime.now(dt.UTC).isoformat()
        with self._lock:
            try:
                self.conn.execute(
                    """
                    INSERT INTO kv_store(key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, now),
                )
                if not self._atomic_depth:
                    self.conn.commit()
            except sqlite3.Error as exc:
                if not self._atomic_depth:
                    self.conn.rollback()
                raise PersistenceFailure(f"write of {key!r} failed: {exc}") from exc

    @contextlib.contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            if self._atomic_depth:
                self._atomic_depth += 1
                try:
                    yield
                finally:
                    self._atomic_depth -= 1
                return
            try:
                self.conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                raise PersistenceFailure(f"could not lock storage: {exc}") from exc
            self._atomic_depth = 1
            try:
                yield
            except BaseException:
                self.conn.rollback()
                raise
            else:
                try:
                    self.conn.commit()
                except sqlite3.Error as exc:
                    self.conn.rollback()
                    raise PersistenceFailure(f"commit failed: {exc}") from exc
            finally:
                self._atomic_depth = 0


class ScopedStorage:
    """Prefixes every key with a scope, e.g. ``session:<id>:``."""

    def __init__(self, storage: KeyValueStorage, scope: str) -> None:
        self.storage = storage
        self.prefix = f"{scope}:"

    def get_item(self, key: str) -> str | None:
        return self.storage.get_item(self.prefix + key)

    def set_item(self, key: str, value: str) -> None:
        self.storage.set_item(self.prefix + key, value)

    def atomic(self) -> ContextManager[None]:
        return self.storage.atomic()


def current_session_id() -> str:
    # The parent of a CLI invocation is the shell, so one shell is one session.
    return os.environ.get("QUOTESYNC_SESSION") or str(os.getppid())


def session_storage(storage: KeyValueStorage, session_id: str | None = None) -> ScopedStorage:
    return ScopedStorage(storage, f"session:{session_id or current_session_id()}")
