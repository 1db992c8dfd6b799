from __future__ import annotations

import sqlite3
from typing import Any

from .sync_pass import SyncPassResult


def record_sync_attempt(conn: sqlite3.Connection, result: SyncPassResult) -> None:
    outcome = result.outcome
    conn.execute(
        """
        INSERT INTO sync_attempts(
            started_at,
            finished_at,
            ok,
            fetched,
            added,
            conflicts,
            error
        )
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            result.started_at,
            result.finished_at,
            1 if result.ok else 0,
            result.fetched,
            outcome.added if outcome else 0,
            outcome.conflicts if outcome else 0,
            result.error,
        ),
    )
    conn.commit()


def list_sync_attempts(conn: sqlite3.Connection, limit: int = 10) -> list[dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT started_at, finished_at, ok, fetched, added, conflicts, error
        FROM sync_attempts
        ORDER BY finished_at DESC, id DESC
        LIMIT ?
        """,
        (limit,),
    ).fetchall()
    return [dict(row) for row in rows]
