from __future__ import annotations

from pathlib import Path

from quotesync import db
from quotesync.store import SyncOutcome
from quotesync.sync.attempts import list_sync_attempts, record_sync_attempt
from quotesync.sync.sync_pass import SyncPassResult


def test_attempts_are_listed_newest_first(tmp_path: Path) -> None:
    conn = db.connect(tmp_path / "q.sqlite")
    try:
        db.initialize_schema(conn)
        record_sync_attempt(
            conn,
            SyncPassResult(
                ok=True,
                started_at="2026-01-01T00:00:00+00:00",
                finished_at="2026-01-01T00:00:01+00:00",
                fetched=5,
                outcome=SyncOutcome(added=3, conflicts=1, timestamp="2026-01-01T00:00:01+00:00"),
            ),
        )
        record_sync_attempt(
            conn,
            SyncPassResult(
                ok=False,
                started_at="2026-01-01T00:01:00+00:00",
                finished_at="2026-01-01T00:01:01+00:00",
                error="fetch failed (503): unexpected status",
            ),
        )
        rows = list_sync_attempts(conn, limit=10)
    finally:
        conn.close()
    assert [row["ok"] for row in rows] == [0, 1]
    assert rows[0]["error"].startswith("fetch failed")
    assert (rows[1]["fetched"], rows[1]["added"], rows[1]["conflicts"]) == (5, 3, 1)
