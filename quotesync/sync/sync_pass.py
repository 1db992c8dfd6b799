from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

from ..errors import PersistenceFailure
from ..notify import Notifier
from ..store import RecordStore, SyncOutcome
from .gateway import RemoteGateway
from .reconcile import reconcile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncPassResult:
    ok: bool
    started_at: str
    finished_at: str
    fetched: int = 0
    outcome: SyncOutcome | None = None
    grew_by: int = 0
    error: str | None = None


def _now() -> str:
    return dt.datetime.now(dt.UTC).isoformat()


def run_sync_pass(
    store: RecordStore,
    gateway: RemoteGateway,
    notifier: Notifier,
) -> SyncPassResult:
    """Fetch one remote batch, merge it, and report what changed."""

    started_at = _now()
    size_before = len(store)
    batch = gateway.fetch_batch()
    if not batch:
        if gateway.last_error is not None:
            error = str(gateway.last_error)
            notifier.sync_failed(error)
            return SyncPassResult(ok=False, started_at=started_at, finished_at=_now(), error=error)
        return SyncPassResult(ok=True, started_at=started_at, finished_at=_now())

    try:
        outcome = reconcile(store, batch)
    except PersistenceFailure as exc:
        logger.error("sync pass could not persist merged records: %s", exc)
        error = f"could not save merged quotes: {exc}"
        notifier.sync_failed(error)
        return SyncPassResult(
            ok=False,
            started_at=started_at,
            finished_at=_now(),
            fetched=len(batch),
            error=error,
        )

    grew_by = len(store) - size_before
    if outcome.changed:
        notifier.sync_completed(outcome)
    elif grew_by > 0:
        notifier.records_added(grew_by)
    return SyncPassResult(
        ok=True,
        started_at=started_at,
        finished_at=outcome.timestamp,
        fetched=len(batch),
        outcome=outcome,
        grew_by=grew_by,
    )
