"""Remote-precedence merge of a remote batch into the record store.

A remote record always replaces a local record with the same id. Only a text
difference counts as a conflict; a category-only change is applied silently.
Local ids and remote ids live in separate namespaces, so records created
locally are never touched here.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable

from ..store import Record, RecordStore, SyncOutcome


def reconcile(store: RecordStore, remote_batch: Iterable[Record]) -> SyncOutcome:
    added = 0
    conflicts = 0
    with store.transaction():
        for remote in remote_batch:
            existing = store.find(remote.id)
            if existing is None:
                added += 1
            elif existing.text != remote.text:
                conflicts += 1
            store.upsert(remote)
    return SyncOutcome(
        added=added,
        conflicts=conflicts,
        timestamp=dt.datetime.now(dt.UTC).isoformat(),
    )
