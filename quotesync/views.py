from __future__ import annotations

import json
import random

from .storage import KeyValueStorage
from .store import ALL_CATEGORIES, Record, RecordStore

LAST_SHOWN_KEY = "lastQuote"


def pick_random(
    store: RecordStore,
    category: str | None = None,
    *,
    rng: random.Random | None = None,
) -> Record | None:
    candidates = store.get(category or ALL_CATEGORIES)
    if not candidates:
        return None
    return (rng or random).choice(candidates)


def format_record(record: Record) -> str:
    return f'"{record.text}"\n- {record.category} (ID: {record.id or "N/A"})'


def remember_shown(session: KeyValueStorage, record: Record) -> None:
    session.set_item(LAST_SHOWN_KEY, json.dumps(record.to_dict(), ensure_ascii=False))


def last_shown(session: KeyValueStorage) -> Record | None:
    raw = session.get_item(LAST_SHOWN_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
        return Record.from_dict(data) if isinstance(data, dict) else None
    except (json.JSONDecodeError, ValueError):
        return None
