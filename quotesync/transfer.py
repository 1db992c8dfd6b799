"""JSON import and export of the quote collection.

Imports de-duplicate by text against the records already in the store, which
differs from the id-based policy the reconciler uses.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .errors import ImportFormatError
from .store import Record, RecordStore


def export_all(store: RecordStore) -> bytes:
    return (store.to_json(indent=2) + "\n").encode("utf-8")


def export_file(store: RecordStore, path: Path) -> int:
    payload = export_all(store)
    path.write_bytes(payload)
    return len(payload)


def parse_batch(raw: bytes | str) -> list[dict[str, Any]]:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ImportFormatError("import file is not valid utf-8") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"invalid json: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(data, list):
        raise ImportFormatError(f"expected a json array of quotes, got {type(data).__name__}")
    items: list[dict[str, Any]] = []
    for position, item in enumerate(data):
        if not isinstance(item, dict):
            raise ImportFormatError(f"entry {position} is not an object")
        if not isinstance(item.get("text"), str) or not isinstance(item.get("category"), str):
            raise ImportFormatError(f"entry {position} needs string text and category")
        items.append(item)
    return items


def import_batch(store: RecordStore, raw: bytes | str) -> int:
    items = parse_batch(raw)
    with store.transaction():
        existing_texts = {record.text for record in store.get()}
        fresh: list[Record] = []
        used_ids: set[str] = set()
        for item in items:
            if item["text"] in existing_texts:
                continue
            record_id = item.get("id")
            if (
                not isinstance(record_id, str)
                or not record_id
                or record_id in used_ids
                or store.find(record_id) is not None
            ):
                record_id = store.new_local_id()
                while record_id in used_ids:
                    record_id = store.new_local_id()
            used_ids.add(record_id)
            fresh.append(Record(id=record_id, text=item["text"], category=item["category"]))
        return store.append_many(fresh)


def import_file(store: RecordStore, path: Path) -> int:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ImportFormatError(f"could not read {path}: {exc.strerror or exc}") from exc
    return import_batch(store, raw)
