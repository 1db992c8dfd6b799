from __future__ import annotations

import json
from pathlib import Path

import pytest

from helpers import MemoryKeyValueStorage
from quotesync.errors import ImportFormatError
from quotesync.store import QUOTES_KEY, RecordStore
from quotesync.transfer import export_all, export_file, import_batch, import_file


def test_export_all_is_pretty_printed_and_side_effect_free() -> None:
    storage = MemoryKeyValueStorage()
    store = RecordStore(storage)
    payload = export_all(store)
    assert payload.startswith(b"[\n  {")
    data = json.loads(payload)
    assert [item["id"] for item in data] == ["local-1", "local-2"]
    assert storage.get_item(QUOTES_KEY) is None


def test_import_skips_texts_already_present() -> None:
    store = RecordStore(MemoryKeyValueStorage())
    raw = json.dumps(
        [
            {"text": "The only way to do great work is to love what you do.", "category": "Dup"},
            {"text": "Fresh one", "category": "New"},
            {"text": "Fresh two", "category": "New"},
        ]
    ).encode("utf-8")
    assert import_batch(store, raw) == 2
    assert [r.text for r in store.get("New")] == ["Fresh one", "Fresh two"]
    assert len(store) == 4
    assert all(r.id.startswith("local-") for r in store.get("New"))


def test_import_keeps_unused_ids_and_replaces_taken_ones() -> None:
    store = RecordStore(MemoryKeyValueStorage())
    raw = json.dumps(
        [
            {"id": "local-77", "text": "keeps id", "category": "A"},
            {"id": "local-1", "text": "id taken", "category": "A"},
        ]
    )
    assert import_batch(store, raw) == 2
    assert store.find("local-77").text == "keeps id"
    assert store.find("local-1").text.startswith("The only way")
    renamed = [r for r in store.get("A") if r.text == "id taken"]
    assert renamed and renamed[0].id not in {"local-1", "local-77"}


@pytest.mark.parametrize(
    "raw",
    [
        b'{"text": "not a list", "category": "x"}',
        b"not json at all",
        b'[{"text": "ok", "category": "x"}, 5]',
        b'[{"text": "missing category"}]',
    ],
)
def test_import_rejects_malformed_payloads(raw: bytes) -> None:
    storage = MemoryKeyValueStorage()
    store = RecordStore(storage)
    with pytest.raises(ImportFormatError):
        import_batch(store, raw)
    assert len(store) == 2
    assert storage.get_item(QUOTES_KEY) is None


def test_export_then_import_into_other_store_dedupes(tmp_path: Path) -> None:
    source = RecordStore(MemoryKeyValueStorage())
    source.insert_new("Only in source", "Shared")
    path = tmp_path / "quotes.json"
    export_file(source, path)

    target = RecordStore(MemoryKeyValueStorage())
    assert import_file(target, path) == 1
    assert [r.text for r in target.get("Shared")] == ["Only in source"]
    assert import_file(target, path) == 0


def test_import_file_missing_is_format_error(tmp_path: Path) -> None:
    store = RecordStore(MemoryKeyValueStorage())
    with pytest.raises(ImportFormatError, match="could not read"):
        import_file(store, tmp_path / "missing.json")
