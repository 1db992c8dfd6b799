from __future__ import annotations

import contextlib
import json
import threading
import time
from collections.abc import Callable, Iterable, Iterator

from ..errors import PersistenceFailure, ValidationError
from ..storage import KeyValueStorage
from .types import Record

QUOTES_KEY = "quotes"
FILTER_KEY = "lastCategoryFilter"
ALL_CATEGORIES = "all"
LOCAL_ID_PREFIX = "local-"

DEFAULT_RECORDS: tuple[Record, ...] = (
    Record(
        id="local-1",
        text="The only way to do great work is to love what you do.",
        category="Work",
    ),
    Record(
        id="local-2",
        text="Strive not to be a success, but rather to be of value.",
        category="Inspiration",
    ),
)


class RecordStore:
    """Ordered, id-addressable quote collection mirrored to durable storage.

    Every mutation runs inside :meth:`transaction`. The outermost transaction
    reloads the collection from storage under the storage write lock, so
    changes saved by another process are kept, and writes the full
    collection back once on exit. If that write fails, the in-memory
    collection is rolled back to its state at the start of the
    transaction and :class:`PersistenceFailure` is raised.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self._clock = clock
        self._lock = threading.RLock()
        self._records: list[Record] = []
        self._index: dict[str, int] = {}
        self._depth = 0
        self._last_local_ms = 0
        self._filter = ALL_CATEGORIES
        self._hydrate()

    def _hydrate(self) -> None:
        if not self._reload():
            for record in DEFAULT_RECORDS:
                self._apply_upsert(record)
        stored_filter = self.storage.get_item(FILTER_KEY) or ALL_CATEGORIES
        self._filter = stored_filter if stored_filter in self.categories() else ALL_CATEGORIES

    def _reload(self) -> bool:
        """Replace the in-memory list with what storage holds, if anything."""
        raw = self.storage.get_item(QUOTES_KEY)
        if raw is None or not raw.strip():
            return False
        records = _decode_records(raw)
        self._restore([])
        for record in records:
            self._apply_upsert(record)
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get(self, filter_category: str | None = None) -> list[Record]:
        with self._lock:
            if not filter_category or filter_category == ALL_CATEGORIES:
                return list(self._records)
            return [r for r in self._records if r.category == filter_category]

    def find(self, record_id: str) -> Record | None:
        with self._lock:
            idx = self._index.get(record_id)
            return self._records[idx] if idx is not None else None

    def categories(self) -> list[str]:
        with self._lock:
            seen: dict[str, None] = {}
            for record in self._records:
                seen.setdefault(record.category, None)
        return [ALL_CATEGORIES, *seen]

    @property
    def filter(self) -> str:
        return self._filter

    def set_filter(self, category: str) -> None:
        category = category.strip()
        with self._lock, self.storage.atomic():
            self._reload()
            if category not in self.categories():
                raise ValidationError("category", f"unknown category: {category!r}")
            self.storage.set_item(FILTER_KEY, category)
        self._filter = category

    @contextlib.contextmanager
    def transaction(self) -> Iterator[RecordStore]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return
            snapshot: list[Record] | None = None
            try:
                with self.storage.atomic():
                    # Other writers may have saved since we last looked.
                    self._reload()
                    snapshot = list(self._records)
                    self._depth = 1
                    try:
                        yield self
                    finally:
                        self._depth = 0
                    self._persist()
            except BaseException:
                if snapshot is not None:
                    self._restore(snapshot)
                raise

    def upsert(self, record: Record) -> None:
        with self.transaction():
            self._apply_upsert(record)

    def insert_new(self, text: str, category: str) -> Record:
        text = (text or "").strip()
        category = (category or "").strip()
        if not text:
            raise ValidationError("text")
        if not category:
            raise ValidationError("category")
        with self.transaction():
            record = Record(id=self.new_local_id(), text=text, category=category)
            self._apply_upsert(record)
        return record

    def append_many(self, records: Iterable[Record]) -> int:
        count = 0
        with self.transaction():
            for record in records:
                if record.id in self._index:
                    raise ValueError(f"duplicate record id: {record.id}")
                self._apply_upsert(record)
                count += 1
        return count

    def new_local_id(self) -> str:
        with self._lock:
            ms = max(int(self._clock() * 1000), self._last_local_ms + 1)
            while f"{LOCAL_ID_PREFIX}{ms}" in self._index:
                ms += 1
            self._last_local_ms = ms
            return f"{LOCAL_ID_PREFIX}{ms}"

    def to_json(self, indent: int | None = None) -> str:
        with self._lock:
            payload = [record.to_dict() for record in self._records]
        return json.dumps(payload, ensure_ascii=False, indent=indent)

    def _apply_upsert(self, record: Record) -> None:
        idx = self._index.get(record.id)
        if idx is None:
            self._index[record.id] = len(self._records)
            self._records.append(record)
        else:
            self._records[idx] = record

    def _restore(self, snapshot: list[Record]) -> None:
        self._records = snapshot
        self._index = {record.id: idx for idx, record in enumerate(snapshot)}

    def _persist(self) -> None:
        try:
            self.storage.set_item(QUOTES_KEY, self.to_json())
        except OSError as exc:
            raise PersistenceFailure(f"write of {QUOTES_KEY!r} failed: {exc}") from exc


def _decode_records(raw: str) -> list[Record]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceFailure(f"stored {QUOTES_KEY!r} is not valid json") from exc
    if not isinstance(data, list):
        raise PersistenceFailure(f"stored {QUOTES_KEY!r} must be a list")
    records: list[Record] = []
    for item in data:
        if not isinstance(item, dict):
            raise PersistenceFailure(f"stored {QUOTES_KEY!r} contains a non-object entry")
        try:
            records.append(Record.from_dict(item))
        except ValueError as exc:
            raise PersistenceFailure(f"stored {QUOTES_KEY!r} entry invalid: {exc}") from exc
    return records
