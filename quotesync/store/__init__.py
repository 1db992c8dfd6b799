from __future__ import annotations

from ._store import (
    ALL_CATEGORIES,
    DEFAULT_RECORDS,
    FILTER_KEY,
    LOCAL_ID_PREFIX,
    QUOTES_KEY,
    RecordStore,
)
from .types import Record, SyncOutcome

__all__ = [
    "ALL_CATEGORIES",
    "DEFAULT_RECORDS",
    "FILTER_KEY",
    "LOCAL_ID_PREFIX",
    "QUOTES_KEY",
    "Record",
    "RecordStore",
    "SyncOutcome",
]
