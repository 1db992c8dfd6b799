from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Record:
    id: str
    text: str
    category: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        record_id = data.get("id")
        text = data.get("text")
        category = data.get("category")
        if not isinstance(record_id, str) or not record_id:
            raise ValueError("record id must be a non-empty string")
        if not isinstance(text, str) or not isinstance(category, str):
            raise ValueError("record text and category must be strings")
        return cls(id=record_id, text=text, category=category)


@dataclass(frozen=True)
class SyncOutcome:
    added: int
    conflicts: int
    timestamp: str

    @property
    def changed(self) -> bool:
        return self.added > 0 or self.conflicts > 0
