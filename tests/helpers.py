from __future__ import annotations

import contextlib
from collections.abc import Iterator


class MemoryKeyValueStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    @contextlib.contextmanager
    def atomic(self) -> Iterator[None]:
        yield
