from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_quotesync_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("QUOTESYNC_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("QUOTESYNC_DB_PATH", str(tmp_path / "quotes.sqlite"))
    for name in (
        "QUOTESYNC_SERVER_URL",
        "QUOTESYNC_SYNC_INTERVAL_S",
        "QUOTESYNC_FETCH_LIMIT",
        "QUOTESYNC_HTTP_TIMEOUT_S",
        "QUOTESYNC_PUSH_USER_ID",
        "QUOTESYNC_PUSH_ON_ADD",
        "QUOTESYNC_SESSION",
    ):
        monkeypatch.delenv(name, raising=False)
