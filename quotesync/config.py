from __future__ import annotations

import json
import os
import warnings
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/quotesync/config.json").expanduser()
DEFAULT_SERVER_URL = "https://jsonplaceholder.typicode.com/posts"

CONFIG_ENV_OVERRIDES = {
    "server_url": "QUOTESYNC_SERVER_URL",
    "sync_interval_s": "QUOTESYNC_SYNC_INTERVAL_S",
    "fetch_limit": "QUOTESYNC_FETCH_LIMIT",
    "http_timeout_s": "QUOTESYNC_HTTP_TIMEOUT_S",
    "push_user_id": "QUOTESYNC_PUSH_USER_ID",
    "push_on_add": "QUOTESYNC_PUSH_ON_ADD",
    "db_path": "QUOTESYNC_DB_PATH",
}

_KINDS = {
    "sync_interval_s": "int",
    "fetch_limit": "int",
    "push_user_id": "int",
    "http_timeout_s": "float",
    "push_on_add": "bool",
}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("QUOTESYNC_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    return config_path


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class QuoteSyncConfig:
    server_url: str = DEFAULT_SERVER_URL
    sync_interval_s: int = 10
    # Only the first N remote entries are merged per pass.
    fetch_limit: int = 5
    http_timeout_s: float = 10.0
    push_user_id: int = 1
    push_on_add: bool = True
    db_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})
# Zero or negative values fall back to the default.
_POSITIVE_KEYS = {"sync_interval_s", "fetch_limit", "http_timeout_s"}


def _to_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(word)


_CONVERTERS = {"int": int, "float": float, "bool": _to_bool}


def _coerce(key: str, value: object, default: Any) -> Any:
    """Convert a raw file or env value to the field's type, warning and keeping
    ``default`` when it does not convert."""
    if value is None:
        return default
    kind = _KINDS.get(key)
    if kind is None:
        return value
    try:
        converted = _CONVERTERS[kind](value)
    except (TypeError, ValueError):
        warnings.warn(f"Invalid {kind} for {key}: {value!r}", RuntimeWarning, stacklevel=3)
        return default
    if key in _POSITIVE_KEYS and converted <= 0:
        warnings.warn(f"{key} must be positive, got {value!r}", RuntimeWarning, stacklevel=3)
        return default
    return converted


def load_config(path: Path | None = None) -> QuoteSyncConfig:
    cfg = QuoteSyncConfig()
    config_path = get_config_path(path)
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
        except json.JSONDecodeError:
            data = {}
        if isinstance(data, dict):
            cfg = _apply_dict(cfg, data)
    cfg = _apply_dict(cfg, get_env_overrides())
    return cfg


def _apply_dict(cfg: QuoteSyncConfig, data: dict[str, Any]) -> QuoteSyncConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        setattr(cfg, key, _coerce(key, value, getattr(cfg, key)))
    return cfg
