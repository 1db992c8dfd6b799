from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import RemoteUnavailable
from ..store import Record
from . import http_client

logger = logging.getLogger(__name__)

REMOTE_ID_PREFIX = "server-"
REMOTE_CATEGORY_PREFIX = "Server-"
DEFAULT_FETCH_LIMIT = 5


def remote_record(item: dict[str, Any]) -> Record | None:
    remote_id = item.get("id")
    title = item.get("title")
    user_id = item.get("userId")
    if not isinstance(title, str) or _blank(remote_id) or _blank(user_id):
        return None
    return Record(
        id=f"{REMOTE_ID_PREFIX}{remote_id}",
        text=title,
        category=f"{REMOTE_CATEGORY_PREFIX}{user_id}",
    )


def _blank(value: object) -> bool:
    return value is None or str(value).strip() == ""


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class RemoteGateway:
    """Reads quote batches from, and pushes local quotes to, the remote endpoint.

    Neither operation raises to the caller. Failures are logged and kept on
    ``last_error`` until the next call; ``fetch_batch`` then returns an empty
    list and ``push_record`` returns ``False``.
    """

    def __init__(
        self,
        client: httpx.Client,
        endpoint: str,
        *,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        push_user_id: int = 1,
    ) -> None:
        self.client = client
        self.endpoint = http_client.build_base_url(endpoint)
        self.fetch_limit = fetch_limit
        self.push_user_id = push_user_id
        self.last_error: RemoteUnavailable | None = None

    def fetch_batch(self) -> list[Record]:
        self.last_error = None
        try:
            return self._fetch()
        except RemoteUnavailable as exc:
            self._record_failure(exc)
            return []

    def push_record(self, record: Record) -> bool:
        self.last_error = None
        body = {"title": record.text, "body": record.category, "userId": self.push_user_id}
        try:
            status, _payload = http_client.request_json(
                self.client, "POST", self.endpoint, body=body
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._record_failure(RemoteUnavailable("push", _describe(exc)))
            return False
        if not _is_success(status):
            self._record_failure(RemoteUnavailable("push", "unexpected status", status=status))
            return False
        logger.debug("pushed record %s", record.id)
        return True

    def _fetch(self) -> list[Record]:
        try:
            status, payload = http_client.request_json(self.client, "GET", self.endpoint)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RemoteUnavailable("fetch", _describe(exc)) from exc
        if not _is_success(status):
            raise RemoteUnavailable("fetch", "unexpected status", status=status)
        if not isinstance(payload, list):
            raise RemoteUnavailable(
                "fetch", f"expected a json array, got {type(payload).__name__}", status=status
            )
        records: list[Record] = []
        for item in payload[: self.fetch_limit]:
            record = remote_record(item) if isinstance(item, dict) else None
            if record is None:
                logger.warning("skipping malformed remote item", extra={"item": repr(item)[:200]})
                continue
            records.append(record)
        return records

    def _record_failure(self, exc: RemoteUnavailable) -> None:
        self.last_error = exc
        logger.warning(
            str(exc),
            extra={
                "operation": exc.operation,
                "endpoint": self.endpoint,
                "status": exc.status,
            },
        )


def _describe(exc: BaseException) -> str:
    message = str(exc).strip()
    return f"{exc.__class__.__name__}: {message}" if message else exc.__class__.__name__
