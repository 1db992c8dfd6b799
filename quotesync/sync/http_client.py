from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlparse

import httpx


def build_base_url(address: str) -> str:
    trimmed = address.strip().rstrip("/")
    if not trimmed:
        return ""
    parsed = urlparse(trimmed)
    if parsed.scheme:
        return trimmed
    return f"http://{trimmed}"


def build_client(*, timeout_s: float = 10.0) -> httpx.Client:
    return httpx.Client(timeout=timeout_s, headers={"Accept": "application/json"})


def request_json(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    body: dict[str, Any] | None = None,
) -> tuple[int, Any]:
    """Issue one request and decode the JSON response body.

    Transport errors propagate as ``httpx.HTTPError`` and a malformed URL as
    ``httpx.InvalidURL``. A body that is not JSON
    is reported as ``{"error": "non_json_response: ..."}`` so callers can
    still surface the status code.
    """
    response = client.request(method, url, json=body)
    raw = response.content
    if not raw:
        return response.status_code, None
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        snippet = raw[:240].decode("utf-8", errors="replace").strip()
        payload = {"error": f"non_json_response: {snippet}" if snippet else "non_json_response"}
    return response.status_code, payload
