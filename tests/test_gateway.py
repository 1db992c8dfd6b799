from __future__ import annotations

import json

import httpx

from quotesync.store import Record
from quotesync.sync.gateway import RemoteGateway

ENDPOINT = "https://remote.test/posts"


def _posts(count: int) -> list[dict[str, object]]:
    return [{"id": n, "userId": (n % 3) + 1, "title": f"title {n}", "body": "..."} for n in range(1, count + 1)]


def _gateway(handler, **kwargs) -> RemoteGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return RemoteGateway(client, ENDPOINT, **kwargs)


def test_fetch_batch_maps_first_five_items() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, json=_posts(100)))
    batch = gateway.fetch_batch()
    assert len(batch) == 5
    assert batch[0] == Record(id="server-1", text="title 1", category="Server-2")
    assert [r.id for r in batch] == [f"server-{n}" for n in range(1, 6)]
    assert gateway.last_error is None


def test_fetch_batch_ids_are_stable_across_fetches() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, json=_posts(3)))
    assert gateway.fetch_batch() == gateway.fetch_batch()


def test_fetch_batch_skips_malformed_items_within_limit() -> None:
    payload = [{"id": 1, "userId": 1, "title": "ok"}, {"userId": 1, "title": "no id"}, "junk"]
    gateway = _gateway(lambda request: httpx.Response(200, json=payload))
    assert [r.id for r in gateway.fetch_batch()] == ["server-1"]


def test_fetch_batch_returns_empty_on_bad_status() -> None:
    gateway = _gateway(lambda request: httpx.Response(503, json={"error": "down"}))
    assert gateway.fetch_batch() == []
    assert gateway.last_error is not None
    assert gateway.last_error.operation == "fetch"
    assert gateway.last_error.status == 503


def test_fetch_batch_returns_empty_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    gateway = _gateway(handler)
    assert gateway.fetch_batch() == []
    assert "ConnectError" in str(gateway.last_error)


def test_fetch_batch_rejects_non_array_payload() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, json={"posts": []}))
    assert gateway.fetch_batch() == []
    assert "expected a json array" in str(gateway.last_error)


def test_push_record_posts_title_body_user_id() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": 101})

    gateway = _gateway(handler, push_user_id=7)
    ok = gateway.push_record(Record(id="local-1", text="hello", category="Work"))
    assert ok is True
    assert seen[0].method == "POST"
    assert str(seen[0].url) == ENDPOINT
    assert json.loads(seen[0].content) == {"title": "hello", "body": "Work", "userId": 7}


def test_push_record_returns_false_instead_of_raising() -> None:
    record = Record(id="local-1", text="hello", category="Work")
    failing = _gateway(lambda request: httpx.Response(500))
    assert failing.push_record(record) is False
    assert failing.last_error.operation == "push"

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    timing_out = _gateway(handler)
    assert timing_out.push_record(record) is False


def test_malformed_endpoint_is_contained() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_posts(1))

    client = httpx.Client(transport=httpx.MockTransport(handler))
    gateway = RemoteGateway(client, "http://remote.test:notaport/posts")
    assert gateway.fetch_batch() == []
    assert gateway.last_error.operation == "fetch"
    assert "InvalidURL" in str(gateway.last_error)
    assert gateway.push_record(Record(id="local-1", text="hello", category="Work")) is False
    assert gateway.last_error.operation == "push"
    assert calls == []


def test_fetch_batch_skips_items_without_user_id() -> None:
    payload = [
        {"id": 1, "title": "no user"},
        {"id": 2, "userId": "  ", "title": "blank user"},
        {"id": 3, "userId": None, "title": "null user"},
        {"id": 4, "userId": 2, "title": "kept"},
    ]
    gateway = _gateway(lambda request: httpx.Response(200, json=payload))
    batch = gateway.fetch_batch()
    assert batch == [Record(id="server-4", text="kept", category="Server-2")]
    assert all(not r.category.endswith("None") for r in batch)
