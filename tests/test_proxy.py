"""Tests for the completion proxy routes."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from bizhub.config import Settings
from bizhub.proxy.app import (
    app,
    get_proxy_settings,
    get_upstream_client,
)

CONTENTS = [{"role": "user", "parts": [{"text": "hi"}]}]
GEMINI_REPLY = {"candidates": [{"content": {"parts": [{"text": "Hello!"}]}}]}


class FakeUpstream:
    """Records forwarded requests; ``handler`` decides the answer."""

    def __init__(self) -> None:
        self.requests = []
        self.handler = lambda request: httpx.Response(200, json=GEMINI_REPLY)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def upstream():
    fake = FakeUpstream()

    async def _client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as client:
            yield client

    app.dependency_overrides[get_upstream_client] = _client
    app.dependency_overrides[get_proxy_settings] = lambda: Settings(
        GEMINI_API_KEY="test-key", GEMINI_MODEL="gemini-test"
    )
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(upstream) -> TestClient:
    return TestClient(app)


def test_health(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "message": "Gemini proxy is active"}
    assert resp.headers["access-control-allow-origin"] == "*"


def test_preflight(client: TestClient) -> None:
    resp = client.options("/")
    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "apikey" in resp.headers["access-control-allow-headers"]


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"contents": None},
        {"messages": CONTENTS},
        {"contents": ""},
        {"contents": 0},
        {"contents": False},
    ],
)
def test_missing_contents(client: TestClient, upstream, body) -> None:
    resp = client.post("/", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing contents in request body"}
    assert upstream.requests == []


def test_non_json_body(client: TestClient) -> None:
    resp = client.post("/", content=b"not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400


def test_missing_api_key(client: TestClient, upstream) -> None:
    app.dependency_overrides[get_proxy_settings] = lambda: Settings(GEMINI_API_KEY=None)
    resp = client.post("/", json={"contents": CONTENTS})
    assert resp.status_code == 500
    assert resp.json() == {"error": "GEMINI_API_KEY not set in proxy configuration"}
    assert upstream.requests == []


def test_forwards_contents_and_relays_answer(client: TestClient, upstream) -> None:
    resp = client.post("/", json={"contents": CONTENTS, "extra": "dropped"})

    assert resp.status_code == 200
    assert resp.json() == GEMINI_REPLY
    assert resp.headers["access-control-allow-origin"] == "*"

    assert len(upstream.requests) == 1
    sent = upstream.requests[0]
    assert sent.url.path.endswith("/models/gemini-test:generateContent")
    assert sent.url.params["key"] == "test-key"
    assert json.loads(sent.content) == {"contents": CONTENTS}


def test_upstream_error_status_is_relayed(client: TestClient, upstream) -> None:
    upstream.handler = lambda request: httpx.Response(429, json={"error": {"code": 429}})
    resp = client.post("/", json={"contents": CONTENTS})
    assert resp.status_code == 429
    assert resp.json() == {"error": {"code": 429}}


def test_upstream_unreachable(client: TestClient, upstream) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    upstream.handler = refuse
    resp = client.post("/", json={"contents": CONTENTS})
    assert resp.status_code == 500
    assert "connection refused" in resp.json()["error"]


def test_empty_contents_array_is_forwarded(client: TestClient, upstream) -> None:
    """An empty list is present, just empty; the upstream decides what to make of it."""
    resp = client.post("/", json={"contents": []})
    assert resp.status_code == 200
    assert json.loads(upstream.requests[0].content) == {"contents": []}
