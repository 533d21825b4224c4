"""Tests for the HTTP client and plugin-wrapped endpoints"""

from __future__ import annotations

import asyncio
import json

import pytest
import requests

from endpoint_retry.infrastructure import http_client
from endpoint_retry.infrastructure.http_client import ApiClient, HttpError, requests_fetch
from endpoint_retry.infrastructure.plugin import Plugin, PluginHooks, create_plugin
from endpoint_retry.infrastructure.retry import retry_plugin


def _make_response(status_code: int, payload: dict | None = None, reason: str = "") -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.reason = reason
    r.url = "http://example.test"
    if payload is None:
        r._content = b""  # type: ignore[attr-defined]
    else:
        r._content = json.dumps(payload).encode("utf-8")  # type: ignore[attr-defined]
        r.headers["Content-Type"] = "application/json"
    return r


class FakeFetch:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    async def fake_sleep(seconds):
        return None

    monkeypatch.setattr("endpoint_retry.infrastructure.retry._sleep", fake_sleep)


def test_endpoint_without_plugins():
    fetch = FakeFetch(_make_response(200, {"ok": True}))
    client = ApiClient("http://example.test/api/", fetch=fetch)

    result = asyncio.run(client.endpoint("post", "/users")({"name": "ada"}))

    assert result == {"ok": True}
    assert fetch.calls == [("POST", "http://example.test/api/users", {"json": {"name": "ada"}})]


def test_get_payload_sent_as_params():
    fetch = FakeFetch(_make_response(200, [1, 2]))
    client = ApiClient("http://example.test", fetch=fetch)

    assert asyncio.run(client.endpoint("GET", "items")({"page": 2})) == [1, 2]
    assert fetch.calls[0][2] == {"params": {"page": 2}}


def test_empty_body_returns_none():
    fetch = FakeFetch(_make_response(204))
    client = ApiClient("http://example.test", fetch=fetch)
    assert asyncio.run(client.endpoint("DELETE", "/items/1")()) is None


def test_non_json_body_returns_text():
    response = _make_response(200)
    response._content = b"plain"  # type: ignore[attr-defined]
    client = ApiClient("http://example.test", fetch=FakeFetch(response))
    assert asyncio.run(client.endpoint("GET", "/ping")()) == "plain"


def test_error_response_raises_http_error():
    fetch = FakeFetch(_make_response(404, {"error": "missing"}, reason="Not Found"))
    client = ApiClient("http://example.test", fetch=fetch)

    with pytest.raises(HttpError) as exc_info:
        asyncio.run(client.endpoint("GET", "/users/9")())
    assert exc_info.value.status == 404
    assert exc_info.value.status_text == "Not Found"
    assert "missing" in exc_info.value.body


def test_retry_plugin_end_to_end():
    observed = []
    fetch = FakeFetch(
        _make_response(503, {"error": "busy"}),
        _make_response(500, {"error": "boom"}),
        _make_response(200, {"ok": True}),
    )
    client = ApiClient(
        "http://example.test",
        plugins=[retry_plugin(max_retries=3, base_delay=100, on_retry=lambda e, a, d: observed.append((e.status, a, d)))],
        fetch=fetch,
    )

    assert asyncio.run(client.endpoint("GET", "/users")()) == {"ok": True}
    assert len(fetch.calls) == 3
    assert observed == [(503, 1, 100), (500, 2, 200)]


def test_retry_plugin_respects_method_filter():
    fetch = FakeFetch(_make_response(503), _make_response(200, {"ok": True}))
    client = ApiClient(
        "http://example.test",
        plugins=[retry_plugin(retry_methods=["GET"])],
        fetch=fetch,
    )

    with pytest.raises(HttpError):
        asyncio.run(client.endpoint("POST", "/users")({"name": "ada"}))
    assert len(fetch.calls) == 1


def test_plugins_applied_first_outermost():
    order = []

    def tagging(tag):
        def factory():
            def handler_wrapper(handler, endpoint):
                async def wrapped(payload, context):
                    order.append((tag, endpoint.method, endpoint.path))
                    return await handler(payload, context)

                return wrapped

            return PluginHooks(handler_wrapper=handler_wrapper)

        return create_plugin(tag, factory)()

    outer, inner = tagging("outer"), tagging("inner")
    assert isinstance(outer, Plugin)
    client = ApiClient("http://example.test", plugins=[outer, inner], fetch=FakeFetch(_make_response(200, {})))

    asyncio.run(client.endpoint("get", "/x")())
    assert order == [("outer", "GET", "/x"), ("inner", "GET", "/x")]


def test_custom_handler():
    async def handler(payload, context):
        return f"{context.method} {context.url} {payload}"

    client = ApiClient("http://example.test/", fetch=FakeFetch())
    assert asyncio.run(client.endpoint("put", "/a", handler=handler)(1)) == "PUT http://example.test/a 1"


def test_requests_fetch_uses_requests(monkeypatch):
    captured = {}

    def fake_request(method, url, **kwargs):
        captured.update(method=method, url=url, kwargs=kwargs)
        return _make_response(200, {"ok": True})

    monkeypatch.setattr(requests, "request", fake_request)

    response = asyncio.run(requests_fetch("GET", "http://example.test", params={"a": 1}))

    assert response.status_code == 200
    assert captured["method"] == "GET"
    assert captured["kwargs"] == {"params": {"a": 1}, "timeout": http_client.DEFAULT_TIMEOUT}


def test_requests_http_error_status_drives_retry():
    calls = {"n": 0}

    async def handler(payload, context):
        calls["n"] += 1
        response = _make_response(502)
        raise requests.HTTPError("bad gateway", response=response)

    client = ApiClient("http://example.test", plugins=[retry_plugin(max_retries=2)], fetch=FakeFetch())
    with pytest.raises(requests.HTTPError):
        asyncio.run(client.endpoint("GET", "/x", handler=handler)())
    assert calls["n"] == 3
