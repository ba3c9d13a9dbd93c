"""Tests for mirror fallback fetching."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from reply_guy.config import FetchConfig
from reply_guy.core.errors import FetchError
from reply_guy.fetch.fetcher import MirrorFetcher, fetch_url

MIRRORS = [
    "https://m1.example",
    "https://m2.example/",
    "https://m3.example",
    "https://m4.example",
]


def _run_fetch(handler, identifier="999", **cfg_overrides):
    cfg = FetchConfig(mirrors=list(MIRRORS), **cfg_overrides)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = MirrorFetcher(cfg, client=client)
            return await fetcher.fetch(identifier)

    return asyncio.run(_go())


def test_second_mirror_used_after_timeout_and_third_never_contacted():
    hosts = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        if request.url.host == "m1.example":
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, text=f"<html>{request.url.host}</html>")

    body = _run_fetch(handler)

    assert body == "<html>m2.example</html>"
    assert hosts == ["m1.example", "m2.example"]


def test_non_success_status_moves_to_next_mirror():
    hosts = []

    def handler(request):
        hosts.append(request.url.host)
        if request.url.host in {"m1.example", "m2.example"}:
            return httpx.Response(503 if request.url.host == "m1.example" else 404)
        return httpx.Response(200, text="ok body")

    assert _run_fetch(handler) == "ok body"
    assert hosts == ["m1.example", "m2.example", "m3.example"]


def test_post_url_built_from_base_and_identifier():
    paths = []

    def handler(request):
        paths.append(str(request.url))
        return httpx.Response(200, text="x")

    _run_fetch(handler, identifier="123")

    assert paths == ["https://m1.example/i/status/123"]


def test_owned_client_sends_browser_user_agent_and_is_closed():
    cfg = FetchConfig(mirrors=["https://m1.example"], timeout_seconds=10.0)
    fetcher = MirrorFetcher(cfg)
    seen = {}

    async def _go():
        async with fetcher:
            client = fetcher._client  # noqa: SLF001
            seen["ua"] = client.headers["user-agent"]
            seen["timeout"] = client.timeout.read

    asyncio.run(_go())

    assert seen["ua"].startswith("Mozilla/5.0")
    assert seen["timeout"] == 10.0
    assert fetcher._client is None  # noqa: SLF001


def test_all_mirrors_exhausted_raises_fetch_error():
    def handler(request):
        if request.url.host == "m4.example":
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(500)

    with pytest.raises(FetchError, match="no mirror returned content") as excinfo:
        _run_fetch(handler)

    reasons = [exc.reason for _, exc in excinfo.value.failures]
    assert reasons == ["http_status", "http_status", "http_status", "transport"]


def test_fetch_url_reports_distinct_reasons():
    def handler(request):
        path = request.url.path
        if path == "/slow":
            raise httpx.ReadTimeout("slow", request=request)
        if path == "/down":
            raise httpx.ConnectError("down", request=request)
        if path == "/missing":
            return httpx.Response(404)
        return httpx.Response(200, text="fine")

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return [
                await fetch_url(client, f"https://h.example{p}", timeout=1.0)
                for p in ("/ok", "/slow", "/down", "/missing")
            ]

    ok, slow, down, missing = asyncio.run(_go())

    assert ok.ok and ok.text == "fine" and ok.reason == "ok"
    assert slow.reason == "timeout" and slow.text is None
    assert down.reason == "transport" and down.status_code is None
    assert missing.reason == "http_status" and missing.status_code == 404


def test_fetch_url_retries_transport_errors(monkeypatch):
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        if calls == 1:
            raise httpx.ConnectError("blip", request=request)
        return httpx.Response(200, text="second try")

    async def fake_sleep(delay):
        return None

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_url(client, "https://h.example/", timeout=1.0, retries=1)

    result = asyncio.run(_go())

    assert calls == 2
    assert result.text == "second try"


@pytest.mark.parametrize("template", ["/i/status/{post_id}", "/i/status/{}", "/i/status/{id"])
def test_bad_status_path_rejected_when_fetcher_is_built(template):
    with pytest.raises(ValueError, match="status_path"):
        MirrorFetcher(FetchConfig(status_path=template))


def test_errors_outside_mirror_requests_propagate():
    requests = []

    def handler(request):
        requests.append(request.url)
        return httpx.Response(200, text="x")

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = MirrorFetcher(FetchConfig(mirrors=list(MIRRORS)), client=client)
            fetcher.cfg.status_path = "/i/status/{post_id}"
            return await fetcher.fetch("123")

    with pytest.raises(KeyError):
        asyncio.run(_go())
    assert requests == []
