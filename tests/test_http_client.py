import asyncio

import pytest
import requests
from aiohttp import web
from aiohttp import test_utils

from acelist.models import Configuration
from acelist.playlist.channel_cache import ChannelCache
from acelist.playlist.fetcher import PlaylistFetcher
from acelist.utils.http_client import FetchError, HttpClient

from .conftest import SAMPLE_PLAYLIST


class _FakeResponse:
    def __init__(self, status_code: int, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


def _playlist_app() -> web.Application:
    async def playlist(request: web.Request) -> web.Response:
        return web.Response(text=SAMPLE_PLAYLIST, content_type="audio/x-mpegurl")

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="gone")

    app = web.Application()
    app.router.add_get("/list.m3u", playlist)
    app.router.add_get("/missing.m3u", missing)
    return app


def test_fetch_text_returns_body(monkeypatch):
    monkeypatch.setattr(requests.Session, "get", lambda self, url, timeout: _FakeResponse(200, "#EXTM3U\n"))
    with HttpClient() as client:
        assert client.fetch_text("http://host/list.m3u") == "#EXTM3U\n"


def test_fetch_text_raises_on_error_status(monkeypatch):
    monkeypatch.setattr(requests.Session, "get", lambda self, url, timeout: _FakeResponse(502))
    with HttpClient() as client:
        with pytest.raises(FetchError) as excinfo:
            client.fetch_text("http://host/list.m3u")
    assert excinfo.value.status == 502


def test_fetch_text_wraps_transport_errors(monkeypatch):
    def refuse(self, url, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests.Session, "get", refuse)
    with HttpClient() as client:
        with pytest.raises(FetchError) as excinfo:
            client.fetch_text("http://host/list.m3u")
    assert excinfo.value.status is None
    assert isinstance(excinfo.value.cause, requests.ConnectionError)


def test_playlist_fetcher_downloads_over_aiohttp():
    async def scenario():
        async with test_utils.TestServer(_playlist_app()) as server:
            client = HttpClient(timeout=5)
            try:
                fetcher = PlaylistFetcher(client)
                text = await fetcher.fetch(str(server.make_url("/list.m3u")))
                with pytest.raises(FetchError) as excinfo:
                    await fetcher.fetch(str(server.make_url("/missing.m3u")))
            finally:
                await client.aclose()
        return text, excinfo.value

    text, error = asyncio.run(scenario())
    assert text == SAMPLE_PLAYLIST
    assert error.status == 404


def test_unreachable_source_raises_fetch_error():
    async def scenario():
        client = HttpClient(timeout=2)
        try:
            await client.fetch_text_async("http://127.0.0.1:9/list.m3u")
        finally:
            await client.aclose()

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.cause is not None


def test_undecodable_body_degrades_instead_of_raising():
    async def latin1(request: web.Request) -> web.Response:
        return web.Response(body=b"#EXTINF:-1,Caf\xe9\nhttp://127.0.0.1/cafe\n", content_type="text/plain")

    app = web.Application()
    app.router.add_get("/latin1.m3u", latin1)

    async def scenario():
        async with test_utils.TestServer(app) as server:
            client = HttpClient(timeout=5)
            try:
                cache = ChannelCache(PlaylistFetcher(client))
                return await cache.get(Configuration(source=str(server.make_url("/latin1.m3u"))))
            finally:
                await client.aclose()

    channels = asyncio.run(scenario())
    assert len(channels) == 1
    assert channels[0].name.startswith("Caf")
    assert channels[0].url == "http://127.0.0.1/cafe"
