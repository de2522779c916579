import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from codexline_installer.download import TransferFetcher
from codexline_installer.exceptions import (
    DownloadNetworkError,
    DownloadTimeoutError,
    HTTPStatusError,
    TooManyRedirectsError,
)
from tests.release_server import ReleaseStore, serve, stalling_app, truncating_app


def redirect_chain_app(hops: int, seen: list) -> web.Application:
    """/hop/0 -> /hop/1 -> ... -> /hop/<hops>，最后一跳返回内容"""

    async def handler(request: web.Request) -> web.Response:
        index = int(request.match_info["index"])
        seen.append(index)
        if index < hops:
            return web.Response(status=302, headers={"Location": f"/hop/{index + 1}"})
        return web.Response(body=b"arrived")

    app = web.Application()
    app.router.add_get("/hop/{index}", handler)
    return app


@pytest.mark.asyncio
async def test_fetch_text_reads_body():
    store = ReleaseStore()
    store.add_file("/sums.txt", b"hello manifest")

    async with serve(store) as server:
        async with TransferFetcher() as fetcher:
            assert await fetcher.fetch_text(str(server.make_url("/sums.txt"))) == "hello manifest"


@pytest.mark.asyncio
async def test_relative_redirect_is_resolved_against_current_url():
    store = ReleaseStore()
    store.redirects["/releases/download/v1/asset"] = "../../../storage/asset"
    store.add_file("/storage/asset", b"payload")

    async with serve(store) as server:
        async with TransferFetcher() as fetcher:
            async with fetcher.open(str(server.make_url("/releases/download/v1/asset"))) as response:
                assert await response.read() == b"payload"

    assert store.requests == ["/releases/download/v1/asset", "/storage/asset"]


@pytest.mark.asyncio
async def test_non_200_names_status_and_url():
    store = ReleaseStore()

    async with serve(store) as server:
        url = str(server.make_url("/missing"))
        async with TransferFetcher() as fetcher:
            with pytest.raises(HTTPStatusError) as excinfo:
                await fetcher.fetch_text(url)

    assert excinfo.value.status == 404
    assert str(excinfo.value) == f"HTTP 404 from {url}"


@pytest.mark.asyncio
async def test_five_redirects_are_allowed():
    seen = []

    async with TestServer(redirect_chain_app(5, seen)) as server:
        async with TransferFetcher(max_redirects=5) as fetcher:
            assert await fetcher.fetch_text(str(server.make_url("/hop/0"))) == "arrived"

    assert seen == [0, 1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_six_redirects_exceed_limit_after_following_five():
    seen = []

    async with TestServer(redirect_chain_app(6, seen)) as server:
        async with TransferFetcher(max_redirects=5) as fetcher:
            with pytest.raises(TooManyRedirectsError, match="too many redirects"):
                await fetcher.fetch_text(str(server.make_url("/hop/0")))

    # 初始请求 + 跟随的 5 次重定向
    assert seen == [0, 1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_slow_response_times_out():
    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(0.5)
        return web.Response(body=b"late")

    app = web.Application()
    app.router.add_get("/slow", slow)

    async with TestServer(app) as server:
        async with TransferFetcher(timeout_ms=100) as fetcher:
            with pytest.raises(DownloadTimeoutError, match="timed out after 100ms"):
                await fetcher.fetch_text(str(server.make_url("/slow")))


@pytest.mark.asyncio
async def test_stall_after_headers_times_out():
    async with TestServer(stalling_app("/asset", b"x" * 100, stall=1.0)) as server:
        async with TransferFetcher(timeout_ms=100) as fetcher:
            with pytest.raises(DownloadTimeoutError, match="timed out after 100ms"):
                await fetcher.fetch_text(str(server.make_url("/asset")))


@pytest.mark.asyncio
async def test_connection_cut_mid_body_is_a_network_error():
    seen = []
    app = truncating_app("/asset", b"x" * 1000, cut_after=100, failures=1, seen=seen)

    async with TestServer(app) as server:
        async with TransferFetcher() as fetcher:
            with pytest.raises(DownloadNetworkError, match="while reading|incomplete response"):
                await fetcher.fetch_text(str(server.make_url("/asset")))


@pytest.mark.asyncio
async def test_close_leaves_external_session_open():
    async with aiohttp.ClientSession() as session:
        fetcher = TransferFetcher(session=session)
        await fetcher.close()
        assert not session.closed
