"""
Shared test fixtures: a local HTTP server standing in for remote hosts, and a
configuration with short timeouts writing into a temporary directory.
"""

import asyncio
from dataclasses import dataclass, field

import pytest
from aiohttp import test_utils, web

from fetchpool.models.config import FetchConfig

SONG_BYTES = b"ID3" + b"\x00" * 1021  # 1024 bytes


@dataclass
class RemoteHost:
    """A running local server plus counters describing the load it saw."""

    server: test_utils.TestServer
    state: dict = field(default_factory=dict)

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))


def build_remote_app(state: dict) -> web.Application:
    async def song(request: web.Request) -> web.Response:
        return web.Response(body=SONG_BYTES, content_type="audio/mpeg")

    async def empty(request: web.Request) -> web.Response:
        return web.Response(body=b"")

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(2)
        return web.Response(body=b"too late")

    async def redirect(request: web.Request) -> web.Response:
        raise web.HTTPFound("/a/song1.mp3")

    async def status(request: web.Request) -> web.Response:
        return web.Response(status=int(request.match_info["code"]), body=b"nope")

    async def tracked(request: web.Request) -> web.Response:
        state["active"] += 1
        state["peak"] = max(state["peak"], state["active"])
        try:
            await asyncio.sleep(0.05)
        finally:
            state["active"] -= 1
        return web.Response(body=request.match_info["name"].encode() * 16)

    app = web.Application()
    app.router.add_get("/a/song1.mp3", song)
    app.router.add_get("/empty.bin", empty)
    app.router.add_get("/slow.bin", slow)
    app.router.add_get("/redirect", redirect)
    app.router.add_get("/status/{code}", status)
    app.router.add_get("/files/{name}", tracked)
    return app


@pytest.fixture
async def remote():
    """Serves the resources the fetcher downloads in tests."""
    state = {"active": 0, "peak": 0}
    server = test_utils.TestServer(build_remote_app(state))
    await server.start_server()
    yield RemoteHost(server=server, state=state)
    await server.close()


@pytest.fixture
def config(tmp_path) -> FetchConfig:
    return FetchConfig(
        download_dir=str(tmp_path / "downloads"),
        max_workers=3,
        connect_timeout=0.5,
        total_timeout=1.0,
        poll_interval=0.05,
    )
