from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer as AiohttpTestServer

from co2tracker._transport import HttpAggregateTransport
from co2tracker.exceptions import TrackerTransportError
from co2tracker.models.aggregate import AuthoritativeAggregate

_GOOD = {
    "co2Kg": 1500.5,
    "distKm": 200.25,
    "count": 42,
    "since": "2025-11-01T00:00:00Z",
    "updated": "2026-01-01T00:00:00Z",
}


async def _good(request: web.Request) -> web.Response:
    assert "_" in request.query
    return web.json_response(_GOOD)


async def _server_error(request: web.Request) -> web.Response:
    return web.Response(status=503, text="daemon down")


async def _not_json(request: web.Request) -> web.Response:
    return web.Response(text="<html>oops</html>", content_type="text/html")


async def _missing_fields(request: web.Request) -> web.Response:
    return web.json_response({"co2Kg": 1.0})


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1.0)
    return web.json_response(_GOOD)


@pytest_asyncio.fixture
async def server() -> AsyncIterator[AiohttpTestServer]:
    app = web.Application()
    app.router.add_get("/co2data.json", _good)
    app.router.add_get("/error", _server_error)
    app.router.add_get("/html", _not_json)
    app.router.add_get("/partial", _missing_fields)
    app.router.add_get("/slow", _slow)
    async with AiohttpTestServer(app) as test_server:
        yield test_server


async def _fetch(server: AiohttpTestServer, path: str, *, timeout: float = 5.0) -> AuthoritativeAggregate:
    async with aiohttp.ClientSession() as session:
        transport = HttpAggregateTransport(str(server.make_url(path)), session, timeout=timeout)
        return await transport.fetch()


@pytest.mark.asyncio
async def test_fetch_parses_aggregate(server: AiohttpTestServer) -> None:
    aggregate = await _fetch(server, "/co2data.json")

    assert aggregate.co2_kg == 1500.5
    assert aggregate.distance_km == 200.25
    assert aggregate.count == 42
    assert aggregate.updated is not None
    assert aggregate.updated.year == 2026


@pytest.mark.asyncio
async def test_non_200_raises_transport_error(server: AiohttpTestServer) -> None:
    with pytest.raises(TrackerTransportError) as excinfo:
        await _fetch(server, "/error")

    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/html", "/partial"])
async def test_malformed_body_raises_transport_error(server: AiohttpTestServer, path: str) -> None:
    with pytest.raises(TrackerTransportError):
        await _fetch(server, path)


@pytest.mark.asyncio
async def test_timeout_raises_transport_error(server: AiohttpTestServer) -> None:
    with pytest.raises(TrackerTransportError, match="timed out"):
        await _fetch(server, "/slow", timeout=0.1)


@pytest.mark.asyncio
async def test_connection_refused_raises_transport_error() -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpAggregateTransport("http://127.0.0.1:9/co2data.json", session, timeout=1.0)
        with pytest.raises(TrackerTransportError):
            await transport.fetch()
