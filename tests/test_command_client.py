import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from core.command_client import (
    CommandClient, CommandRejectedError, CommandTransportError,
)

pytestmark = pytest.mark.asyncio


async def handle_command(request):
    method = request.match_info["method"]
    body = await request.json()
    args = body["args"]

    if method == "Echo":
        return web.json_response({"result": args})
    if method == "Nothing":
        return web.json_response({"result": None})
    if method == "Fail":
        return web.json_response({"error": "profile not found"})
    if method == "Crash":
        return web.Response(status=500, text="internal")
    return web.json_response({"error": f"unknown method {method}"}, status=404)


@pytest.fixture
async def server():
    app = web.Application()
    app.router.add_post("/api/v1/commands/{method}", handle_command)
    async with TestServer(app) as test_server:
        yield test_server


@pytest.fixture
async def client(server):
    command_client = CommandClient(str(server.make_url("/")), timeout=5)
    yield command_client
    await command_client.close()


async def test_call_returns_result(client):
    assert await client.call("Echo", "a", 1, {"b": True}) == ["a", 1, {"b": True}]


async def test_null_result(client):
    assert await client.call("Nothing") is None


async def test_error_field_is_rejection(client):
    with pytest.raises(CommandRejectedError) as exc_info:
        await client.call("Fail", "x")
    assert exc_info.value.method == "Fail"
    assert exc_info.value.message == "profile not found"


async def test_http_error_is_rejection(client):
    with pytest.raises(CommandRejectedError) as exc_info:
        await client.call("Crash")
    assert exc_info.value.status == 500


async def test_unreachable_backend():
    command_client = CommandClient("http://127.0.0.1:1", timeout=2)
    try:
        with pytest.raises(CommandTransportError):
            await command_client.call("Echo")
    finally:
        await command_client.close()
