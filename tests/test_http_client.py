import asyncio

import httpx

from mapchat.config import Config
from mapchat.utils.http_client import close_http_client, get_http_client, new_http_client


def test_new_client_identifies_itself():
    client = new_http_client()
    assert client.headers["User-Agent"] == Config.USER_AGENT
    assert client.timeout.connect == Config.HTTP_CONNECT_TIMEOUT
    assert client.timeout.read == Config.HTTP_TIMEOUT


def test_headers_override_defaults():
    seen = []

    def respond(request):
        seen.append(request)
        return httpx.Response(200, json={})

    client = new_http_client(
        transport=httpx.MockTransport(respond),
        headers={"User-Agent": "Override/2.0", "Accept": "application/json"},
    )
    asyncio.run(client.get("https://example.org/"))

    [request] = seen
    assert request.headers["User-Agent"] == "Override/2.0"
    assert request.headers["Accept"] == "application/json"


def test_shared_client_is_reused_until_closed():
    first = get_http_client()
    assert get_http_client() is first
    asyncio.run(close_http_client())
    assert get_http_client() is not first
    asyncio.run(close_http_client())
