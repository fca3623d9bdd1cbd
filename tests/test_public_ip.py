import ipaddress

import pytest
from aiohttp import web, test_utils

from rollping.exceptions import NetworkError
from rollping.geo.public_ip import get_public_ip


def ip_app() -> web.Application:
    async def good(request):
        return web.Response(text="203.0.113.7\n")

    async def good_v6(request):
        return web.Response(text="2001:db8::7")

    async def garbage(request):
        return web.Response(text="<html>rate limited</html>")

    async def broken(request):
        return web.Response(status=503)

    app = web.Application()
    app.router.add_get("/good", good)
    app.router.add_get("/v6", good_v6)
    app.router.add_get("/garbage", garbage)
    app.router.add_get("/broken", broken)
    return app


@pytest.mark.asyncio
async def test_first_valid_service_wins():
    async with test_utils.TestServer(ip_app()) as server:
        ip = await get_public_ip([str(server.make_url("/good")), str(server.make_url("/v6"))])

    assert ip == ipaddress.ip_address("203.0.113.7")


@pytest.mark.asyncio
async def test_falls_back_past_failing_services():
    async with test_utils.TestServer(ip_app()) as server:
        services = [
            "http://127.0.0.1:1/unreachable",
            str(server.make_url("/broken")),
            str(server.make_url("/garbage")),
            str(server.make_url("/v6")),
        ]
        ip = await get_public_ip(services, timeout=2.0)

    assert ip == ipaddress.ip_address("2001:db8::7")


@pytest.mark.asyncio
async def test_all_services_failing_raises_network_error():
    async with test_utils.TestServer(ip_app()) as server:
        services = [str(server.make_url("/broken")), str(server.make_url("/garbage"))]
        with pytest.raises(NetworkError):
            await get_public_ip(services)


@pytest.mark.asyncio
async def test_no_services_raises_network_error():
    with pytest.raises(NetworkError):
        await get_public_ip([])
