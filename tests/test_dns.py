import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from icmplib import NameLookupError

from rollping.probing.dns import HostResolver, is_ip_address


def test_is_ip_address():
    assert is_ip_address("1.1.1.1")
    assert is_ip_address("2606:4700::1111")
    assert not is_ip_address("one.one.one.one")


@pytest.mark.asyncio
@patch("rollping.probing.dns.async_resolve", new_callable=AsyncMock)
async def test_ip_literal_is_not_resolved(mock_resolve):
    assert await HostResolver().resolve("8.8.8.8") == "8.8.8.8"
    mock_resolve.assert_not_awaited()


@pytest.mark.asyncio
@patch("rollping.probing.dns.async_resolve", new_callable=AsyncMock)
async def test_resolved_name_is_cached(mock_resolve):
    mock_resolve.return_value = ["192.0.2.1", "192.0.2.2"]
    resolver = HostResolver()

    assert await resolver.resolve("example.test") == "192.0.2.1"
    assert await resolver.resolve("example.test") == "192.0.2.1"
    mock_resolve.assert_awaited_once_with("example.test")


@pytest.mark.asyncio
@patch("rollping.probing.dns.async_resolve", new_callable=AsyncMock)
async def test_lookup_failure_is_cached_as_none(mock_resolve):
    mock_resolve.side_effect = NameLookupError("example.invalid")
    resolver = HostResolver()

    assert await resolver.resolve("example.invalid") is None
    assert await resolver.resolve("example.invalid") is None
    assert resolver.dns_cache["example.invalid"] is None
    mock_resolve.assert_awaited_once_with("example.invalid")


@pytest.mark.asyncio
async def test_slow_lookup_times_out():
    async def slow_resolve(host):
        await asyncio.sleep(10)

    resolver = HostResolver()
    with patch("rollping.probing.dns.async_resolve", side_effect=slow_resolve) as mock_resolve:
        assert await asyncio.wait_for(resolver.resolve("slow.test", 0.05), timeout=1.0) is None
        assert await resolver.resolve("slow.test", 0.05) is None

    assert mock_resolve.call_count == 1
